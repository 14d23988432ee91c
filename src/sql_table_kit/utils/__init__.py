"""Shared utilities for sql-table-kit."""
