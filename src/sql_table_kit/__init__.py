"""
sql-table-kit - MySQL data access layer.

An immutable SELECT statement builder plus a schema-aware table gateway that
introspects catalog metadata and runs parameterized CRUD statements.
"""

__version__ = "0.1.0"
