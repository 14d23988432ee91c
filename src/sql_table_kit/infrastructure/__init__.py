"""
Infrastructure Layer

SQL generation utilities that the table gateway in ``sql_table_kit.io``
builds on. Nothing here talks to a database except StatementBuilder.execute(),
which goes through the injected connection.

Usage:
    from sql_table_kit.infrastructure.sql import StatementBuilder
"""

__all__: list[str] = []
