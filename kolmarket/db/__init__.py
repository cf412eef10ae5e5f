"""
Database module - SQLAlchemy engine, sessions and schema.
"""
from kolmarket.db.postgres import get_db_session, execute_raw_sql, check_db_connection
from kolmarket.db.schema import init_schema, TABLES

__all__ = [
    "get_db_session",
    "execute_raw_sql",
    "check_db_connection",
    "init_schema",
    "TABLES"
]
