"""
Database bootstrap for RefTrends.

This package owns the SQLite store (schema, Alembic migrations, the async
session manager) and the query helpers the sync jobs and web API share.
"""
from .init import initialize
from .dbm import DBM

__all__ = ["initialize", "DBM"]
