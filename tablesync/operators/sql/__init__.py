"""Generic SQL operators for SQLAlchemy-based databases.

SQLConnector manages SQLAlchemy engines and scoped connections; backend
packages subclass it with their URL rules and engine options.
"""

from tablesync.operators.sql.connector import SQLConnector

__all__ = ["SQLConnector"]
