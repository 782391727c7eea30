"""
Storage Package.

Async SQLAlchemy persistence for candidates, platform
connections, the metrics cache, score snapshots and
notifications.

Modules:
- database: engine and session factory
- models/: ORM models
- repositories/: data access layer
- persistence: scoring-core Persistence implementation
"""

from storage.database import Database, DatabaseConfig, create_database_engine
from storage.persistence import SqlAlchemyPersistence


__all__ = [
    "Database",
    "DatabaseConfig",
    "create_database_engine",
    "SqlAlchemyPersistence",
]

__version__ = "1.0.0"
