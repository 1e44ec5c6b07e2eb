"""Database package: session and lifecycle."""
from app.models.db_models import (
    Base,
    create_tables,
    dispose_db,
    get_db,
    init_db,
)

__all__ = [
    "Base",
    "create_tables",
    "dispose_db",
    "get_db",
    "init_db",
]
