"""Business logic services for the MiroTrak backend."""

from mirotrak.services.database import DatabaseManager, get_db_session
from mirotrak.services.database_transfer import DatabaseTransfer
from mirotrak.services.documents import DocumentRenderer

__all__ = [
    "DatabaseManager",
    "DatabaseTransfer",
    "DocumentRenderer",
    "get_db_session",
]
