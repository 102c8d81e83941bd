"""
Repository layer for the visit sync service.

Repositories encapsulate data access; services own transactions.
"""

from .base_repository import BaseRepository
from .factory import RepositoryFactory

__all__ = ["BaseRepository", "RepositoryFactory"]
