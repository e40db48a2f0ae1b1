"""Bench repository (parent entity lookups for the photo service)."""
from typing import Optional

from sqlalchemy.orm import Session

from src.models.bench import Bench
from src.repositories.base import BaseRepository


class BenchRepository(BaseRepository[Bench]):
    """Repository for bench database operations."""

    def __init__(self, db: Session):
        super().__init__(Bench, db)

    def get_owner_id(self, bench_id: int) -> Optional[int]:
        """
        Get the ID of the user who created a bench.

        Args:
            bench_id: Bench ID

        Returns:
            Owner user ID or None if the bench does not exist
        """
        bench = self.get(bench_id)
        return bench.created_by if bench else None
