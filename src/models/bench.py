"""Bench model (parent entity of photos)."""
from sqlalchemy import Column, BigInteger, Integer, String

from src.db.base import Base
from .base import TimestampMixin, SoftDeleteMixin


class Bench(Base, TimestampMixin, SoftDeleteMixin):
    """Bench/spot record photos are attached to."""

    __tablename__ = 'benches'

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    created_by = Column(BigInteger, nullable=False, index=True)

    def __repr__(self) -> str:
        return f'<Bench(id={self.id}, name={self.name})>'
