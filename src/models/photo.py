"""Photo model."""
from sqlalchemy import Column, BigInteger, Boolean, Index, Integer, String, text

from src.db.base import Base
from .base import TimestampMixin, SoftDeleteMixin
from .enums import PhotoVariant


class Photo(Base, TimestampMixin, SoftDeleteMixin):
    """
    Photo metadata.

    A record starts "pending" with all three paths empty and becomes "active"
    when the paths are committed together after every variant is stored.
    """

    __tablename__ = 'photos'
    __table_args__ = (
        Index('ix_photos_parent_main', 'parent_id', 'is_main'),
        # at most one live main photo per parent
        Index(
            'uq_photos_parent_live_main',
            'parent_id',
            unique=True,
            postgresql_where=text('is_main AND deleted_at IS NULL'),
            sqlite_where=text('is_main = 1 AND deleted_at IS NULL'),
        ),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    parent_id = Column(BigInteger, nullable=False, index=True)
    uploader_id = Column(BigInteger, nullable=False, index=True)
    is_main = Column(Boolean, nullable=False, default=False)

    # Storage paths (empty until committed)
    path_original = Column(String(255), nullable=False, default='')
    path_medium = Column(String(255), nullable=False, default='')
    path_thumbnail = Column(String(255), nullable=False, default='')

    mime_type = Column(String(50), nullable=False, default='image/jpeg')
    file_size = Column(Integer, nullable=False, default=0)

    @property
    def is_pending(self) -> bool:
        return not (self.path_original and self.path_medium and self.path_thumbnail)

    @property
    def is_active(self) -> bool:
        return not self.is_pending and self.deleted_at is None

    def path_for(self, variant: PhotoVariant) -> str:
        return {
            PhotoVariant.original: self.path_original,
            PhotoVariant.medium: self.path_medium,
            PhotoVariant.thumbnail: self.path_thumbnail,
        }[variant]

    @property
    def paths(self) -> list:
        """Committed paths, in variant order, skipping empty ones."""
        return [p for p in (self.path_original, self.path_medium, self.path_thumbnail) if p]

    def __repr__(self) -> str:
        return f'<Photo(id={self.id}, parent_id={self.parent_id}, is_main={self.is_main})>'
