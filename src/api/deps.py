"""Dependencies for API endpoints."""
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from src.db.base import get_db
from src.repositories.bench_repo import BenchRepository
from src.repositories.photo_repo import PhotoRepository
from src.services.photo_service import PhotoService
from src.services.storage.s3 import S3Service

ADMIN_ROLE = "admin"


@dataclass(frozen=True)
class CallerContext:
    """Caller identity resolved by the upstream gateway."""
    user_id: int
    role: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return (self.role or "").lower() == ADMIN_ROLE


async def get_caller(
    x_user_id: Optional[str] = Header(None),
    x_user_role: Optional[str] = Header(None),
) -> CallerContext:
    """Read the caller from the trusted X-User-Id / X-User-Role headers."""
    if not x_user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing caller identity",
        )
    try:
        user_id = int(x_user_id)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid caller identity",
        )
    return CallerContext(user_id=user_id, role=x_user_role)


@lru_cache
def get_storage() -> S3Service:
    """Process-wide S3 gateway (boto3 clients are thread-safe)."""
    return S3Service()


def get_photo_service(
    db: Session = Depends(get_db),
    storage: S3Service = Depends(get_storage),
) -> PhotoService:
    return PhotoService(
        photo_repo=PhotoRepository(db),
        bench_repo=BenchRepository(db),
        storage=storage,
    )


__all__ = ["get_db", "get_caller", "get_storage", "get_photo_service", "CallerContext"]
