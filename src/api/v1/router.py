from fastapi import APIRouter
from src.api.v1.endpoints import photos


api_router = APIRouter()

api_router.include_router(photos.router, tags=["photos"])
