"""
API 路由包
"""
from .arena import router as arena_router
from .oracle import router as oracle_router

__all__ = [
    "arena_router",
    "oracle_router",
]
