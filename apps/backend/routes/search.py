"""
Video search endpoint.

GET /api/search?q=<text> fans the query out to every configured provider and
returns ``{"data": [...]}``. Request-level failures are answered with
``{"error": "..."}`` by the VideoSearchError handler registered in main.py.
"""

import asyncio
import hashlib
import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query, Request

from sourcing.registry import load_registry
from sourcing.service import VideoSearchService
from sourcing.settings import SearchSettings

logger = logging.getLogger(__name__)
router = APIRouter(tags=["search"])


def build_search_service() -> VideoSearchService:
    """Registry and settings are read once, at process start."""
    return VideoSearchService.create(load_registry(), SearchSettings.from_env())


_build_lock = asyncio.Lock()


async def get_search_service(request: Request) -> VideoSearchService:
    """Service built by the startup hook, or built once here if startup was skipped."""
    service = getattr(request.app.state, "search_service", None)
    if service is None:
        async with _build_lock:
            service = getattr(request.app.state, "search_service", None)
            if service is None:
                service = build_search_service()
                request.app.state.search_service = service
    return service


def _hash_query(query: str) -> str:
    return hashlib.sha256(query.encode()).hexdigest()[:12]


@router.get("/api/search")
async def search_videos(
    q: Optional[str] = Query(None, description="Search text"),
    service: VideoSearchService = Depends(get_search_service),
) -> Dict[str, List[Dict[str, Any]]]:
    """
    Search all configured providers in parallel.
    Providers that fail or time out contribute nothing; that is still a 200.
    """
    result = await service.search(q)
    logger.info(f"[Search] query={_hash_query(q or '')} results={len(result.records)}")
    return result.to_response()
