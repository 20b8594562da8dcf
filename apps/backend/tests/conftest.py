import asyncio
import os
import sys
from typing import Callable, Dict, List, Optional

import httpx
import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

# Add parent directory to path to allow importing the backend modules
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from main import app
from routes.search import get_search_service
from sourcing.models import ProviderDescriptor
from sourcing.registry import ProviderRegistry
from sourcing.service import VideoSearchService
from sourcing.settings import SearchSettings


def video_xml(*titles: str) -> str:
    """Provider feed with one <video> per title (attributes included, to be ignored)."""
    videos = "".join(
        f'<video><id>{i}</id><name>{title}</name><type tid="1">movie</type></video>'
        for i, title in enumerate(titles, start=1)
    )
    return f'<?xml version="1.0" encoding="utf-8"?><rss version="5.1"><list page="1">{videos}</list></rss>'


def make_descriptor(key: str, name: Optional[str] = None) -> ProviderDescriptor:
    return ProviderDescriptor(
        key=key,
        display_name=name or f"Provider {key.upper()}",
        endpoint_template=f"https://{key}.example.com/api.php/provide/vod/at/xml/",
    )


def make_registry(*keys: str) -> ProviderRegistry:
    return ProviderRegistry([make_descriptor(key) for key in keys])


class ProviderBehaviour:
    """Per-host canned behaviour for the mock transport."""

    def __init__(self, *, body: str = "", status: int = 200, delay: float = 0.0, error: Optional[Exception] = None):
        self.body = body
        self.status = status
        self.delay = delay
        self.error = error


class FakeProviders:
    """httpx.MockTransport handler that records every request it receives."""

    def __init__(self, behaviours: Dict[str, ProviderBehaviour]):
        self.behaviours = behaviours
        self.requests: List[httpx.Request] = []

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = request.url.host.split(".")[0]
        behaviour = self.behaviours.get(key, ProviderBehaviour(status=404))
        if behaviour.delay:
            await asyncio.sleep(behaviour.delay)
        if behaviour.error is not None:
            raise behaviour.error
        return httpx.Response(behaviour.status, text=behaviour.body)

    @property
    def queried_keys(self) -> List[str]:
        return [r.url.host.split(".")[0] for r in self.requests]

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self))


@pytest.fixture
def fake_providers() -> Callable[..., FakeProviders]:
    def _factory(**behaviours: ProviderBehaviour) -> FakeProviders:
        return FakeProviders(behaviours)
    return _factory


@pytest.fixture
def settings() -> SearchSettings:
    return SearchSettings(timeout_seconds=0.2)


@pytest_asyncio.fixture(name="client")
async def client_fixture():
    """ASGI client; tests install their own search service via ``use_service``."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
    if hasattr(app.state, "search_service"):
        del app.state.search_service


@pytest.fixture
def use_service() -> Callable[[VideoSearchService], VideoSearchService]:
    def _install(service: VideoSearchService) -> VideoSearchService:
        app.dependency_overrides[get_search_service] = lambda: service
        app.state.search_service = service
        return service
    return _install
