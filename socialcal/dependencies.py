"""
FastAPI dependency providers for the posting collaborators.

Tests override these with fakes through app.dependency_overrides.
"""
from fastapi import Depends

from .config import get_settings
from .posting.dispatcher import PostingDispatcher
from .posting.transport import PlatformTransport
from .services.storage import get_storage

__all__ = ["get_storage", "get_transport", "get_dispatcher"]


def get_transport() -> PlatformTransport:
    settings = get_settings()
    return PlatformTransport(settings.platform_api_base_url, timeout=settings.platform_request_timeout)


def get_dispatcher(transport: PlatformTransport = Depends(get_transport)) -> PostingDispatcher:
    return PostingDispatcher(transport, settings=get_settings())
