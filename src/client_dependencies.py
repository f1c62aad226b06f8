"""Shared dependency factory for the marketplace client.

Components are created once from environment configuration and reused, so every
caller in the process shares one SessionStore and one view of the caches.
"""

import logging
import os

from marketplace_client.auth.auth_service import AuthService
from marketplace_client.auth.session_store import FileTokenStorage, SessionStore
from marketplace_client.observability import configure_logging, setup_observability
from marketplace_client.repositories.menu_repository import MenuRepository
from marketplace_client.repositories.vendor_repository import VendorRepository
from marketplace_client.services.directory_query import DirectoryQueryEngine
from marketplace_client.services.transport_client import (
    DEFAULT_TIMEOUT_SECONDS,
    TransportClient,
)

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://127.0.0.1:5000"
DEFAULT_SESSION_FILE = "~/.marketplace_client/session.json"

# Module-level caches shared by every caller in the process
_session_store: SessionStore | None = None
_transport_client: TransportClient | None = None
_auth_service: AuthService | None = None
_vendor_repository: VendorRepository | None = None
_menu_repository: MenuRepository | None = None
_query_engine: DirectoryQueryEngine | None = None


def get_session_store() -> SessionStore:
    """Create or retrieve the cached session store.

    Returns:
        SessionStore hydrated from the session file
    """
    global _session_store

    if _session_store is not None:
        return _session_store

    session_file = os.getenv("MARKETPLACE_SESSION_FILE", DEFAULT_SESSION_FILE)
    _session_store = SessionStore(FileTokenStorage(session_file))

    logger.info(f"Session store initialized from {session_file}")
    return _session_store


def get_transport_client() -> TransportClient:
    """Create or retrieve the cached transport client.

    Returns:
        TransportClient configured for the marketplace API

    Raises:
        ValueError: If the configured timeout is not a positive number
    """
    global _transport_client

    if _transport_client is not None:
        return _transport_client

    base_url = os.getenv("MARKETPLACE_API_BASE_URL", DEFAULT_BASE_URL)
    timeout_str = os.getenv("MARKETPLACE_API_TIMEOUT_SECONDS", str(DEFAULT_TIMEOUT_SECONDS))

    timeout = float(timeout_str)
    if timeout <= 0:
        raise ValueError("MARKETPLACE_API_TIMEOUT_SECONDS must be positive")

    _transport_client = TransportClient(
        base_url=base_url,
        session_store=get_session_store(),
        timeout_seconds=timeout,
    )

    logger.info(f"Transport client configured - URL: {base_url}, timeout: {timeout}s")
    return _transport_client


def get_auth_service() -> AuthService:
    """Create or retrieve the cached auth service."""
    global _auth_service

    if _auth_service is None:
        _auth_service = AuthService(
            transport=get_transport_client(), session_store=get_session_store()
        )
    return _auth_service


def get_vendor_repository() -> VendorRepository:
    """Create or retrieve the cached vendor repository."""
    global _vendor_repository

    if _vendor_repository is None:
        _vendor_repository = VendorRepository(transport=get_transport_client())
    return _vendor_repository


def get_menu_repository() -> MenuRepository:
    """Create or retrieve the cached menu repository."""
    global _menu_repository

    if _menu_repository is None:
        _menu_repository = MenuRepository(transport=get_transport_client())
    return _menu_repository


def get_query_engine() -> DirectoryQueryEngine:
    """Create or retrieve the cached directory query engine."""
    global _query_engine

    if _query_engine is None:
        _query_engine = DirectoryQueryEngine()
    return _query_engine


def initialize_client_environment() -> None:
    """Configure logging and observability.

    Should be called once at startup, before the first request.
    """
    log_level = os.getenv("LOG_LEVEL", "INFO")
    configure_logging(log_level)
    setup_observability()

    logger.info("Marketplace client environment initialized")
