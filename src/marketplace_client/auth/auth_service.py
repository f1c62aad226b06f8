"""Vendor login, registration and logout."""

import logging
from pathlib import Path
from typing import Any

from marketplace_client.auth.session_store import SessionStore
from marketplace_client.exceptions import DecodeError, ValidationError
from marketplace_client.models.auth_models import AuthResult, VendorRegistration
from marketplace_client.observability.decorators import traced
from marketplace_client.services.transport_client import TransportClient

logger = logging.getLogger(__name__)


class AuthService:
    """Creates and ends vendor sessions.

    A token returned by login or registration is stored in the SessionStore, after
    which the TransportClient attaches it to every call.
    """

    def __init__(self, transport: TransportClient, session_store: SessionStore) -> None:
        """Initialize the service.

        Args:
            transport: Client used for the auth endpoints
            session_store: Store receiving issued tokens
        """
        self.transport = transport
        self.session_store = session_store

    @traced("auth.login")
    async def login(self, email: str, password: str) -> AuthResult:
        """Log in with vendor credentials.

        Args:
            email: Vendor login email
            password: Vendor password

        Returns:
            AuthResult carrying the issued token

        Raises:
            ValidationError: If either credential is blank
        """
        if not email.strip() or not password:
            raise ValidationError("Email and password are required")

        data = await self.transport.request(
            "POST", "/api/vendors/login", {"email": email.strip(), "password": password}
        )
        return self._store_result(data)

    @traced("auth.register")
    async def register(
        self,
        registration: VendorRegistration,
        image: str | Path | bytes | None = None,
        image_filename: str = "shop-image",
    ) -> AuthResult:
        """Register a new vendor shop.

        The profile is sent as form data, multipart when a shop image is attached.

        Args:
            registration: Validated registration form
            image: Image file path or raw bytes
            image_filename: File name sent with raw bytes

        Returns:
            AuthResult, with a token when the server logs the vendor in directly
        """
        files: dict[str, Any] | None = None
        if isinstance(image, (str, Path)):
            image_path = Path(image)
            files = {"image": (image_path.name, image_path.read_bytes())}
        elif isinstance(image, bytes):
            files = {"image": (image_filename, image)}

        data = await self.transport.request(
            "POST",
            "/api/vendors/register",
            data=registration.to_form_fields(),
            files=files,
        )
        return self._store_result(data)

    def logout(self) -> None:
        """End the current session."""
        self.session_store.clear_token()
        logger.info("Vendor logged out")

    def is_authenticated(self) -> bool:
        """Return True when a session token is present."""
        return self.session_store.is_authenticated()

    def _store_result(self, data: Any) -> AuthResult:
        try:
            result = AuthResult.from_response(data)
        except ValueError as e:
            raise DecodeError(f"Unexpected authentication payload: {e}") from e

        if result.token:
            self.session_store.set_token(result.token)
        else:
            logger.info("Authentication response carried no token")
        return result
