"""Cached view over the vendor directory.

The cache is replaced wholesale by each successful listing and only touched by
an update after the server confirms it, so a failed call never leaves a
partially applied profile behind.
"""

import logging
from typing import Any

from marketplace_client.exceptions import NotFoundError
from marketplace_client.models.vendor_models import Vendor, VendorProfileUpdate
from marketplace_client.observability.decorators import traced
from marketplace_client.services.transport_client import (
    TransportClient,
    decode_list,
    decode_model,
)

logger = logging.getLogger(__name__)


class VendorRepository:
    """Repository for vendor profiles.

    Holds the most recently fetched directory plus at most one profile draft
    under edit.
    """

    def __init__(self, transport: TransportClient) -> None:
        """Initialize repository.

        Args:
            transport: Client for the marketplace API
        """
        self.transport = transport
        self._vendors: list[Vendor] | None = None
        self._draft_id: str | None = None
        self._draft: VendorProfileUpdate | None = None

    @property
    def vendors(self) -> tuple[Vendor, ...]:
        """Read-only snapshot of the cached directory (empty before the first fetch)."""
        return tuple(self._vendors or ())

    @property
    def is_loaded(self) -> bool:
        """Whether a directory listing has been fetched."""
        return self._vendors is not None

    @traced("vendors.list_all")
    async def list_all(self) -> list[Vendor]:
        """Fetch the full directory and replace the cache.

        Returns:
            list: Vendors in server order

        Raises:
            MarketplaceClientError: On any failure; the previous cache is kept
        """
        data = await self.transport.request("GET", "/api/vendors/")
        vendors = _unique_by_id(decode_list(Vendor, data, keys=("vendors", "items", "data")))

        self._vendors = vendors
        logger.info(f"Loaded {len(vendors)} vendors")
        return list(vendors)

    async def get_by_id(self, vendor_id: str, refresh: bool = False) -> Vendor:
        """Look up a vendor, from the cache unless a refresh is requested.

        Args:
            vendor_id: Vendor identifier
            refresh: Refetch the directory before looking up

        Returns:
            Vendor: The matching profile

        Raises:
            NotFoundError: If no vendor has this id
        """
        if refresh or self._vendors is None:
            await self.list_all()

        vendor = self._find(vendor_id)
        if vendor is None:
            raise NotFoundError("Vendor", vendor_id)
        return vendor

    @traced("vendors.update")
    async def update(
        self, vendor_id: str, profile: VendorProfileUpdate | dict[str, Any]
    ) -> Vendor:
        """Send a profile update and commit the server's version to the cache.

        Args:
            vendor_id: Vendor identifier
            profile: Fields to change

        Returns:
            Vendor: The updated profile as confirmed by the server

        Raises:
            ValidationError: If the profile fields are invalid (no call is made)
            MarketplaceClientError: On any failure; the cached entry is unchanged
        """
        profile = VendorProfileUpdate.parse(profile)

        body = profile.to_request_body()
        data = await self.transport.request("PUT", f"/api/vendors/{vendor_id}", body)

        if isinstance(data, dict) and isinstance(data.get("vendor"), dict):
            data = data["vendor"]

        if isinstance(data, dict) and data.get("id") is not None:
            updated = decode_model(Vendor, data)
        else:
            # Server acknowledged without echoing the profile
            committed = self._find(vendor_id)
            if committed is None:
                raise NotFoundError("Vendor", vendor_id)
            updated = committed.model_copy(update=profile.model_dump(exclude_unset=True))

        self._replace(updated)
        logger.info(f"Updated vendor {vendor_id}")
        return updated

    def committed(self, vendor_id: str) -> Vendor:
        """Return the cached profile as last confirmed by the server.

        Raises:
            NotFoundError: If the vendor is not cached
        """
        vendor = self._find(vendor_id)
        if vendor is None:
            raise NotFoundError("Vendor", vendor_id)
        return vendor

    def start_edit(self, vendor_id: str) -> VendorProfileUpdate:
        """Open an editable draft copied from the committed profile.

        Only one draft exists at a time; starting another replaces it.

        Args:
            vendor_id: Vendor to edit

        Returns:
            VendorProfileUpdate: Draft the caller may modify freely
        """
        self._draft = VendorProfileUpdate.from_vendor(self.committed(vendor_id))
        self._draft_id = vendor_id
        return self._draft

    @property
    def draft(self) -> VendorProfileUpdate | None:
        """The profile draft under edit, if any."""
        return self._draft

    async def commit_edit(self) -> Vendor:
        """Send the current draft.

        On success the draft is closed. On failure it stays open so the caller
        can retry or discard it, and committed() still returns the pre-edit values.

        Raises:
            NotFoundError: If no draft is open
        """
        if self._draft is None or self._draft_id is None:
            raise NotFoundError("Vendor draft", "current")

        updated = await self.update(self._draft_id, self._draft)
        self.discard_edit()
        return updated

    def discard_edit(self) -> None:
        """Drop the current draft without sending it."""
        self._draft = None
        self._draft_id = None

    def categories(self) -> list[str]:
        """Distinct categories present in the cache, in first-seen order."""
        seen: list[str] = []
        for vendor in self._vendors or ():
            if vendor.category.value not in seen:
                seen.append(vendor.category.value)
        return seen

    def _find(self, vendor_id: str) -> Vendor | None:
        for vendor in self._vendors or ():
            if vendor.id == vendor_id:
                return vendor
        return None

    def _replace(self, vendor: Vendor) -> None:
        if self._vendors is None:
            return
        self._vendors = [vendor if v.id == vendor.id else v for v in self._vendors]


def _unique_by_id(vendors: list[Vendor]) -> list[Vendor]:
    seen: set[str] = set()
    unique: list[Vendor] = []
    for vendor in vendors:
        if vendor.id in seen:
            logger.warning(f"Dropping duplicate vendor id {vendor.id} from listing")
            continue
        seen.add(vendor.id)
        unique.append(vendor)
    return unique
