"""Vendor directory models.

These models mirror the vendor profiles served by the marketplace API. Unknown
categories are folded into VendorCategory.OTHER instead of failing the whole listing.
"""

import logging
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from marketplace_client.exceptions import ValidationError

logger = logging.getLogger(__name__)


class VendorCategory(str, Enum):
    """Enumeration of shop categories offered at registration."""

    RESTAURANT = "Restaurant"
    CAFE = "Cafe"
    BAKERY = "Bakery"
    GROCERY = "Grocery"
    CLOTHING = "Clothing"
    ELECTRONICS = "Electronics"
    PHARMACY = "Pharmacy"
    SALON = "Salon"
    OTHER = "Other"

    @classmethod
    def coerce(cls, value: Any) -> "VendorCategory":
        """Map a raw category value onto the enumeration.

        Matching is case-insensitive; anything unrecognised becomes OTHER.

        Args:
            value: Raw category from the server or a caller

        Returns:
            VendorCategory: The matching member
        """
        if isinstance(value, cls):
            return value

        text = str(value or "").strip().lower()
        for member in cls:
            if member.value.lower() == text:
                return member

        logger.warning(f"Unknown vendor category {value!r}, using {cls.OTHER.value}")
        return cls.OTHER


class Coordinates(BaseModel):
    """Geographic point supplied by the location capture collaborator."""

    latitude: float = Field(..., description="Latitude in degrees", ge=-90, le=90)
    longitude: float = Field(..., description="Longitude in degrees", ge=-180, le=180)


class Vendor(BaseModel):
    """Vendor profile as listed in the directory."""

    id: str = Field(..., description="Server-assigned vendor identifier")
    name: str = Field(..., description="Shop name")
    description: str = Field(default="", description="Shop description")
    category: VendorCategory = Field(..., description="Shop category")
    image: str | None = Field(None, description="URI of the shop image")
    location: str | None = Field(None, description="Human readable address")
    rating: float | None = Field(None, description="Average rating", ge=0, le=5)
    offers: str | None = Field(None, description="Current offers, for display")
    contact: str | None = Field(None, description="Contact phone or email")
    latitude: float | None = Field(None, description="Shop latitude", ge=-90, le=90)
    longitude: float | None = Field(None, description="Shop longitude", ge=-180, le=180)

    @field_validator("id", mode="before")
    @classmethod
    def validate_id(cls, v: Any) -> str:
        """Accept numeric ids and normalise them to strings."""
        if v is None or str(v) == "":
            raise ValueError("id must not be empty")
        return str(v)

    @field_validator("category", mode="before")
    @classmethod
    def validate_category(cls, v: Any) -> VendorCategory:
        """Coerce raw category strings onto VendorCategory."""
        return VendorCategory.coerce(v)

    @field_validator("description", mode="before")
    @classmethod
    def validate_description(cls, v: Any) -> str:
        """Treat a missing description as empty text."""
        return "" if v is None else v

    @property
    def coordinates(self) -> Coordinates | None:
        """Shop position, or None when the profile carries no coordinates."""
        if self.latitude is None or self.longitude is None:
            return None
        return Coordinates(latitude=self.latitude, longitude=self.longitude)


class VendorProfileUpdate(BaseModel):
    """Partial vendor profile used for edits.

    Only fields that were explicitly set are sent to the server.
    """

    name: str | None = None
    description: str | None = None
    category: VendorCategory | None = None
    image: str | None = None
    location: str | None = None
    rating: float | None = Field(None, ge=0, le=5)
    offers: str | None = None
    contact: str | None = None
    latitude: float | None = Field(None, ge=-90, le=90)
    longitude: float | None = Field(None, ge=-180, le=180)

    @field_validator("category", mode="before")
    @classmethod
    def validate_category(cls, v: Any) -> VendorCategory | None:
        """Coerce raw category strings onto VendorCategory."""
        if v is None:
            return None
        return VendorCategory.coerce(v)

    @classmethod
    def from_vendor(cls, vendor: Vendor) -> "VendorProfileUpdate":
        """Create an editable draft prefilled from a committed profile.

        Args:
            vendor: The committed vendor profile

        Returns:
            VendorProfileUpdate: Draft with every field set
        """
        return cls(**vendor.model_dump(exclude={"id"}))

    @classmethod
    def parse(cls, data: "VendorProfileUpdate | dict[str, Any]") -> "VendorProfileUpdate":
        """Validate profile edits, keeping track of which fields were set.

        Raises:
            ValidationError: If any field is out of range or malformed
        """
        if isinstance(data, VendorProfileUpdate):
            return data

        try:
            return cls.model_validate(data)
        except PydanticValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
                for err in e.errors()
            )
            raise ValidationError(f"Invalid vendor profile: {problems}") from e

    def to_request_body(self) -> dict[str, Any]:
        """Serialize the explicitly set fields for the API.

        Returns:
            dict: JSON-compatible request body
        """
        return self.model_dump(mode="json", exclude_unset=True)
