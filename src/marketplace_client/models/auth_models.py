"""Authentication request and response models."""

from typing import Any

from pydantic import BaseModel, Field

from marketplace_client.models.vendor_models import Vendor, VendorCategory


class VendorRegistration(BaseModel):
    """Shop registration submitted by a new vendor."""

    vendor_name: str = Field(..., description="Owner's name", min_length=2)
    email: str = Field(..., description="Login email")
    shop_name: str = Field(..., description="Shop name", min_length=2)
    description: str = Field(..., description="Shop description")
    location: str = Field(..., description="Shop address")
    phone: str = Field(..., description="Contact phone number")
    category: VendorCategory = Field(..., description="Shop category")
    password: str = Field(..., description="Account password", min_length=6)

    def to_form_fields(self) -> dict[str, str]:
        """Build the multipart form fields, using the server's camelCase names.

        Returns:
            dict: Form field name to value
        """
        return {
            "vendorName": self.vendor_name,
            "email": self.email,
            "shopName": self.shop_name,
            "description": self.description,
            "location": self.location,
            "phone": self.phone,
            "category": self.category.value,
            "password": self.password,
        }


class AuthResult(BaseModel):
    """Outcome of a login or registration call."""

    token: str | None = Field(None, description="Session token, when issued")
    vendor: Vendor | None = Field(None, description="Authenticated vendor profile")
    message: str | None = Field(None, description="Server message")

    @classmethod
    def from_response(cls, data: Any) -> "AuthResult":
        """Create an AuthResult from a decoded response body.

        Args:
            data: Decoded JSON body

        Returns:
            AuthResult: Parsed result (empty when the body is not an object)
        """
        if not isinstance(data, dict):
            return cls()

        vendor_data = data.get("vendor")
        return cls(
            token=data.get("token") or None,
            vendor=Vendor.model_validate(vendor_data) if isinstance(vendor_data, dict) else None,
            message=data.get("message"),
        )
