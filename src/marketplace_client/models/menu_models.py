"""Menu item models.

MenuItem is the entity held in the local menu list. MenuItemInput is the
validated add/edit form payload; its validation runs before any network call.
"""

from decimal import Decimal, InvalidOperation
from typing import Any

from pydantic import BaseModel, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from marketplace_client.exceptions import ValidationError
from marketplace_client.services.pricing import discounted_price

TEMPORARY_ID_PREFIX = "tmp-"


def _parse_amount(value: Any, field_name: str) -> Decimal:
    """Parse a form amount into a finite Decimal."""
    if isinstance(value, bool):
        raise ValueError(f"{field_name} must be a number")
    try:
        amount = Decimal(str(value).strip())
    except InvalidOperation as e:
        raise ValueError(f"{field_name} must be a number") from e
    if not amount.is_finite():
        raise ValueError(f"{field_name} must be a finite number")
    return amount


class MenuItem(BaseModel):
    """Menu item owned by a single vendor."""

    id: str = Field(..., description="Server id, or a tmp- token before confirmation")
    vendor_id: str | None = Field(None, description="Vendor this item belongs to")
    name: str = Field(..., description="Item name", min_length=1)
    description: str = Field(default="", description="Item description")
    price: Decimal = Field(..., description="Base price", ge=0)
    discount: Decimal | None = Field(None, description="Discount percentage", ge=0, le=100)
    category: str | None = Field(None, description="Menu section, e.g. 'Pizza'")

    @field_validator("id", "vendor_id", mode="before")
    @classmethod
    def validate_ids(cls, v: Any) -> str | None:
        """Normalise numeric ids to strings."""
        return None if v is None else str(v)

    @field_validator("price", "discount", mode="before")
    @classmethod
    def validate_amounts(cls, v: Any) -> Any:
        """Route floats through str so 12.99 stays Decimal('12.99')."""
        if isinstance(v, float):
            return str(v)
        return v

    @field_validator("description", mode="before")
    @classmethod
    def validate_description(cls, v: Any) -> str:
        """Treat a missing description as empty text."""
        return "" if v is None else v

    @property
    def is_temporary(self) -> bool:
        """Whether the item is still waiting for a server-assigned id."""
        return self.id.startswith(TEMPORARY_ID_PREFIX)

    @property
    def display_price(self) -> Decimal:
        """Price after discount, unrounded."""
        return discounted_price(self.price, self.discount or Decimal("0"))

    def values(self) -> dict[str, Any]:
        """Return the editable fields, excluding identity."""
        return self.model_dump(exclude={"id", "vendor_id"})


class MenuItemInput(BaseModel):
    """Validated payload from the add/edit menu item form."""

    name: str
    description: str = ""
    price: Decimal = Field(..., ge=0)
    discount: Decimal | None = Field(None, ge=0, le=100)
    category: str | None = None

    @field_validator("name", mode="before")
    @classmethod
    def validate_name(cls, v: Any) -> str:
        """Require a non-blank name."""
        name = "" if v is None else str(v).strip()
        if not name:
            raise ValueError("name is required")
        return name

    @field_validator("price", mode="before")
    @classmethod
    def validate_price(cls, v: Any) -> Decimal:
        """Require a price parseable as a number."""
        if v is None or (isinstance(v, str) and not v.strip()):
            raise ValueError("price is required")
        return _parse_amount(v, "price")

    @field_validator("discount", mode="before")
    @classmethod
    def validate_discount(cls, v: Any) -> Decimal | None:
        """Treat a blank discount as absent."""
        if v is None or (isinstance(v, str) and not v.strip()):
            return None
        return _parse_amount(v, "discount")

    @field_validator("category", mode="before")
    @classmethod
    def validate_category(cls, v: Any) -> str | None:
        """Treat a blank category as absent."""
        if v is None or not str(v).strip():
            return None
        return str(v).strip()

    @field_validator("description", mode="before")
    @classmethod
    def validate_description(cls, v: Any) -> str:
        return "" if v is None else str(v)

    @classmethod
    def parse(cls, data: "MenuItemInput | MenuItem | dict[str, Any]") -> "MenuItemInput":
        """Validate raw form data.

        Args:
            data: Form fields as a dict, an existing MenuItem, or an input instance

        Returns:
            MenuItemInput: The validated payload

        Raises:
            ValidationError: If any field violates the input rules
        """
        if isinstance(data, MenuItemInput):
            return data
        if isinstance(data, MenuItem):
            data = data.values()

        try:
            return cls.model_validate(data)
        except PydanticValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
                for err in e.errors()
            )
            raise ValidationError(f"Invalid menu item: {problems}") from e

    def to_request_body(self) -> dict[str, Any]:
        """Serialize for the API, sending amounts as JSON numbers.

        Returns:
            dict: JSON-compatible request body
        """
        body: dict[str, Any] = {
            "name": self.name,
            "description": self.description,
            "price": float(self.price),
        }

        if self.discount is not None:
            body["discount"] = float(self.discount)

        if self.category is not None:
            body["category"] = self.category

        return body
