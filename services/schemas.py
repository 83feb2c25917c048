# merchant_dashboard/services/schemas.py
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, ValidationInfo, field_validator
from pydantic_core import PydanticCustomError

DUPLICATE_SKU_MESSAGE = "SKU must be unique"


def _required(value, message):
    if isinstance(value, str):
        value = value.strip()
    if not value:
        raise PydanticCustomError("required", message)
    return value


# --- Backend records ---

class Category(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    name: str

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value):
        return str(value) if isinstance(value, int) else value


class ProductSummary(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    name: str
    price: Optional[Union[float, str]] = None
    brand: Optional[str] = None
    image: Optional[str] = None
    price_inr: Optional[Union[float, str]] = Field(default=None, alias="priceInr")

    @property
    def display_price(self):
        return self.price_inr if self.price_inr is not None else self.price


class ImageAsset(BaseModel):
    name: str
    content: bytes
    mime_type: Optional[str] = None

    @property
    def size(self) -> int:
        return len(self.content)


# --- Wizard schemas ---

class VariantSchema(BaseModel):
    option: str
    values: List[str]

    @field_validator("option")
    @classmethod
    def _option_required(cls, value):
        return _required(value, "Option is required")

    @field_validator("values")
    @classmethod
    def _values_required(cls, value):
        return _required(value, "At least one value is required")


class CombinationSchema(BaseModel):
    sku: str
    in_stock: bool = False
    quantity: int = 0

    @field_validator("sku")
    @classmethod
    def _sku_required(cls, value):
        return _required(value, "SKU is required")

    @field_validator("quantity")
    @classmethod
    def _quantity_for_stock(cls, value, info: ValidationInfo):
        if value < 0:
            raise PydanticCustomError("min_quantity", "Quantity must be 0 or greater")
        if info.data.get("in_stock") and value <= 0:
            raise PydanticCustomError("in_stock_quantity", "Quantity must be greater than 0")
        return value


class DescriptionStep(BaseModel):
    product_name: str
    category: str
    brand: str
    image: Optional[ImageAsset] = Field(default=None, validate_default=True)

    @field_validator("product_name")
    @classmethod
    def _name_required(cls, value):
        return _required(value, "Product name is required")

    @field_validator("category")
    @classmethod
    def _category_known(cls, value, info: ValidationInfo):
        value = _required(value, "Category is required")
        known = (info.context or {}).get("category_ids")
        if known is not None and value not in known:
            raise PydanticCustomError("unknown_category", "Select a valid category")
        return value

    @field_validator("brand")
    @classmethod
    def _brand_required(cls, value):
        return _required(value, "Brand is required")

    @field_validator("image")
    @classmethod
    def _image_required(cls, value):
        if value is None or value.size <= 0:
            raise PydanticCustomError("required", "Image is required")
        return value


class VariantsStep(BaseModel):
    variants: List[VariantSchema]

    @field_validator("variants")
    @classmethod
    def _at_least_one(cls, value):
        return _required(value, "At least one variant is required")


class CombinationsStep(BaseModel):
    combinations: List[CombinationSchema]

    @field_validator("combinations")
    @classmethod
    def _unique_skus(cls, value):
        _required(value, "At least one combination is required")
        seen = set()
        for combination in value:
            if combination.sku in seen:
                raise PydanticCustomError("duplicate_sku", DUPLICATE_SKU_MESSAGE)
            seen.add(combination.sku)
        return value


class PricingStep(BaseModel):
    price: float = Field(default=0, allow_inf_nan=False)
    discount: float = Field(default=0, allow_inf_nan=False)
    discount_type: Literal["percentage", "flat"] = "percentage"

    @field_validator("price")
    @classmethod
    def _price_non_negative(cls, value):
        if value < 0:
            raise PydanticCustomError("min_price", "Price cannot be negative")
        return value

    @field_validator("discount")
    @classmethod
    def _discount_non_negative(cls, value):
        if value < 0:
            raise PydanticCustomError("min_discount", "Discount cannot be negative")
        return value


class ProductSubmission(DescriptionStep, VariantsStep, CombinationsStep, PricingStep):
    """Everything the backend receives for one new product."""


STEP_SCHEMAS = {
    1: DescriptionStep,
    2: VariantsStep,
    3: CombinationsStep,
    4: PricingStep,
}


def error_messages(exc: ValidationError) -> Dict[str, str]:
    """Flattens a ValidationError into {'combinations.0.sku': 'SKU is required', ...}."""
    messages: Dict[str, str] = {}
    for error in exc.errors():
        path = ".".join(str(part) for part in error["loc"]) or "__root__"
        messages.setdefault(path, error["msg"])
    return messages


def validate_payload(schema, payload: Dict[str, Any], category_ids=None):
    """Returns (model, {}) on success or (None, errors) on failure."""
    context = {"category_ids": category_ids} if category_ids is not None else None
    try:
        return schema.model_validate(payload, context=context), {}
    except ValidationError as exc:
        return None, error_messages(exc)
