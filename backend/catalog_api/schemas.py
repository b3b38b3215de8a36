from typing import Any, Dict, List, Optional
from decimal import Decimal
from urllib.parse import urlparse

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from catalog_api.validation import (
    coerce_bool,
    coerce_int,
    parse_id_list,
    parse_json_object,
    parse_price,
)


# --- Shared ---
class CamelModel(BaseModel):
    """JSON keys are camelCase, Python attributes snake_case."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _check_image_url(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    parsed = urlparse(value)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValueError("Invalid image URL")
    return value


class DeleteResponse(BaseModel):
    success: bool = True
    message: str


# --- Category ---
class CategoryCreate(CamelModel):
    name: str = Field(..., min_length=3, max_length=100)
    description: str = Field(..., min_length=10, max_length=300)
    image_url: Optional[str] = None

    @field_validator("image_url", mode="before")
    @classmethod
    def blank_image_url(cls, v):
        return _blank_to_none(v)

    @field_validator("image_url")
    @classmethod
    def valid_image_url(cls, v):
        return _check_image_url(v)


class CategoryUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=3, max_length=100)
    description: Optional[str] = Field(None, min_length=10, max_length=300)
    image_url: Optional[str] = None

    @field_validator("name", "description", "image_url", mode="before")
    @classmethod
    def blank_is_absent(cls, v):
        return _blank_to_none(v)

    @field_validator("image_url")
    @classmethod
    def valid_image_url(cls, v):
        return _check_image_url(v)


class CategoryResponse(CamelModel):
    id: int
    name: str
    description: str
    image_url: Optional[str] = None


# --- Product ---
class ProductCreate(CamelModel):
    name: str = Field(..., min_length=3, max_length=100)
    description: str = Field(..., min_length=10)
    price: Optional[Decimal] = None
    is_contact_for_price: bool = False
    machine_data: Dict[str, Any] = Field(default_factory=dict)
    show_in_hero: bool = False
    hero_index: int = 0
    category_ids: Optional[List[int]] = None

    @field_validator("price", mode="before")
    @classmethod
    def normalize_price(cls, v):
        return parse_price(v)

    @field_validator("is_contact_for_price", "show_in_hero", mode="before")
    @classmethod
    def lenient_flag(cls, v):
        return coerce_bool(v, default=False)

    @field_validator("hero_index", mode="before")
    @classmethod
    def lenient_index(cls, v):
        return coerce_int(v, default=0)

    @field_validator("machine_data", mode="before")
    @classmethod
    def decode_machine_data(cls, v):
        return parse_json_object(v)

    @field_validator("category_ids", mode="before")
    @classmethod
    def decode_category_ids(cls, v):
        return parse_id_list(v)


class ProductUpdate(CamelModel):
    """Partial update: a field left as None is not touched."""

    name: Optional[str] = Field(None, min_length=3, max_length=100)
    description: Optional[str] = Field(None, min_length=10)
    price: Optional[Decimal] = None
    is_contact_for_price: Optional[bool] = None
    machine_data: Optional[Dict[str, Any]] = None
    show_in_hero: Optional[bool] = None
    hero_index: Optional[int] = None
    category_ids: Optional[List[int]] = None

    @field_validator("name", "description", mode="before")
    @classmethod
    def blank_is_absent(cls, v):
        return _blank_to_none(v)

    @field_validator("price", mode="before")
    @classmethod
    def normalize_price(cls, v):
        return parse_price(v)

    @field_validator("is_contact_for_price", "show_in_hero", mode="before")
    @classmethod
    def lenient_flag(cls, v):
        return coerce_bool(v, default=False)

    @field_validator("hero_index", mode="before")
    @classmethod
    def lenient_index(cls, v):
        return coerce_int(v, default=0)

    @field_validator("machine_data", mode="before")
    @classmethod
    def decode_machine_data(cls, v):
        return parse_json_object(v)

    @field_validator("category_ids", mode="before")
    @classmethod
    def decode_category_ids(cls, v):
        return parse_id_list(v)


class ProductResponse(CamelModel):
    id: int
    name: str
    price: Optional[Decimal] = None
    is_contact_for_price: bool = False
    description: str
    machine_data: Dict[str, Any] = Field(default_factory=dict)
    show_in_hero: bool = False
    hero_index: int = 0
    categories: List[CategoryResponse] = []

    @field_validator("machine_data", mode="before")
    @classmethod
    def empty_bag(cls, v):
        return dict(v or {})

    @model_validator(mode="after")
    def render_category_ids(self):
        # Category membership lives in the join table; clients read it from the bag
        self.machine_data = {
            **self.machine_data,
            "categories": [c.id for c in self.categories],
        }
        return self


# --- Auth ---
class LoginRequest(BaseModel):
    username: str = Field(..., min_length=3)
    password: str = Field(..., min_length=6)


class UserResponse(BaseModel):
    id: int
    username: str

    class Config:
        from_attributes = True


class LoginResponse(BaseModel):
    token: str
    user: UserResponse


class TokenUser(BaseModel):
    userId: int
    username: str


# --- Uploads ---
class UploadResponse(BaseModel):
    success: bool = True
    fileUrl: str
