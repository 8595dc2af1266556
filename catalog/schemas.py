from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from datetime import datetime

from catalog.models.product import (
    CODE_MAX_LENGTH,
    NAME_MAX_LENGTH,
    CATEGORY_MAX_LENGTH,
    BRAND_MAX_LENGTH,
    TYPE_MAX_LENGTH,
    DESCRIPTION_MAX_LENGTH,
    MUTABLE_FIELDS,
)


# Product Schemas
class ProductBase(BaseModel):
    code: str = Field(..., min_length=1, max_length=CODE_MAX_LENGTH, description="Product code (unique)")
    name: str = Field(..., min_length=1, max_length=NAME_MAX_LENGTH, description="Product name")
    category: str = Field(..., min_length=1, max_length=CATEGORY_MAX_LENGTH, description="Product category")
    brand: Optional[str] = Field(None, max_length=BRAND_MAX_LENGTH, description="Brand")
    type: Optional[str] = Field(None, max_length=TYPE_MAX_LENGTH, description="Product type")
    description: Optional[str] = Field(None, max_length=DESCRIPTION_MAX_LENGTH, description="Product description")

    @field_validator("code", "name", "category")
    @classmethod
    def validate_not_blank(cls, v):
        if not v.strip():
            raise ValueError("must not be blank")
        return v

    def mutable_fields(self) -> dict:
        return self.model_dump(include=set(MUTABLE_FIELDS))


class ProductCreate(ProductBase):
    pass


class ProductUpdate(ProductBase):
    id: int = Field(..., description="Must equal the id in the request path")


class ProductResponse(BaseModel):
    id: int
    code: str
    name: str
    category: str
    brand: Optional[str] = None
    type: Optional[str] = None
    description: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


# Pagination Schemas
class ProductListResponse(BaseModel):
    items: List[ProductResponse]
    total: int
    page: int
    page_size: int
    total_pages: int


class ErrorResponse(BaseModel):
    code: str
    message: str
