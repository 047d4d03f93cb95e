"""
Database Schemas for the E-commerce back office

Each Pydantic model describes the documents of one MongoDB collection.

- Customer -> "customers"
- Product -> "products"
- Order -> "orders"
- Credentials -> "auth" (stored as username + password hash)
"""
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

# largest integer BSON can store
MAX_INT64 = 2**63 - 1


class Location(BaseModel):
    """GeoJSON point, coordinates are [longitude, latitude]"""
    type: Literal["Point"] = "Point"
    coordinates: List[float] = Field(..., min_length=2, max_length=2)

    @field_validator("coordinates")
    @classmethod
    def check_range(cls, v):
        lng, lat = v
        if not -180 <= lng <= 180:
            raise ValueError("longitude must be between -180 and 180")
        if not -90 <= lat <= 90:
            raise ValueError("latitude must be between -90 and 90")
        return v


class PurchasedProduct(BaseModel):
    name: str
    quantity: int = Field(..., ge=1, le=MAX_INT64)
    price: float = Field(..., ge=0)


class Customer(BaseModel):
    name: str = Field(..., min_length=1, description="Unique customer name")
    email: EmailStr
    location: Optional[Location] = None
    products: List[PurchasedProduct] = []
    total: float = Field(0, ge=0, description="Amount spent")
    date: Optional[datetime] = Field(None, description="Purchase date")


class CustomerUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    email: Optional[EmailStr] = None
    location: Optional[Location] = None
    products: Optional[List[PurchasedProduct]] = None
    total: Optional[float] = Field(None, ge=0)
    date: Optional[datetime] = None

    @field_validator("name", "email", "products", "total")
    @classmethod
    def not_null(cls, v):
        if v is None:
            raise ValueError("must not be null")
        return v


class Product(BaseModel):
    name: str = Field(..., min_length=1, description="Unique product name")
    description: Optional[str] = Field(None, description="Product description")
    price: float = Field(..., ge=0)
    category: Optional[str] = None


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    category: Optional[str] = None

    @field_validator("name", "price")
    @classmethod
    def not_null(cls, v):
        if v is None:
            raise ValueError("must not be null")
        return v


class OrderCustomer(BaseModel):
    name: str
    email: EmailStr
    location: Optional[Location] = None


class OrderLine(BaseModel):
    id: Optional[str] = Field(None, description="Product id")
    name: str
    quantity: int = Field(..., ge=1, le=MAX_INT64)
    price: float = Field(..., ge=0)


class Order(BaseModel):
    date: datetime
    customer: OrderCustomer
    products: List[OrderLine]
    total: float = Field(..., ge=0)


class Credentials(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)
