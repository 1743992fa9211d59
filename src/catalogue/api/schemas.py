"""Pydantic request/response schemas for the Catalogue API."""

from __future__ import annotations

from pydantic import BaseModel, Field

# --- Product Request Schemas ---


class CreateProductRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "Classic Black T-Shirt",
                    "description": "Premium cotton crew-neck tee in black.",
                    "price": 29.99,
                    "category": "5b0c7a52-8c8e-4c59-9a8e-3a3c2f1d9e10",
                    "quantity": 40,
                    "shipping": True,
                }
            ]
        }
    }

    name: str = Field(..., max_length=255)
    description: str
    price: float
    category: str
    quantity: int
    shipping: bool = False


class UpdateProductRequest(CreateProductRequest):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "Classic Black T-Shirt (Organic)",
                    "description": "Premium organic cotton crew-neck tee in black.",
                    "price": 34.99,
                    "category": "5b0c7a52-8c8e-4c59-9a8e-3a3c2f1d9e10",
                    "quantity": 25,
                    "shipping": True,
                }
            ]
        }
    }


class FilterProductsRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [{"checked": ["5b0c7a52-8c8e-4c59-9a8e-3a3c2f1d9e10"], "radio": [20, 39.99]}]
        }
    }

    checked: list[str] = Field(default_factory=list)
    radio: list[float] = Field(default_factory=list)


# --- Category Request Schemas ---


class CreateCategoryRequest(BaseModel):
    model_config = {"json_schema_extra": {"examples": [{"name": "Apparel"}]}}

    name: str = Field(..., max_length=100)


# --- Response Schemas ---


class ProductIdResponse(BaseModel):
    success: bool = True
    product_id: str


class CategoryIdResponse(BaseModel):
    success: bool = True
    category_id: str


class StatusResponse(BaseModel):
    success: bool = True
    message: str = "ok"
