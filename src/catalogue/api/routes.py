"""FastAPI endpoints for the Catalogue domain.

Read endpoints are declared before ``/{slug}`` so the fixed prefixes
(``count``, ``list``, ``search``...) are matched first.
"""

from fastapi import APIRouter, Depends, Request, Response
from fastapi.concurrency import run_in_threadpool
from shared.database import get_session
from sqlalchemy.orm import Session

from catalogue.api.schemas import (
    CategoryIdResponse,
    CreateCategoryRequest,
    CreateProductRequest,
    FilterProductsRequest,
    ProductIdResponse,
    StatusResponse,
    UpdateProductRequest,
)
from catalogue.category.management import CreateCategory, ManageCategoryHandler
from catalogue.product.creation import CreateProduct, CreateProductHandler
from catalogue.product.details import UpdateProduct, UpdateProductHandler
from catalogue.product.photo import SetProductPhoto, SetProductPhotoHandler
from catalogue.product.removal import DeleteProduct, DeleteProductHandler
from catalogue.product.repository import ProductRepository

product_router = APIRouter(prefix="/products", tags=["products"])
category_router = APIRouter(prefix="/categories", tags=["categories"])


# --- Product queries ---


@product_router.get("")
def list_products(session: Session = Depends(get_session)) -> dict:
    products = ProductRepository(session).list_recent()
    return {"success": True, "length": len(products), "message": "All Products", "products": products}


@product_router.get("/count")
def count_products(session: Session = Depends(get_session)) -> dict:
    return {"success": True, "total": ProductRepository(session).count(), "message": "Product count fetched"}


@product_router.get("/list/{page}")
def list_products_page(page: int, session: Session = Depends(get_session)) -> dict:
    return {"success": True, "products": ProductRepository(session).paginate(page)}


@product_router.get("/search/{keyword}")
def search_products(keyword: str, session: Session = Depends(get_session)) -> dict:
    return {"success": True, "products": ProductRepository(session).search(keyword)}


@product_router.get("/related/{product_id}/{category_id}")
def related_products(product_id: str, category_id: str, session: Session = Depends(get_session)) -> dict:
    return {"success": True, "products": ProductRepository(session).related(category_id, product_id)}


@product_router.get("/photo/{product_id}")
def product_photo(product_id: str, session: Session = Depends(get_session)) -> Response:
    data, content_type = ProductRepository(session).get_photo(product_id)
    return Response(content=data, media_type=content_type)


@product_router.post("/filter")
def filter_products(body: FilterProductsRequest, session: Session = Depends(get_session)) -> dict:
    products = ProductRepository(session).filter(category_ids=body.checked, price_range=body.radio)
    return {"success": True, "products": products}


@product_router.get("/category/{slug}")
def products_by_category(slug: str, session: Session = Depends(get_session)) -> dict:
    result = ProductRepository(session).by_category_slug(slug)
    return {"success": True, **result}


@product_router.get("/{slug}")
def get_product(slug: str, session: Session = Depends(get_session)) -> dict:
    product = ProductRepository(session).get_by_slug(slug)
    return {"success": True, "message": "Single product fetched", "product": product}


# --- Product commands ---


@product_router.post("", status_code=201, response_model=ProductIdResponse)
def create_product(body: CreateProductRequest, session: Session = Depends(get_session)) -> ProductIdResponse:
    command = CreateProduct(
        name=body.name,
        description=body.description,
        price=body.price,
        category_id=body.category,
        quantity=body.quantity,
        shipping=body.shipping,
    )
    result = CreateProductHandler(session).create_product(command)
    return ProductIdResponse(product_id=result)


@product_router.put("/{product_id}", response_model=StatusResponse)
def update_product(product_id: str, body: UpdateProductRequest, session: Session = Depends(get_session)) -> StatusResponse:
    command = UpdateProduct(
        product_id=product_id,
        name=body.name,
        description=body.description,
        price=body.price,
        category_id=body.category,
        quantity=body.quantity,
        shipping=body.shipping,
    )
    UpdateProductHandler(session).update_product(command)
    return StatusResponse(message="Product updated successfully")


@product_router.put("/{product_id}/photo", response_model=StatusResponse)
async def set_product_photo(
    product_id: str,
    request: Request,
    session: Session = Depends(get_session),
) -> StatusResponse:
    """Replace the product photo with the raw request body.

    The request ``Content-Type`` header becomes the stored content type.
    """
    command = SetProductPhoto(
        product_id=product_id,
        data=await request.body(),
        content_type=request.headers.get("content-type", ""),
    )
    await run_in_threadpool(SetProductPhotoHandler(session).set_photo, command)
    return StatusResponse(message="Photo updated successfully")


@product_router.delete("/{product_id}", response_model=StatusResponse)
def delete_product(product_id: str, session: Session = Depends(get_session)) -> StatusResponse:
    DeleteProductHandler(session).delete_product(DeleteProduct(product_id=product_id))
    return StatusResponse(message="Product deleted successfully")


# --- Category endpoints ---


@category_router.post("", status_code=201, response_model=CategoryIdResponse)
def create_category(body: CreateCategoryRequest, session: Session = Depends(get_session)) -> CategoryIdResponse:
    result = ManageCategoryHandler(session).create_category(CreateCategory(name=body.name))
    return CategoryIdResponse(category_id=result)
