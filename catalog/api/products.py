from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Path, Query, Request, Response
from fastapi.responses import HTMLResponse
from typing import List

from catalog.api.deps import get_repository, templates
from catalog.config import settings
from catalog.errors import ProductNotFoundError, ValidationFailedError
from catalog.logging import get_logger
from catalog.models.product import Product
from catalog.repository import ProductRepository, total_pages
from catalog.schemas import (
    ErrorResponse, ProductCreate, ProductUpdate, ProductResponse, ProductListResponse
)

logger = get_logger(__name__)

router = APIRouter(prefix="/products", tags=["products"])

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@router.get("/all", response_model=List[ProductResponse], responses=ERROR_RESPONSES)
async def list_all_products(repo: ProductRepository = Depends(get_repository)):
    """Return every product."""
    products = await repo.list_all()
    return [ProductResponse.model_validate(p) for p in products]


@router.get("/view", response_class=HTMLResponse, responses=ERROR_RESPONSES)
async def products_view(request: Request, repo: ProductRepository = Depends(get_repository)):
    """Render every product as an HTML table."""
    products = await repo.list_all()
    return templates.TemplateResponse(request, "products_table.html", {"products": products})


@router.get("", response_model=ProductListResponse, responses=ERROR_RESPONSES)
async def list_products(
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(
        settings.default_page_size, ge=1, le=settings.max_page_size, description="Items per page"
    ),
    repo: ProductRepository = Depends(get_repository),
):
    """List products one page at a time."""
    total = await repo.count()
    products = await repo.list_page(page, page_size)

    return ProductListResponse(
        items=[ProductResponse.model_validate(p) for p in products],
        total=total,
        page=page,
        page_size=page_size,
        total_pages=total_pages(total, page_size),
    )


@router.get("/{product_id}", response_model=ProductResponse, responses=ERROR_RESPONSES)
async def get_product(
    product_id: int = Path(..., ge=1),
    repo: ProductRepository = Depends(get_repository),
):
    """Get a single product by ID."""
    product = await repo.get_by_id(product_id)
    if product is None:
        raise ProductNotFoundError(product_id)

    return ProductResponse.model_validate(product)


@router.post("", response_model=ProductResponse, status_code=201, responses=ERROR_RESPONSES)
async def create_product(
    payload: ProductCreate,
    request: Request,
    response: Response,
    repo: ProductRepository = Depends(get_repository),
):
    """Create a new product. Timestamps are always assigned by the server."""
    now = utcnow()
    db_product = Product(**payload.mutable_fields(), created_at=now, updated_at=now)

    db_product = await repo.insert(db_product)

    response.headers["Location"] = str(request.url_for("get_product", product_id=db_product.id))
    return ProductResponse.model_validate(db_product)


@router.put("/{product_id}", status_code=204, responses=ERROR_RESPONSES)
async def update_product(
    payload: ProductUpdate,
    product_id: int = Path(..., ge=1),
    repo: ProductRepository = Depends(get_repository),
):
    """Replace every mutable field of an existing product."""
    if payload.id != product_id:
        raise ValidationFailedError("ID mismatch")

    product = await repo.update(product_id, payload.mutable_fields(), updated_at=utcnow())
    if product is None:
        raise ProductNotFoundError(product_id)

    return Response(status_code=204)


@router.delete("/{product_id}", status_code=204, responses=ERROR_RESPONSES)
async def delete_product(
    product_id: int = Path(..., ge=1),
    repo: ProductRepository = Depends(get_repository),
):
    """Delete a single product."""
    if not await repo.delete(product_id):
        raise ProductNotFoundError(product_id)

    return Response(status_code=204)
