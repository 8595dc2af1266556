from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import HTMLResponse

from catalog.api.deps import get_repository, templates
from catalog.config import settings
from catalog.repository import ProductRepository, total_pages

router = APIRouter(tags=["pages"])


@router.get("/", response_class=HTMLResponse)
@router.get("/Home/Index", response_class=HTMLResponse)
async def index(
    request: Request,
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.default_page_size, alias="pageSize", ge=1, le=settings.max_page_size),
    repo: ProductRepository = Depends(get_repository),
):
    """Paginated product listing page."""
    products = await repo.list_page(page, page_size)
    total = await repo.count()

    return templates.TemplateResponse(
        request,
        "index.html",
        {
            "products": products,
            "current_page": page,
            "page_size": page_size,
            "total_pages": total_pages(total, page_size),
            "total": total,
        },
    )
