from pathlib import Path

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.templating import Jinja2Templates

from catalog.database import get_db
from catalog.repository import ProductRepository

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"

# Jinja2Templates autoescapes .html templates
templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
templates.env.filters["timestamp"] = lambda value: value.strftime("%Y-%m-%d %H:%M:%S") if value else ""


async def get_repository(db: AsyncSession = Depends(get_db)) -> ProductRepository:
    return ProductRepository(db)
