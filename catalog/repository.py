from contextlib import asynccontextmanager
from datetime import datetime
from typing import List, Mapping, Optional, Any
import math

from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from catalog.errors import ConcurrencyConflictError, DuplicateCodeError, StorageFailureError
from catalog.logging import get_logger
from catalog.models.product import Product, MUTABLE_FIELDS

logger = get_logger(__name__)

# SQLSTATE class 23 code for unique_violation
UNIQUE_VIOLATION_SQLSTATE = "23505"


def is_unique_violation(exc: IntegrityError) -> bool:
    """True when the database rejected a write because of a unique index."""
    sqlstate = getattr(exc.orig, "sqlstate", None) or getattr(exc.orig, "pgcode", None)
    if sqlstate:
        return sqlstate == UNIQUE_VIOLATION_SQLSTATE
    message = str(exc.orig).lower()
    return "unique" in message or "duplicate" in message


def total_pages(count: int, page_size: int) -> int:
    """Number of pages needed to show `count` rows, `page_size` at a time."""
    if page_size < 1:
        raise ValueError("page_size must be positive")
    return math.ceil(count / page_size)


class ProductRepository:
    """Gateway between product operations and the `product` table.

    Each method is a single unit of work: writes are committed before
    returning and rolled back if the database rejects them. Database errors
    are re-raised as the catalog error kinds.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    @asynccontextmanager
    async def _unit_of_work(self, action: str, code: Optional[str] = None):
        try:
            yield
        except IntegrityError as exc:
            await self.session.rollback()
            if not is_unique_violation(exc):
                logger.exception("Integrity error while {}", action)
                raise StorageFailureError("Internal server error") from exc
            logger.warning("Uniqueness violation while {}: {}", action, exc.orig)
            raise DuplicateCodeError(code) from exc
        except StaleDataError as exc:
            await self.session.rollback()
            logger.exception("Concurrency error while {}", action)
            raise ConcurrencyConflictError("Concurrency error occurred") from exc
        except SQLAlchemyError as exc:
            await self.session.rollback()
            logger.exception("Storage error while {}", action)
            raise StorageFailureError("Internal server error") from exc

    async def list_all(self) -> List[Product]:
        async with self._unit_of_work("listing products"):
            result = await self.session.execute(select(Product).order_by(Product.id))
            return list(result.scalars().all())

    async def list_page(self, page: int, page_size: int) -> List[Product]:
        """Rows of the 1-based `page`. Pages past the end are empty."""
        if page < 1 or page_size < 1:
            raise ValueError("page and page_size must be positive")
        offset = (page - 1) * page_size
        async with self._unit_of_work(f"listing page {page}"):
            result = await self.session.execute(
                select(Product).order_by(Product.id).offset(offset).limit(page_size)
            )
            return list(result.scalars().all())

    async def count(self) -> int:
        async with self._unit_of_work("counting products"):
            result = await self.session.execute(select(func.count()).select_from(Product))
            return result.scalar_one()

    async def get_by_id(self, product_id: int) -> Optional[Product]:
        async with self._unit_of_work(f"getting product {product_id}"):
            return await self.session.get(Product, product_id)

    async def insert(self, product: Product) -> Product:
        async with self._unit_of_work("creating product", code=product.code):
            self.session.add(product)
            await self.session.commit()
            await self.session.refresh(product)
        logger.info("Created product {} ({})", product.id, product.code)
        return product

    async def update(
        self,
        product_id: int,
        fields: Mapping[str, Any],
        updated_at: datetime,
    ) -> Optional[Product]:
        """Overwrite every mutable field of the row and stamp `updated_at`.

        Returns None when no row has `product_id`.
        """
        async with self._unit_of_work(f"updating product {product_id}", code=fields.get("code")):
            product = await self.session.get(Product, product_id)
            if product is None:
                return None
            for field in MUTABLE_FIELDS:
                setattr(product, field, fields.get(field))
            product.updated_at = updated_at
            await self.session.commit()
            await self.session.refresh(product)
        logger.info("Updated product {}", product_id)
        return product

    async def delete(self, product_id: int) -> bool:
        async with self._unit_of_work(f"deleting product {product_id}"):
            product = await self.session.get(Product, product_id)
            if product is None:
                return False
            await self.session.delete(product)
            await self.session.commit()
        logger.info("Deleted product {}", product_id)
        return True
