"""Error kinds raised by the gateway and handlers.

Every error carries the HTTP status it maps to and a short machine-readable
code; the exception handlers in ``catalog.main`` turn them into the JSON
envelope ``{"code": ..., "message": ...}``.
"""

from typing import Optional


class CatalogError(Exception):
    status_code = 500
    code = "internal_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message}


class ProductNotFoundError(CatalogError):
    status_code = 404
    code = "not_found"

    def __init__(self, product_id: int):
        super().__init__(f"Product with ID {product_id} not found")
        self.product_id = product_id


class ValidationFailedError(CatalogError):
    status_code = 400
    code = "validation_error"


class DuplicateCodeError(CatalogError):
    status_code = 409
    code = "duplicate_code"

    def __init__(self, code_value: Optional[str] = None):
        if code_value:
            message = f"Product with code '{code_value}' already exists"
        else:
            message = "Product code already exists"
        super().__init__(message)
        self.code_value = code_value


class StorageFailureError(CatalogError):
    status_code = 500
    code = "storage_error"


class ConcurrencyConflictError(StorageFailureError):
    code = "concurrency_error"
