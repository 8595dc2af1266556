from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from catalog.api import pages, products
from catalog.config import settings
from catalog.database import async_engine, init_models
from catalog.errors import CatalogError
from catalog.logging import configure_logging, get_logger
from catalog.middleware import RequestTimeoutMiddleware

logger = get_logger(__name__)

app = FastAPI(
    title=settings.api_title,
    description="API for managing products. The paginated page is served at /Home/Index.",
    version=settings.api_version,
)

# The last middleware added is outermost; CORS wraps the timeout response too
app.add_middleware(RequestTimeoutMiddleware)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(products.router)
app.include_router(pages.router)


@app.on_event("startup")
async def startup_event():
    configure_logging()
    if settings.create_tables:
        # Development convenience; production uses the Alembic migration
        await init_models(async_engine)
    logger.info("Product catalog started ({})", settings.environment)


@app.on_event("shutdown")
async def shutdown_event():
    await async_engine.dispose()


@app.get("/health")
async def health_check():
    return {"status": "healthy"}


@app.exception_handler(CatalogError)
async def catalog_exception_handler(request: Request, exc: CatalogError):
    if exc.status_code < 500:
        logger.info("{} {} -> {}: {}", request.method, request.url.path, exc.status_code, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    message = "; ".join(
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}" for error in exc.errors()
    )
    return JSONResponse(
        status_code=400,
        content={"code": "validation_error", "message": message},
    )


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.opt(exception=exc).error("Unhandled error on {} {}", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"code": "internal_error", "message": "Internal server error"},
    )
