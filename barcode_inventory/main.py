# barcode_inventory/main.py
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import Depends, FastAPI, Request, Response, status
from fastapi.middleware.cors import CORSMiddleware

from .config import Settings, get_settings
from .core import (
    ProductIn, ProductOut, CategoryIn, CategoryOut, CategoryUpdate,
    CategoryMove, AnalyticsOut,
)
from .database import LockRegistry, make_store
from .errors import install_error_handlers
from .handlers import (
    list_products_logic, create_product_logic, lookup_product_logic,
    update_category_logic, list_categories_logic, create_category_logic,
    analytics_logic,
)
from .logging import get_logger
from .upstream import ProductDataSource

log = get_logger("barcode_inventory.main")


# ---------------------------
# Dependencies
# ---------------------------
def get_store(request: Request):
    return request.app.state.store

def get_source(request: Request) -> ProductDataSource:
    return request.app.state.source

def get_locks(request: Request) -> LockRegistry:
    return request.app.state.locks


@asynccontextmanager
async def lifespan(app: FastAPI):
    await app.state.store.connect()
    try:
        yield
    finally:
        await app.state.store.close()


def create_app(settings: Optional[Settings] = None, store=None,
               source: Optional[ProductDataSource] = None) -> FastAPI:
    settings = settings or get_settings()
    app = FastAPI(title="barcode-inventory", lifespan=lifespan)
    app.state.store = store if store is not None else make_store(settings.MONGODB_URI, settings.MONGODB_DB)
    app.state.source = source if source is not None else ProductDataSource(
        settings.UPSTREAM_API_URL, timeout=settings.UPSTREAM_TIMEOUT
    )
    app.state.locks = LockRegistry()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    install_error_handlers(app)

    # ---------------------------
    # Product endpoints
    # ---------------------------
    @app.get("/products", response_model=List[ProductOut])
    async def list_products(category: Optional[str] = None, store=Depends(get_store)):
        return await list_products_logic(store, category)

    @app.post("/products", response_model=ProductOut, status_code=status.HTTP_201_CREATED)
    async def create_product(payload: ProductIn, store=Depends(get_store)):
        return await create_product_logic(store, payload)

    @app.get("/products/{barcode}", response_model=ProductOut)
    async def lookup_product(barcode: str, response: Response, store=Depends(get_store),
                             source: ProductDataSource = Depends(get_source),
                             locks: LockRegistry = Depends(get_locks)):
        product, created = await lookup_product_logic(store, source, locks, barcode)
        if created:
            response.status_code = status.HTTP_201_CREATED
        return product

    @app.patch("/products/{barcode}", response_model=CategoryMove)
    async def update_product_category(barcode: str, payload: CategoryUpdate, store=Depends(get_store)):
        return await update_category_logic(store, barcode, payload)

    # ---------------------------
    # Category endpoints
    # ---------------------------
    @app.get("/categories", response_model=List[CategoryOut])
    async def list_categories(store=Depends(get_store)):
        return await list_categories_logic(store)

    @app.post("/categories", response_model=CategoryOut)
    async def create_category(payload: CategoryIn, response: Response, store=Depends(get_store)):
        category, created = await create_category_logic(store, payload)
        response.status_code = status.HTTP_201_CREATED if created else status.HTTP_200_OK
        return category

    # ---------------------------
    # Analytics
    # ---------------------------
    @app.get("/analytics", response_model=AnalyticsOut)
    async def analytics(store=Depends(get_store)):
        return await analytics_logic(store)

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    s = get_settings()
    uvicorn.run("barcode_inventory.main:app", host=s.HOST, port=s.PORT, log_level=s.LOG_LEVEL.lower())
