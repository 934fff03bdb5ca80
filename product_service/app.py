import os
import time
import logging
from decimal import Decimal

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

# common module: models, storage, logging
from common import ProductStore, setup_logging, utc_now
from common.models import Product, ProductCatalog
from common.storage import UnknownProductId, VersionMismatch

# Logging via common (stdout, timestamps, service name)
setup_logging("product-service")
logger = logging.getLogger(__name__)

app = FastAPI(title="Product Service")

DELAY_MS = int(os.getenv("PRODUCT_DELAY_MS", "0"))
FAIL = os.getenv("PRODUCT_FAIL", "false").lower() in ("1", "true", "yes")


def seed_products() -> list[Product]:
    """Initial catalog: (name, price, inventory_count, category) for ids 1-6."""
    created_at = utc_now()
    rows = [
        ("Product 1", "10.50", 5, "Premium"),
        ("Product 2", "5.50", 7, "Regular"),
        ("Product 3", "2.50", 11, "Budget"),
        ("Product 4", "12.50", 9, "Premium"),
        ("Product 5", "7.50", 10, "Regular"),
        ("Product 6", "9.50", 14, "Premium"),
    ]
    return [
        Product(
            id=i,
            name=name,
            price=Decimal(price),
            inventory_count=count,
            category=category,
            created_at=created_at,
        )
        for i, (name, price, count, category) in enumerate(rows, start=1)
    ]


_store = ProductStore(seed_products())


def get_store() -> ProductStore:
    return _store


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    logger.info("Rejected %s %s: malformed request", request.method, request.url.path)
    return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})


@app.get("/products", response_model=ProductCatalog)
def get_product_catalog(store: ProductStore = Depends(get_store)):
    return ProductCatalog(products=store.list())


@app.get("/products/{product_id}", response_model=Product)
def get_product(product_id: int, store: ProductStore = Depends(get_store)):
    try:
        return store.get(product_id)
    except UnknownProductId:
        raise HTTPException(status_code=404, detail=f"Product not found: {product_id}")


@app.patch("/products", response_model=list[Product])
def update_products(payload: list[Product], store: ProductStore = Depends(get_store)):
    if DELAY_MS > 0:
        time.sleep(DELAY_MS / 1000.0)

    if FAIL:
        raise HTTPException(status_code=500, detail="Simulated catalog failure")

    # All-or-nothing: an unknown id or stale version rejects the whole batch.
    try:
        updated = store.update_inventory(payload)
    except UnknownProductId as e:
        raise HTTPException(status_code=404, detail=f"Product not found: {e.product_id}")
    except VersionMismatch as e:
        logger.info("Rejected stale update: %s", e)
        raise HTTPException(status_code=409, detail=str(e))

    logger.info(
        "Inventory updated: %s",
        ", ".join(f"{p.id}={p.inventory_count}" for p in updated),
    )
    return updated


@app.get("/health")
def health():
    return {"status": "ok", "service": "product-service"}
