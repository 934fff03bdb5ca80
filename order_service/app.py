import logging

from fastapi import Depends, FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

# common module: models, errors, storage, logging
from common import OrderStore, setup_logging
from common.errors import OrderError
from common.models import Order, OrderCreateRequest, OrderUpdateRequest

from order_service import config
from order_service.catalog_client import CatalogClient
from order_service.coordinator import OrderCoordinator
from order_service.pricing import DiscountPolicy

# Logging via common (stdout, timestamps, service name)
setup_logging("order-service")
logger = logging.getLogger(__name__)

app = FastAPI(title="Order Service")

_coordinator = OrderCoordinator(
    OrderStore(),
    CatalogClient(config.PRODUCT_SERVICE_URL, timeout_ms=config.CATALOG_TIMEOUT_MS),
    DiscountPolicy(
        category=config.PREMIUM_CATEGORY,
        threshold=config.PREMIUM_ITEM_THRESHOLD,
        percent=config.PREMIUM_DISCOUNT_PERCENT,
    ),
    restock_on_cancel=config.RESTOCK_ON_CANCEL,
    optimistic_commit=config.OPTIMISTIC_COMMIT,
    max_commit_attempts=config.MAX_COMMIT_ATTEMPTS,
)


def get_coordinator() -> OrderCoordinator:
    return _coordinator


@app.exception_handler(OrderError)
async def order_error_handler(request: Request, exc: OrderError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=exc.status_code, content={"detail": str(exc)})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    # Malformed bodies and ids are client errors, not 422s.
    return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})


@app.get("/orders", response_model=list[Order])
def list_orders(coordinator: OrderCoordinator = Depends(get_coordinator)):
    return coordinator.list_orders()


@app.post("/orders", response_model=Order)
async def create_order(
    payload: OrderCreateRequest,
    coordinator: OrderCoordinator = Depends(get_coordinator),
):
    logger.info("Placing order: %s", ", ".join(str(i) for i in payload.items))
    return await coordinator.place_order(payload.items)


@app.patch("/orders/{order_id}", response_model=Order)
async def update_order(
    order_id: int,
    payload: OrderUpdateRequest,
    coordinator: OrderCoordinator = Depends(get_coordinator),
):
    return await coordinator.update_order(order_id, payload)


@app.get("/health")
def health():
    return {"status": "ok", "service": "order-service"}
