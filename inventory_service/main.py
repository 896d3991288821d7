import logging
import traceback
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from http import HTTPStatus

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from inventory_service.api import purchases, stock
from inventory_service.clients.product_directory import ProductDirectoryClient
from inventory_service.config import Settings, settings as default_settings
from inventory_service.database import create_db_engine, create_session_factory, init_db
from inventory_service.errors import InventoryError
from inventory_service.services.purchase_workflow import PurchaseWorkflow
from inventory_service.services.stock_ledger import StockLedger

logger = logging.getLogger(__name__)


def _error_body(request: Request, status_code: int, message: str, details: dict | None = None) -> dict:
    body = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "status": status_code,
        "error": HTTPStatus(status_code).phrase,
        "message": message,
        "path": request.url.path,
    }
    if details:
        body["details"] = details
    return body


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(InventoryError)
    async def inventory_error_handler(request: Request, exc: InventoryError):
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(request, exc.status_code, exc.message, exc.details),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        details = {}
        for err in exc.errors():
            field = ".".join(str(p) for p in err["loc"] if p not in ("body", "query", "path"))
            details[field or "request"] = err["msg"]
        return JSONResponse(status_code=400, content=_error_body(request, 400, "Invalid request", details))

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(status_code=exc.status_code, content=_error_body(request, exc.status_code, str(exc.detail)))

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Return JSON for unhandled exceptions so clients can parse the error."""
        logger.error("Unhandled error: %s\n%s", exc, traceback.format_exc())
        return JSONResponse(status_code=500, content=_error_body(request, 500, "Internal server error"))


def create_app(settings: Settings | None = None, product_directory: ProductDirectoryClient | None = None) -> FastAPI:
    settings = settings or default_settings
    owns_client = product_directory is None
    if product_directory is None:
        product_directory = ProductDirectoryClient.from_settings(settings)

    engine = create_db_engine(settings.DATABASE_URL)
    session_factory = create_session_factory(engine)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logging.basicConfig(level=settings.LOG_LEVEL)
        init_db(engine)
        logger.info("%s started, products service at %s", settings.APP_NAME, settings.PRODUCTS_SERVICE_URL)
        yield
        if owns_client:
            product_directory.close()
        engine.dispose()

    app = FastAPI(
        title="Inventory Service API",
        description="Stock levels, purchases and purchase cancellation",
        version="1.0.0",
        lifespan=lifespan,
    )

    stock_ledger = StockLedger(product_directory)
    app.state.settings = settings
    app.state.session_factory = session_factory
    app.state.stock_ledger = stock_ledger
    app.state.purchase_workflow = PurchaseWorkflow(stock_ledger, product_directory)

    _register_exception_handlers(app)
    app.include_router(stock.router, prefix="/api/v1")
    app.include_router(purchases.router, prefix="/api/v1")

    @app.get("/health")
    def health():
        return {"status": "ok", "service": "inventory-service"}

    return app


app = create_app()
