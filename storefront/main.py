# storefront/main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from storefront.config import settings
from storefront.database import init_db
from storefront.services.errors import StoreError

# Router imports
from storefront.routes.auth import router as auth_router
from storefront.routes.shop import router as shop_router
from storefront.routes.cart import router as cart_router
from storefront.routes.favorites import router as favorites_router
from storefront.routes.promos import router as promos_router
from storefront.routes.orders import router as orders_router
from storefront.routes.reviews import router as reviews_router
from storefront.routes.cards import router as cards_router
from storefront.routes.admin import router as admin_router
from storefront.routes.products import router as admin_products_router
from storefront.routes.logs import router as logs_router

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


def create_app() -> FastAPI:
    app = FastAPI(title="Storefront API", version="1.0.0", lifespan=lifespan)

    # CORS configuration; the deployed frontend URL comes from the environment
    origins = ["http://localhost:3000", "http://127.0.0.1:3000"]
    if settings.FRONTEND_URL:
        origins.append(settings.FRONTEND_URL)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Every error leaves the API as {"message": ...}
    @app.exception_handler(StoreError)
    async def store_error_handler(request: Request, exc: StoreError):
        return JSONResponse(status_code=exc.status_code, content={"message": exc.message})

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
            message = "Method not allowed"
        else:
            message = exc.detail if isinstance(exc.detail, str) else "Request failed"
        return JSONResponse(status_code=exc.status_code, content={"message": message}, headers=getattr(exc, "headers", None))

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"message": "Validation error", "errors": jsonable_encoder(exc.errors())},
        )

    @app.exception_handler(SQLAlchemyError)
    async def database_error_handler(request: Request, exc: SQLAlchemyError):
        logger.exception("Database error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"message": "Internal server error"})

    # Router registration
    app.include_router(auth_router)
    app.include_router(shop_router)
    app.include_router(cart_router)
    app.include_router(favorites_router)
    app.include_router(promos_router)
    app.include_router(orders_router)
    app.include_router(reviews_router)
    app.include_router(cards_router)
    app.include_router(admin_router)
    app.include_router(admin_products_router)
    app.include_router(logs_router)

    @app.get("/")
    def read_root():
        return {"message": "Storefront API is running"}

    return app


app = create_app()
