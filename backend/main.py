from fastapi import FastAPI, Request
import uvicorn
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import logging

from sqlalchemy.exc import SQLAlchemyError

from core.auth import fastapi_users, auth_backend
from core.config import settings
from core.errors import InventoryError, classify_storage_error
from core.logging_setup import setup_logging
from db.database import create_db_and_tables
from routers.access import router as access_router
from routers.admin import router as admin_router
from routers.branches import router as branches_router
from routers.cylinder_types import router as cylinder_types_router
from routers.records import router as records_router

setup_logging(settings)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await create_db_and_tables()
    yield


app = FastAPI(
    title="Cylinder Inventory API",
    description="Weekly gas-cylinder counts per branch",
    version="2.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-Requested-With"],
)


@app.exception_handler(InventoryError)
async def inventory_error_handler(request: Request, exc: InventoryError):
    return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(exc.to_payload()))


# Storage failures outside the submission path (reads, admin) get the same JSON shape.
@app.exception_handler(SQLAlchemyError)
@app.exception_handler(OSError)
async def storage_error_handler(request: Request, exc: Exception):
    error = classify_storage_error(exc, expose_details=settings.is_development)
    logger.error("Storage failure on %s %s: %s %r", request.method, request.url.path, error.code, exc)
    return await inventory_error_handler(request, error)


@app.get("/", tags=["status"])
async def root():
    return {"status": "API is running", "version": app.version}


# Admin login / logout (fastapi-users)
app.include_router(fastapi_users.get_auth_router(auth_backend), prefix="/auth/jwt", tags=["auth"])

# Branch employee routes
app.include_router(access_router, prefix="/auth", tags=["access"])
app.include_router(branches_router, prefix="/branches", tags=["branches"])
app.include_router(cylinder_types_router, prefix="/cylinder-types", tags=["cylinder-types"])
app.include_router(records_router, prefix="/records", tags=["records"])

# Dashboard routes
app.include_router(admin_router, prefix="/admin", tags=["admin"])

if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=5050, reload=True)
