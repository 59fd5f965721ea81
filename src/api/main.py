from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from ..core.errors import ApprovalEngineError
from ..core.logging import setup_logging
from ..core.config import settings
from .deps import build_container
from .routers import admin, approvals, health, projects, purchase_orders, requisitions

logger = setup_logging()
app = FastAPI(title="Procurement Approval Engine")
app.state.container = build_container(settings)


# Add custom exception handler for validation errors
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.error(f"Validation error: {exc.errors()}")
    logger.error(f"Request body: {await request.body()}")
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": exc.errors(), "body": str(await request.body())},
    )


# Engine errors carry their own status: 400 validation, 404 unknown entity, 409 conflict
@app.exception_handler(ApprovalEngineError)
async def approval_engine_exception_handler(request: Request, exc: ApprovalEngineError):
    logger.warning(
        "Request rejected by approval engine",
        path=request.url.path,
        error=exc.kind,
        detail=exc.message,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "error": exc.kind},
    )


# Configure CORS to allow frontend access
# CORS_ORIGINS can be set in .env as comma-separated list
allowed_origins = [origin.strip() for origin in settings.cors_origins.split(",")]

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(approvals.router)
app.include_router(admin.router)
app.include_router(projects.router)
app.include_router(requisitions.router)
app.include_router(purchase_orders.router)
