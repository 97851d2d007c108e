"""Burnout Risk API - FastAPI application entry point."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from burnout_engine.errors import BurnoutError, NoDataAvailable

from .config import get_settings
from .models.risk import NoDataResponse
from .routes import alerts, assessments, interventions, risk
from .services.engine import engine

logger = logging.getLogger(__name__)

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await engine.shutdown()


app = FastAPI(
    title="Interpreter Burnout API",
    description="Daily burnout check-ins, risk trends and intervention plans",
    version="1.0.0",
    lifespan=lifespan,
)

# Configure CORS for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)


# ============================================================================
# Exception handlers
# ============================================================================

@app.exception_handler(NoDataAvailable)
async def no_data_handler(request: Request, exc: NoDataAvailable):
    """First-time users are a normal state, not an error."""
    return JSONResponse(
        status_code=200,
        content=NoDataResponse(message=exc.message).model_dump(),
    )


@app.exception_handler(BurnoutError)
async def burnout_error_handler(request: Request, exc: BurnoutError):
    """Translate engine errors into the standard error envelope."""
    logger.warning(f"{exc.error_code}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "success": False,
            "errors": [{"msg": exc.message, "code": exc.error_code}],
        },
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Malformed request bodies use the same envelope as engine validation errors."""
    errors = []
    for error in exc.errors():
        field = error["loc"][-1] if error["loc"] else "unknown"
        errors.append({"field": str(field), "msg": error["msg"], "code": "VALIDATION_ERROR"})
    logger.warning(f"Request validation failed: {errors}")
    return JSONResponse(status_code=422, content={"success": False, "errors": errors})


# Include routers
app.include_router(assessments.router)
app.include_router(risk.router)
app.include_router(interventions.router)
app.include_router(alerts.router)


@app.get("/health")
@app.get("/api/burnout/health")
async def health_check():
    """Health check endpoint for the API."""
    return {"status": "healthy", "service": "burnout-api"}


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(
        "server.burnout_api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=True,
    )
