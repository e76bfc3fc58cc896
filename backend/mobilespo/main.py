import asyncio
import logging
from contextlib import asynccontextmanager, suppress
from datetime import datetime, timezone

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from mobilespo.core.config import settings
from mobilespo.core.logging_config import setup_logging
from mobilespo.routers.api import chat, emergency, realtime, ussd
from mobilespo.services.emergency_service import EmergencyService
from mobilespo.services.notification_service import NotificationService
from mobilespo.ussd.handler import UssdMenu
from mobilespo.ussd.session_store import build_session_store, sweep_forever

setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    store = build_session_store()
    emergency_service = EmergencyService(NotificationService())

    app.state.session_store = store
    app.state.emergency_service = emergency_service
    app.state.ussd_menu = UssdMenu(store, escalation=emergency_service)

    sweeper = asyncio.create_task(sweep_forever(store, settings.USSD_SWEEP_INTERVAL))
    logger.info("Mobile Spo backend started (%s, sessions=%s)", settings.APP_ENV, settings.USSD_SESSION_BACKEND)
    try:
        yield
    finally:
        sweeper.cancel()
        with suppress(asyncio.CancelledError):
            await sweeper
        logger.info("Mobile Spo backend stopped")


app = FastAPI(title="Mobile Spo Backend", version=settings.VERSION, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(ussd.router)
app.include_router(chat.router)
app.include_router(emergency.router)
app.include_router(realtime.router)


@app.get("/health")
def health():
    return {
        "status": "ok",
        "service": settings.SERVICE_NAME,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "success": False,
            "message": "Validation failed",
            "errors": jsonable_encoder(exc.errors()),
        },
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"success": False, "message": "Internal server error"},
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
