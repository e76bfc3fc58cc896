import logging
from collections import Counter
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse

from mobilespo.core.config import settings
from mobilespo.core.constants import LANGUAGE_DISPLAY, LANGUAGE_NAMES, USSD_FEATURES
from mobilespo.schemas.ussd import UssdRequest, UssdResponse, UssdTestRequest, UssdWebhookEvent
from mobilespo.ussd.handler import UssdMenu
from mobilespo.ussd.replies import render
from mobilespo.ussd.session_store import SessionStore
from mobilespo.ussd.states import Language
from mobilespo.ussd.validators import mask_phone, normalize_phone, valid_phone
from mobilespo.utils.rate_limit import RateLimiter

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/ussd", tags=["USSD"])

ussd_rate_limiter = RateLimiter(settings.USSD_RATE_LIMIT, settings.USSD_RATE_WINDOW)


def get_ussd_menu(request: Request) -> UssdMenu:
    return request.app.state.ussd_menu


def get_session_store(request: Request) -> SessionStore:
    return request.app.state.session_store


def ussd_error(status_code: int, key: str) -> JSONResponse:
    body = UssdResponse.error(render(Language.ENGLISH, key))
    return JSONResponse(status_code=status_code, content=body.model_dump(by_alias=True, mode="json"))


def provider_authenticated(request: Request) -> bool:
    """Telecom providers must send credentials in production."""
    if not settings.is_production:
        return True

    api_key = request.headers.get("X-API-Key")
    if settings.USSD_PROVIDER_API_KEY:
        return api_key == settings.USSD_PROVIDER_API_KEY
    return bool(api_key or request.headers.get("Authorization"))


def client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"


# -------------------------------
# Gateway (telecom provider -> menu)
# -------------------------------
@router.post("/gateway", response_model=UssdResponse)
async def ussd_gateway(
    request: Request,
    payload: UssdRequest,
    menu: UssdMenu = Depends(get_ussd_menu),
):
    if not provider_authenticated(request):
        return ussd_error(401, "unauthorized")

    phone = normalize_phone(payload.phone_number) if valid_phone(payload.phone_number) else None

    rate_key = phone or client_ip(request)
    if not ussd_rate_limiter.hit(rate_key):
        logger.warning("USSD rate limit hit for %s", mask_phone(rate_key))
        return ussd_error(429, "rate_limited")

    if not phone or not payload.session_id:
        return ussd_error(400, "missing_fields")

    logger.info(
        "USSD gateway request: phone=%s session=%s text_length=%d ip=%s",
        mask_phone(phone), payload.session_id, len(payload.text or ""), client_ip(request),
    )

    try:
        response = await menu.handle(phone, payload.text or "", payload.session_id)
    except Exception:
        logger.exception("USSD gateway error")
        return ussd_error(500, "service_error")

    logger.info(
        "USSD gateway response: session=%s type=%s continue=%s message_length=%d",
        payload.session_id, response.type.value, response.continue_session, len(response.message),
    )
    return response


@router.get("/status")
def ussd_status():
    return {
        "status": "operational",
        "service": "USSD Gateway",
        "version": settings.VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "supportedLanguages": LANGUAGE_NAMES,
        "features": USSD_FEATURES,
    }


@router.get("/analytics")
def ussd_analytics(store: SessionStore = Depends(get_session_store)):
    sessions = store.active_sessions()

    languages = Counter(LANGUAGE_DISPLAY[s.language.value] for s in sessions)
    states = Counter(s.state.value for s in sessions)

    return {
        "activeSessions": len(sessions),
        "activeUsers": len({s.phone_number for s in sessions}),
        "languageDistribution": [
            {"language": name, "sessions": languages[name]} for name in LANGUAGE_NAMES
        ],
        "stateDistribution": dict(states),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


# -------------------------------
# Provider session callbacks
# -------------------------------
@router.post("/webhook")
def ussd_webhook(
    request: Request,
    payload: UssdWebhookEvent,
    store: SessionStore = Depends(get_session_store),
):
    if not provider_authenticated(request):
        return ussd_error(401, "unauthorized")

    logger.info(
        "USSD webhook received: event=%s session=%s phone=%s",
        payload.event, payload.session_id, mask_phone(payload.phone_number),
    )

    if payload.event == "session_started":
        return {"status": "acknowledged"}

    if payload.event in ("session_ended", "timeout"):
        if payload.session_id:
            store.delete(payload.session_id)
        return {"status": "acknowledged"}

    return {"status": "unknown_event"}


@router.post("/test")
async def ussd_test(payload: UssdTestRequest, menu: UssdMenu = Depends(get_ussd_menu)):
    if settings.is_production:
        raise HTTPException(status_code=404, detail="Not found")

    response = await menu.handle(payload.phone_number, payload.text, payload.session_id)

    return {
        **response.model_dump(by_alias=True, mode="json"),
        "debug": {
            "phoneNumber": payload.phone_number,
            "text": payload.text,
            "sessionId": payload.session_id,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
    }
