import logging

from fastapi import APIRouter, Depends, Request

from mobilespo.ai.responder import fallback_result, process_health_query
from mobilespo.auth.dependencies import CurrentUser, get_current_user
from mobilespo.schemas.chat import ChatMessageCreate, ChatReply, ChatResponse, EmergencyInfo
from mobilespo.services.emergency_service import EmergencyService, build_action_plan, get_emergency_resources

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/chat", tags=["Chat"])


def get_emergency_service(request: Request) -> EmergencyService:
    return request.app.state.emergency_service


def run_health_query(message: str, history: list, profile: dict):
    try:
        return process_health_query(message, history, profile)
    except Exception:
        logger.exception("Error processing health query")
        return fallback_result()


def to_reply(result, conversation_id=None) -> ChatReply:
    return ChatReply(
        conversation_id=conversation_id,
        message=result.response,
        confidence=result.confidence,
        medical_topics=result.medical_topics,
        recommendations=result.recommendations,
        disclaimers=result.disclaimers,
        is_emergency=result.is_emergency,
        emergency_level=result.emergency_level,
        timestamp=result.timestamp,
    )


# -------------------------------
# Unauthenticated test endpoint
# -------------------------------
@router.post("/test", response_model=ChatResponse)
def chat_test(payload: ChatMessageCreate):
    logger.info("Processing test health query (%d chars)", len(payload.message))

    result = run_health_query(payload.message, [], {"interface": "test"})
    reply = to_reply(result)

    if result.is_emergency:
        logger.warning("Emergency detected in test query: %s", result.emergency_level)
        reply.emergency = EmergencyInfo(level=result.emergency_level, resources=get_emergency_resources())

    return ChatResponse(data=reply)


# -------------------------------
# Authenticated chat
# -------------------------------
@router.post("/message", response_model=ChatResponse)
async def chat_message(
    payload: ChatMessageCreate,
    current_user: CurrentUser = Depends(get_current_user),
    emergency_service: EmergencyService = Depends(get_emergency_service),
):
    logger.info("Processing health query for user %s", current_user.id)

    history = [turn.model_dump() for turn in payload.history]
    result = run_health_query(payload.message, history, {"interface": "api", "role": current_user.role})
    reply = to_reply(result, payload.conversation_id)

    if result.is_emergency:
        logger.warning("Emergency detected for user %s: %s", current_user.id, result.emergency_level)

        try:
            plan = await emergency_service.handle_emergency_response(
                current_user.id, payload.message, result.emergency_level
            )
        except Exception:
            logger.exception("Emergency escalation failed for user %s", current_user.id)
            plan = build_action_plan(current_user.id, result.emergency_level)

        reply.emergency = EmergencyInfo(
            level=result.emergency_level,
            resources=plan["resources"],
            actions=plan["actions"],
        )

    return ChatResponse(data=reply)
