"""
USSD menu state machine.

The gateway calls `UssdMenu.handle` once per keypress screen. The
session's `state` decides how the trimmed input is read; each state has
one handler in `UssdMenu.handlers`, and the main menu's options live in
MAIN_MENU_OPTIONS. Terminal responses (`end`/`error`) close the session.
"""

import logging
import random

from mobilespo.ai.responder import process_health_query
from mobilespo.core.config import settings
from mobilespo.core.constants import SUPPORTED_LANGUAGES, USSD_REPLY_MAX_LENGTH
from mobilespo.schemas.ussd import UssdResponse
from mobilespo.ussd.replies import random_tip, render, with_footer
from mobilespo.ussd.session_store import SessionStore, UssdSession
from mobilespo.ussd.states import Language, UssdState
from mobilespo.ussd.validators import mask_phone
from mobilespo.utils import audit

logger = logging.getLogger(__name__)

BACK = "0"

# main menu input -> (next state, handler method name)
MAIN_MENU_OPTIONS = {
    "1": (UssdState.HEALTH_CHAT, "_open_health_chat"),
    "2": (UssdState.EMERGENCY, "_emergency"),
    "3": (UssdState.APPOINTMENT_BOOKING, "_open_appointments"),
    "4": (UssdState.HEALTH_TIPS, "_tip"),
    "5": (UssdState.LANGUAGE_SELECTION, "_open_language_menu"),
    "0": (None, "_goodbye"),
}


def truncate_reply(text: str, limit: int = USSD_REPLY_MAX_LENGTH) -> str:
    if len(text) <= limit:
        return text
    return text[:limit - 3] + "..."


class UssdMenu:
    def __init__(
        self,
        store: SessionStore,
        escalation=None,
        responder=process_health_query,
        tip_chooser=random.choice,
        escalation_channel: str = None,
    ):
        self.store = store
        self.escalation = escalation
        self.escalation_channel = escalation_channel or settings.USSD_ESCALATION_CHANNEL
        self.responder = responder
        self.tip_chooser = tip_chooser

        self.handlers = {
            UssdState.MAIN_MENU: self._main_menu,
            UssdState.LANGUAGE_SELECTION: self._language_selection,
            UssdState.HEALTH_CHAT: self._health_chat,
            UssdState.EMERGENCY: self._emergency_input,
            UssdState.APPOINTMENT_BOOKING: self._appointment_booking,
            UssdState.HEALTH_TIPS: self._health_tips,
        }
        missing = set(UssdState) - set(self.handlers)
        if missing:
            raise RuntimeError(f"No USSD handler for states: {sorted(s.value for s in missing)}")

    async def handle(self, phone_number: str, text: str, session_id: str) -> UssdResponse:
        raw = text or ""
        try:
            logger.info(
                "USSD request received: session=%s phone=%s text_length=%d",
                session_id, mask_phone(phone_number), len(raw),
            )

            session = self.store.get(session_id)
            if session is None:
                session = self.store.create(session_id, phone_number)
                audit.record("USSD session started", "ussd", session_id=session_id, phone=mask_phone(phone_number))
            session.last_activity = self.store.clock()
            session.input_history.append(raw)

            user_input = raw.strip()
            if user_input == "":
                session.state = UssdState.MAIN_MENU
                response = self._show_main_menu(session)
            else:
                response = await self.handlers[session.state](session, user_input)

            if response.continue_session:
                self.store.save(session)
            else:
                self.store.delete(session_id)
                audit.record(
                    "USSD session ended",
                    "ussd",
                    session_id=session_id,
                    state=session.state.value,
                    response_type=response.type.value,
                    turns=len(session.input_history),
                )

            logger.info(
                "USSD response generated: session=%s state=%s type=%s continue=%s",
                session_id, session.state.value, response.type.value, response.continue_session,
            )
            return response

        except Exception:
            logger.exception("USSD request error for session %s", session_id)
            self._discard(session_id)
            return UssdResponse.error(render(Language.ENGLISH, "service_error"))

    def _discard(self, session_id: str):
        try:
            self.store.delete(session_id)
        except Exception:
            logger.exception("Could not discard USSD session %s", session_id)

    # ---------- MAIN MENU ----------
    def _show_main_menu(self, session: UssdSession) -> UssdResponse:
        return UssdResponse.menu(render(session.language, "main_menu"))

    def _back_to_menu(self, session: UssdSession) -> UssdResponse:
        session.state = UssdState.MAIN_MENU
        return self._show_main_menu(session)

    async def _main_menu(self, session: UssdSession, text: str) -> UssdResponse:
        option = MAIN_MENU_OPTIONS.get(text)
        if option is None:
            return UssdResponse.menu(
                render(session.language, "invalid_option") + "\n\n" + render(session.language, "main_menu")
            )

        next_state, method = option
        if next_state is not None:
            session.state = next_state
        return await getattr(self, method)(session, text)

    async def _open_health_chat(self, session: UssdSession, text: str) -> UssdResponse:
        return UssdResponse.input(render(session.language, "health_chat_prompt"))

    async def _open_appointments(self, session: UssdSession, text: str) -> UssdResponse:
        return UssdResponse.menu(render(session.language, "appointment_menu"))

    async def _open_language_menu(self, session: UssdSession, text: str) -> UssdResponse:
        return UssdResponse.menu(render(Language.ENGLISH, "language_menu"))

    async def _goodbye(self, session: UssdSession, text: str) -> UssdResponse:
        return UssdResponse.end(render(session.language, "goodbye"))

    # ---------- LANGUAGE ----------
    async def _language_selection(self, session: UssdSession, text: str) -> UssdResponse:
        language = SUPPORTED_LANGUAGES.get(text)
        if language is None:
            return UssdResponse.menu(
                render(Language.ENGLISH, "invalid_selection") + "\n\n" + render(Language.ENGLISH, "language_menu")
            )

        session.language = Language(language)
        session.state = UssdState.MAIN_MENU
        return UssdResponse.menu(
            render(session.language, "language_changed") + "\n\n" + render(session.language, "main_menu")
        )

    # ---------- HEALTH CHAT ----------
    async def _health_chat(self, session: UssdSession, text: str) -> UssdResponse:
        if text == BACK:
            return self._back_to_menu(session)

        result = self.responder(
            text,
            [],
            {"language": session.language.value, "interface": "ussd", "phone_number": session.phone_number},
        )

        if result.is_emergency:
            session.state = UssdState.EMERGENCY
            if self.escalation is not None:
                try:
                    await self.escalation.handle_emergency_response(
                        session.phone_number, text, result.emergency_level, channel=self.escalation_channel
                    )
                except Exception:
                    logger.exception("Emergency escalation failed for session %s", session.session_id)
                    # hotline block still reaches the caller
                    return UssdResponse.error(render(session.language, "emergency_info"))
            return await self._emergency(session, text)

        reply = truncate_reply(result.response)
        return UssdResponse.input(with_footer(reply, session.language, "chat_footer"))

    # ---------- EMERGENCY ----------
    async def _emergency(self, session: UssdSession, text: str) -> UssdResponse:
        return UssdResponse.end(render(session.language, "emergency_info"))

    async def _emergency_input(self, session: UssdSession, text: str) -> UssdResponse:
        return await self._emergency(session, text)

    # ---------- APPOINTMENTS ----------
    async def _appointment_booking(self, session: UssdSession, text: str) -> UssdResponse:
        if text == BACK:
            return self._back_to_menu(session)
        return UssdResponse.end(render(session.language, "appointment_info"))

    # ---------- HEALTH TIPS ----------
    async def _tip(self, session: UssdSession, text: str) -> UssdResponse:
        tip = random_tip(session.language, self.tip_chooser)
        return UssdResponse.input(with_footer(tip, session.language, "tips_footer"))

    async def _health_tips(self, session: UssdSession, text: str) -> UssdResponse:
        if text == BACK:
            return self._back_to_menu(session)
        return await self._tip(session, text)
