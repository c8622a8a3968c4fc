import logging
from typing import List

from openai import AsyncOpenAI

from sukejuru.config import app_cfg
from sukejuru.constants import MessageRole, NO_REPLY_FALLBACK
from sukejuru.db.events.crud import list_events
from sukejuru.db.events.models import Event
from sukejuru.db.messages.crud import append_messages, get_messages_by_user_id
from sukejuru.instructions import build_chat_system_prompt
from sukejuru.utils.app_utils import (
    app_timezone,
    as_utc,
    format_iso,
    format_local_clock,
    local_day_bounds,
    local_today,
    local_weekday_name,
)
from sukejuru.utils.reference_data import current_semester, load_reference_data
from sukejuru.utils.tracing_utils import chat_generation

logger = logging.getLogger(__name__)

DEFAULT_SCHEDULE_START_HOUR = 8


def _event_context(event: Event) -> dict:
    local_start = as_utc(event.start_date).astimezone(app_timezone())
    return {
        "id": event.id,
        "title": event.title,
        "start": format_iso(event.start_date),
        "end": format_iso(event.end_date),
        "description": event.description,
        "all_day": event.all_day,
        "color": event.color,
        "day": local_weekday_name(event.start_date),
        "date": local_start.date().isoformat(),
        "time": f"{format_local_clock(event.start_date)} - {format_local_clock(event.end_date)}",
    }


def _upcoming_event_context(event: Event) -> dict:
    context = _event_context(event)
    return {name: context[name] for name in ("title", "start", "end", "day", "time")}


class ChatService:
    """Builds the scheduling prompt, calls the chat model and records the exchange."""

    def __init__(self):
        logger.info("ChatService initialized")

    def build_prompt_messages(self, user_id: str, message: str) -> List[dict]:
        """
        Messages for one completion: the system prompt, the recent turns, then the new message.
        """
        today = local_today()
        courses, semesters = load_reference_data()

        all_events = list_events(user_id)
        upcoming_events = list_events(user_id, start_from=local_day_bounds(today)[0])

        all_messages = get_messages_by_user_id(user_id)
        history_limit = max(app_cfg.CHAT_HISTORY_LIMIT, 0)
        recent_messages = all_messages[max(len(all_messages) - history_limit, 0):]
        recent_history = [{"role": m.role, "content": m.content} for m in recent_messages]

        schedule_start_hour = DEFAULT_SCHEDULE_START_HOUR
        if upcoming_events:
            earliest = as_utc(upcoming_events[0].start_date).astimezone(app_timezone())
            schedule_start_hour = min(DEFAULT_SCHEDULE_START_HOUR, earliest.hour)

        system_prompt = build_chat_system_prompt(
            app_name=app_cfg.APP_NAME,
            timezone=app_cfg.DEFAULT_TIMEZONE,
            today=today,
            schedule_start_hour=schedule_start_hour,
            recent_history=recent_history,
            history_limit=app_cfg.CHAT_HISTORY_LIMIT,
            all_messages=[
                {"role": m.role, "content": m.content, "created_at": format_iso(m.created_at)}
                for m in all_messages
            ],
            all_events=[_event_context(event) for event in all_events],
            upcoming_events=[_upcoming_event_context(event) for event in upcoming_events],
            semesters=semesters,
            current_semester=current_semester(semesters, today),
            courses=courses,
        )

        return [
            {"role": MessageRole.SYSTEM.value, "content": system_prompt},
            *recent_history,
            {"role": MessageRole.USER.value, "content": message},
        ]

    async def reply(self, llm_client: AsyncOpenAI, user_id: str, message: str) -> str:
        """
        Ask the chat model for a reply and append both turns to the user's log.

        Provider errors propagate unchanged; a failure to store the turns is only logged.
        """
        messages = self.build_prompt_messages(user_id, message)

        with chat_generation(user_id, messages) as generation:
            completion = await llm_client.chat.completions.create(
                model=app_cfg.CHAT_MODEL,
                temperature=app_cfg.CHAT_TEMPERATURE,
                messages=messages
            )
            content = completion.choices[0].message.content if completion.choices else None
            reply = content or NO_REPLY_FALLBACK
            generation.update(output=reply)

        try:
            append_messages(user_id, [
                (MessageRole.USER.value, message),
                (MessageRole.ASSISTANT.value, reply),
            ])
        except Exception as e:
            logger.warning(f"Failed to save conversation for user {user_id}: {e}", exc_info=True)

        logger.info(f"Chat reply generated for user {user_id} ({len(reply)} chars)")
        return reply


_chat_service_instance = None


def get_chat_service() -> ChatService:
    """Get or create chat service singleton instance."""
    global _chat_service_instance

    if _chat_service_instance is None:
        _chat_service_instance = ChatService()

    return _chat_service_instance
