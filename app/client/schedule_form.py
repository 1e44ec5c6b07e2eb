"""LinkedIn scheduling form: field state, client-side checks, submit lock and reset."""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable

from app.client.api_client import ApiError, SchedulerClient
from app.utils.helpers import tomorrow_at_noon
from app.utils.logging import get_logger

logger = get_logger(__name__)

MAX_CHARS = 3000


@dataclass
class FormMessage:
    level: str  # success | error
    text: str


@dataclass
class LinkedInScheduleForm:
    """
    Mirrors the scheduling form. Validation problems become error messages and
    never reach the server; a successful submit resets every field.
    """

    client: SchedulerClient
    now: Callable[[], datetime] = field(default=lambda: datetime.now().astimezone())
    content: str = ""
    title: str = ""
    image_url: str = ""
    scheduled_for: datetime | None = None
    is_submitting: bool = False
    messages: list[FormMessage] = field(default_factory=list)

    def __post_init__(self):
        if self.scheduled_for is None:
            self.scheduled_for = tomorrow_at_noon(self.now())

    @property
    def character_count(self) -> str:
        return f"{len(self.content)}/{MAX_CHARS} characters"

    @property
    def can_submit(self) -> bool:
        return not self.is_submitting and bool(self.content.strip()) and self.scheduled_for is not None

    def set_date(self, value: datetime | None) -> None:
        """Picker callback; clearing the picker keeps the previous date."""
        if value is not None:
            self.scheduled_for = value

    def reset(self) -> None:
        self.content = ""
        self.title = ""
        self.image_url = ""
        self.scheduled_for = tomorrow_at_noon(self.now())
        self.is_submitting = False

    def submit(self) -> bool:
        """Validate and send one schedule request. Returns True when the post was scheduled."""
        if self.is_submitting:
            return False
        if not self.content.strip():
            return self._error("Post content is required")
        if not isinstance(self.scheduled_for, datetime):
            return self._error("Please select a valid date and time to schedule")
        when = self.scheduled_for
        if when.tzinfo is None:
            when = when.astimezone()
        if when < self.now():
            return self._error("Please select a future date and time")

        self.is_submitting = True
        try:
            self.client.schedule_linkedin_post(
                content=self.content,
                scheduled_for=when,
                title=self.title or None,
                image_url=self.image_url or None,
            )
        except ApiError as e:
            logger.info("schedule_form_rejected", error=e.message)
            return self._error(f"Error scheduling post: {e.message}")
        except Exception as e:
            logger.exception("schedule_form_failed", error=str(e))
            return self._error(f"Error scheduling post: {str(e) or e.__class__.__name__}")
        finally:
            self.is_submitting = False
        self.messages.append(FormMessage("success", "LinkedIn post scheduled successfully!"))
        self.reset()
        return True

    def _error(self, text: str) -> bool:
        self.messages.append(FormMessage("error", text))
        return False
