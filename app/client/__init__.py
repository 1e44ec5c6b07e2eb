"""HTTP client and form controllers for the scheduling API."""
from app.client.api_client import ApiError, SchedulerClient
from app.client.schedule_form import FormMessage, LinkedInScheduleForm

__all__ = ["ApiError", "FormMessage", "LinkedInScheduleForm", "SchedulerClient"]
