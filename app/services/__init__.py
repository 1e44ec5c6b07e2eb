"""Business logic services."""
from app.services.content_service import ContentRevisionError, ContentService
from app.services.dispatcher import ScheduleDispatcher
from app.services.image_service import ImageGenerationError, ImageService
from app.services.schedule_service import ScheduleService

__all__ = ["ContentRevisionError", "ContentService", "ImageGenerationError", "ImageService", "ScheduleDispatcher", "ScheduleService"]
