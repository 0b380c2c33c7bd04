"""
Analytics event recording service
"""
import logging
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.exceptions import ValidationError
from app.models import AnalyticsEvent
from app.schemas.analytics import AnalyticsEventCreate
from app.services.user_service import user_service

logger = logging.getLogger(__name__)


class AnalyticsService:
    """
    Records page views and section completions sent by the reader

    Aggregation (dashboards, activity log) is served by a separate reporting
    stack that reads the analytics_events table directly.
    """

    def record_event(self, db: Session, data: AnalyticsEventCreate) -> AnalyticsEvent:
        """
        Store one analytics event

        Raises:
            InvalidSessionError: user no longer exists
            ValidationError: page, section or chapter reference is dangling
        """
        user_service.require_user(db, data.user_id)

        event = AnalyticsEvent(**data.model_dump())
        db.add(event)
        try:
            db.commit()
        except IntegrityError as e:
            db.rollback()
            logger.warning(f"Rejected analytics event with dangling reference: {str(e.orig)}")
            raise ValidationError("Invalid analytics data")

        db.refresh(event)
        logger.debug(
            f"Analytics event: {event.event_type} user={event.user_id} "
            f"page={event.page_id} duration={event.duration}"
        )
        return event


# Global instance
analytics_service = AnalyticsService()
