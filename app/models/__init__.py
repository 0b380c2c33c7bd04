"""
Database models package
"""
from app.models.user import User
from app.models.chapter import Chapter
from app.models.section import Section
from app.models.page import Page
from app.models.reading_progress import ReadingProgress
from app.models.liked_section import LikedSection
from app.models.analytics_event import AnalyticsEvent

__all__ = [
    "User",
    "Chapter",
    "Section",
    "Page",
    "ReadingProgress",
    "LikedSection",
    "AnalyticsEvent",
]
