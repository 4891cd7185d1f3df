"""
User Service Events

Event models and publishers for the user registry
"""

from .models import (
    UserEventData,
    ScoreChangedEventData,
    create_user_event_data,
    create_score_changed_event_data,
)
from .publishers import (
    publish_user_created,
    publish_user_updated,
    publish_score_charged,
    publish_score_debited,
)

__all__ = [
    "UserEventData",
    "ScoreChangedEventData",
    "create_user_event_data",
    "create_score_changed_event_data",
    "publish_user_created",
    "publish_user_updated",
    "publish_score_charged",
    "publish_score_debited",
]
