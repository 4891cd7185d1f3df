"""
User Service Event Data Models

Data carried by events published by the user registry. Every event holds
the full post-mutation record.
"""

from pydantic import BaseModel, Field

from ..models import User


class UserEventData(BaseModel):
    """
    Event: user.created / user.updated
    Triggered when a user record is written
    """

    contract: str = Field(..., description="Registry address")
    sender: str = Field(..., description="Account that performed the change")
    user: User = Field(..., description="User record after the change")


class ScoreChangedEventData(BaseModel):
    """
    Event: user.score_charged / user.score_debited
    Triggered when a user's score moves
    """

    contract: str = Field(..., description="Registry address")
    sender: str = Field(..., description="Account that performed the change")
    amount: int = Field(..., ge=0, description="Score added or removed")
    previous_score: int = Field(..., ge=0, description="Score before the change")
    user: User = Field(..., description="User record after the change")


# ============================================================================
# Helper Functions
# ============================================================================


def create_user_event_data(contract: str, sender: str, user: User) -> UserEventData:
    """Create UserEventData"""
    return UserEventData(contract=contract, sender=sender, user=user)


def create_score_changed_event_data(
    contract: str, sender: str, amount: int, previous_score: int, user: User
) -> ScoreChangedEventData:
    """Create ScoreChangedEventData"""
    return ScoreChangedEventData(
        contract=contract,
        sender=sender,
        amount=amount,
        previous_score=previous_score,
        user=user,
    )
