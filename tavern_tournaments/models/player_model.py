from datetime import datetime, timezone
from uuid import uuid4
from typing import Optional

from pydantic import BaseModel, Field

class TournamentPlayer(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid4()))
    event_id: str
    player_name: str = Field(min_length=1, max_length=100)
    player_user_id: Optional[str] = None # Linked account, if the player has one
    seed: Optional[int] = Field(default=None, ge=1) # 1 is the top seed
    is_eliminated: bool = False
    wins: int = 0
    losses: int = 0
    draws: int = 0
    points: int = 0
    tiebreaker_score: float = 0.0
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    class Config:
        from_attributes = True
