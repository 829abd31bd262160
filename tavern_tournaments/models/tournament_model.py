from datetime import datetime, timezone
from typing import Optional
from enum import Enum

from pydantic import BaseModel, Field, model_validator

class TournamentFormat(str, Enum):
    SINGLE_ELIMINATION = "single_elimination"
    DOUBLE_ELIMINATION = "double_elimination" # Accepted as a setting, no generator yet
    ROUND_ROBIN = "round_robin"
    SWISS = "swiss"

    @property
    def is_elimination(self) -> bool:
        return self in (TournamentFormat.SINGLE_ELIMINATION, TournamentFormat.DOUBLE_ELIMINATION)

class TournamentStatus(str, Enum):
    SETUP = "setup"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"

class SeedMethod(str, Enum):
    RANDOM = "random"
    MANUAL = "manual"
    ELO = "elo"

class Tiebreaker(str, Enum):
    HEAD_TO_HEAD = "head_to_head"
    POINTS_DIFF = "points_diff"
    BUCHHOLZ = "buchholz"

class TournamentConfig(BaseModel):
    id: Optional[str] = None
    event_id: str
    format: TournamentFormat = TournamentFormat.SINGLE_ELIMINATION
    max_rounds: Optional[int] = Field(default=None, ge=1)
    current_round: int = Field(default=0, ge=0)
    status: TournamentStatus = TournamentStatus.SETUP
    seed_method: SeedMethod = SeedMethod.RANDOM
    third_place_match: bool = False
    points_win: int = 3
    points_draw: int = 1
    points_loss: int = 0
    tiebreaker: Tiebreaker = Tiebreaker.HEAD_TO_HEAD
    notes: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    class Config:
        from_attributes = True

    @model_validator(mode='after')
    def points_are_ordered(self):
        if not (self.points_win >= self.points_draw >= self.points_loss):
            raise ValueError('Points must satisfy points_win >= points_draw >= points_loss')
        return self
