from datetime import datetime
from uuid import uuid4
from typing import Optional
from enum import Enum

from pydantic import BaseModel, Field

class MatchStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    BYE = "bye"

    @property
    def is_resolved(self) -> bool:
        return self in (MatchStatus.COMPLETED, MatchStatus.BYE)

class BracketPosition(str, Enum):
    WINNERS = "winners"
    LOSERS = "losers"
    FINALS = "finals"
    THIRD_PLACE = "third_place"

class MatchModel(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid4()))
    event_id: str
    round_number: int = Field(ge=1)
    match_number: int = Field(ge=1)
    bracket_position: Optional[BracketPosition] = None

    player1_id: Optional[str] = None
    player2_id: Optional[str] = None

    winner_id: Optional[str] = None

    player1_score: Optional[int] = None
    player2_score: Optional[int] = None

    status: MatchStatus = MatchStatus.PENDING

    scheduled_time: Optional[datetime] = None
    table_label: Optional[str] = None
    notes: Optional[str] = None

    # Elimination wiring: where this match's winner (and, for semifinals, loser) goes next.
    next_match_id: Optional[str] = None
    winner_to_player_slot: Optional[int] = None
    loser_to_match_id: Optional[str] = None
    loser_to_player_slot: Optional[int] = None

    class Config:
        from_attributes = True

    @property
    def participant_ids(self) -> list:
        return [pid for pid in (self.player1_id, self.player2_id) if pid is not None]

    def loser_id(self) -> Optional[str]:
        if self.winner_id is None or self.player1_id is None or self.player2_id is None:
            return None
        return self.player2_id if self.winner_id == self.player1_id else self.player1_id

    def opponent_of(self, player_id: str) -> Optional[str]:
        if player_id == self.player1_id:
            return self.player2_id
        if player_id == self.player2_id:
            return self.player1_id
        return None

    def assign_slot(self, slot: int, player_id: Optional[str]):
        if slot == 1:
            self.player1_id = player_id
        elif slot == 2:
            self.player2_id = player_id
        else:
            raise RuntimeError(f"Invalid player slot '{slot}' for match {self.id}.")
