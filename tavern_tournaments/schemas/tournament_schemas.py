from pydantic import BaseModel, Field
from typing import Optional

from tavern_tournaments.models.tournament_model import SeedMethod, Tiebreaker, TournamentFormat

class TournamentConfigUpdate(BaseModel):
    format: Optional[TournamentFormat] = None
    max_rounds: Optional[int] = Field(default=None, ge=1)
    seed_method: Optional[SeedMethod] = None
    third_place_match: Optional[bool] = None
    points_win: Optional[int] = None
    points_draw: Optional[int] = None
    points_loss: Optional[int] = None
    tiebreaker: Optional[Tiebreaker] = None
    notes: Optional[str] = None

class GenerateBracketRequest(BaseModel):
    # Only used by the "random" seed method; defaults to the event id so regenerating is repeatable.
    shuffle_seed: Optional[int] = None
