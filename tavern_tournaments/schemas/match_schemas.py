from pydantic import BaseModel, Field
from typing import Optional

class MatchResultUpdate(BaseModel):
    winner_id: Optional[str] = None # None leaves the match in progress unless is_draw is set
    player1_score: Optional[int] = Field(default=None, ge=0)
    player2_score: Optional[int] = Field(default=None, ge=0)
    is_draw: bool = False
