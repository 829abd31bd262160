from pydantic import BaseModel

class StandingEntry(BaseModel):
    rank: int
    player_id: str
    player_name: str
    matches_played: int = 0
    wins: int = 0
    losses: int = 0
    draws: int = 0
    points: int = 0
    tiebreaker_score: float = 0.0
    is_eliminated: bool = False
