from pydantic import BaseModel, Field
from typing import Optional

class PlayerCreate(BaseModel):
    player_name: str = Field(..., min_length=1, max_length=100)
    seed: Optional[int] = Field(default=None, ge=1)
    player_user_id: Optional[str] = None
