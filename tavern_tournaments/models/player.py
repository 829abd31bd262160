import datetime
import uuid

from sqlalchemy import Column, Integer, String, Boolean, DateTime, Float, UniqueConstraint
from tavern_tournaments.core.database import Base

class TournamentPlayerRow(Base):
    __tablename__ = "event_tournament_players"
    __table_args__ = (UniqueConstraint("event_id", "player_name", name="uq_tournament_player_name"),)

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    event_id = Column(String(36), index=True, nullable=False)
    player_name = Column(String, nullable=False)
    player_user_id = Column(String(36), nullable=True)
    seed = Column(Integer, nullable=True)
    is_eliminated = Column(Boolean, nullable=False, default=False)
    wins = Column(Integer, nullable=False, default=0)
    losses = Column(Integer, nullable=False, default=0)
    draws = Column(Integer, nullable=False, default=0)
    points = Column(Integer, nullable=False, default=0)
    tiebreaker_score = Column(Float, nullable=False, default=0.0)
    created_at = Column(DateTime(timezone=True), nullable=False,
                        default=lambda: datetime.datetime.now(datetime.timezone.utc))
