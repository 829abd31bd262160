import datetime
import uuid

from sqlalchemy import Column, Integer, String, Boolean, DateTime, Text
from tavern_tournaments.core.database import Base

def _now():
    return datetime.datetime.now(datetime.timezone.utc)

class TournamentConfigRow(Base):
    __tablename__ = "event_tournament_config"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    event_id = Column(String(36), unique=True, index=True, nullable=False)
    format = Column(String, nullable=False, default="single_elimination") # single_elimination, double_elimination, round_robin, swiss
    max_rounds = Column(Integer, nullable=True)
    current_round = Column(Integer, nullable=False, default=0)
    status = Column(String, nullable=False, default="setup") # setup, in_progress, completed
    seed_method = Column(String, nullable=False, default="random") # random, manual, elo
    third_place_match = Column(Boolean, nullable=False, default=False)
    points_win = Column(Integer, nullable=False, default=3)
    points_draw = Column(Integer, nullable=False, default=1)
    points_loss = Column(Integer, nullable=False, default=0)
    tiebreaker = Column(String, nullable=False, default="head_to_head") # head_to_head, points_diff, buchholz
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_now, onupdate=_now)
