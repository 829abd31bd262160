import datetime
import uuid

from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Text, Index
from tavern_tournaments.core.database import Base

def _now():
    return datetime.datetime.now(datetime.timezone.utc)

class TournamentMatchRow(Base):
    __tablename__ = "event_tournament_matches"
    __table_args__ = (Index("idx_event_tournament_matches_round", "event_id", "round_number"),)

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    event_id = Column(String(36), index=True, nullable=False)
    round_number = Column(Integer, nullable=False)
    match_number = Column(Integer, nullable=False)
    bracket_position = Column(String, nullable=True) # winners, losers, finals, third_place
    player1_id = Column(String(36), ForeignKey("event_tournament_players.id", ondelete="SET NULL"), nullable=True)
    player2_id = Column(String(36), ForeignKey("event_tournament_players.id", ondelete="SET NULL"), nullable=True)
    winner_id = Column(String(36), ForeignKey("event_tournament_players.id", ondelete="SET NULL"), nullable=True)
    player1_score = Column(Integer, nullable=True)
    player2_score = Column(Integer, nullable=True)
    status = Column(String, nullable=False, default="pending") # pending, in_progress, completed, bye
    scheduled_time = Column(DateTime(timezone=True), nullable=True)
    table_label = Column(String, nullable=True)
    notes = Column(Text, nullable=True)

    # Bracket wiring, stored as plain ids so a whole bracket can be inserted in one batch.
    next_match_id = Column(String(36), nullable=True)
    winner_to_player_slot = Column(Integer, nullable=True)
    loser_to_match_id = Column(String(36), nullable=True)
    loser_to_player_slot = Column(Integer, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_now, onupdate=_now)
