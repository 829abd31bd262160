import logging
from enum import Enum
from typing import List, Optional, Union

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from tavern_tournaments.core.exceptions import (
    InsufficientParticipantsError,
    InvalidResultError,
    InvalidTransitionError,
    NotFoundError,
    PersistenceError,
    TournamentError,
)
from tavern_tournaments.models.bracket_model import MatchModel, MatchStatus
from tavern_tournaments.models.match import TournamentMatchRow
from tavern_tournaments.models.player import TournamentPlayerRow
from tavern_tournaments.models.player_model import TournamentPlayer
from tavern_tournaments.models.tournament import TournamentConfigRow
from tavern_tournaments.models.tournament_model import TournamentConfig, TournamentFormat, TournamentStatus
from tavern_tournaments.schemas import match_schemas, player_schemas, tournament_schemas
from tavern_tournaments.schemas.standings_schemas import StandingEntry
from tavern_tournaments.services import bracket_service, standings_service

logger = logging.getLogger(__name__)

_MATCH_COLUMNS = [column.name for column in TournamentMatchRow.__table__.columns if column.name not in ("created_at", "updated_at")]


def _db_value(value):
    return value.value if isinstance(value, Enum) else value


def _commit(db: Session, action: str):
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Database error while trying to %s", action)
        raise PersistenceError(f"Could not {action}: {e}") from e


# --- Config ---

def get_config_row(db: Session, event_id: str) -> Optional[TournamentConfigRow]:
    return db.query(TournamentConfigRow).filter(TournamentConfigRow.event_id == event_id).first()

def _require_config_row(db: Session, event_id: str) -> TournamentConfigRow:
    row = get_config_row(db, event_id)
    if not row:
        raise NotFoundError(f"No tournament is configured for event {event_id}.")
    return row

def get_config(db: Session, event_id: str) -> Optional[TournamentConfig]:
    row = get_config_row(db, event_id)
    return TournamentConfig.model_validate(row) if row else None

def upsert_config(db: Session, event_id: str, config_update: tournament_schemas.TournamentConfigUpdate) -> TournamentConfig:
    row = get_config_row(db, event_id)
    current = TournamentConfig.model_validate(row) if row else TournamentConfig(event_id=event_id)
    update_data = config_update.model_dump(exclude_unset=True)

    if (
        current.status == TournamentStatus.IN_PROGRESS
        and "format" in update_data
        and update_data["format"] != current.format
    ):
        raise InvalidTransitionError("The format cannot be changed while the tournament is in progress.")

    # Re-validate the merged settings so rules like points ordering hold across partial updates.
    merged = TournamentConfig.model_validate({**current.model_dump(), **update_data})

    if not row:
        row = TournamentConfigRow(event_id=event_id)
        db.add(row)
        update_data = merged.model_dump(exclude={"id", "event_id", "created_at", "updated_at"})
    for key, value in update_data.items():
        setattr(row, key, _db_value(value))

    _commit(db, "save the tournament configuration")
    db.refresh(row)
    logger.info("Saved tournament configuration for event %s", event_id)
    return TournamentConfig.model_validate(row)

def _get_or_create_config_row(db: Session, event_id: str) -> TournamentConfigRow:
    row = get_config_row(db, event_id)
    if row:
        return row
    defaults = TournamentConfig(event_id=event_id)
    row = TournamentConfigRow(**{
        key: _db_value(value)
        for key, value in defaults.model_dump(exclude={"id", "created_at", "updated_at"}).items()
    })
    db.add(row)
    db.flush()
    return row


# --- Players ---

def _player_rows(db: Session, event_id: str) -> List[TournamentPlayerRow]:
    return db.query(TournamentPlayerRow).filter(TournamentPlayerRow.event_id == event_id).order_by(
        TournamentPlayerRow.seed.is_(None),
        TournamentPlayerRow.seed,
        TournamentPlayerRow.created_at,
    ).all()

def list_players(db: Session, event_id: str) -> List[TournamentPlayer]:
    return [TournamentPlayer.model_validate(row) for row in _player_rows(db, event_id)]

def _ensure_roster_editable(db: Session, event_id: str):
    row = get_config_row(db, event_id)
    if row and row.status == TournamentStatus.IN_PROGRESS.value:
        raise InvalidTransitionError("Players cannot be added or removed while the tournament is in progress.")

def add_player(db: Session, event_id: str, player_in: player_schemas.PlayerCreate) -> TournamentPlayer:
    _ensure_roster_editable(db, event_id)

    existing = db.query(TournamentPlayerRow).filter(
        TournamentPlayerRow.event_id == event_id,
        TournamentPlayerRow.player_name == player_in.player_name,
    ).first()
    if existing:
        raise TournamentError(f"A player named '{player_in.player_name}' is already registered for this event.")

    player = TournamentPlayer(event_id=event_id, **player_in.model_dump())
    row = TournamentPlayerRow(**player.model_dump())
    db.add(row)
    try:
        db.commit()
    except IntegrityError as e:
        # Another request registered the same name between the check and the insert.
        db.rollback()
        raise TournamentError(f"A player named '{player_in.player_name}' is already registered for this event.") from e
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Database error while adding a player to event %s", event_id)
        raise PersistenceError(f"Could not add player: {e}") from e
    db.refresh(row)
    return TournamentPlayer.model_validate(row)

def remove_player(db: Session, event_id: str, player_id: str) -> bool:
    _ensure_roster_editable(db, event_id)
    row = db.query(TournamentPlayerRow).filter(
        TournamentPlayerRow.event_id == event_id,
        TournamentPlayerRow.id == player_id,
    ).first()
    if not row:
        raise NotFoundError(f"Player {player_id} not found in event {event_id}.")
    db.delete(row)
    _commit(db, "remove the player")
    return True


# --- Matches ---

def _match_rows(db: Session, event_id: str) -> List[TournamentMatchRow]:
    return db.query(TournamentMatchRow).filter(TournamentMatchRow.event_id == event_id).order_by(
        TournamentMatchRow.round_number,
        TournamentMatchRow.match_number,
    ).all()

def list_matches(db: Session, event_id: str) -> List[MatchModel]:
    return [MatchModel.model_validate(row) for row in _match_rows(db, event_id)]

def _to_row(match: MatchModel) -> TournamentMatchRow:
    values = match.model_dump()
    return TournamentMatchRow(**{key: _db_value(values[key]) for key in _MATCH_COLUMNS})

def _copy_to_row(match: MatchModel, row: TournamentMatchRow):
    for key in ("player1_id", "player2_id", "winner_id", "player1_score", "player2_score", "status"):
        setattr(row, key, _db_value(getattr(match, key)))

def _refresh_standings(db: Session, config: TournamentConfig, event_id: str) -> List[StandingEntry]:
    # Flush first so the query sees match updates made earlier in this transaction.
    db.flush()
    player_rows = _player_rows(db, event_id)
    standings = standings_service.compute_standings(config, player_rows, _match_rows(db, event_id))
    standings_service.apply_standings(player_rows, standings)
    return standings


def generate_bracket(db: Session, event_id: str, shuffle_seed: Union[int, str, None] = None) -> List[MatchModel]:
    """
    Builds the opening matches for the configured format and replaces every
    existing match of the event with them in a single transaction.
    """
    config_row = _get_or_create_config_row(db, event_id)
    config = TournamentConfig.model_validate(config_row)

    player_rows = _player_rows(db, event_id)
    if len(player_rows) < 2:
        db.rollback()
        raise InsufficientParticipantsError(len(player_rows))

    # A fresh bracket starts everyone from zero; Swiss round one depends on it.
    players = [
        TournamentPlayer.model_validate(row).model_copy(update={
            "wins": 0, "losses": 0, "draws": 0, "points": 0, "tiebreaker_score": 0.0, "is_eliminated": False,
        })
        for row in player_rows
    ]

    try:
        matches = bracket_service.generate_matches(
            config, players, shuffle_seed if shuffle_seed is not None else event_id
        )
    except NotImplementedError:
        db.rollback()
        raise

    db.query(TournamentMatchRow).filter(TournamentMatchRow.event_id == event_id).delete(synchronize_session=False)
    db.add_all([_to_row(m) for m in matches])
    for row in player_rows:
        row.wins = row.losses = row.draws = row.points = 0
        row.tiebreaker_score = 0.0
        row.is_eliminated = False
    config_row.status = TournamentStatus.IN_PROGRESS.value
    config_row.current_round = 1
    _commit(db, "replace the bracket")

    logger.info("Replaced bracket for event %s with %d matches", event_id, len(matches))
    return matches


def record_match_result(db: Session, event_id: str, match_id: str, result: match_schemas.MatchResultUpdate) -> MatchModel:
    config = TournamentConfig.model_validate(_require_config_row(db, event_id))
    tournament_format = TournamentFormat(config.format)

    row = db.query(TournamentMatchRow).filter(
        TournamentMatchRow.event_id == event_id,
        TournamentMatchRow.id == match_id,
    ).first()
    if not row:
        raise NotFoundError(f"Match with ID {match_id} not found in event {event_id}.")

    match = MatchModel.model_validate(row)
    if match.status.is_resolved:
        raise InvalidTransitionError(f"Match status is '{match.status.value}'. Completed and bye matches cannot be updated.")
    if not match.player1_id or not match.player2_id:
        raise InvalidResultError("Match does not have two players assigned.")
    if result.winner_id is not None and result.winner_id not in (match.player1_id, match.player2_id):
        raise InvalidResultError("Winner must be one of the players in the match.")
    if result.is_draw:
        if result.winner_id is not None:
            raise InvalidResultError("A drawn match cannot also have a winner.")
        if tournament_format.is_elimination:
            raise InvalidResultError("Draws are not allowed in elimination formats. A winner must be determined.")

    match.player1_score = result.player1_score
    match.player2_score = result.player2_score
    match.winner_id = result.winner_id
    if result.winner_id is not None or result.is_draw:
        match.status = MatchStatus.COMPLETED
    else:
        match.status = MatchStatus.IN_PROGRESS
    _copy_to_row(match, row)

    if tournament_format.is_elimination and match.winner_id:
        rows_by_id = {r.id: r for r in _match_rows(db, event_id)}
        models_by_id = {match_row_id: MatchModel.model_validate(r) for match_row_id, r in rows_by_id.items()}
        models_by_id[match.id] = match
        for changed in bracket_service.advance_winner(match, models_by_id):
            _copy_to_row(changed, rows_by_id[changed.id])
        if all(m.status.is_resolved for m in models_by_id.values()):
            config_row = _require_config_row(db, event_id)
            config_row.status = TournamentStatus.COMPLETED.value
            logger.info("Event %s bracket finished; winner %s", event_id, match.winner_id)

    if match.status == MatchStatus.COMPLETED:
        _refresh_standings(db, config, event_id)
    _commit(db, "record the match result")

    logger.info("Recorded result for match %s in event %s: status=%s winner=%s",
                match_id, event_id, match.status.value, match.winner_id)
    return match


def advance_round(db: Session, event_id: str) -> TournamentConfig:
    """
    Closes the current round. Swiss tournaments get the next round's pairings
    from the updated standings; the other formats only move the round counter
    on, since their schedule already exists. After the last round the
    tournament is marked completed.
    """
    config_row = _require_config_row(db, event_id)
    config = TournamentConfig.model_validate(config_row)
    if config.status != TournamentStatus.IN_PROGRESS:
        raise InvalidTransitionError(f"Tournament status is '{config.status.value}'. Only tournaments in progress can advance.")

    matches = list_matches(db, event_id)
    unfinished = [m for m in matches if m.round_number == config.current_round and not m.status.is_resolved]
    if unfinished:
        raise InvalidTransitionError(
            f"Round {config.current_round} still has {len(unfinished)} unfinished match(es)."
        )

    if TournamentFormat(config.format) == TournamentFormat.SWISS:
        player_rows = _player_rows(db, event_id)
        last_round = config.max_rounds or bracket_service.recommended_swiss_rounds(len(player_rows))
        _refresh_standings(db, config, event_id)
        if config.current_round >= last_round:
            config_row.status = TournamentStatus.COMPLETED.value
        else:
            next_round = config.current_round + 1
            players = [TournamentPlayer.model_validate(row) for row in player_rows]
            pairings = bracket_service.generate_swiss_round(event_id, players, next_round)
            db.add_all([_to_row(m) for m in pairings])
            config_row.current_round = next_round
    else:
        last_round = max((m.round_number for m in matches), default=0)
        if config.current_round >= last_round:
            config_row.status = TournamentStatus.COMPLETED.value
        else:
            config_row.current_round = config.current_round + 1

    _commit(db, "advance the round")
    db.refresh(config_row)
    logger.info("Event %s now at round %d (%s)", event_id, config_row.current_round, config_row.status)
    return TournamentConfig.model_validate(config_row)


def reset_tournament(db: Session, event_id: str) -> TournamentConfig:
    """
    Puts the tournament back into setup: every match is deleted, tallies are
    cleared and the round counter returns to 0. The roster and settings are
    kept, so players can be added or removed before generating again.
    """
    config_row = _require_config_row(db, event_id)

    db.query(TournamentMatchRow).filter(TournamentMatchRow.event_id == event_id).delete(synchronize_session=False)
    for row in _player_rows(db, event_id):
        row.wins = row.losses = row.draws = row.points = 0
        row.tiebreaker_score = 0.0
        row.is_eliminated = False
    config_row.status = TournamentStatus.SETUP.value
    config_row.current_round = 0
    _commit(db, "reset the tournament")

    db.refresh(config_row)
    logger.info("Reset tournament for event %s", event_id)
    return TournamentConfig.model_validate(config_row)


def get_standings(db: Session, event_id: str) -> List[StandingEntry]:
    config = TournamentConfig.model_validate(_require_config_row(db, event_id))
    standings = _refresh_standings(db, config, event_id)
    _commit(db, "update standings")
    return standings
