import logging
from typing import List, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Path, status
from sqlalchemy.orm import Session

from tavern_tournaments.api.dependencies import get_current_user_id, get_db
from tavern_tournaments.core.exceptions import NotFoundError, PersistenceError, TournamentError
from tavern_tournaments.models.bracket_model import MatchModel
from tavern_tournaments.models.player_model import TournamentPlayer
from tavern_tournaments.models.tournament_model import TournamentConfig
from tavern_tournaments.schemas import match_schemas, player_schemas, tournament_schemas
from tavern_tournaments.schemas.standings_schemas import StandingEntry
from tavern_tournaments.services import tournament_service

logger = logging.getLogger(__name__)

router = APIRouter()


def _to_http_error(e: Exception) -> HTTPException:
    if isinstance(e, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    if isinstance(e, NotImplementedError):
        return HTTPException(status_code=status.HTTP_501_NOT_IMPLEMENTED, detail=str(e))
    if isinstance(e, PersistenceError):
        return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

_SERVICE_ERRORS = (TournamentError, NotFoundError, NotImplementedError, PersistenceError)


# --- Configuration ---

@router.get("/{event_id}/tournament", response_model=TournamentConfig, summary="Get Tournament Configuration")
async def get_tournament_config(
    event_id: str = Path(..., description="The ID of the event"),
    db: Session = Depends(get_db),
):
    config = tournament_service.get_config(db, event_id)
    if not config:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Tournament not configured for this event")
    return config


@router.put("/{event_id}/tournament", response_model=TournamentConfig, summary="Create or Update Tournament Configuration")
async def upsert_tournament_config(
    config_in: tournament_schemas.TournamentConfigUpdate,
    event_id: str = Path(..., description="The ID of the event"),
    db: Session = Depends(get_db),
    current_user_id: str = Depends(get_current_user_id),
):
    """
    Saves the tournament settings for an event, creating them on first save.
    Only the fields present in the body are changed.
    """
    try:
        return tournament_service.upsert_config(db, event_id, config_in)
    except (ValueError, NotFoundError, NotImplementedError, PersistenceError) as e:
        # ValueError also covers pydantic validation of the merged config.
        raise _to_http_error(e)


# --- Players ---

@router.get("/{event_id}/tournament/players", response_model=List[TournamentPlayer], summary="List Tournament Players")
async def list_tournament_players(
    event_id: str = Path(..., description="The ID of the event"),
    db: Session = Depends(get_db),
):
    return tournament_service.list_players(db, event_id)


@router.post("/{event_id}/tournament/players", response_model=TournamentPlayer, status_code=status.HTTP_201_CREATED,
             summary="Add Player to Tournament")
async def add_tournament_player(
    player_in: player_schemas.PlayerCreate,
    event_id: str = Path(..., description="The ID of the event"),
    db: Session = Depends(get_db),
    current_user_id: str = Depends(get_current_user_id),
):
    try:
        return tournament_service.add_player(db, event_id, player_in)
    except _SERVICE_ERRORS as e:
        raise _to_http_error(e)


@router.delete("/{event_id}/tournament/players/{player_id}", status_code=status.HTTP_204_NO_CONTENT,
               summary="Remove Player from Tournament")
async def remove_tournament_player(
    event_id: str = Path(..., description="The ID of the event"),
    player_id: str = Path(..., description="The ID of the tournament player"),
    db: Session = Depends(get_db),
    current_user_id: str = Depends(get_current_user_id),
):
    try:
        tournament_service.remove_player(db, event_id, player_id)
    except _SERVICE_ERRORS as e:
        raise _to_http_error(e)
    return None


# --- Bracket and matches ---

@router.get("/{event_id}/tournament/matches", response_model=List[MatchModel], summary="List Tournament Matches")
async def list_tournament_matches(
    event_id: str = Path(..., description="The ID of the event"),
    db: Session = Depends(get_db),
):
    return tournament_service.list_matches(db, event_id)


@router.post("/{event_id}/tournament/bracket", response_model=List[MatchModel], status_code=status.HTTP_201_CREATED,
             summary="Generate Bracket")
async def generate_tournament_bracket(
    event_id: str = Path(..., description="The ID of the event"),
    payload: Optional[tournament_schemas.GenerateBracketRequest] = Body(default=None),
    db: Session = Depends(get_db),
    current_user_id: str = Depends(get_current_user_id),
):
    """
    Generates the bracket (or schedule, or first Swiss round) for the event's
    configured format from the current roster. Any existing matches for the
    event are replaced.
    """
    shuffle_seed = payload.shuffle_seed if payload else None
    try:
        matches = tournament_service.generate_bracket(db, event_id, shuffle_seed=shuffle_seed)
    except _SERVICE_ERRORS as e:
        raise _to_http_error(e)
    logger.info("User %s generated the bracket for event %s", current_user_id, event_id)
    return matches


@router.post("/{event_id}/tournament/matches/{match_id}/result", response_model=MatchModel,
             summary="Record the result of a match")
async def record_tournament_match_result(
    result_in: match_schemas.MatchResultUpdate,
    event_id: str = Path(..., description="The ID of the event"),
    match_id: str = Path(..., description="The ID of the match"),
    db: Session = Depends(get_db),
    current_user_id: str = Depends(get_current_user_id),
):
    """
    Records a result for a match.

    - **winner_id**: one of the two players; completes the match. Omit to mark the match in progress.
    - **player1_score** / **player2_score** (optional): stored as given.
    - **is_draw**: completes the match without a winner (not allowed in elimination formats).
    """
    try:
        return tournament_service.record_match_result(db, event_id, match_id, result_in)
    except _SERVICE_ERRORS as e:
        raise _to_http_error(e)


@router.post("/{event_id}/tournament/advance", response_model=TournamentConfig, summary="Advance to the Next Round")
async def advance_tournament_round(
    event_id: str = Path(..., description="The ID of the event"),
    db: Session = Depends(get_db),
    current_user_id: str = Depends(get_current_user_id),
):
    try:
        return tournament_service.advance_round(db, event_id)
    except _SERVICE_ERRORS as e:
        raise _to_http_error(e)


@router.post("/{event_id}/tournament/reset", response_model=TournamentConfig, summary="Reset Tournament to Setup")
async def reset_tournament(
    event_id: str = Path(..., description="The ID of the event"),
    db: Session = Depends(get_db),
    current_user_id: str = Depends(get_current_user_id),
):
    """
    Deletes every match and returns the tournament to setup so the roster can
    be edited before the bracket is generated again.
    """
    try:
        config = tournament_service.reset_tournament(db, event_id)
    except _SERVICE_ERRORS as e:
        raise _to_http_error(e)
    logger.info("User %s reset the tournament for event %s", current_user_id, event_id)
    return config


@router.get("/{event_id}/tournament/standings", response_model=List[StandingEntry], summary="Get Standings")
async def get_tournament_standings(
    event_id: str = Path(..., description="The ID of the event"),
    db: Session = Depends(get_db),
):
    try:
        return tournament_service.get_standings(db, event_id)
    except _SERVICE_ERRORS as e:
        raise _to_http_error(e)
