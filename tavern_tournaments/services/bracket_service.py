"""
Bracket and pairing generation.

Everything in this module is a pure function over in-memory models: given a
roster it returns the MatchModel stubs to persist, and given a decided match it
fills in the matches that decided match feeds. Nothing here touches the
database, and nothing is random unless a shuffle seed is passed in explicitly.
"""
import logging
import math
import random
from typing import Dict, List, Optional, Sequence, Union

from tavern_tournaments.models.bracket_model import BracketPosition, MatchModel, MatchStatus
from tavern_tournaments.models.player_model import TournamentPlayer
from tavern_tournaments.models.tournament_model import SeedMethod, TournamentConfig, TournamentFormat

logger = logging.getLogger(__name__)


def _new_match(
    event_id: str,
    round_number: int,
    match_number: int,
    player1: Optional[TournamentPlayer] = None,
    player2: Optional[TournamentPlayer] = None,
    bracket_position: Optional[BracketPosition] = None,
) -> MatchModel:
    """
    Builds a match stub. A match with exactly one player present is a bye:
    that player is put in slot 1 and declared the winner straight away.
    """
    if (player1 is None) != (player2 is None):
        present = player1 or player2
        return MatchModel(
            event_id=event_id,
            round_number=round_number,
            match_number=match_number,
            bracket_position=bracket_position,
            player1_id=present.id,
            winner_id=present.id,
            status=MatchStatus.BYE,
        )
    return MatchModel(
        event_id=event_id,
        round_number=round_number,
        match_number=match_number,
        bracket_position=bracket_position,
        player1_id=player1.id if player1 else None,
        player2_id=player2.id if player2 else None,
        status=MatchStatus.PENDING,
    )


def bracket_size_for(num_players: int) -> int:
    bracket_size = 1
    while bracket_size < num_players:
        bracket_size *= 2
    return bracket_size


def generate_single_elimination(
    event_id: str,
    players: Sequence[TournamentPlayer],
    third_place_match: bool = False,
) -> List[MatchModel]:
    """
    Generates a full single elimination bracket.

    `players` is expected in seed order (top seed first). Round 1 pairs seed i
    with seed (bracket_size - 1 - i) so the top seeds meet as late as possible;
    empty slots become byes. Later rounds are created as empty stubs and every
    match is wired to the slot its winner fills in the next round. Winners of
    byes are placed into that slot immediately.
    """
    num_players = len(players)
    if num_players < 2:
        return []

    bracket_size = bracket_size_for(num_players)
    total_rounds = int(math.log2(bracket_size))

    rounds: Dict[int, List[MatchModel]] = {1: []}
    for i in range(bracket_size // 2):
        top = players[i] if i < num_players else None
        bottom_index = bracket_size - 1 - i
        bottom = players[bottom_index] if bottom_index < num_players else None
        rounds[1].append(_new_match(event_id, 1, i + 1, top, bottom, BracketPosition.WINNERS))

    matches_in_round = bracket_size // 4
    for round_number in range(2, total_rounds + 1):
        rounds[round_number] = [
            _new_match(event_id, round_number, i + 1, bracket_position=BracketPosition.WINNERS)
            for i in range(matches_in_round)
        ]
        matches_in_round //= 2

    # Match i of round r feeds match i // 2 of round r + 1: even indices take slot 1, odd take slot 2.
    for round_number in range(1, total_rounds):
        next_round = rounds[round_number + 1]
        for index, match in enumerate(rounds[round_number]):
            destination = next_round[index // 2]
            match.next_match_id = destination.id
            match.winner_to_player_slot = 1 if index % 2 == 0 else 2
            if match.status == MatchStatus.BYE:
                destination.assign_slot(match.winner_to_player_slot, match.winner_id)

    # With fewer than four players a semifinal can be a bye, so there is no second loser.
    if third_place_match and num_players >= 4:
        final_round = total_rounds
        third_place = _new_match(event_id, final_round, 2, bracket_position=BracketPosition.THIRD_PLACE)
        for index, semifinal in enumerate(rounds[final_round - 1]):
            semifinal.loser_to_match_id = third_place.id
            semifinal.loser_to_player_slot = index + 1
        rounds[final_round].append(third_place)

    all_matches = [match for round_number in sorted(rounds) for match in rounds[round_number]]
    logger.debug(
        "Single elimination for event %s: %d players, bracket of %d, %d rounds, %d matches",
        event_id, num_players, bracket_size, total_rounds, len(all_matches),
    )
    return all_matches


def generate_round_robin(event_id: str, players: Sequence[TournamentPlayer]) -> List[MatchModel]:
    """
    Circle-method schedule. An odd roster gets a padding slot; whoever is
    paired with it that round gets a bye. Position 0 stays put and the others
    rotate by one after every round. Match numbers run across the whole
    schedule rather than restarting each round.
    """
    if len(players) < 2:
        return []

    slots: List[Optional[TournamentPlayer]] = list(players)
    if len(slots) % 2 != 0:
        slots.append(None)

    size = len(slots)
    matches: List[MatchModel] = []
    match_number = 0
    for round_index in range(size - 1):
        for i in range(size // 2):
            player1 = slots[i]
            player2 = slots[size - 1 - i]
            match_number += 1
            matches.append(_new_match(event_id, round_index + 1, match_number, player1, player2))
        slots = [slots[0]] + slots[2:] + [slots[1]]

    return matches


def generate_swiss_round(
    event_id: str,
    players: Sequence[TournamentPlayer],
    round_number: int,
) -> List[MatchModel]:
    """
    Pairings for a single Swiss round.

    Players are ranked by points, then tiebreaker score, and paired with their
    neighbour in that order. Earlier meetings are not taken into account, so
    rematches are possible. An odd player out gets a bye as the last match.
    """
    if len(players) < 2:
        return []

    # sorted() is stable, so equal players keep the order they were passed in.
    ranked = sorted(players, key=lambda p: (-p.points, -p.tiebreaker_score))

    matches: List[MatchModel] = []
    for i in range(0, len(ranked) - 1, 2):
        matches.append(_new_match(event_id, round_number, len(matches) + 1, ranked[i], ranked[i + 1]))
    if len(ranked) % 2 != 0:
        matches.append(_new_match(event_id, round_number, len(matches) + 1, ranked[-1]))
    return matches


def recommended_swiss_rounds(num_players: int) -> int:
    if num_players <= 2:
        return 1
    return math.ceil(math.log2(num_players))


def order_players_for_seeding(
    players: Sequence[TournamentPlayer],
    seed_method: Union[SeedMethod, str],
    shuffle_seed: Union[int, str, None] = None,
) -> List[TournamentPlayer]:
    method = SeedMethod(seed_method)
    if method == SeedMethod.MANUAL:
        # Unseeded players go last, alphabetically.
        return sorted(players, key=lambda p: (p.seed is None, p.seed or 0, p.player_name.lower()))
    if method == SeedMethod.RANDOM:
        ordered = sorted(players, key=lambda p: (p.player_name.lower(), p.id))
        random.Random(shuffle_seed if shuffle_seed is not None else 0).shuffle(ordered)
        return ordered
    raise NotImplementedError(f"Seeding method '{method.value}' is not implemented.")


def generate_matches(
    config: TournamentConfig,
    players: Sequence[TournamentPlayer],
    shuffle_seed: Union[int, str, None] = None,
) -> List[MatchModel]:
    """
    Opening matches for the configured format: the whole bracket or schedule
    for elimination and round robin, round one only for Swiss.
    """
    tournament_format = TournamentFormat(config.format)
    if tournament_format == TournamentFormat.DOUBLE_ELIMINATION:
        raise NotImplementedError("Bracket generation for double_elimination is not implemented.")

    ordered = order_players_for_seeding(players, config.seed_method, shuffle_seed)

    if tournament_format == TournamentFormat.SINGLE_ELIMINATION:
        matches = generate_single_elimination(config.event_id, ordered, config.third_place_match)
    elif tournament_format == TournamentFormat.ROUND_ROBIN:
        matches = generate_round_robin(config.event_id, ordered)
    else:
        matches = generate_swiss_round(config.event_id, ordered, 1)

    logger.info(
        "Generated %d %s matches for event %s from %d players",
        len(matches), tournament_format.value, config.event_id, len(players),
    )
    return matches


def advance_winner(match: MatchModel, matches_by_id: Dict[str, MatchModel]) -> List[MatchModel]:
    """
    Moves the winner of a decided elimination match into the match it feeds,
    and the loser into the third-place match when one is wired. Returns the
    matches that were changed.
    """
    changed: List[MatchModel] = []
    if match.winner_id is None:
        return changed

    if match.next_match_id:
        next_match = matches_by_id.get(match.next_match_id)
        if next_match is None:
            raise RuntimeError(
                f"Consistency error: next_match_id {match.next_match_id} "
                f"not found in bracket for event {match.event_id}."
            )
        next_match.assign_slot(match.winner_to_player_slot, match.winner_id)
        changed.append(next_match)

    loser_id = match.loser_id()
    if match.loser_to_match_id and loser_id:
        consolation = matches_by_id.get(match.loser_to_match_id)
        if consolation is None:
            raise RuntimeError(
                f"Consistency error: loser_to_match_id {match.loser_to_match_id} "
                f"not found in bracket for event {match.event_id}."
            )
        consolation.assign_slot(match.loser_to_player_slot, loser_id)
        changed.append(consolation)

    return changed
