"""
Error taxonomy for the tournament engine.

Services raise these; the HTTP layer translates them into status codes.
ValueError subclasses map to 400 the same way plain ValueErrors always have.
"""


class TournamentError(ValueError):
    """Base class for rejected tournament operations."""


class InsufficientParticipantsError(TournamentError):
    def __init__(self, count: int, minimum: int = 2):
        self.count = count
        self.minimum = minimum
        super().__init__(f"At least {minimum} players are required to generate a bracket (got {count}).")


class InvalidResultError(TournamentError):
    """The reported result does not fit the match (wrong winner, draw in elimination, ...)."""


class InvalidTransitionError(TournamentError):
    """The match or tournament is not in a state that allows the operation."""


class NotFoundError(LookupError):
    pass


class PersistenceError(RuntimeError):
    """A database write failed and the transaction was rolled back."""
