from tavern_tournaments.core.database import Base

# Import all models here to ensure they are registered with Base
from .tournament import TournamentConfigRow
from .player import TournamentPlayerRow
from .match import TournamentMatchRow
