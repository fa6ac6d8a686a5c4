"""Bradley-Terry MAP ratings from pairwise win/loss results"""
from btmm.aggregation import aggregate, total_games, total_wins
from btmm.configs import RatingConfig
from btmm.models.bradley_terry_map import BradleyTerryMAP, rate
from btmm.utils.data_utils import MatchResult
from btmm.utils.errors import ConfigurationError, ConvergenceError, MatchParseError, RatingError
from btmm.utils.math_utils import lambert_w

__version__ = '0.1.0'

__all__ = [
    'BradleyTerryMAP',
    'ConfigurationError',
    'ConvergenceError',
    'MatchParseError',
    'MatchResult',
    'RatingConfig',
    'RatingError',
    'aggregate',
    'lambert_w',
    'rate',
    'total_games',
    'total_wins',
]
