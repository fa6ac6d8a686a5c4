"""
Bradley-Terry log-likelihood with a gaussian prior on elo scale ratings.

The optimizer never evaluates these, it climbs the log-posterior through the MM surrogate.
They are here for diagnostics and for checking that a fit actually improved the objective.
"""
from typing import Dict
import numpy as np
from scipy.stats import norm
from btmm.aggregation import WinMatrix
from btmm.utils.constants import INV_ELO_CONST


def log_likelihood_pair(wins, rating_a, rating_b):
    """log probability that a beat b `wins` times, computed as wins * (log s_a - log(s_a + s_b))"""
    log_s_a = rating_a * INV_ELO_CONST
    log_s_b = rating_b * INV_ELO_CONST
    return wins * (log_s_a - np.logaddexp(log_s_a, log_s_b))


def log_likelihood(win_matrix: WinMatrix, ratings: Dict[str, float]) -> float:
    """sum of log_likelihood_pair over every (winner, loser) entry of the win matrix"""
    if not win_matrix:
        return 0.0
    wins = np.fromiter(win_matrix.values(), dtype=np.float64, count=len(win_matrix))
    ratings_a = np.array([ratings[winner] for winner, _ in win_matrix])
    ratings_b = np.array([ratings[loser] for _, loser in win_matrix])
    return float(log_likelihood_pair(wins, ratings_a, ratings_b).sum())


def log_prior(x, mean, sd):
    """gaussian log density of a rating, -log(sd) - log(2 pi) / 2 - (x - mean)^2 / (2 sd^2)"""
    return norm.logpdf(x, loc=mean, scale=sd)


def log_posterior(win_matrix: WinMatrix, ratings: Dict[str, float], mean: float, sd: float) -> float:
    """unnormalized log posterior of a ratings assignment"""
    prior_term = float(np.sum(log_prior(np.fromiter(ratings.values(), dtype=np.float64), mean, sd)))
    return log_likelihood(win_matrix, ratings) + prior_term
