"""
Minorization-Maximization updates for Bradley-Terry MAP ratings

Holding every opponent fixed, -log(s_i + s_j) is minorized by its tangent at the current strengths,
which leaves a surrogate in x = rating_i of the form

    w * x / K - n * exp(x / K) - (x - mean)^2 / (2 sd^2)

whose stationary point solves u * exp(u) = (sd^2 / K^2) * n * exp(sd^2 w / K^2 + mean / K) with
x = mean + w * sd^2 / K - K * u. u is found with the Lambert W function.
"""
import math
import numpy as np
from scipy.sparse import coo_matrix, csr_matrix
from btmm.utils.constants import ELO_CONST, INV_ELO_CONST, INV_ELO_CONST2, MIN_RATING
from btmm.utils.errors import ConvergenceError
from btmm.utils.math_utils import lambert_w_log, lambert_w_log_vector, strength, strength_scalar


def games_matrix(wins: csr_matrix) -> csr_matrix:
    """symmetric matrix of games played between each pair, self play excluded"""
    both = (wins + wins.T).tocoo()
    off_diag = both.row != both.col
    return coo_matrix(
        (both.data[off_diag], (both.row[off_diag], both.col[off_diag])),
        shape=both.shape,
    ).tocsr()


def opponent_weight(idx: int, ratings: np.ndarray, games: csr_matrix) -> float:
    """n for one competitor: sum over opponents q of games(idx, q) / (s_idx + s_q)"""
    start, end = games.indptr[idx], games.indptr[idx + 1]
    opponents = games.indices[start:end]
    counts = games.data[start:end]
    own_strength = strength_scalar(ratings[idx])
    return float(np.sum(counts / (own_strength + strength(ratings[opponents]))))


def opponent_weights(ratings: np.ndarray, games: csr_matrix) -> np.ndarray:
    """n for every competitor, all computed from the same ratings"""
    strengths = strength(ratings)
    coo = games.tocoo()
    weights = coo.data / (strengths[coo.row] + strengths[coo.col])
    return np.bincount(coo.row, weights=weights, minlength=ratings.shape[0])


def minorize_maximize(w, n, mean, sd):
    """
    Exact maximizer of one competitor's minorizing surrogate.

    Parameters:
        w (float): total wins of the competitor
        n (float): opponent weight, see opponent_weight
        mean (float): prior mean
        sd (float): prior standard deviation

    Returns:
        float: the new rating
    """
    sd2 = sd**2.0
    term1 = w * sd2 / ELO_CONST
    if n > 0.0:
        # log of ic2 * sd2 * n * exp(ic2 * sd2 * w + ic1 * mean), exp() alone overflows for heavy winners
        log_arg = math.log(INV_ELO_CONST2 * sd2 * n) + (INV_ELO_CONST2 * sd2 * w) + (INV_ELO_CONST * mean)
        term2 = ELO_CONST * lambert_w_log(log_arg)
    else:
        term2 = 0.0
    new_rating = mean + term1 - term2
    if not math.isfinite(new_rating):
        raise ConvergenceError(f'non finite rating from w={w}, n={n}')
    return max(new_rating, MIN_RATING)


def minorize_maximize_vector(w, n, mean, sd):
    """minorize_maximize for arrays of wins and opponent weights"""
    sd2 = sd**2.0
    term1 = w * sd2 / ELO_CONST
    term2 = np.zeros_like(n, dtype=np.float64)
    played = n > 0.0
    log_arg = np.log(INV_ELO_CONST2 * sd2 * n[played]) + (INV_ELO_CONST2 * sd2 * w[played]) + (INV_ELO_CONST * mean)
    term2[played] = ELO_CONST * lambert_w_log_vector(log_arg)
    new_ratings = mean + term1 - term2
    if not np.all(np.isfinite(new_ratings)):
        raise ConvergenceError('non finite ratings produced by the mm update')
    return np.maximum(new_ratings, MIN_RATING)
