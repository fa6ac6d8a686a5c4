"""
Bradley-Terry ratings by maximum a posteriori estimation

Hunter, D. R. (2004). MM algorithms for generalized Bradley-Terry models. The Annals of Statistics.
https://doi.org/10.1214/aos/1079120141
"""
import logging
from typing import Dict, Iterable, Optional
import numpy as np
from tqdm import tqdm
from btmm.aggregation import WinMatrix, aggregate, to_sparse
from btmm.configs import RatingConfig
from btmm.core.base import BatchRatingSystem
from btmm.models.mm import (
    games_matrix,
    minorize_maximize,
    minorize_maximize_vector,
    opponent_weight,
    opponent_weights,
)
from btmm.models.posterior import log_posterior
from btmm.utils.constants import INV_ELO_CONST
from btmm.utils.data_utils import MatchResult
from btmm.utils.errors import ConvergenceError
from btmm.utils.math_utils import sigmoid

logger = logging.getLogger(__name__)


class BradleyTerryMAP(BatchRatingSystem):
    """
    Bradley-Terry model on the elo scale with a gaussian prior on each rating, fit by
    minorization-maximization.

    P(i beats j) = s_i / (s_i + s_j) with s_i = exp(rating_i * ln(10) / 400), and every
    rating starts at, and is shrunk towards, the prior mean.
    """

    rating_dim = 1

    def __init__(
        self,
        competitors: list,
        mean: float = 1500.0,
        sd: float = 350.0,
        tol: float = 1e-5,
        max_sweeps: int = 1_000_000,
        update_method: str = 'batched',
        verbose: bool = False,
        dtype=np.float64,
    ):
        """
        Initializes the rating system with every competitor at the prior mean.

        Parameters:
            competitors (list): A list of competitors to be rated within the system.
            mean (float, optional): Mean of the gaussian prior and the initial rating. Defaults to 1500.0.
            sd (float, optional): Standard deviation of the gaussian prior. Defaults to 350.0.
            tol (float, optional): Largest rating change in a sweep that counts as converged. Defaults to 1e-5.
            max_sweeps (int, optional): Sweeps allowed before raising ConvergenceError. Defaults to 1_000_000.
            update_method (str, optional): 'batched' computes every update from the ratings at the start
                                           of the sweep, 'iterative' updates competitors one after another
                                           using the newest ratings. Both have the same fixed point. Defaults to 'batched'.
            verbose (bool, optional): Show a progress bar over sweeps. Defaults to False.
            dtype: The data type for the ratings array. Defaults to np.float64.
        """
        super().__init__(competitors)
        self.config = RatingConfig(mean=mean, sd=sd, tol=tol, max_sweeps=max_sweeps, update_method=update_method)
        self.mean = self.config.mean
        self.sd = self.config.sd
        self.tol = self.config.tol
        self.max_sweeps = self.config.max_sweeps
        self.verbose = verbose
        self.dtype = dtype
        self.ratings = np.zeros(shape=self.num_competitors, dtype=dtype) + self.mean

        self.win_matrix: WinMatrix = {}
        self.wins = None
        self.games = None
        self.total_wins = np.zeros(shape=self.num_competitors, dtype=dtype)
        self.num_sweeps = 0
        self.converged = False

        if update_method == 'batched':
            self.sweep = self.batched_sweep
        elif update_method == 'iterative':
            self.sweep = self.iterative_sweep

    @classmethod
    def from_results(cls, results: Iterable[MatchResult], **kwargs):
        """a model over exactly the competitors in results, already fit"""
        win_matrix, players = aggregate(results)
        model = cls(competitors=sorted(players), **kwargs)
        model.fit_win_matrix(win_matrix)
        return model

    def fit(self, results: Iterable[MatchResult]) -> Dict[str, float]:
        win_matrix, _ = aggregate(results)
        return self.fit_win_matrix(win_matrix)

    def set_win_matrix(self, win_matrix: WinMatrix):
        """load the win matrix and reset every rating to the prior mean"""
        unknown = {player for pair in win_matrix for player in pair}.difference(self.competitor_to_idx)
        if unknown:
            raise ValueError(f'win matrix references unknown competitors: {sorted(unknown)}')
        self.win_matrix = dict(win_matrix)
        self.wins = to_sparse(self.win_matrix, self.competitors)
        self.games = games_matrix(self.wins)
        self.total_wins = np.asarray(self.wins.sum(axis=1), dtype=self.dtype).ravel()
        self.ratings = np.zeros(shape=self.num_competitors, dtype=self.dtype) + self.mean
        self.num_sweeps = 0
        self.converged = False

    def fit_win_matrix(self, win_matrix: WinMatrix) -> Dict[str, float]:
        """
        Sweeps until no rating moves by more than tol.

        Raises:
            ConvergenceError: if max_sweeps sweeps pass without converging
        """
        self.set_win_matrix(win_matrix)
        logger.info(
            'fitting %d competitors on %d games', self.num_competitors, int(sum(self.win_matrix.values()))
        )
        delta = np.inf
        for sweep_idx in tqdm(range(self.max_sweeps), disable=not self.verbose, desc='mm sweeps'):
            delta = self.sweep()
            self.num_sweeps = sweep_idx + 1
            logger.debug('sweep %d max rating change %.3e', self.num_sweeps, delta)
            if delta <= self.tol:
                self.converged = True
                logger.info('converged after %d sweeps', self.num_sweeps)
                return self.get_ratings()
        raise ConvergenceError(
            f'ratings did not converge within {self.max_sweeps} sweeps (last max change {delta:.3e})',
            iterations=self.max_sweeps,
            delta=delta,
        )

    def batched_sweep(self) -> float:
        """update every competitor from the ratings at the start of the sweep, returns the largest change"""
        snapshot = self.ratings
        n = opponent_weights(snapshot, self.games)
        new_ratings = minorize_maximize_vector(self.total_wins, n, self.mean, self.sd).astype(self.dtype)
        self.ratings = new_ratings
        return float(np.max(np.abs(new_ratings - snapshot), initial=0.0))

    def iterative_sweep(self) -> float:
        """update competitors in order, each one seeing the updates made before it in the sweep"""
        prev_ratings = self.ratings.copy()
        for idx in range(self.num_competitors):
            n = opponent_weight(idx, self.ratings, self.games)
            self.ratings[idx] = minorize_maximize(self.total_wins[idx], n, self.mean, self.sd)
        return float(np.max(np.abs(self.ratings - prev_ratings), initial=0.0))

    def get_ratings(self) -> Dict[str, float]:
        return dict(zip(self.competitors, self.ratings.tolist()))

    def predict(self, matchups: np.ndarray) -> np.ndarray:
        """
        Probability of the first competitor in each matchup beating the second.

        Parameters:
            matchups (np.ndarray): (n, 2) array of competitor indices

        Returns:
            np.ndarray: win probabilities of the first competitor
        """
        ratings_1 = self.ratings[matchups[:, 0]]
        ratings_2 = self.ratings[matchups[:, 1]]
        return sigmoid(INV_ELO_CONST * (ratings_1 - ratings_2))

    def log_posterior(self, ratings: Optional[Dict[str, float]] = None) -> float:
        """log posterior of the loaded win matrix at ratings, the current ratings if not given"""
        if ratings is None:
            ratings = self.get_ratings()
        return log_posterior(self.win_matrix, ratings, self.mean, self.sd)

    def print_leaderboard(self, num_places=None):
        if num_places is None:
            num_places = self.num_competitors
        num_places = min(num_places, self.num_competitors)
        sorted_idxs = np.argsort(-self.ratings, kind='stable')[:num_places]
        max_len = min(max([len(str(comp)) for comp in self.competitors] + [10]), 25)
        print(f'{"competitor": <{max_len}}\t{"rating"}')
        for comp_idx in sorted_idxs:
            print(f'{str(self.competitors[comp_idx]): <{max_len}}\t{self.ratings[comp_idx]:.6f}')


def rate(results: Iterable[MatchResult], mean: float = 1500.0, sd: float = 350.0, **kwargs) -> Dict[str, float]:
    """
    Fit ratings for everyone appearing in results.

    Parameters:
        results: (winner, loser) pairs
        mean (float): prior mean
        sd (float): prior standard deviation
        **kwargs: any other BradleyTerryMAP argument

    Returns:
        dict mapping competitor to rating, order is not meaningful
    """
    return BradleyTerryMAP.from_results(results, mean=mean, sd=sd, **kwargs).get_ratings()
