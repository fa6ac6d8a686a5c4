"""base class for batch rating systems"""
from abc import ABC, abstractmethod
from typing import Dict, Iterable
import numpy as np
from btmm.utils.data_utils import MatchResult


class BatchRatingSystem(ABC):
    """
    Base class for batch rating systems. A batch system is fit once on the complete history
    of results and recomputes every rating from scratch, there are no per match updates.

    Attributes:
        rating_dim (int): Dimension of competitor ratings, 1 for systems with a single number per competitor.
        competitors (list): The competitors within the rating system, ratings are stored in this order.
        num_competitors (int): The number of competitors in the system.
        competitor_to_idx (dict): Position of each competitor in competitors.
    """

    rating_dim: int

    def __init__(self, competitors):
        """
        Parameters:
            competitors (list): Identifiers of the competitors to rate. Competitors that never
                                appear in the fitted results keep their initial rating.
        """
        self.competitors = list(competitors)
        self.num_competitors = len(self.competitors)
        self.competitor_to_idx = {competitor: idx for idx, competitor in enumerate(self.competitors)}
        if len(self.competitor_to_idx) != self.num_competitors:
            raise ValueError('competitors must be unique')

    @abstractmethod
    def fit(self, results: Iterable[MatchResult]) -> Dict[str, float]:
        """
        Fits ratings to the full list of results.

        Parameters:
            results: every decisive game, as (winner, loser) pairs

        Returns:
            dict mapping each competitor to its fitted rating
        """

    def predict(self, matchups: np.ndarray) -> np.ndarray:
        """probability that the first competitor of each (n, 2) index pair beats the second"""
        raise NotImplementedError

    def index_matchups(self, results: Iterable[MatchResult]) -> np.ndarray:
        """(n, 2) array of (winner, loser) competitor indices"""
        pairs = [(self.competitor_to_idx[winner], self.competitor_to_idx[loser]) for winner, loser in results]
        return np.array(pairs, dtype=np.int64).reshape(-1, 2)

    def print_leaderboard(self, num_places=None):
        """
        Prints the leaderboard of the rating system.

        Parameters:
            num_places int: The number of top places to display on the leaderboard.
        """
        pass  # Implementation should be provided by subclasses.
