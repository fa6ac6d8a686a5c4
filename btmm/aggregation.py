"""turn a history of match results into win counts"""
from collections import Counter
from typing import Dict, FrozenSet, Iterable, List, Tuple
import numpy as np
from scipy.sparse import coo_matrix, csr_matrix
from btmm.utils.data_utils import MatchResult

WinMatrix = Dict[Tuple[str, str], int]


def aggregate(results: Iterable[MatchResult]) -> Tuple[WinMatrix, FrozenSet[str]]:
    """
    Count the wins of every ordered (winner, loser) pair.

    Parameters:
        results: iterable of MatchResult (or any (winner, loser) pairs)

    Returns:
        win_matrix (dict): (winner, loser) -> number of wins, only pairs with at least one win appear
        players (frozenset): everyone who appeared as a winner or a loser
    """
    win_matrix = Counter()
    players = set()
    for winner, loser in results:
        win_matrix[(winner, loser)] += 1
        players.add(winner)
        players.add(loser)
    return dict(win_matrix), frozenset(players)


def total_wins(win_matrix: WinMatrix, players: Iterable[str]) -> Dict[str, int]:
    """wins of each player summed over all opponents"""
    wins = dict.fromkeys(players, 0)
    for (winner, _), count in win_matrix.items():
        wins[winner] += count
    return wins


def total_games(player_a: str, player_b: str, win_matrix: WinMatrix) -> int:
    """games played between a and b in either direction"""
    return win_matrix.get((player_a, player_b), 0) + win_matrix.get((player_b, player_a), 0)


def to_sparse(win_matrix: WinMatrix, competitors: List[str]) -> csr_matrix:
    """
    Sparse (num_competitors, num_competitors) win matrix, row = winner, column = loser,
    indexed by position in competitors.
    """
    competitor_to_idx = {competitor: idx for idx, competitor in enumerate(competitors)}
    num_competitors = len(competitors)
    num_pairs = len(win_matrix)
    rows = np.empty(num_pairs, dtype=np.int64)
    cols = np.empty(num_pairs, dtype=np.int64)
    counts = np.empty(num_pairs, dtype=np.float64)
    for idx, ((winner, loser), count) in enumerate(win_matrix.items()):
        rows[idx] = competitor_to_idx[winner]
        cols[idx] = competitor_to_idx[loser]
        counts[idx] = count
    # row major order so the matrix does not depend on the order results arrived in
    order = np.lexsort((cols, rows))
    rows, cols, counts = rows[order], cols[order], counts[order]
    return coo_matrix((counts, (rows, cols)), shape=(num_competitors, num_competitors)).tocsr()
