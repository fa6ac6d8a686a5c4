"""how well fitted ratings explain the results they were fit on"""
import time
import numpy as np
from btmm.models.bradley_terry_map import BradleyTerryMAP


def weighted_accuracy(win_probs: np.ndarray, counts: np.ndarray) -> float:
    """share of games whose winner was the favourite, an even prediction earns half a game"""
    credit = (win_probs > 0.5) + 0.5 * (win_probs == 0.5)
    return float((counts * credit).sum() / counts.sum())


def weighted_log_loss(win_probs: np.ndarray, counts: np.ndarray, eps: float = 1e-15) -> float:
    """mean negative log probability of each game's actual winner"""
    win_probs = np.clip(win_probs, eps, 1.0)
    return float(-(counts * np.log(win_probs)).sum() / counts.sum())


def weighted_brier_score(win_probs: np.ndarray, counts: np.ndarray) -> float:
    """mean squared gap between the winner's predicted probability and 1"""
    return float((counts * np.square(1.0 - win_probs)).sum() / counts.sum())


def evaluate(model: BradleyTerryMAP):
    """
    Scores a fitted model against its own win matrix.

    Every (winner, loser) entry contributes once per game it counts, so each distinct
    pairing is predicted a single time however often it was played.

    Returns:
        dict with accuracy, log_loss, brier_score, num_games and duration (seconds)
    """
    if model.wins is None or model.wins.nnz == 0:
        raise ValueError('model has no games to evaluate on, fit it first')
    start_time = time.time()
    wins = model.wins.tocoo()
    matchups = np.column_stack([wins.row, wins.col])
    win_probs = model.predict(matchups)
    counts = wins.data
    metrics = {
        'accuracy': weighted_accuracy(win_probs, counts),
        'log_loss': weighted_log_loss(win_probs, counts),
        'brier_score': weighted_brier_score(win_probs, counts),
        'num_games': int(counts.sum()),
    }
    metrics['duration'] = time.time() - start_time
    return metrics
