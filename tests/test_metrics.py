import math
import pytest
import numpy as np
from btmm.metrics import evaluate, weighted_accuracy, weighted_brier_score, weighted_log_loss
from btmm.models.bradley_terry_map import BradleyTerryMAP
from btmm.utils.data_utils import MatchResult


def test_weighted_accuracy():
    probs = np.array([0.9, 0.2, 0.5])
    assert weighted_accuracy(probs, np.array([1.0, 1.0, 1.0])) == pytest.approx(0.5)
    assert weighted_accuracy(probs, np.array([3.0, 1.0, 0.0])) == pytest.approx(0.75)


def test_weighted_log_loss():
    probs = np.array([0.5, 0.25])
    expected = -(2.0 * math.log(0.5) + math.log(0.25)) / 3.0
    assert weighted_log_loss(probs, np.array([2.0, 1.0])) == pytest.approx(expected)
    assert math.isfinite(weighted_log_loss(np.array([0.0]), np.array([1.0])))


def test_weighted_brier_score():
    probs = np.array([1.0, 0.5])
    assert weighted_brier_score(probs, np.array([1.0, 3.0])) == pytest.approx(0.1875)


def test_evaluate_weights_by_game_count():
    model = BradleyTerryMAP.from_results([MatchResult('A', 'B')] * 3 + [MatchResult('B', 'A')])
    prob = float(model.predict(np.array([[0, 1]]))[0])
    metrics = evaluate(model)
    assert metrics['num_games'] == 4
    assert metrics['accuracy'] == pytest.approx(0.75)
    assert metrics['log_loss'] == pytest.approx(-(3.0 * math.log(prob) + math.log(1.0 - prob)) / 4.0)
    assert metrics['brier_score'] == pytest.approx((3.0 * (1.0 - prob) ** 2 + prob**2) / 4.0)
    assert metrics['duration'] >= 0.0


def test_evaluate_unfit_model():
    with pytest.raises(ValueError):
        evaluate(BradleyTerryMAP(competitors=['A', 'B']))
