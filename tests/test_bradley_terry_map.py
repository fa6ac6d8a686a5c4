"""
fitting Bradley-Terry MAP ratings end to end
"""
import math
import random
import pytest
import numpy as np
from btmm.models.bradley_terry_map import BradleyTerryMAP, rate
from btmm.models.posterior import log_posterior
from btmm.utils.constants import ELO_CONST
from btmm.utils.data_utils import MatchResult, generate_match_results, parse_rows
from btmm.utils.errors import ConfigurationError, ConvergenceError
from btmm.metrics import evaluate

MEAN = 1500.0
SD = 350.0


def map_gradient(model):
    """gradient of the log posterior with respect to each rating"""
    wins = model.wins.toarray()
    games = wins + wins.T
    np.fill_diagonal(games, 0.0)
    diffs = (model.ratings[:, None] - model.ratings[None, :]) / ELO_CONST
    probs = 1.0 / (1.0 + np.exp(-diffs))
    expected_wins = (games * probs).sum(axis=1)
    return (model.total_wins - expected_wins) / ELO_CONST - (model.ratings - model.mean) / model.sd**2.0


def test_end_to_end_ordering():
    results = parse_rows([('P1', 'P2', 'win'), ('P2', 'P3', 'win'), ('P1', 'P3', 'win')])
    ratings = rate(results, mean=MEAN, sd=SD)
    assert set(ratings) == {'P1', 'P2', 'P3'}
    assert all(math.isfinite(r) for r in ratings.values())
    assert ratings['P1'] > ratings['P2'] > ratings['P3']


@pytest.mark.parametrize('num_games', [1, 5, 20])
def test_one_sided_pair(num_games):
    ratings = rate([MatchResult('A', 'B')] * num_games, mean=MEAN, sd=SD)
    assert ratings['A'] > MEAN > ratings['B']
    assert ratings['A'] - MEAN == pytest.approx(MEAN - ratings['B'], abs=1e-2)

    swapped = rate([MatchResult('B', 'A')] * num_games, mean=MEAN, sd=SD)
    assert swapped['B'] == pytest.approx(ratings['A'], abs=1e-9)
    assert swapped['A'] == pytest.approx(ratings['B'], abs=1e-9)


def test_more_wins_more_rating():
    few = rate([MatchResult('A', 'B')] * 2)
    many = rate([MatchResult('A', 'B')] * 10)
    assert many['A'] > few['A']


def test_player_without_games_stays_at_mean():
    model = BradleyTerryMAP(competitors=['A', 'B', 'C'], mean=MEAN, sd=SD)
    ratings = model.fit([MatchResult('A', 'B'), MatchResult('A', 'B')])
    assert ratings['C'] == MEAN
    assert ratings['A'] > MEAN > ratings['B']


def test_split_evidence_stays_at_mean():
    results = [MatchResult('A', 'B')] * 10 + [MatchResult('B', 'A')] * 10
    ratings = rate(results, mean=MEAN, sd=SD)
    assert ratings['A'] == pytest.approx(MEAN, abs=1e-3)
    assert ratings['B'] == pytest.approx(MEAN, abs=1e-3)


@pytest.mark.parametrize('update_method', ['batched', 'iterative'])
def test_extra_sweep_after_convergence_is_small(update_method):
    results, _ = generate_match_results(num_matchups=300, num_competitors=8, seed=1)
    model = BradleyTerryMAP.from_results(results, update_method=update_method)
    assert model.converged
    before = model.ratings.copy()
    delta = model.sweep()
    assert delta <= model.tol
    assert np.max(np.abs(model.ratings - before)) <= model.tol


def test_input_order_does_not_matter():
    results, _ = generate_match_results(num_matchups=200, num_competitors=6, seed=2)
    shuffled = list(results)
    random.Random(3).shuffle(shuffled)
    assert rate(shuffled) == rate(results)


def test_converges_to_map_estimate():
    results, _ = generate_match_results(num_matchups=500, num_competitors=10, seed=4)
    model = BradleyTerryMAP.from_results(results)
    assert map_gradient(model) == pytest.approx(np.zeros(model.num_competitors), abs=1e-5)


def test_log_posterior_increases():
    results, _ = generate_match_results(num_matchups=200, num_competitors=5, seed=5)
    model = BradleyTerryMAP.from_results(results)
    initial = {competitor: model.mean for competitor in model.competitors}
    assert model.log_posterior() > model.log_posterior(initial)
    assert model.log_posterior() == pytest.approx(
        log_posterior(model.win_matrix, model.get_ratings(), model.mean, model.sd)
    )


def test_batched_and_iterative_agree():
    results, _ = generate_match_results(num_matchups=400, num_competitors=10, seed=6)
    batched = rate(results, update_method='batched')
    iterative = rate(results, update_method='iterative')
    assert set(batched) == set(iterative)
    for competitor, rating in batched.items():
        assert iterative[competitor] == pytest.approx(rating, abs=0.05)


def test_recovers_true_ratings():
    results, true_ratings = generate_match_results(num_matchups=3000, num_competitors=10, seed=7)
    fitted = rate(results)
    competitors = sorted(true_ratings)
    corr = np.corrcoef([true_ratings[c] for c in competitors], [fitted[c] for c in competitors])[0, 1]
    assert corr > 0.9


def test_default_sweep_cap_allows_slow_convergence():
    # this history needs more than ten thousand batched sweeps to settle
    results, _ = generate_match_results(num_matchups=3000, num_competitors=10, seed=7)
    model = BradleyTerryMAP.from_results(results)
    assert model.converged
    assert model.num_sweeps > 10_000


def test_heavy_winners_stay_finite():
    results = [MatchResult('A', 'B')] * 200 + [MatchResult('B', 'C')] * 200
    ratings = rate(results)
    assert all(math.isfinite(r) for r in ratings.values())
    assert ratings['A'] > ratings['B'] > ratings['C']


def test_sweep_cap():
    model = BradleyTerryMAP(competitors=['A', 'B'], max_sweeps=1)
    with pytest.raises(ConvergenceError) as excinfo:
        model.fit([MatchResult('A', 'B')] * 3)
    assert excinfo.value.iterations == 1
    assert excinfo.value.delta > model.tol


def test_empty_results():
    assert rate([]) == {}


@pytest.mark.parametrize(
    'kwargs',
    [{'sd': 0.0}, {'sd': -5.0}, {'mean': -1.0}, {'tol': 0.0}, {'max_sweeps': 0}, {'update_method': 'sgd'}],
)
def test_bad_configuration(kwargs):
    with pytest.raises(ConfigurationError):
        BradleyTerryMAP(competitors=['A'], **kwargs)


def test_unknown_competitor():
    model = BradleyTerryMAP(competitors=['A', 'B'])
    with pytest.raises(ValueError):
        model.fit([MatchResult('A', 'C')])


def test_predict():
    model = BradleyTerryMAP(competitors=['A', 'B', 'C'])
    assert model.predict(np.array([[0, 1]])) == pytest.approx([0.5])
    model.fit([MatchResult('A', 'B'), MatchResult('A', 'B'), MatchResult('B', 'C')])
    probs = model.predict(model.index_matchups([MatchResult('A', 'B'), MatchResult('C', 'A')]))
    assert probs[0] > 0.5
    assert probs[1] < 0.5


def test_evaluate():
    results = parse_rows([('P1', 'P2', 'win'), ('P2', 'P3', 'win'), ('P1', 'P3', 'win')])
    model = BradleyTerryMAP.from_results(results)
    metrics = evaluate(model)
    assert metrics['accuracy'] == 1.0
    assert 0.0 < metrics['log_loss'] < math.log(2.0)
    assert 0.0 < metrics['brier_score'] < 0.25


def test_print_leaderboard(capsys):
    model = BradleyTerryMAP.from_results([MatchResult('P1', 'P2'), MatchResult('P2', 'P3')])
    model.print_leaderboard(2)
    lines = capsys.readouterr().out.strip().split('\n')
    assert lines[0].split() == ['competitor', 'rating']
    assert len(lines) == 3
    assert lines[1].split()[0] == 'P1'
    assert lines[2].split()[0] == 'P2'
