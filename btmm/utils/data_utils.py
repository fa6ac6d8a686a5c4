"""Classes and functions for reading and writing rating data"""

import logging
import math
from typing import Dict, Iterable, List, NamedTuple, Sequence
import numpy as np
import polars as pl
from btmm.utils.errors import MatchParseError

logger = logging.getLogger(__name__)

MATCH_COLS = ['player_a', 'player_b', 'result']
RATING_COLS = ['competitor', 'rating']


class MatchResult(NamedTuple):
    """a single decisive game"""

    winner: str
    loser: str


def parse_row(row: Sequence, row_number: int) -> MatchResult:
    """
    Converts one (player_a, player_b, result) row into a MatchResult.

    result is 'win' when player_a beat player_b and 'loss' when player_a lost to player_b.
    Fields are stripped of surrounding whitespace, tokens are otherwise matched exactly.
    """
    if len(row) < 3:
        raise MatchParseError(row_number, row, f'expected 3 fields, got {len(row)}')
    missing = [MATCH_COLS[idx] for idx, field in enumerate(row[:3]) if field is None]
    if missing:
        raise MatchParseError(row_number, row, f'missing field {", ".join(missing)}')
    player_a, player_b, result = [str(field).strip() for field in row[:3]]
    if not player_a or not player_b:
        raise MatchParseError(row_number, row, 'missing player identifier')
    if result == 'win':
        return MatchResult(winner=player_a, loser=player_b)
    if result == 'loss':
        return MatchResult(winner=player_b, loser=player_a)
    raise MatchParseError(row_number, row, f"unrecognized result {result!r}, expected 'win' or 'loss'")


def parse_rows(rows: Iterable[Sequence]) -> List[MatchResult]:
    """parse every row, failing on the first malformed one (row numbers are 1 based)"""
    return [parse_row(row, row_number) for row_number, row in enumerate(rows, start=1)]


def read_match_csv(path) -> List[MatchResult]:
    """Read a header-less player_a,player_b,result csv into match results."""
    try:
        # every column is read as a string, player ids like 007 keep their leading zeros.
        # fields past the first row's width are dropped, short rows come back as nulls
        df = pl.read_csv(path, has_header=False, infer_schema=False, truncate_ragged_lines=True)
    except pl.exceptions.NoDataError:
        logger.warning('%s contains no matches', path)
        return []
    if df.width < len(MATCH_COLS):
        raise MatchParseError(1, df.row(0) if len(df) else (), f'expected 3 fields, got {df.width}')
    df = df.select(df.columns[: len(MATCH_COLS)])
    df.columns = MATCH_COLS
    results = parse_rows(df.iter_rows())
    logger.info('read %d matches from %s', len(results), path)
    return results


def write_ratings_csv(ratings: Dict[str, float], path):
    """Write a header-less competitor,rating csv, order follows the mapping."""
    df = pl.DataFrame(
        [list(ratings.keys()), list(ratings.values())],
        schema={RATING_COLS[0]: pl.Utf8, RATING_COLS[1]: pl.Float64},
        orient='col',
    )
    df.write_csv(path, include_header=False)
    logger.info('wrote %d ratings to %s', len(df), path)


def generate_match_results(
    num_matchups: int = 1000,
    num_competitors: int = 20,
    mean: float = 1500.0,
    sd: float = 350.0,
    seed: int = 0,
):
    """
    Sample decisive games from a bradley-terry model with gaussian true ratings.

    Returns:
        (list of MatchResult, dict of competitor -> true rating)
    """
    rng = np.random.default_rng(seed=seed)
    true_ratings = rng.normal(loc=mean, scale=sd, size=num_competitors)
    comp_1 = rng.integers(low=0, high=num_competitors, size=num_matchups)
    offset = rng.integers(low=1, high=num_competitors, size=num_matchups)
    comp_2 = np.mod(comp_1 + offset, num_competitors)

    alpha = math.log(10.0) / 400.0
    probs = 1.0 / (1.0 + np.exp(-alpha * (true_ratings[comp_1] - true_ratings[comp_2])))
    comp_1_wins = rng.uniform(size=num_matchups) < probs

    names = [f'competitor_{idx}' for idx in range(num_competitors)]
    results = [
        MatchResult(names[c1], names[c2]) if won else MatchResult(names[c2], names[c1])
        for c1, c2, won in zip(comp_1, comp_2, comp_1_wins)
    ]
    return results, dict(zip(names, true_ratings.tolist()))
