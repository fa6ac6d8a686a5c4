"""default parameters and validation for the rating engine"""
import math
from dataclasses import asdict, dataclass
from btmm.utils.constants import SMALL_ENOUGH_EPS
from btmm.utils.errors import ConfigurationError

UPDATE_METHODS = ('batched', 'iterative')

DEFAULT_PARAMS = {
    'mean': 1500.0,
    'sd': 350.0,
    'tol': SMALL_ENOUGH_EPS,
    'max_sweeps': 1_000_000,
    'update_method': 'batched',
}


def _parse_float(name, value):
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f'{name} must be a number, got {value!r}') from exc
    if not math.isfinite(number):
        raise ConfigurationError(f'{name} must be finite, got {value!r}')
    return number


@dataclass(frozen=True)
class RatingConfig:
    """
    Prior and optimizer settings for BradleyTerryMAP.

    Attributes:
        mean (float): mean of the gaussian prior over ratings, also every competitor's starting rating
        sd (float): standard deviation of the prior, smaller values pull ratings harder towards mean
        tol (float): a fit has converged once no rating moves by more than tol in a sweep
        max_sweeps (int): number of sweeps after which an unconverged fit is an error
        update_method (str): 'batched' updates everyone from the same snapshot, 'iterative' updates in turn
    """

    mean: float = DEFAULT_PARAMS['mean']
    sd: float = DEFAULT_PARAMS['sd']
    tol: float = DEFAULT_PARAMS['tol']
    max_sweeps: int = DEFAULT_PARAMS['max_sweeps']
    update_method: str = DEFAULT_PARAMS['update_method']

    def __post_init__(self):
        for name in ('mean', 'sd', 'tol'):
            value = _parse_float(name, getattr(self, name))
            if value <= 0.0:
                raise ConfigurationError(f'{name} must be positive, got {value}')
            object.__setattr__(self, name, value)
        if isinstance(self.max_sweeps, bool) or not isinstance(self.max_sweeps, int) or self.max_sweeps < 1:
            raise ConfigurationError(f'max_sweeps must be a positive integer, got {self.max_sweeps!r}')
        if self.update_method not in UPDATE_METHODS:
            raise ConfigurationError(f'update_method must be one of {UPDATE_METHODS}, got {self.update_method!r}')

    @classmethod
    def from_strings(cls, mean=None, sd=None, **kwargs):
        """build a config from command line text, missing values fall back to the defaults"""
        params = dict(kwargs)
        if mean is not None:
            params['mean'] = _parse_float('mean', mean)
        if sd is not None:
            params['sd'] = _parse_float('sd', sd)
        return cls(**params)

    def to_dict(self):
        return asdict(self)
