"""
Models Module
=============

The Bradley-Terry MAP rating system and the pieces it is built from.

- posterior: Bradley-Terry log-likelihood, gaussian log-prior and their sum, the objective being maximized.
- mm: the closed form minorization-maximization update of a single rating (solved with the Lambert W
  function) and its vectorized form for a whole sweep.
- bradley_terry_map: BradleyTerryMAP, which owns the ratings and sweeps the MM update until no rating
  moves by more than the tolerance.
"""
from btmm.models.bradley_terry_map import BradleyTerryMAP, rate

__all__ = ['BradleyTerryMAP', 'rate']
