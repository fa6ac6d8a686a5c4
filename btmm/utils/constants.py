"""mathematical constants computed once here to avoid recomputation"""
import math
import sys

# general math constants
LOG_2PI = math.log(2.0 * math.pi)
MACHINE_EPSILON = sys.float_info.epsilon

# elo scale constants, a 400 point gap is a strength ratio of 10
ELO_CONST = 400.0 / math.log(10.0)
INV_ELO_CONST = 1.0 / ELO_CONST
INV_ELO_CONST2 = INV_ELO_CONST**2.0

# the rating k with exp(k / ELO_CONST) == MACHINE_EPSILON
MIN_RATING = ELO_CONST * math.log(MACHINE_EPSILON)

# convergence
SMALL_ENOUGH_EPS = 1e-5
LAMBERT_W_MAX_ITERS = 100

# largest log argument for which exp() stays finite in double precision
LOG_MAX_FLOAT = math.log(sys.float_info.max)
