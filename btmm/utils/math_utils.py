"""math utility functions for the rating engine"""
import math
import numpy as np
from scipy.special import expit
from btmm.utils.constants import (
    ELO_CONST,
    LAMBERT_W_MAX_ITERS,
    LOG_MAX_FLOAT,
    MACHINE_EPSILON,
    SMALL_ENOUGH_EPS,
)
from btmm.utils.errors import ConvergenceError


def sigmoid(x):
    """a little faster than implementing it in numpy for d < 100000"""
    return expit(x)


def strength(ratings):
    """bradley-terry strength of elo scale ratings, floored at machine epsilon"""
    return np.maximum(np.exp(ratings / ELO_CONST), MACHINE_EPSILON)


def strength_scalar(rating):
    return max(math.exp(rating / ELO_CONST), MACHINE_EPSILON)


def lambert_w_approx(z):
    """initial guess for the principal branch of W at z >= 0"""
    if z > math.e:
        log_z = math.log(z)
        return log_z - math.log(log_z)
    return z / math.e


def lambert_w(z, eps=SMALL_ENOUGH_EPS, max_iters=LAMBERT_W_MAX_ITERS):
    """
    Principal branch of the Lambert W function, the w satisfying w * exp(w) == z.

    Starts from lambert_w_approx and refines with Halley's method until two successive
    iterates differ by at most eps.

    Parameters:
        z (float): argument, must be non negative
        eps (float): absolute tolerance on successive iterates
        max_iters (int): number of Halley steps allowed before giving up

    Returns:
        float: W(z)
    """
    if z < 0.0:
        raise ValueError(f'lambert_w is only defined here for z >= 0, got {z}')
    w = lambert_w_approx(z)
    for _ in range(max_iters):
        exp_w = math.exp(w)
        residual = (w * exp_w) - z
        new_w = w - residual / ((exp_w * (w + 1.0)) - ((w + 2.0) * residual) / (2.0 * w + 2.0))
        if abs(new_w - w) <= eps:
            return new_w
        w = new_w
    raise ConvergenceError(f'lambert_w({z}) did not converge in {max_iters} iterations', iterations=max_iters)


def lambert_w_vector(z, eps=SMALL_ENOUGH_EPS, max_iters=LAMBERT_W_MAX_ITERS):
    """elementwise lambert_w, entries stop moving once they have converged"""
    z = np.asarray(z, dtype=np.float64)
    if np.any(z < 0.0):
        raise ValueError('lambert_w is only defined here for z >= 0')
    big_mask = z > math.e
    w = z / math.e
    log_z = np.log(z[big_mask])
    w[big_mask] = log_z - np.log(log_z)

    active = np.ones(z.shape, dtype=np.bool_)
    for _ in range(max_iters):
        w_a = w[active]
        z_a = z[active]
        exp_w = np.exp(w_a)
        residual = (w_a * exp_w) - z_a
        new_w = w_a - residual / ((exp_w * (w_a + 1.0)) - ((w_a + 2.0) * residual) / (2.0 * w_a + 2.0))
        done = np.abs(new_w - w_a) <= eps
        w[active] = new_w
        active_idxs = np.flatnonzero(active)
        active[active_idxs[done]] = False
        if not active.any():
            return w
    raise ConvergenceError(f'lambert_w did not converge in {max_iters} iterations', iterations=max_iters)


def lambert_w_log(log_z, eps=SMALL_ENOUGH_EPS, max_iters=LAMBERT_W_MAX_ITERS):
    """
    W(exp(log_z)) for log_z arguments that may be too large to exponentiate.

    Below the overflow threshold this is exactly lambert_w(exp(log_z)). Above it, W is the
    root of w + log(w) = log_z, found with Newton's method from the asymptotic seed.
    """
    if log_z < LOG_MAX_FLOAT:
        return lambert_w(math.exp(log_z), eps=eps, max_iters=max_iters)
    w = log_z - math.log(log_z)
    for _ in range(max_iters):
        new_w = w - (w + math.log(w) - log_z) / (1.0 + 1.0 / w)
        if abs(new_w - w) <= eps:
            return new_w
        w = new_w
    raise ConvergenceError(f'lambert_w_log({log_z}) did not converge in {max_iters} iterations', iterations=max_iters)


def lambert_w_log_vector(log_z, eps=SMALL_ENOUGH_EPS, max_iters=LAMBERT_W_MAX_ITERS):
    """elementwise lambert_w_log"""
    log_z = np.asarray(log_z, dtype=np.float64)
    w = np.empty_like(log_z)
    small_mask = log_z < LOG_MAX_FLOAT
    w[small_mask] = lambert_w_vector(np.exp(log_z[small_mask]), eps=eps, max_iters=max_iters)
    big_log_z = log_z[~small_mask]
    if big_log_z.size == 0:
        return w

    big_w = big_log_z - np.log(big_log_z)
    for _ in range(max_iters):
        new_w = big_w - (big_w + np.log(big_w) - big_log_z) / (1.0 + 1.0 / big_w)
        converged = np.all(np.abs(new_w - big_w) <= eps)
        big_w = new_w
        if converged:
            w[~small_mask] = big_w
            return w
    raise ConvergenceError(f'lambert_w_log did not converge in {max_iters} iterations', iterations=max_iters)
