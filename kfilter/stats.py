"""Statistics related helpers."""
from dataclasses import dataclass
import numpy as np
from scipy import linalg


@dataclass(frozen=True)
class GaussianDistribution:
    """Univariate normal distribution.

    Adding two distributions gives the distribution of the sum of independent
    variables, which is what the prediction step of a 1-D Kalman filter does.
    Multiplying them gives the normalized product of densities, which is the
    measurement update.

    Parameters
    ----------
    mean : float
        Mean of the distribution.
    var : float
        Variance of the distribution.
    """
    mean : float
    var : float

    def __add__(self, other):
        if not isinstance(other, GaussianDistribution):
            return NotImplemented
        return GaussianDistribution(self.mean + other.mean, self.var + other.var)

    def __mul__(self, other):
        if not isinstance(other, GaussianDistribution):
            return NotImplemented
        mean = ((self.var * other.mean + other.var * self.mean) /
                (self.var + other.var))
        var = 1 / (1 / self.var + 1 / other.var)
        return GaussianDistribution(mean, var)


def mahalanobis(x, mean, cov):
    """Compute Mahalanobis distance of `x` from a distribution.

    Parameters
    ----------
    x : array_like, shape (n,)
        Point.
    mean : array_like, shape (n,)
        Mean of the distribution.
    cov : array_like, shape (n, n)
        Covariance matrix of the distribution, must be positive definite.

    Returns
    -------
    float
    """
    e = np.atleast_1d(np.asarray(x, dtype=float) - np.asarray(mean, dtype=float))
    cov = np.atleast_2d(np.asarray(cov, dtype=float))
    return float(e @ linalg.cho_solve(linalg.cho_factor(cov), e)) ** 0.5


def is_symmetric(A, atol=1e-9):
    """Check whether `A` is a square matrix equal to its transpose within `atol`."""
    A = np.asarray(A)
    return A.ndim == 2 and A.shape[0] == A.shape[1] and \
        np.max(np.abs(A - A.T), initial=0) <= atol
