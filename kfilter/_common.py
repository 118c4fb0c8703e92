import numpy as np
from scipy import linalg


class DimensionError(ValueError):
    """Array shape does not match the dimensions of a filter."""
    def __init__(self, name, expected, actual):
        self.name = name
        self.expected = tuple(expected)
        self.actual = tuple(actual)
        super().__init__("{} must have shape {}, got {}".format(
            name, self.expected, self.actual))


class NumericalError(np.linalg.LinAlgError):
    """Matrix can't be factorized or inverted within numerical tolerance."""


def check_dtype(dtype):
    dtype = np.dtype(dtype)
    if dtype not in (np.dtype(np.float32), np.dtype(np.float64)):
        raise ValueError("dtype must be float32 or float64, got {}".format(dtype))
    return dtype


def check_array(array, shape, name, dtype):
    """Convert `array` to ndarray of `dtype` and verify its shape.

    A scalar is accepted in place of an array with a single element, like shape
    (1,) or (1, 1).
    """
    array = np.array(array, dtype=dtype)
    if array.ndim == 0 and np.prod(shape) == 1:
        array = array.reshape(shape)
    if array.shape != shape:
        raise DimensionError(name, shape, array.shape)
    return array


def check_covariance(array, shape, name, dtype):
    """Same as `check_array`, but also verify that the matrix is symmetric.

    The asymmetry is compared against ``sqrt(eps)`` times the largest absolute
    element.
    """
    array = check_array(array, shape, name, dtype)
    scale = np.max(np.abs(array), initial=0)
    if np.max(np.abs(array - array.T), initial=0) > np.sqrt(np.finfo(dtype).eps) * scale:
        raise ValueError("{} must be symmetric".format(name))
    return array


def check_optional_array(array, default, shape, name, dtype, check=check_array):
    if array is None:
        return default
    return check(array, shape, name, dtype)


def solve_spd(S, B, name="S"):
    """Solve ``S @ X = B`` for a symmetric positive definite `S`.

    The singularity test is done on ``D S D`` with ``D = diag(S)^(-1/2)``, so it
    doesn't depend on the units of the individual components.

    Returns
    -------
    X : ndarray
        Solution.
    log_det : float
        Natural logarithm of the determinant of `S`.

    Raises
    ------
    NumericalError
        If `S` is not finite, has a non-positive diagonal element, the condition
        number of the scaled matrix exceeds ``1 / eps`` for its dtype or the
        Cholesky factorization fails.
    """
    if not np.all(np.isfinite(S)):
        raise NumericalError("{} contains non-finite values".format(name))
    diag = np.diag(S)
    if np.any(diag <= 0):
        raise NumericalError("{} is singular (non-positive diagonal)".format(name))
    d = 1 / np.sqrt(diag)
    cond = np.linalg.cond(d[:, None] * S * d)
    if not np.isfinite(cond) or cond * np.finfo(S.dtype).eps > 1:
        raise NumericalError("{} is singular (condition number {:.3g})".format(
            name, cond))
    try:
        factor = linalg.cho_factor(S)
    except np.linalg.LinAlgError as e:
        raise NumericalError("{} is not positive definite".format(name)) from e
    log_det = 2 * np.sum(np.log(np.diag(factor[0])))
    return linalg.cho_solve(factor, B), log_det
