"""g-h and g-h-k filters.

These are fixed-gain trackers for a scalar quantity and its time derivatives.
They perform no input validation: the caller is responsible for passing a
positive time step, ``dt = 0`` results in division by zero.

References
----------
.. [1] E. Brookner, "Tracking and Kalman Filters Made Easy", Wiley, 1998
.. [2] R. R. Labbe, "Kalman and Bayesian Filters in Python"
"""
import numpy as np
from scipy import linalg


class GHFilter:
    """g-h (alpha-beta) filter.

    Each call to `update` predicts the value with a constant rate model and
    corrects the value and the rate with the residual weighted by `g` and `h`.

    Parameters
    ----------
    x0 : float
        Initial value estimate.
    dx0 : float
        Initial rate estimate.
    g : float
        Weight of the residual for the value, typically in (0, 1).
    h : float
        Weight of the residual for the rate, typically in (0, 1).
    dt : float
        Time step between measurements.

    Attributes
    ----------
    x, dx : float
        Current value and rate estimates.
    x_prediction, dx_prediction : float
        Predicted value and rate computed in the last `update`.
    y : float
        Residual computed in the last `update`.
    """
    def __init__(self, x0, dx0, g, h, dt):
        self.x = x0
        self.dx = dx0
        self.g = g
        self.h = h
        self.dt = dt
        self.x_prediction = x0
        self.dx_prediction = dx0
        self.y = 0.0

    def update(self, z, g=None, h=None):
        """Process a measurement and return the new value estimate.

        Parameters
        ----------
        z : float
            Measurement.
        g, h : float or None, optional
            Gains to use for this call only. None (default) means the gains set in
            the filter.

        Returns
        -------
        float
            Updated value estimate.
        """
        if g is None:
            g = self.g
        if h is None:
            h = self.h

        self.dx_prediction = self.dx
        self.x_prediction = self.x + self.dx * self.dt

        self.y = z - self.x_prediction
        self.dx = self.dx_prediction + h * self.y / self.dt
        self.x = self.x_prediction + g * self.y
        return self.x

    def batch_filter(self, zs, save_predictions=False):
        """Run `update` for each measurement in a sequence.

        Parameters
        ----------
        zs : array_like, shape (n,)
            Measurements.
        save_predictions : bool, optional
            Whether to return predicted values as well. Default is False.

        Returns
        -------
        results : ndarray, shape (n + 1, 2)
            Rows ``(x, dx)``, the first one is the state before processing.
        predictions : ndarray, shape (n,)
            Predicted values, returned only when `save_predictions` is True.
        """
        results = [(self.x, self.dx)]
        predictions = []
        for z in zs:
            self.update(z)
            results.append((self.x, self.dx))
            predictions.append(self.x_prediction)

        results = np.asarray(results, dtype=float)
        if save_predictions:
            return results, np.asarray(predictions, dtype=float)
        return results

    def vrf(self):
        """Compute variance reduction factors of value and rate.

        Returns
        -------
        vx : float
            Steady state ratio of value estimate variance to measurement variance.
        vdx : float
            The same for the rate estimate.
        """
        g, h, dt = self.g, self.h, self.dt
        den = g * (4 - 2 * g - h)
        vx = (2 * g**2 + 2 * h - 3 * g * h) / den
        vdx = 2 * h**2 / (dt**2 * den)
        return vx, vdx

    def vrf_prediction(self):
        """Compute variance reduction factor of the predicted value.

        References
        ----------
        .. [1] Asquith, "Weight Selection in First Order Linear Filters",
           Report No RG-TR-69-12, U.S. Army Missile Command, 1970
        """
        g, h = self.g, self.h
        return (2 * g**2 + 2 * h + g * h) / (g * (4 - 2 * g - h))

    def __repr__(self):
        return "GHFilter(x={!r}, dx={!r}, g={!r}, h={!r}, dt={!r})".format(
            self.x, self.dx, self.g, self.h, self.dt)


class GHKFilter:
    """g-h-k filter which additionally tracks the second derivative.

    Parameters
    ----------
    x0, dx0, ddx0 : float
        Initial value, rate and acceleration estimates.
    g, h, k : float
        Weights of the residual for value, rate and acceleration.
    dt : float
        Time step between measurements.
    """
    def __init__(self, x0, dx0, ddx0, g, h, k, dt):
        self.x = x0
        self.dx = dx0
        self.ddx = ddx0
        self.g = g
        self.h = h
        self.k = k
        self.dt = dt
        self.x_prediction = x0
        self.dx_prediction = dx0
        self.ddx_prediction = ddx0
        self.y = 0.0

    def update(self, z, g=None, h=None, k=None):
        """Process a measurement and return the new value estimate."""
        if g is None:
            g = self.g
        if h is None:
            h = self.h
        if k is None:
            k = self.k

        dt = self.dt
        self.ddx_prediction = self.ddx
        self.dx_prediction = self.dx + self.ddx * dt
        self.x_prediction = self.x + self.dx * dt + 0.5 * self.ddx * dt**2

        self.y = z - self.x_prediction
        self.ddx = self.ddx_prediction + 2 * k * self.y / dt**2
        self.dx = self.dx_prediction + h * self.y / dt
        self.x = self.x_prediction + g * self.y
        return self.x

    def _steady_state_covariance(self):
        g, h, k, dt = self.g, self.h, self.k, self.dt
        A = np.array([[1, dt, 0.5 * dt**2], [0, 1, dt], [0, 0, 1]])
        gain = np.array([g, h / dt, 2 * k / dt**2])
        M = (np.identity(3) - np.outer(gain, [1, 0, 0])) @ A
        if np.max(np.abs(np.linalg.eigvals(M))) >= 1:
            raise ValueError("Gains g={}, h={}, k={} don't give a stable filter"
                             .format(g, h, k))
        return linalg.solve_discrete_lyapunov(M, np.outer(gain, gain)), A

    def vrf(self):
        """Compute variance reduction factors of value, rate and acceleration.

        The factors are the diagonal of the steady state error covariance for a
        unit measurement variance. It is found from the discrete Lyapunov
        equation of the filter error dynamics.

        Returns
        -------
        vx, vdx, vddx : float
            Steady state ratios of the estimate variances to measurement variance.

        Raises
        ------
        ValueError
            If the gains don't give a stable filter.
        """
        P, _ = self._steady_state_covariance()
        return tuple(float(v) for v in np.diag(P))

    def vrf_prediction(self):
        """Compute variance reduction factor of the predicted value.

        Raises
        ------
        ValueError
            If the gains don't give a stable filter.
        """
        P, A = self._steady_state_covariance()
        return float((A @ P @ A.T)[0, 0])

    def bias_error(self, dddx):
        """Compute steady state bias error for a constant third derivative."""
        return -self.dt**2 * dddx / (2 * self.k)

    def __repr__(self):
        return ("GHKFilter(x={!r}, dx={!r}, ddx={!r}, g={!r}, h={!r}, k={!r}, "
                "dt={!r})".format(self.x, self.dx, self.ddx, self.g, self.h,
                                  self.k, self.dt))


def optimal_noise_smoothing(g):
    """Compute g, h, k gains which optimally smooth noise for a given `g`.

    References
    ----------
    .. [1] Polge and Bhagavan, "A Study of the g-h-k Tracking Filter",
       Report No. RE-CR-76-1, University of Alabama in Huntsville, 1975
    """
    h = ((2 * g**3 - 4 * g**2) + (4 * g**6 - 64 * g**5 + 64 * g**4) ** 0.5) / \
        (8 * (1 - g))
    k = (h * (2 - g) - g**2) / g
    return g, h, k


def least_squares_parameters(n):
    """Compute g, h gains which turn a g-h filter into a least squares fit.

    The gains change with each measurement, `n` is the index of the measurement
    starting from 0.
    """
    den = (n + 2) * (n + 1)
    g = 2 * (2 * n + 1) / den
    h = 6 / den
    return g, h


def critical_damping_parameters(theta, order=2):
    """Compute gains of a critically damped (fading memory) filter.

    Parameters
    ----------
    theta : float
        Memory parameter in [0, 1), larger values discount old data slower.
    order : {2, 3}, optional
        2 (default) returns ``(g, h)``, 3 returns ``(g, h, k)``.
    """
    if order == 2:
        return 1 - theta**2, (1 - theta)**2
    if order == 3:
        return (1 - theta**3,
                1.5 * (1 - theta**2) * (1 - theta),
                0.5 * (1 - theta)**3)
    raise ValueError("order must be 2 or 3, got {}".format(order))


def benedict_bordner_gamma_beta(g, critical=False):
    """Compute g, h gains of a Benedict-Bordner filter for a given `g`.

    The filter minimizes transient errors. The classic formula allows ringing,
    with `critical` set to True it is nearly critically damped.
    """
    g_sqr = g**2
    if critical:
        return g, 0.8 * (2 - g_sqr - 2 * (1 - g_sqr) ** 0.5) / g_sqr
    return g, g_sqr / (2 - g)
