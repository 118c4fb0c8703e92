"""Linear Kalman filter."""
import logging
import numpy as np
from ._common import (DimensionError, NumericalError, check_array,
                      check_covariance, check_dtype, check_optional_array,
                      solve_spd)
from .util import Bunch

logger = logging.getLogger(__name__)

# Scale of the default initial covariance, large to signal unknown initial state.
DEFAULT_P_SCALE = 1000.0


def _model_property(name, shape, doc, check=check_array):
    attr = '_' + name

    def fget(self):
        return getattr(self, attr)

    def fset(self, value):
        setattr(self, attr, check(value, shape(self), name, self.dtype))

    return property(fget, fset, doc=doc)


class KalmanFilter:
    """Linear Kalman filter.

    The filter estimates the state of a system described by::

        x_{k + 1} = F x_k + B u_k + w_k
        z_k = H x_k + v_k

    with ``w_k`` and ``v_k`` being zero mean white noises with covariances ``Q`` and
    ``R``. The user calls `predict` and `update` once per time step in the order
    which fits the problem. `predict` can be called several times in a row to skip
    epochs without measurements.

    Dimensions are fixed for the lifetime of the filter. Every matrix assigned to
    the filter or passed to its methods is checked against them and
    `DimensionError` is raised on mismatch before any state is modified. Covariance
    matrices ``P``, ``Q`` and ``R`` must also be symmetric, otherwise `ValueError` is
    raised.

    The covariance update uses the Joseph form::

        P = (I - K H) P (I - K H)^T + K R K^T

    which keeps ``P`` symmetric and positive semi-definite under rounding errors.
    The cheaper form ``P = (I - K H) P`` is used when `joseph` is False, it's
    only appropriate for well conditioned problems.

    Parameters
    ----------
    dim_x : int
        Number of states.
    dim_z : int
        Number of measurements.
    dim_u : int, optional
        Number of control inputs. Default is 0.
    x : array_like, shape (dim_x,), optional
        Initial state. Default is zeros.
    P : array_like, shape (dim_x, dim_x), optional
        Initial state covariance. Default is ``1000 * I``.
    F : array_like, shape (dim_x, dim_x), optional
        State transition matrix. Default is identity.
    H : array_like, shape (dim_z, dim_x), optional
        Measurement matrix. Default is zeros, which makes `update` useless. The
        filter is considered configured only after `H` was set.
    Q : array_like, shape (dim_x, dim_x), optional
        Process noise covariance. Default is identity.
    R : array_like, shape (dim_z, dim_z), optional
        Measurement noise covariance. Default is identity.
    B : array_like, shape (dim_x, dim_u) or None, optional
        Control input matrix. None (default) means no control influence.
    alpha : float, optional
        Fading memory factor, the propagated covariance is multiplied by
        ``alpha**2``. Default is 1 (regular Kalman filter).
    joseph : bool, optional
        Whether to use the Joseph form of the covariance update. Default is True.
    dtype : numpy float dtype, optional
        Precision of all the arrays, either float32 or float64 (default).

    Attributes
    ----------
    x_prior, P_prior : ndarray
        State and covariance after the last `predict`.
    x_post, P_post : ndarray
        State and covariance after the last `update`.
    z : ndarray or None
        Last processed measurement.
    y : ndarray, shape (dim_z,)
        Innovation of the last update.
    K : ndarray, shape (dim_x, dim_z)
        Kalman gain of the last update.
    S : ndarray, shape (dim_z, dim_z)
        Innovation covariance of the last update.
    SI : ndarray, shape (dim_z, dim_z)
        Inverse of `S`.
    log_likelihood : float or None
        Log-likelihood of the last measurement.
    mahalanobis : float or None
        Mahalanobis distance of the last innovation.
    """
    def __init__(self, dim_x, dim_z, dim_u=0, *, x=None, P=None, F=None, H=None,
                 Q=None, R=None, B=None, alpha=1.0, joseph=True, dtype=np.float64):
        if dim_x < 1 or dim_z < 1 or dim_u < 0:
            raise ValueError("Inconsistent dimensions: dim_x={}, dim_z={}, "
                             "dim_u={}".format(dim_x, dim_z, dim_u))

        self._dim_x = int(dim_x)
        self._dim_z = int(dim_z)
        self._dim_u = int(dim_u)
        self._dtype = check_dtype(dtype)
        self.joseph = joseph
        self._configured = False
        self._warned_unconfigured = False

        self._x = np.zeros(dim_x, dtype=self._dtype)
        self._P = DEFAULT_P_SCALE * np.identity(dim_x, dtype=self._dtype)
        self._F = np.identity(dim_x, dtype=self._dtype)
        self._H = np.zeros((dim_z, dim_x), dtype=self._dtype)
        self._Q = np.identity(dim_x, dtype=self._dtype)
        self._R = np.identity(dim_z, dtype=self._dtype)
        self._B = None
        self.alpha = alpha

        for name, value in [('x', x), ('P', P), ('F', F), ('H', H), ('Q', Q),
                            ('R', R), ('B', B)]:
            if value is not None:
                setattr(self, name, value)

        self._z = None
        self._y = np.zeros(dim_z, dtype=self._dtype)
        self._K = np.zeros((dim_x, dim_z), dtype=self._dtype)
        self._S = np.zeros((dim_z, dim_z), dtype=self._dtype)
        self._SI = np.zeros((dim_z, dim_z), dtype=self._dtype)
        self._log_likelihood = None
        self._mahalanobis = None

        self.x_prior = self._x.copy()
        self.P_prior = self._P.copy()
        self.x_post = self._x.copy()
        self.P_post = self._P.copy()

        logger.debug("Created KalmanFilter with dim_x=%d, dim_z=%d, dim_u=%d, "
                     "dtype=%s", self._dim_x, self._dim_z, self._dim_u, self._dtype)

    dim_x = property(lambda self: self._dim_x, doc="Number of states.")
    dim_z = property(lambda self: self._dim_z, doc="Number of measurements.")
    dim_u = property(lambda self: self._dim_u, doc="Number of control inputs.")
    dtype = property(lambda self: self._dtype, doc="Precision of the arrays.")
    configured = property(lambda self: self._configured,
                          doc="Whether the measurement matrix was set.")

    x = _model_property('x', lambda self: (self._dim_x,), "State estimate.")
    P = _model_property('P', lambda self: (self._dim_x, self._dim_x),
                        "State covariance.", check_covariance)
    F = _model_property('F', lambda self: (self._dim_x, self._dim_x),
                        "State transition matrix.")
    Q = _model_property('Q', lambda self: (self._dim_x, self._dim_x),
                        "Process noise covariance.", check_covariance)
    R = _model_property('R', lambda self: (self._dim_z, self._dim_z),
                        "Measurement noise covariance.", check_covariance)

    @property
    def H(self):
        """Measurement matrix."""
        return self._H

    @H.setter
    def H(self, value):
        self._H = check_array(value, (self._dim_z, self._dim_x), 'H', self._dtype)
        self._configured = True

    @property
    def B(self):
        """Control input matrix or None."""
        return self._B

    @B.setter
    def B(self, value):
        self._B = check_optional_array(value, None, (self._dim_x, self._dim_u), 'B',
                                       self._dtype)

    @property
    def alpha(self):
        """Fading memory factor."""
        return self._alpha

    @alpha.setter
    def alpha(self, value):
        if not value > 0:
            raise ValueError("alpha must be positive, got {}".format(value))
        self._alpha = value

    z = property(lambda self: self._z, doc="Last processed measurement.")
    y = property(lambda self: self._y, doc="Innovation of the last update.")
    K = property(lambda self: self._K, doc="Kalman gain of the last update.")
    S = property(lambda self: self._S,
                 doc="Innovation covariance of the last update.")
    SI = property(lambda self: self._SI,
                  doc="Inverse innovation covariance of the last update.")
    log_likelihood = property(lambda self: self._log_likelihood,
                              doc="Log-likelihood of the last measurement.")
    mahalanobis = property(lambda self: self._mahalanobis,
                           doc="Mahalanobis distance of the last innovation.")

    def _propagate(self, u, B, F, Q):
        dtype = self._dtype
        B = check_optional_array(B, self._B, (self._dim_x, self._dim_u), 'B', dtype)
        F = check_optional_array(F, self._F, (self._dim_x, self._dim_x), 'F', dtype)
        Q = check_optional_array(Q, self._Q, (self._dim_x, self._dim_x), 'Q', dtype,
                                 check_covariance)
        if u is not None:
            u = check_array(u, (self._dim_u,), 'u', dtype)

        x = F @ self._x
        if B is not None and u is not None:
            x = x + B @ u
        P = self._alpha ** 2 * (F @ self._P @ F.T) + Q
        return x, P

    def predict(self, u=None, B=None, F=None, Q=None):
        """Predict the state to the next time step.

        Computes::

            x = F x + B u
            P = alpha**2 F P F^T + Q

        The control term is omitted if either `u` or the effective `B` is None.
        The results of the last `update` (`K`, `y`, `S` and others) are not
        affected.

        Parameters
        ----------
        u : array_like, shape (dim_u,) or None, optional
            Control input. Default is None.
        B, F, Q : array_like or None, optional
            Matrices to use for this call only. None (default) means the matrices
            stored in the filter.

        Raises
        ------
        DimensionError
            If any of the passed arrays has an inconsistent shape.
        ValueError
            If the passed covariance matrix is not symmetric.
        """
        x, P = self._propagate(u, B, F, Q)
        self._x = x
        self._P = P
        self.x_prior = x.copy()
        self.P_prior = P.copy()

    def get_prediction(self, u=None, B=None, F=None, Q=None):
        """Compute the prediction without modifying the filter.

        Parameters are the same as in `predict`.

        Returns
        -------
        x : ndarray, shape (dim_x,)
            Predicted state.
        P : ndarray, shape (dim_x, dim_x)
            Predicted covariance.
        """
        return self._propagate(u, B, F, Q)

    def update(self, z, R=None, H=None):
        """Correct the state with a measurement.

        Computes::

            y = z - H x
            S = H P H^T + R
            K = P H^T S^-1
            x = x + K y

        and updates the covariance using the Joseph or the standard form.
        The update is atomic: when an exception is raised the filter isn't
        modified.

        Parameters
        ----------
        z : array_like, shape (dim_z,) or None
            Measurement. None means no measurement, only `z` is reset and the
            posterior is set to the current state.
        R, H : array_like or None, optional
            Matrices to use for this call only. None (default) means the matrices
            stored in the filter.

        Raises
        ------
        DimensionError
            If any of the passed arrays has an inconsistent shape.
        ValueError
            If the passed covariance matrix is not symmetric.
        NumericalError
            If the innovation covariance ``S`` is singular.
        """
        if z is None:
            self._z = None
            self.x_post = self._x.copy()
            self.P_post = self._P.copy()
            return

        dtype = self._dtype
        z = check_array(z, (self._dim_z,), 'z', dtype)
        R = check_optional_array(R, self._R, (self._dim_z, self._dim_z), 'R', dtype,
                                 check_covariance)
        H = check_optional_array(H, self._H, (self._dim_z, self._dim_x), 'H', dtype)

        if not self._configured and H is self._H and not self._warned_unconfigured:
            logger.warning("KalmanFilter.update is called with the default zero "
                           "measurement matrix H, the state won't be corrected")
            self._warned_unconfigured = True

        x = self._x
        P = self._P
        y = z - H @ x
        S = H @ P @ H.T + R
        try:
            solution, log_det = solve_spd(
                S, np.hstack((H, np.identity(self._dim_z, dtype=dtype))))
        except NumericalError:
            logger.debug("Rejected update with singular S=%s", S)
            raise

        J = solution[:, :self._dim_x].T
        SI = solution[:, self._dim_x:]
        K = P @ J
        U = np.identity(self._dim_x, dtype=dtype) - K @ H
        if self.joseph:
            P = U @ P @ U.T + K @ R @ K.T
        else:
            P = U @ P
        x = x + K @ y

        innovation_norm = float(y @ SI @ y)
        self._x = x
        self._P = P
        self._z = z
        self._y = y
        self._K = K
        self._S = S
        self._SI = SI
        self._mahalanobis = max(innovation_norm, 0.0) ** 0.5
        self._log_likelihood = -0.5 * (self._dim_z * np.log(2 * np.pi) + float(log_det)
                                       + innovation_norm)
        self.x_post = x.copy()
        self.P_post = P.copy()

    def residual_of(self, z):
        """Compute the residual between `z` and the measurement of the current state.
        """
        z = check_array(z, (self._dim_z,), 'z', self._dtype)
        return z - self._H @ self._x

    def __repr__(self):
        return "{}(dim_x={}, dim_z={}, dim_u={}, dtype={})".format(
            self.__class__.__name__, self._dim_x, self._dim_z, self._dim_u,
            self._dtype.name)


def run_kalman_filter(kf, zs, us=None, predict_first=True):
    """Run a Kalman filter over a sequence of measurements.

    For each epoch `KalmanFilter.predict` is called followed by
    `KalmanFilter.update`. With `predict_first` set to False the state of `kf`
    is assumed to refer to the first epoch and the first prediction is skipped.

    Parameters
    ----------
    kf : KalmanFilter
        Configured filter, it's modified in place.
    zs : sequence
        Measurements for each epoch. None elements denote epochs without
        measurements.
    us : sequence or None, optional
        Control inputs used in the prediction to each epoch. None (default) means
        no control.
    predict_first : bool, optional
        Whether to call `KalmanFilter.predict` before the first update.
        Default is True.

    Returns
    -------
    Bunch object with the following fields:

        - x : ndarray, shape (n_epochs, dim_x)
            State estimates after the update.
        - P : ndarray, shape (n_epochs, dim_x, dim_x)
            Covariance after the update.
        - x_prior : ndarray, shape (n_epochs, dim_x)
            State estimates before the update.
        - P_prior : ndarray, shape (n_epochs, dim_x, dim_x)
            Covariance before the update.
    """
    n_epochs = len(zs)
    if us is not None and len(us) != n_epochs:
        raise DimensionError('us', (n_epochs,), (len(us),))

    x = np.empty((n_epochs, kf.dim_x), dtype=kf.dtype)
    P = np.empty((n_epochs, kf.dim_x, kf.dim_x), dtype=kf.dtype)
    x_prior = np.empty_like(x)
    P_prior = np.empty_like(P)

    for epoch, z in enumerate(zs):
        if predict_first or epoch > 0:
            kf.predict(u=None if us is None else us[epoch])
        x_prior[epoch] = kf.x
        P_prior[epoch] = kf.P
        kf.update(z)
        x[epoch] = kf.x
        P[epoch] = kf.P

    return Bunch(x=x, P=P, x_prior=x_prior, P_prior=P_prior)
