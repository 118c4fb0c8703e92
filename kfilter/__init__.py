"""kfilter: Recursive state estimation filters.

The package contains estimators for discrete-time linear stochastic systems of the
form::

    x_{k + 1} = F x_k + B u_k + w_k
    z_k = H x_k + v_k

Where

    - k   - integer epoch index
    - x_k - state vector
    - u_k - control vector
    - w_k - process noise vector with covariance Q
    - z_k - measurement vector
    - v_k - measurement noise vector with covariance R

`KalmanFilter` implements the optimal linear estimator as an object with `predict`
and `update` methods called by the user once per epoch. `GHFilter` and
`GHKFilter` are simple fixed-gain trackers of a scalar quantity and its
derivatives.

Instances are not thread-safe, each one must be driven by a single caller.

References
----------
.. [1] J. L. Crassidis, J. L. Junkins, "Optimal Estimation of Dynamic Systems",
   2nd edition
.. [2] E. Brookner, "Tracking and Kalman Filters Made Easy", Wiley, 1998
"""
from . import examples, stats, util
from ._common import DimensionError, NumericalError
from .gh import (GHFilter, GHKFilter, benedict_bordner_gamma_beta,
                 critical_damping_parameters, least_squares_parameters,
                 optimal_noise_smoothing)
from .linear import KalmanFilter, run_kalman_filter
