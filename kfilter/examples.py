"""Example estimation problems."""
from dataclasses import dataclass
import numpy as np
from scipy._lib._util import check_random_state


@dataclass
class LinearProblemExample:
    """Example of a linear estimation problem.

    Parameters
    ----------
    x0 : ndarray, shape (n_states,)
        Initial state estimate.
    P0 : ndarray, shape (n_states, n_states)
        Initial covariance.
    F : ndarray, shape (n_states, n_states)
        Transition matrix.
    H : ndarray, shape (n_meas, n_states)
        Measurement matrix.
    Q : ndarray, shape (n_states, n_states)
        Process noise covariance matrix.
    R : ndarray, shape (n_meas, n_meas)
        Measurement noise covariance matrix.
    n_epochs : int
        Number of epochs.
    z : ndarray, shape (n_epochs, n_meas)
        Measurements.
    xt : ndarray, shape (n_epochs, n_states)
        True state for each epoch.
    """
    x0 : np.ndarray
    P0 : np.ndarray
    F : np.ndarray
    H : np.ndarray
    Q : np.ndarray
    R : np.ndarray
    n_epochs : int
    z : np.ndarray
    xt : np.ndarray


def white_noise_acceleration_covariance(tau, q):
    """Compute process noise covariance of a constant velocity model.

    The acceleration is modelled as continuous white noise with intensity `q`,
    discretized over the time step `tau`.
    """
    return q**2 * np.array([[tau**3 / 3, tau**2 / 2],
                            [tau**2 / 2, tau]])


def generate_constant_velocity(
    n_epochs=200,
    x0=np.array([0.0, 1.0]),
    P0=np.diag([10.0**2, 1.0**2]),
    tau=1.0,
    q=0.01,
    sigma_position=2.0,
    rng=0,
):
    """Generate data for a 1-D target moving with nearly constant velocity.

    The state consists of position and velocity, only the position is measured.
    The initial estimate is `x0`, the true initial state is drawn from the normal
    distribution with mean `x0` and covariance `P0`.

    Parameters
    ----------
    n_epochs : int
        Number of epochs for simulation.
    x0 : array_like, shape (2,)
        Initial state estimate.
    P0 : array_like, shape (2, 2)
        Initial state covariance.
    tau : float
        Time step in seconds.
    q : float
        Intensity of acceleration noise in m/s/sqrt(s).
    sigma_position : float
        Accuracy of position measurements in m.
    rng : None, int or `numpy.random.RandomState`
        Seed to create or already created RandomState. None corresponds to
        nondeterministic seeding. Default is 0.

    Returns
    -------
    LinearProblemExample
    """
    rng = check_random_state(rng)
    x0 = np.asarray(x0, dtype=float)
    P0 = np.asarray(P0, dtype=float)

    F = np.array([[1.0, tau], [0.0, 1.0]])
    H = np.array([[1.0, 0.0]])
    Q = white_noise_acceleration_covariance(tau, q)
    R = np.array([[sigma_position**2]])

    xt = np.empty((n_epochs, 2))
    z = np.empty((n_epochs, 1))
    xt[0] = rng.multivariate_normal(x0, P0)
    for i in range(n_epochs):
        z[i] = H @ xt[i] + rng.multivariate_normal(np.zeros(1), R)
        if i + 1 < n_epochs:
            xt[i + 1] = F @ xt[i] + rng.multivariate_normal(np.zeros(2), Q)

    return LinearProblemExample(x0, P0, F, H, Q, R, n_epochs, z, xt)


def generate_weight_measurements():
    """Return noisy daily weight readings of a person gaining about 1 lb a day.

    Returns
    -------
    x0 : float
        Initial weight guess.
    dx0 : float
        Initial weight gain rate guess.
    z : ndarray, shape (12,)
        Measured weights.
    """
    z = np.array([158.0, 164.2, 160.3, 159.9, 162.1, 164.6, 169.6, 167.4, 166.4,
                  171.0, 171.2, 172.6])
    return 160.0, 1.0, z
