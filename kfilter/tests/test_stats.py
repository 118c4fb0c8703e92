import numpy as np
from numpy.testing import assert_allclose
from kfilter.stats import GaussianDistribution, is_symmetric, mahalanobis


def test_gaussian_distribution():
    a = GaussianDistribution(10.0, 1.0)
    b = GaussianDistribution(12.0, 1.0)

    prior = a + b
    assert prior == GaussianDistribution(22.0, 2.0)

    posterior = a * b
    assert_allclose([posterior.mean, posterior.var], [11.0, 0.5])

    posterior = GaussianDistribution(10.0, 4.0) * GaussianDistribution(20.0, 1.0)
    assert_allclose([posterior.mean, posterior.var], [18.0, 0.8])


def test_mahalanobis():
    assert_allclose(mahalanobis([3.0, 4.0], [0.0, 0.0], np.eye(2)), 5.0)
    assert_allclose(mahalanobis(3.0, 1.0, 4.0), 1.0)
    assert_allclose(mahalanobis([1.0, 1.0], [0.0, 0.0], np.diag([1.0, 4.0])),
                    1.25 ** 0.5)


def test_is_symmetric():
    A = np.array([[2.0, 1.0], [1.0, 3.0]])
    assert is_symmetric(A)
    A[0, 1] += 1e-6
    assert not is_symmetric(A)
    assert is_symmetric(A, atol=1e-5)
    assert not is_symmetric(np.ones((2, 3)))
    assert not is_symmetric(np.ones(3))
