import numpy as np
import pytest
from numpy.testing import assert_allclose
from kfilter import (GHFilter, GHKFilter, benedict_bordner_gamma_beta,
                     critical_damping_parameters, least_squares_parameters,
                     optimal_noise_smoothing)
from kfilter.examples import generate_weight_measurements

# Estimates for the weight measurements with g=0.6, h=2/3.
WEIGHT_ESTIMATES = [159.2, 161.8, 162.1, 160.78, 160.985333, 163.310578, 168.100290,
                    169.695982, 168.203604, 169.164250, 170.892342, 172.628684]


def test_weight_scenario():
    x0, dx0, zs = generate_weight_measurements()
    f = GHFilter(x0=x0, dx0=dx0, g=0.6, h=2/3, dt=1.0)

    estimates = []
    for z in zs:
        x_previous = f.x
        x = f.update(z)
        estimates.append(x)
        assert x == f.x
        assert min(f.x_prediction, z) <= x <= max(f.x_prediction, z)
        assert abs(x - x_previous) <= abs(z - x_previous) + abs(f.dx_prediction) * f.dt

    assert_allclose(estimates, WEIGHT_ESTIMATES, atol=1e-5)
    assert_allclose(f.dx, 1.731561, atol=1e-5)


def test_update():
    f = GHFilter(0.0, 0.0, 0.8, 0.2, 1.0)
    assert_allclose(f.update(1.0), 0.8)
    assert_allclose(f.dx, 0.2)
    assert_allclose(f.y, 1.0)

    f.g = 1.0
    f.h = 0.01
    assert_allclose(f.update(2.0), 2.0)
    assert_allclose(f.dx, 0.21)


def test_gain_overrides():
    f = GHFilter(0.0, 0.0, 0.8, 0.2, 1.0)
    f.update(1.0, g=1.0, h=0.5)
    assert_allclose(f.x, 1.0)
    assert_allclose(f.dx, 0.5)
    assert f.g == 0.8
    assert f.h == 0.2


def test_batch_filter():
    _, _, zs = generate_weight_measurements()
    f = GHFilter(160.0, 1.0, 0.6, 2/3, 1.0)
    results, predictions = f.batch_filter(zs, save_predictions=True)

    assert results.shape == (len(zs) + 1, 2)
    assert predictions.shape == (len(zs),)
    assert_allclose(results[0], [160.0, 1.0])
    assert_allclose(results[1:, 0], WEIGHT_ESTIMATES, atol=1e-5)
    assert_allclose(predictions, results[:-1, 0] + results[:-1, 1])

    f = GHFilter(160.0, 1.0, 0.6, 2/3, 1.0)
    assert_allclose(f.batch_filter(zs), results)


def test_vrf():
    f = GHFilter(0.0, 0.0, 0.6, 2/3, 1.0)
    vx, vdx = f.vrf()
    assert_allclose(vx, 2/3)
    assert_allclose(vdx, 0.6944444, rtol=1e-6)
    assert_allclose(f.vrf_prediction(), 1.9166667, rtol=1e-6)


def test_ghk_reduces_to_gh():
    _, _, zs = generate_weight_measurements()
    gh = GHFilter(160.0, 1.0, 0.6, 2/3, 1.0)
    ghk = GHKFilter(160.0, 1.0, 0.0, 0.6, 2/3, 0.0, 1.0)
    for z in zs:
        assert_allclose(ghk.update(z), gh.update(z))
        assert_allclose(ghk.dx, gh.dx)
        assert ghk.ddx == 0


def test_ghk_tracks_parabola():
    g, h, k = critical_damping_parameters(0.5, order=3)
    dt = 0.5
    f = GHKFilter(0.0, 0.0, 0.0, g, h, k, dt)
    t = dt * np.arange(200)
    for z in 3 * t**2 + t:
        f.update(z)
    assert_allclose([f.x, f.dx, f.ddx], [3 * t[-1]**2 + t[-1], 6 * t[-1] + 1, 6],
                    rtol=1e-6)


def test_ghk_bias_error():
    f = GHKFilter(0.0, 0.0, 0.0, 0.5, 0.4, 0.5, 1.0)
    assert_allclose(f.bias_error(1.0), -1.0)
    f.dt = 2.0
    assert_allclose(f.bias_error(1.0), -4.0)


def test_ghk_vrf():
    # Reference values are sums of squared impulse responses of the filter with
    # critically damped gains for theta = 0.5.
    g, h, k = critical_damping_parameters(0.5, order=3)
    f = GHKFilter(0.0, 0.0, 0.0, g, h, k, 1.0)
    assert_allclose(f.vrf(), [65 / 81, 67 / 162, 2 / 81], rtol=1e-10)
    assert_allclose(f.vrf_prediction(), 191 / 81, rtol=1e-10)

    f.dt = 2.0
    assert_allclose(f.vrf(), [65 / 81, 67 / 162 / 4, 2 / 81 / 16], rtol=1e-10)
    assert_allclose(f.vrf_prediction(), 191 / 81, rtol=1e-10)

    f = GHKFilter(0.0, 0.0, 0.0, 0.5, 0.4, 0.5, 1.0)
    with pytest.raises(ValueError):
        f.vrf()


def test_ghk_vrf_matches_noise_statistics():
    g, h, k = critical_damping_parameters(0.6, order=3)
    f = GHKFilter(0.0, 0.0, 0.0, g, h, k, 1.0)
    rng = np.random.RandomState(0)
    estimates = []
    predictions = []
    for z in rng.normal(size=100000):
        f.update(z)
        estimates.append([f.x, f.dx, f.ddx])
        predictions.append(f.x + f.dx + 0.5 * f.ddx)

    estimates = np.asarray(estimates)[1000:]
    predictions = np.asarray(predictions)[1000:]
    assert_allclose(np.mean(estimates**2, axis=0), f.vrf(), rtol=0.1)
    assert_allclose(np.mean(predictions**2), f.vrf_prediction(), rtol=0.1)


def test_least_squares_parameters():
    f = GHFilter(0.0, 0.0, 0.0, 0.0, 1.0)
    for n in range(10):
        z = 3 + 2 * n
        g, h = least_squares_parameters(n)
        f.update(z, g, h)
        if n > 0:
            assert_allclose(f.x, z)
            assert_allclose(f.dx, 2)


def test_critical_damping_parameters():
    assert_allclose(critical_damping_parameters(0.5), [0.75, 0.25])
    assert_allclose(critical_damping_parameters(0.5, order=3), [0.875, 0.5625, 0.0625])
    with pytest.raises(ValueError):
        critical_damping_parameters(0.5, order=4)


def test_benedict_bordner_gamma_beta():
    assert_allclose(benedict_bordner_gamma_beta(0.5), [0.5, 1 / 6])
    assert_allclose(benedict_bordner_gamma_beta(0.5, critical=True),
                    [0.5, 0.0574374], rtol=1e-5)


def test_optimal_noise_smoothing():
    assert_allclose(optimal_noise_smoothing(0.5), [0.5, 0.1715352, 0.0146055],
                    rtol=1e-5)
