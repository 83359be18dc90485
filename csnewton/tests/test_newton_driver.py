import numpy as np
import pytest

from csnewton.core.newton import NewtonStatus, newton_complex_step, newton_scalar
from csnewton.models.benchmarks import linear_2x2, rosenbrock_gradient, singular_seed, sqrt2


def test_scalar_sqrt2_from_1p5() -> None:
    res = newton_complex_step(sqrt2, np.array([1.5]), tol=1e-10, maxiter=20)

    assert res.status is NewtonStatus.CONVERGED
    assert res.converged
    assert res.niter <= 6
    assert abs(res.x[0] - np.sqrt(2.0)) < 1e-10


def test_scalar_sqrt2_from_1() -> None:
    res = newton_complex_step(sqrt2, np.array([1.0]), tol=1e-12, maxiter=20)

    assert res.status is NewtonStatus.CONVERGED
    assert res.niter <= 6
    assert res.x[0] == pytest.approx(1.4142135623730951, rel=0.0, abs=1e-15)
    assert len(res.history) == res.niter
    # quadratic convergence: residual strictly decreasing
    assert all(b < a for a, b in zip(res.history, res.history[1:]))


def test_newton_scalar_wrapper_with_target() -> None:
    res = newton_scalar(lambda z: z * z, 1.0, target=2.0, tol=1e-12, maxiter=20)
    assert res.converged
    assert res.x.shape == (1,)
    assert res.x[0] == pytest.approx(np.sqrt(2.0), abs=1e-14)


def test_linear_system_converges_in_one_step() -> None:
    res = newton_complex_step(linear_2x2, np.zeros(2), tol=1e-14, maxiter=2)

    assert res.status is NewtonStatus.CONVERGED
    assert res.niter == 1
    np.testing.assert_allclose(res.x, [1.6, 0.6], rtol=0.0, atol=1e-14)
    np.testing.assert_allclose(res.jacobian, [[2.0, 3.0], [1.0, -1.0]], rtol=1e-15)


def test_rosenbrock_gradient_root() -> None:
    res = newton_complex_step(rosenbrock_gradient, np.array([-1.2, 1.0]), tol=1e-8, maxiter=50)

    assert res.status is NewtonStatus.CONVERGED
    assert res.residual <= 1e-8
    np.testing.assert_allclose(res.x, [1.0, 1.0], atol=1e-6)


def test_singular_seed_reports_solver_failure() -> None:
    x0 = np.array([0.0, 1.0])
    res = newton_complex_step(singular_seed, x0, tol=1e-8, maxiter=20)

    assert res.status is NewtonStatus.SOLVER_FAILED
    assert not res.converged
    assert res.niter == 0
    np.testing.assert_array_equal(res.x, x0)
    # residual of the seed itself: ||(0, 1)||
    assert res.residual == pytest.approx(1.0)
    assert res.message


def test_seed_at_root_takes_exactly_one_iteration() -> None:
    res = newton_complex_step(sqrt2, np.array([np.sqrt(2.0)]), tol=1e-12, maxiter=20)

    assert res.status is NewtonStatus.CONVERGED
    assert res.niter == 1
    assert res.residual <= 1e-12


def test_idempotent_once_converged() -> None:
    first = newton_complex_step(rosenbrock_gradient, np.array([-1.2, 1.0]), tol=1e-8, maxiter=50)
    second = newton_complex_step(rosenbrock_gradient, first.x, tol=1e-8, maxiter=50)

    assert second.status is NewtonStatus.CONVERGED
    assert second.niter == 1
    assert second.residual <= first.residual + 1e-12
    np.testing.assert_allclose(second.x, first.x, atol=1e-8)


def test_target_shifts_the_root() -> None:
    # (2x + 3y, x - y) = (5, 1)  <=>  linear_2x2 = 0
    res = newton_complex_step(
        lambda z: np.array([2.0 * z[0] + 3.0 * z[1], z[0] - z[1]]),
        np.zeros(2),
        target=[5.0, 1.0],
        tol=1e-13,
        maxiter=3,
    )
    assert res.converged
    np.testing.assert_allclose(res.x, [1.6, 0.6], atol=1e-14)


def test_iteration_cap() -> None:
    res = newton_complex_step(sqrt2, np.array([100.0]), tol=1e-12, maxiter=2)

    assert res.status is NewtonStatus.ITERATION_CAP_EXCEEDED
    assert res.niter == 2
    assert res.residual > 1e-12


def test_model_failure_after_update_keeps_last_iterate() -> None:
    def blows_up_far_away(z):
        # only for the test: poison the model outside |x| < 10
        bad = np.inf if abs(z[0].real) > 10.0 else 0.0
        return np.array([z[0] * z[0] - 2.0 + bad])

    res = newton_complex_step(blows_up_far_away, np.array([0.01]), tol=1e-10, maxiter=20)

    assert res.status is NewtonStatus.MODEL_FAILED
    assert res.niter == 0
    assert res.x[0] == 0.01
    assert res.residual == pytest.approx(abs(0.01 ** 2 - 2.0))


def test_model_failure_inside_jacobian_drops_partial_jacobian() -> None:
    def perturbed_fails_below_two(z):
        bad = np.nan if (z[0].imag != 0.0 and z[0].real < 2.0) else 0.0
        return np.array([z[0] * z[0] - 2.0 + bad])

    # step 1 from 3 lands on 11/6; the next Jacobian pass fails on a perturbed evaluation
    res = newton_complex_step(perturbed_fails_below_two, np.array([3.0]), tol=1e-10, maxiter=20)

    assert res.status is NewtonStatus.MODEL_FAILED
    assert res.niter == 1
    assert res.x[0] == pytest.approx(11.0 / 6.0, rel=1e-15)
    assert res.residual == pytest.approx((11.0 / 6.0) ** 2 - 2.0, rel=1e-12)
    assert res.jacobian is None


def test_model_failure_after_update_keeps_jacobian() -> None:
    def blows_up_far_away(z):
        bad = np.inf if abs(z[0].real) > 10.0 else 0.0
        return np.array([z[0] * z[0] - 2.0 + bad])

    res = newton_complex_step(blows_up_far_away, np.array([0.01]), tol=1e-10, maxiter=20)

    assert res.status is NewtonStatus.MODEL_FAILED
    np.testing.assert_allclose(res.jacobian, [[0.02]], rtol=1e-14)


def test_model_failure_at_seed() -> None:
    res = newton_complex_step(lambda z: np.full(2, np.nan, dtype=complex), np.ones(2))

    assert res.status is NewtonStatus.MODEL_FAILED
    assert res.niter == 0
    assert res.residual == float("inf")
    assert res.jacobian is None


def test_custom_solver_is_used_and_failures_are_values() -> None:
    calls = []

    def lstsq_solver(A, b):
        calls.append(A.shape)
        return np.linalg.solve(A, b)

    res = newton_complex_step(linear_2x2, np.zeros(2), tol=1e-14, maxiter=2, solver=lstsq_solver)
    assert res.converged
    assert calls and all(shape == (2, 2) for shape in calls)

    def always_fails(A, b):
        raise np.linalg.LinAlgError("nope")

    res = newton_complex_step(linear_2x2, np.zeros(2), solver=always_fails)
    assert res.status is NewtonStatus.SOLVER_FAILED
    assert res.message == "nope"

    res = newton_complex_step(linear_2x2, np.zeros(2), solver=lambda A, b: np.full(2, np.nan))
    assert res.status is NewtonStatus.SOLVER_FAILED


def test_central_difference_method_also_converges() -> None:
    res = newton_complex_step(rosenbrock_gradient, np.array([-1.2, 1.0]), tol=1e-8, maxiter=50, method="central")
    assert res.converged
    np.testing.assert_allclose(res.x, [1.0, 1.0], atol=1e-6)


def test_callback_and_last_info() -> None:
    seen = []
    res = newton_complex_step(sqrt2, np.array([1.0]), tol=1e-12, maxiter=20,
                              callback=lambda k, x, r: seen.append((k, float(x[0]), r)))

    assert [k for k, _, _ in seen] == list(range(1, res.niter + 1))
    assert seen[-1][2] == res.residual

    info = newton_complex_step.last_info
    assert info["converged"] is True
    assert info["niter"] == res.niter
    assert info["status"] == "converged"


def test_input_does_not_get_mutated() -> None:
    x0 = np.array([1.0])
    newton_complex_step(sqrt2, x0, tol=1e-12, maxiter=20)
    assert x0[0] == 1.0


@pytest.mark.parametrize(
    "kwargs",
    [
        {"target": [0.0, 0.0, 0.0]},
        {"tol": 0.0},
        {"maxiter": 0},
        {"maxiter": 2.5},
        {"h": -1e-22},
        {"method": "forward"},
    ],
)
def test_invalid_arguments_raise(kwargs) -> None:
    with pytest.raises(ValueError):
        newton_complex_step(linear_2x2, np.zeros(2), **kwargs)


def test_dimension_mismatch_raises() -> None:
    with pytest.raises(ValueError):
        newton_complex_step(linear_2x2, np.zeros(3))
    with pytest.raises(ValueError):
        newton_complex_step(linear_2x2, np.zeros((2, 1)))
    with pytest.raises(ValueError):
        newton_complex_step(linear_2x2, np.zeros(0))
