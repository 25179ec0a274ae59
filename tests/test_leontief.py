"""Tests for technical coefficients and the Leontief inverse."""

import numpy as np
import pytest

from embodied_mrio.analysis.leontief import LeontiefAnalyzer
from embodied_mrio.exceptions import MissingDataError, NumericalError


def test_coefficients_toy(toy_arrays):
    analyzer = LeontiefAnalyzer(toy_arrays["intermediate_use"], toy_arrays["total_input"])
    A = analyzer.compute_technical_coefficients()
    np.testing.assert_allclose(A, [[0.0, 0.5], [0.5, 0.0]])


def test_coefficients_zero_total_input_column_is_zero():
    Z = np.array([[1.0, 3.0], [2.0, 4.0]])
    analyzer = LeontiefAnalyzer(Z, np.array([10.0, 0.0]))
    A = analyzer.compute_technical_coefficients()
    np.testing.assert_allclose(A, [[0.1, 0.0], [0.2, 0.0]])
    assert np.all(np.isfinite(A))


def test_leontief_inverse_toy(toy_arrays):
    analyzer = LeontiefAnalyzer(toy_arrays["intermediate_use"], toy_arrays["total_input"])
    L = analyzer.compute_leontief_inverse()
    np.testing.assert_allclose(L, [[4 / 3, 2 / 3], [2 / 3, 4 / 3]], atol=1e-12)


def test_leontief_round_trip(uneven_arrays):
    analyzer = LeontiefAnalyzer(uneven_arrays["intermediate_use"], uneven_arrays["total_input"])
    L = analyzer.compute_leontief_inverse()
    A = analyzer.compute_technical_coefficients()
    np.testing.assert_allclose(L @ (np.eye(len(L)) - A), np.eye(len(L)), atol=1e-10)
    assert analyzer.identity_residual() < 1e-10
    assert analyzer.condition_number >= 1.0


def test_solve_matches_explicit_inverse(uneven_arrays):
    analyzer = LeontiefAnalyzer(uneven_arrays["intermediate_use"], uneven_arrays["total_input"])
    Y = uneven_arrays["final_demand"]
    np.testing.assert_allclose(analyzer.solve(Y), analyzer.compute_leontief_inverse() @ Y)
    d = np.arange(1.0, Y.shape[0] + 1)
    np.testing.assert_allclose(analyzer.solve_transposed(d), analyzer.compute_leontief_inverse().T @ d)


def test_solve_recovers_total_output(uneven_arrays):
    analyzer = LeontiefAnalyzer(uneven_arrays["intermediate_use"], uneven_arrays["total_input"])
    X = analyzer.solve(uneven_arrays["final_demand"].sum(axis=1))
    np.testing.assert_allclose(X, uneven_arrays["total_output"])


def test_output_multipliers_are_column_sums(toy_arrays):
    analyzer = LeontiefAnalyzer(toy_arrays["intermediate_use"], toy_arrays["total_input"])
    np.testing.assert_allclose(analyzer.compute_output_multipliers(), [2.0, 2.0])


def test_singular_system_raises():
    # A[0, 0] == 1 makes the first row of (I - A) zero
    Z = np.array([[2.0, 0.0], [0.0, 0.0]])
    analyzer = LeontiefAnalyzer(Z, np.array([2.0, 2.0]))
    with pytest.raises(NumericalError):
        analyzer.compute_leontief_inverse()


def test_singular_system_raises_on_solve_too():
    Z = np.array([[0.0, 2.0], [2.0, 0.0]])
    analyzer = LeontiefAnalyzer(Z, np.array([2.0, 2.0]))
    with pytest.raises(NumericalError):
        analyzer.solve(np.eye(2))
    assert analyzer.L is None


def test_ill_conditioned_system_raises():
    Z = np.array([[0.0, 0.9], [0.9, 0.0]])
    analyzer = LeontiefAnalyzer(Z, np.array([1.0, 1.0]), max_condition_number=10.0)
    with pytest.raises(NumericalError) as excinfo:
        analyzer.compute_leontief_inverse()
    assert excinfo.value.condition_number == pytest.approx(19.0)


def test_numerical_error_is_linalg_error():
    Z = np.array([[1.0]])
    analyzer = LeontiefAnalyzer(Z, np.array([1.0]))
    with pytest.raises(np.linalg.LinAlgError):
        analyzer.compute_leontief_inverse()


def test_non_square_rejected():
    with pytest.raises(MissingDataError):
        LeontiefAnalyzer(np.ones((2, 3)), np.ones(3))


def test_total_input_length_rejected():
    with pytest.raises(MissingDataError):
        LeontiefAnalyzer(np.ones((2, 2)), np.ones(3))


def test_results_are_read_only(toy_arrays):
    analyzer = LeontiefAnalyzer(toy_arrays["intermediate_use"], toy_arrays["total_input"])
    L = analyzer.compute_leontief_inverse()
    with pytest.raises(ValueError):
        L[0, 0] = 0.0
    with pytest.raises(ValueError):
        analyzer.A[0, 0] = 1.0


def test_inputs_are_copied(toy_arrays):
    Z = toy_arrays["intermediate_use"].copy()
    analyzer = LeontiefAnalyzer(Z, toy_arrays["total_input"])
    Z[0, 1] = 100.0
    np.testing.assert_allclose(analyzer.compute_technical_coefficients()[0, 1], 0.5)


def test_to_dataframe_labels(toy_arrays):
    analyzer = LeontiefAnalyzer(
        toy_arrays["intermediate_use"], toy_arrays["total_input"], sector_labels=["n_1", "s_1"]
    )
    df = analyzer.to_dataframe(analyzer.compute_leontief_inverse(), name="L")
    assert list(df.index) == ["n_1", "s_1"]
    assert df.loc["n_1", "s_1"] == pytest.approx(2 / 3)
