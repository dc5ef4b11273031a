import logging
import math

import numpy as np
import pytest

from poisson2d.analysis import ErrorAnalyzer, generate_report
from poisson2d.catalog import TestCase
from poisson2d.core import Mesh
from poisson2d.numerics.poisson import SolverMethod


@pytest.fixture
def analyzer(solver):
    return ErrorAnalyzer(solver)


def test_errors_of_initial_guess(analyzer, make_mesh):
    # 内部が0なので誤差は厳密解そのもの
    mesh = make_mesh(5, "CAS1")
    analysis = analyzer.compute_errors(mesh)

    assert analysis.available
    assert analysis.points_analyzed == 9
    assert analysis.max_error == pytest.approx(1.0)
    assert analysis.l2_error == pytest.approx(0.5)
    assert analysis.mean_error == pytest.approx((1 + math.sqrt(2)) ** 2 / 9)
    assert np.all(analysis.error_map[mesh.boundary_mask] == 0.0)
    assert analysis.error_map.shape == (5, 5)


def test_errors_unavailable(analyzer, make_mesh, caplog):
    mesh = make_mesh(9, "CAS3")
    with caplog.at_level(logging.INFO, logger="poisson2d"):
        analysis = analyzer.compute_errors(mesh)

    assert not analysis.available
    assert math.isnan(analysis.l2_error)
    assert math.isnan(analysis.max_error)
    assert np.all(analysis.error_map == 0.0)
    assert "unavailable" in caplog.text


def test_compute_errors_does_not_mutate(analyzer, make_mesh):
    mesh = make_mesh(9, "CAS5")
    before = mesh.U.copy()
    analyzer.compute_errors(mesh)
    np.testing.assert_array_equal(mesh.U, before)


def test_second_order_convergence(analyzer):
    study = analyzer.study_convergence("CAS1", [9, 17, 33], "gauss_seidel")

    assert study.all_converged
    assert study.mesh_sizes == (9, 17, 33)
    assert len(study.l2_orders) == 2
    assert study.l2_order == pytest.approx(2.0, abs=0.3)
    assert study.max_order == pytest.approx(2.0, abs=0.3)
    assert study.expected_order == 2.0
    assert np.all(np.diff(study.l2_errors) < 0)
    assert study.h_values[0] == pytest.approx(0.125)
    assert len(study.analyses) == 3
    assert study.finest_analysis.l2_error == pytest.approx(study.l2_errors[-1])
    assert study.finest_analysis.points_analyzed == 31 * 31


def test_study_with_red_black(analyzer):
    study = analyzer.study_convergence(
        "CAS2", [9, 17, 33], SolverMethod.RED_BLACK, tolerance=1e-11
    )
    assert study.l2_order == pytest.approx(2.0, abs=0.3)
    assert "CAS2" in str(study)


def test_study_requires_two_sizes(analyzer):
    with pytest.raises(ValueError):
        analyzer.study_convergence("CAS1", [9])


def test_study_without_exact_solution(analyzer):
    study = analyzer.study_convergence("CAS3", [5, 9])
    assert math.isnan(study.l2_order)
    assert np.all(np.isnan(study.l2_orders))


def test_study_skips_exactly_resolved_pairs(analyzer):
    # U = 0 はどの格子でも誤差が厳密に0になる
    zero = TestCase("zero", "f = 0", lambda x, y: 0.0 * x, lambda x, y: 0.0 * x, "U = 0")
    study = analyzer.study_convergence(zero, [5, 9, 17])

    assert study.all_converged
    assert np.all(study.l2_errors == 0.0)
    assert np.all(np.isnan(study.l2_orders))
    assert np.all(np.isnan(study.max_orders))
    assert math.isnan(study.l2_order)
    assert "nan" in study.table()


def test_local_orders_skip_tiny_errors():
    orders = ErrorAnalyzer.local_orders([4e-2, 1e-2, 1e-16], [0.2, 0.1, 0.05])
    assert orders[0] == pytest.approx(2.0)
    assert math.isnan(orders[1])
    assert ErrorAnalyzer.mean_order(orders) == pytest.approx(2.0)
    assert math.isnan(ErrorAnalyzer.mean_order(np.array([np.nan, np.nan])))


def test_iterative_convergence_factor():
    history = [0.0, 1.0, 0.5, 0.25, 0.125, 0.0625]
    assert ErrorAnalyzer.analyze_iterative_convergence(history) == pytest.approx(0.5)

    assert math.isnan(ErrorAnalyzer.analyze_iterative_convergence([0.0, 1.0]))
    # 比が (0, 1) に入らない履歴
    assert math.isnan(ErrorAnalyzer.analyze_iterative_convergence([0.0, 1.0, 1.0, 1.0, 2.0]))
    assert math.isnan(ErrorAnalyzer.analyze_iterative_convergence([0.0, 1.0, 1e-16, 1e-17]))


def test_sor_convergence_factor(solver, make_mesh):
    mesh = make_mesh(17)
    result = solver.solve(mesh, "sor", 1e-10, 10000, omega=1.5)
    factor = ErrorAnalyzer.analyze_iterative_convergence(result.error_history)
    assert result.converged
    assert 0.0 < factor < 1.0


def test_discretization_error_estimate():
    assert ErrorAnalyzer.calculate_discretization_error_estimate(Mesh(11)) == pytest.approx(
        0.01 / 12
    )


def test_compare_methods_restores_state(analyzer, make_mesh):
    mesh = make_mesh(9, "CAS5")
    mesh.set_u(4, 4, 0.3)
    before = mesh.U.copy()

    comparisons = analyzer.compare_methods(mesh, tolerance=1e-9, max_iterations=10000)

    assert [c.method for c in comparisons] == [m.label for m in SolverMethod]
    assert all(c.result.converged for c in comparisons)
    assert all(c.analysis.max_error < 1e-7 for c in comparisons)
    np.testing.assert_array_equal(mesh.U, before)


def test_analyzer_without_shared_solver(make_mesh):
    analyzer = ErrorAnalyzer()
    comparisons = analyzer.compare_methods(
        make_mesh(7), ["gauss_seidel"], tolerance=1e-8, max_iterations=1000
    )
    assert len(comparisons) == 1
    assert comparisons[0].to_dict()["result_converged"] is True


def test_generate_report(analyzer, make_mesh):
    study = analyzer.study_convergence("CAS5", [5, 9, 17])
    mesh = make_mesh(17, "CAS5")
    analysis = analyzer.compute_errors(mesh)
    comparisons = analyzer.compare_methods(make_mesh(9, "CAS1"), ["sor"], omega=1.2)

    report = generate_report(analysis, study, comparisons)
    assert "ERROR ANALYSIS REPORT" in report
    assert "L2 order" in report
    assert "N = 17" in report
    assert "METHOD COMPARISON" in report

    unavailable = analyzer.compute_errors(make_mesh(5, "CAS4"))
    assert "unavailable" in generate_report(unavailable)
