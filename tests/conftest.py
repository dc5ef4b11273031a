import pytest

from poisson2d.catalog import get_test_case
from poisson2d.core import BoundaryConditions, Mesh
from poisson2d.numerics.poisson import IterativeSolver, SolverConfig


@pytest.fixture
def solver():
    with IterativeSolver(SolverConfig(num_workers=2)) as s:
        yield s


@pytest.fixture
def make_mesh():
    """テストケースを設定した格子を生成するファクトリ"""

    def _make(n_total, case="CAS1", boundary_conditions=None):
        test_case = get_test_case(case)
        if boundary_conditions is None:
            boundary_conditions = test_case.boundary_conditions()
        mesh = Mesh(n_total, boundary_conditions)
        mesh.configure_test_case(test_case)
        return mesh

    return _make


@pytest.fixture
def linear_bc():
    return BoundaryConditions.bilinear(0.0, 1.0, 0.0, 1.0)
