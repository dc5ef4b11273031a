import numpy as np
import pytest

from poisson2d.catalog import DEFAULT_CATALOG, TestCase, TestCaseCatalog, get_test_case
from poisson2d.core import BoundaryConditions


def test_lookup_is_case_insensitive():
    assert get_test_case("cas1") is get_test_case("CAS1")
    assert "Cas5" in DEFAULT_CATALOG
    assert DEFAULT_CATALOG.names() == ["CAS1", "CAS2", "CAS3", "CAS4", "CAS5", "CAS6"]
    with pytest.raises(ValueError):
        get_test_case("CAS7")


@pytest.mark.parametrize("name", ["CAS1", "CAS2", "CAS5", "CAS6"])
def test_sources_match_exact_solutions(name):
    """-ΔU = f を中心差分で確認"""
    case = get_test_case(name)
    x, y = 0.31, 0.57
    d = 1e-4
    u = case.exact
    laplacian = (
        u(x + d, y) + u(x - d, y) + u(x, y + d) + u(x, y - d) - 4 * u(x, y)
    ) / d**2
    assert -laplacian == pytest.approx(float(case.source(x, y)), rel=1e-5, abs=1e-5)


def test_cases_without_exact_solution():
    for name in ("CAS3", "CAS4"):
        case = get_test_case(name)
        assert not case.has_exact_solution
    grid = np.zeros((3, 3))
    assert np.all(get_test_case("CAS3").source(grid, grid) == 1.0)


def test_recommended_boundary():
    assert get_test_case("CAS1").boundary_conditions() == BoundaryConditions.homogeneous()
    assert get_test_case("CAS6").boundary_conditions() == BoundaryConditions.preset("harmonic")


def test_register_custom_case():
    catalog = TestCaseCatalog([])
    assert len(catalog) == 0

    case = TestCase("linear", "f = 0", lambda x, y: 0.0 * x, lambda x, y: x + y, "U = x + y")
    catalog.register(case)
    assert catalog.get("LINEAR") is case
    assert [c.name for c in catalog] == ["linear"]
    assert str(case) == "linear: f = 0"
