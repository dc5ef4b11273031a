import logging

import numpy as np
import pytest

from poisson2d.catalog import get_test_case
from poisson2d.core import BoundaryConditions, Mesh


def test_geometry():
    mesh = Mesh(5)
    assert mesh.n_interior == 3
    assert mesh.h == pytest.approx(0.25)
    assert mesh.shape == (5, 5)
    assert mesh.boundary_mask.sum() == 16
    assert mesh.coordinates_of(1, 3) == pytest.approx((0.75, 0.25))

    x, y = mesh.coordinate_grids()
    assert x[1, 3] == pytest.approx(0.75)
    assert y[1, 3] == pytest.approx(0.25)


@pytest.mark.parametrize("n_total", [0, 2, 4.5])
def test_invalid_size(n_total):
    with pytest.raises(ValueError):
        Mesh(n_total)


def test_boundary_populated_on_construction(linear_bc):
    mesh = Mesh(9, linear_bc)
    assert mesh.verify_consistency()
    # 下辺 y=0: 0 -> 1
    assert np.allclose(mesh.U[0, :], np.linspace(0, 1, 9))
    assert np.all(mesh.U[1:-1, 1:-1] == 0.0)


def test_views_are_read_only(linear_bc):
    mesh = Mesh(5, linear_bc)
    with pytest.raises(ValueError):
        mesh.U[2, 2] = 1.0
    with pytest.raises(ValueError):
        mesh.F[0, 0] = 1.0
    with pytest.raises(ValueError):
        mesh.boundary_mask[2, 2] = True


def test_set_u(linear_bc, caplog):
    mesh = Mesh(5, linear_bc)

    assert mesh.set_u(2, 2, 3.0)
    assert mesh.get_u(2, 2) == 3.0

    # 境界値と一致する書き込みは受理（値は変わらない）
    assert mesh.set_u(0, 4, 1.0)

    with caplog.at_level(logging.WARNING):
        assert mesh.set_u(0, 2, 99.0) is False
    assert "Rejected" in caplog.text
    assert mesh.get_u(0, 2) == pytest.approx(0.5)

    with pytest.raises(IndexError):
        mesh.set_u(5, 0, 0.0)
    with pytest.raises(IndexError):
        mesh.is_boundary(-1, 0)


def test_configure_test_case():
    mesh = Mesh(7)
    mesh.set_u(3, 3, 5.0)
    mesh.configure_test_case(get_test_case("CAS3"))

    assert mesh.get_u(3, 3) == 0.0
    assert np.all(mesh.F == 1.0)
    assert not mesh.has_exact_solution
    assert mesh.test_case.name == "CAS3"


def test_configure_test_case_with_boundary_conditions():
    mesh = Mesh(9)
    mesh.configure_test_case(
        get_test_case("CAS6"), BoundaryConditions.preset("harmonic")
    )

    assert mesh.has_exact_solution
    assert mesh.verify_consistency()
    # 境界セルは厳密解と一致
    mask = mesh.boundary_mask
    assert np.allclose(mesh.U[mask], mesh.exact_solution[mask])
    assert mesh.exact_solution[8, 0] == pytest.approx(-1.0)


def test_index_conversion():
    mesh = Mesh(6)
    assert mesh.indices_to_linear(1, 1) == 0
    assert mesh.indices_to_linear(2, 1) == 4
    assert mesh.linear_to_indices(15) == (4, 4)

    for k in range(mesh.n_interior**2):
        assert mesh.indices_to_linear(*mesh.linear_to_indices(k)) == k

    with pytest.raises(ValueError):
        mesh.indices_to_linear(0, 1)
    with pytest.raises(ValueError):
        mesh.linear_to_indices(16)


def test_neighbors(linear_bc):
    mesh = Mesh(5, linear_bc)
    mesh.set_u(2, 2, 7.0)
    south, north, west, east = mesh.neighbors(1, 2)
    assert south == pytest.approx(0.5)
    assert north == 7.0
    assert west == 0.0 and east == 0.0

    with pytest.raises(ValueError):
        mesh.neighbors(0, 2)


def test_snapshot_restore(linear_bc):
    mesh = Mesh(6, linear_bc)
    saved = mesh.snapshot()
    assert saved.shape == (4, 4)

    mesh.set_u(2, 3, 1.5)
    mesh.restore(saved)
    assert mesh.get_u(2, 3) == 0.0
    assert mesh.verify_consistency()

    # 全体形状の配列も受け付け、境界は境界条件から再計算
    full = np.full(mesh.shape, 9.0)
    mesh.restore(full)
    assert mesh.get_u(2, 2) == 9.0
    assert mesh.verify_consistency()

    with pytest.raises(ValueError):
        mesh.restore(np.zeros((3, 3)))


def test_exclusive_access_rejects_concurrent_use():
    mesh = Mesh(5)
    with mesh.exclusive_access() as u:
        u[2, 2] = 1.0
        with pytest.raises(RuntimeError):
            with mesh.exclusive_access():
                pass
    assert mesh.get_u(2, 2) == 1.0

    # 解放後は再取得できる
    with mesh.exclusive_access():
        pass


def test_diagnostics():
    mesh = Mesh(9)
    info = mesh.get_diagnostics()
    assert info["unknowns"] == 49
    assert info["test_case"] is None
    assert "Mesh(n_total=9" in repr(mesh)
