"""Tests for the KMA DFS grid projection."""

import math

import numpy as np
import pytest

from kma_grid.grid.constants import DEGRAD, NX_MAX, NY_MAX, OLAT, OLON, XO, YO
from kma_grid.grid.errors import (
    DegenerateInverseError,
    GridCoordinateOutOfBoundsError,
    InvalidGridIndexError,
    KmaGridError,
    OutOfRangeError,
)
from kma_grid.grid.kma_grid import KmaGrid, forward, inverse, latlon_to_grid, round_half_away
from kma_grid.grid.lcc import LccConstants, get_constants, normalize_theta, project, rho


class TestLccConstants:
    """Tests for cone constant / scale factor derivation."""

    def test_values(self):
        """Constants for 30N/60N standard parallels."""
        c = get_constants()
        assert c.n == pytest.approx(0.71557, abs=1e-4)
        assert c.f > 0
        assert c.rho_zero > 0

    def test_bit_identical_across_calls(self):
        """Recomputing yields exactly the same floats."""
        first = get_constants()
        get_constants.cache_clear()
        second = get_constants()
        assert (first.n, first.f, first.rho_zero) == (second.n, second.f, second.rho_zero)

    def test_frozen(self):
        """Constants cannot be mutated."""
        with pytest.raises(Exception):
            get_constants().n = 1.0

    def test_rho_at_reference_latitude(self):
        """rho at the reference latitude equals rho_zero."""
        c = get_constants()
        assert rho(OLAT * DEGRAD) == c.rho_zero

    def test_rho_decreases_with_latitude(self):
        """rho is strictly decreasing northward."""
        lats = np.linspace(20.0, 50.0, 31)
        values = [rho(math.radians(v)) for v in lats]
        assert all(a > b for a, b in zip(values, values[1:]))


class TestNormalizeTheta:
    """Tests for single-step longitude normalisation."""

    def test_in_range_unchanged(self):
        assert normalize_theta(1.0) == 1.0

    def test_above_pi(self):
        assert normalize_theta(math.pi + 0.5) == pytest.approx(-math.pi + 0.5)

    def test_below_minus_pi(self):
        assert normalize_theta(-math.pi - 0.5) == pytest.approx(math.pi - 0.5)

    def test_minus_pi_maps_to_pi(self):
        """Interval is (-pi, pi]."""
        assert normalize_theta(-math.pi) == pytest.approx(math.pi)
        assert normalize_theta(math.pi) == math.pi


class TestFromGcs:
    """Tests for geographic -> grid conversion."""

    def test_reference_point(self):
        """(126, 38) is exactly cell (43, 136)."""
        g = KmaGrid.from_gcs(OLON, OLAT)
        assert (g.x, g.y) == (XO, YO)
        assert g == KmaGrid(43, 136)

    def test_forward_alias(self):
        assert forward(126.0, 38.0) == KmaGrid(43, 136)

    def test_seoul(self):
        """Seoul city hall lies in cell (60, 127)."""
        assert KmaGrid.from_gcs(126.9780, 37.5665).as_tuple() == (60, 127)

    def test_busan(self):
        """Busan city hall lies in cell (98, 76)."""
        assert KmaGrid.from_gcs(129.0756, 35.1796).as_tuple() == (98, 76)

    def test_latlon_to_grid_argument_order(self):
        """Latitude-first helper matches from_gcs."""
        assert latlon_to_grid(37.5665, 126.9780) == (60, 127)

    def test_y_monotonic_along_meridian(self):
        """Moving north never decreases the y index."""
        ys = [KmaGrid.from_gcs(127.0, lat).y for lat in np.arange(33.0, 39.01, 0.1)]
        assert ys == sorted(ys)
        assert ys[-1] > ys[0]

    def test_continuous_y_strictly_increasing(self):
        ys = [project(127.0, lat)[1] for lat in np.arange(33.0, 39.01, 0.1)]
        assert all(a < b for a, b in zip(ys, ys[1:]))

    def test_invalid_latitude(self):
        """Latitude 95 is rejected rather than projected."""
        with pytest.raises(OutOfRangeError) as exc:
            KmaGrid.from_gcs(126.0, 95.0)
        assert exc.value.name == "latitude"

    def test_south_pole_rejected(self):
        with pytest.raises(OutOfRangeError):
            KmaGrid.from_gcs(126.0, -90.0)

    @pytest.mark.parametrize("lon", [-180.5, 360.5, 720.0, float("nan"), float("inf")])
    def test_invalid_longitude(self, lon):
        with pytest.raises(OutOfRangeError):
            KmaGrid.from_gcs(lon, 37.0)

    def test_nan_latitude(self):
        with pytest.raises(OutOfRangeError):
            KmaGrid.from_gcs(126.0, float("nan"))

    @pytest.mark.parametrize("lon,lat", [(139.69, 35.68), (116.40, 39.90), (126.0, 60.0), (126.0, 10.0)])
    def test_outside_grid(self, lon, lat):
        """Points far from the peninsula fail instead of wrapping."""
        with pytest.raises(GridCoordinateOutOfBoundsError):
            KmaGrid.from_gcs(lon, lat)

    def test_errors_share_base(self):
        with pytest.raises(KmaGridError):
            KmaGrid.from_gcs(139.69, 35.68)
        with pytest.raises(ValueError):
            KmaGrid.from_gcs(126.0, 95.0)

    @pytest.mark.parametrize("lon", [-180.0, 360.0])
    def test_longitude_limits_accepted(self, lon):
        """Range limits pass validation and fail only on grid bounds."""
        with pytest.raises(GridCoordinateOutOfBoundsError):
            KmaGrid.from_gcs(lon, 37.0)


class TestAntimeridian:
    """Normalisation around +-180 degrees."""

    def test_plus_minus_180_coincide(self):
        x1, y1 = project(180.0, 38.0)
        x2, y2 = project(-180.0, 38.0)
        assert x1 == pytest.approx(x2, abs=1e-6)
        assert y1 == pytest.approx(y2, abs=1e-6)

    def test_no_jump_across_boundary(self):
        """Crossing 180 moves less than one grid step."""
        x1, y1 = project(179.999, 38.0)
        x2, y2 = project(-179.999, 38.0)
        assert math.hypot(x1 - x2, y1 - y2) < 1.0


class TestKmaGridValue:
    """Tests for the grid coordinate value type."""

    def test_bounds(self):
        KmaGrid(0, 0)
        KmaGrid(NX_MAX, NY_MAX)

    @pytest.mark.parametrize("x,y", [(-1, 0), (0, -1), (NX_MAX + 1, 0), (0, NY_MAX + 1), (255, 255)])
    def test_out_of_bounds(self, x, y):
        with pytest.raises(GridCoordinateOutOfBoundsError) as exc:
            KmaGrid(x, y)
        assert (exc.value.x, exc.value.y) == (x, y)

    def test_rejects_float_and_bool(self):
        """Non-integer indices raise a TypeError that is also a KmaGridError."""
        with pytest.raises(TypeError):
            KmaGrid(1.5, 2)
        with pytest.raises(TypeError):
            KmaGrid(True, 2)
        with pytest.raises(InvalidGridIndexError):
            KmaGrid(float("nan"), 2)

    def test_numpy_int_accepted(self):
        g = KmaGrid(np.int64(60), np.int32(127))
        assert type(g.x) is int and type(g.y) is int
        assert g == KmaGrid(60, 127)

    def test_immutable_and_hashable(self):
        g = KmaGrid(60, 127)
        with pytest.raises(Exception):
            g.x = 1
        assert len({g, KmaGrid(60, 127)}) == 1


class TestToGcs:
    """Tests for grid -> geographic conversion."""

    def test_reference_round_trip(self):
        """The reference cell inverts back to (126, 38)."""
        lon, lat = KmaGrid.from_gcs(126.0, 38.0).to_gcs()
        assert lon == pytest.approx(126.0, abs=1e-9)
        assert lat == pytest.approx(38.0, abs=1e-9)

    def test_inverse_alias(self):
        assert inverse(KmaGrid(43, 136)) == KmaGrid(43, 136).to_gcs()

    @pytest.mark.parametrize("lon,lat", [
        (126.5, 37.5), (127.0, 37.0), (125.7, 38.3), (126.9780, 37.5665), (126.2, 37.9),
    ])
    def test_round_trip_within_cell(self, lon, lat):
        """Discretisation error stays inside one 5 km cell."""
        lon2, lat2 = KmaGrid.from_gcs(lon, lat).to_gcs()
        assert abs(lat2 - lat) < 0.05
        assert abs(lon2 - lon) < 0.06

    def test_cell_centres_project_back(self):
        """Forward(inverse(cell)) is the same cell across the grid."""
        for x in range(0, NX_MAX + 1, 7):
            for y in range(0, NY_MAX + 1, 11):
                cell = KmaGrid(x, y)
                assert KmaGrid.from_gcs(*cell.to_gcs()) == cell

    def test_left_of_reference(self):
        """Cells west/south of the reference invert without underflow."""
        lon, lat = KmaGrid(0, 0).to_gcs()
        assert lon < OLON
        assert lat < OLAT
        assert math.isfinite(lon) and math.isfinite(lat)

    def test_zero_cone_constant_is_reported(self, monkeypatch):
        """A zero cone constant means the fixed constants were changed."""
        import kma_grid.grid.kma_grid as mod

        monkeypatch.setattr(mod, "get_constants", lambda: LccConstants(n=0.0, f=1.0, rho_zero=1.0))
        with pytest.raises(DegenerateInverseError):
            KmaGrid(43, 136).to_gcs()

    def test_apex_is_reported(self, monkeypatch):
        """A cell on the cone apex has no inverse."""
        import kma_grid.grid.kma_grid as mod

        c = get_constants()
        monkeypatch.setattr(mod, "get_constants", lambda: LccConstants(n=c.n, f=c.f, rho_zero=float(10 - YO)))
        with pytest.raises(DegenerateInverseError):
            KmaGrid(XO, 10).to_gcs()

    @pytest.mark.parametrize("x,sign", [(XO + 7, 1.0), (XO - 7, -1.0)])
    def test_on_apex_parallel_row(self, monkeypatch, x, sign):
        """A cell level with the apex (yn == 0) lies a quarter turn off the central meridian."""
        import kma_grid.grid.kma_grid as mod

        c = get_constants()
        monkeypatch.setattr(mod, "get_constants", lambda: LccConstants(n=c.n, f=c.f, rho_zero=float(10 - YO)))
        lon, lat = KmaGrid(x, 10).to_gcs()
        assert lon == pytest.approx(OLON + sign * 90.0 / c.n)
        assert math.isfinite(lat)


class TestRoundHalfAway:
    @pytest.mark.parametrize("v,expected", [(0.5, 1), (1.5, 2), (2.5, 3), (-0.5, -1), (-2.5, -3), (2.4999, 2), (0.0, 0)])
    def test_values(self, v, expected):
        assert round_half_away(v) == expected
