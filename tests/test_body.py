"""Tests for the Body point mass."""

import math

import numpy as np
import pytest

from config import nbody as config
from nbody.body import Body

G = 6.67e-11


class TestBodyConstruction:
    """Tests for construction and validation."""

    def test_defaults(self):
        body = Body((1.0, 2.0, 3.0), mass=5.0)
        assert body.position.dtype == np.float64
        assert np.array_equal(body.velocity, np.zeros(3))
        assert np.array_equal(body.force, np.zeros(3))
        assert body.mass == 5.0

    def test_vectors_are_copied(self):
        position = np.array([1.0, 2.0, 3.0])
        body = Body(position, mass=1.0)
        position[0] = 99.0
        assert body.position[0] == 1.0

    @pytest.mark.parametrize("mass", [0.0, -1.0])
    def test_non_positive_mass_rejected(self, mass):
        with pytest.raises(ValueError):
            Body((0.0, 0.0, 0.0), mass=mass)

    def test_wrong_shape_rejected(self):
        with pytest.raises(ValueError):
            Body((0.0, 0.0), mass=1.0)


class TestBodyEquality:
    """Equality is exact field equality, not identity."""

    def test_equal_fields(self):
        a = Body((1.0, 2.0, 3.0), (0.5, 0.0, 0.0), mass=2.0)
        b = Body((1.0, 2.0, 3.0), (0.5, 0.0, 0.0), mass=2.0)
        assert a == b
        assert a is not b

    def test_any_field_differs(self):
        a = Body((1.0, 2.0, 3.0), mass=2.0)
        assert a != Body((1.0, 2.0, 3.5), mass=2.0)
        assert a != Body((1.0, 2.0, 3.0), (0.0, 1.0, 0.0), mass=2.0)
        assert a != Body((1.0, 2.0, 3.0), force=(1.0, 0.0, 0.0), mass=2.0)
        assert a != Body((1.0, 2.0, 3.0), mass=3.0)

    def test_copy_is_equal(self):
        a = Body((1.0, 2.0, 3.0), (4.0, 5.0, 6.0), (7.0, 8.0, 9.0), 2.0)
        b = a.copy()
        assert a == b
        b.position[0] = 0.0
        assert a != b


class TestBodyGeometry:

    def test_distance(self):
        a = Body((0.0, 0.0, 0.0), mass=1.0)
        b = Body((3.0, 4.0, 0.0), mass=1.0)
        assert a.distance_to(b) == 5.0
        assert a.squared_distance_to(b) == 25.0

    def test_coincidence(self):
        a = Body((1.0, 1.0, 1.0), mass=1.0)
        assert a.is_coincident_with(Body((1.0, 1.0, 1.0), mass=1.0))
        assert a.is_coincident_with(Body((1.0 + 1e-12, 1.0, 1.0), mass=1.0))
        assert not a.is_coincident_with(Body((1.0, 1.0, 1.0 + 1e-9), mass=1.0))


class TestBodyGravity:
    """Tests for the softened force law."""

    def test_unsoftened_magnitude_and_direction(self):
        a = Body((0.0, 0.0, 0.0), mass=2.0)
        b = Body((0.0, 10.0, 0.0), mass=3.0)
        a.apply_gravity_from(b, G=G, softening=0.0)
        assert a.force[0] == 0.0
        assert a.force[2] == 0.0
        assert a.force[1] == pytest.approx(G * 6.0 / 100.0)

    def test_softening_bounds_force(self):
        a = Body((0.0, 0.0, 0.0), mass=1.0)
        b = Body((1e-3, 0.0, 0.0), mass=1.0)
        a.apply_gravity_from(b, G=G, softening=3e4)
        assert a.force[0] == pytest.approx(G / (1e-6 + 9e8))

    def test_zero_separation_is_noop(self):
        a = Body((5.0, 5.0, 5.0), mass=1.0)
        b = Body((5.0, 5.0, 5.0), mass=1.0)
        a.apply_gravity_from(b, G=G, softening=0.0)
        assert np.all(np.isfinite(a.force))
        assert np.array_equal(a.force, np.zeros(3))

    def test_newtons_third_law(self):
        a = Body((1.0, -2.0, 3.0), mass=4.0)
        b = Body((-7.0, 5.0, 0.5), mass=9.0)
        a.apply_gravity_from(b, G=G, softening=1.0)
        b.apply_gravity_from(a, G=G, softening=1.0)
        np.testing.assert_allclose(a.force, -b.force, rtol=1e-12)

    def test_forces_accumulate(self):
        a = Body((0.0, 0.0, 0.0), mass=1.0)
        left = Body((-10.0, 0.0, 0.0), mass=1.0)
        right = Body((10.0, 0.0, 0.0), mass=1.0)
        a.apply_gravity_from(left, G=G, softening=0.0)
        a.apply_gravity_from(right, G=G, softening=0.0)
        assert a.force[0] == pytest.approx(0.0, abs=1e-30)
        a.reset_force()
        assert np.array_equal(a.force, np.zeros(3))


class TestBodyIntegration:

    def test_velocity_updated_before_position(self):
        body = Body((0.0, 0.0, 0.0), (1.0, 0.0, 0.0), (2.0, 0.0, 0.0), mass=2.0)
        body.integrate(0.5)
        # v = 1 + 0.5 * 2 / 2 = 1.5, x = 0 + 0.5 * 1.5
        assert body.velocity[0] == 1.5
        assert body.position[0] == 0.75


class TestBodyMerge:

    def test_centroid_and_mass(self):
        a = Body((0.0, 0.0, 0.0), mass=1.0)
        b = Body((10.0, 0.0, 0.0), mass=1.0)
        merged = a.merge_with(b)
        assert np.array_equal(merged.position, np.array([5.0, 0.0, 0.0]))
        assert merged.mass == 2.0

    def test_weighted_centroid(self):
        a = Body((0.0, 0.0, 0.0), mass=3.0)
        b = Body((4.0, 8.0, -4.0), mass=1.0)
        merged = a.merge_with(b)
        np.testing.assert_allclose(merged.position, [1.0, 2.0, -1.0])

    def test_velocity_and_force_reset(self):
        a = Body((0.0, 0.0, 0.0), (1.0, 2.0, 3.0), (4.0, 5.0, 6.0), 1.0)
        b = Body((1.0, 0.0, 0.0), (-1.0, 0.0, 0.0), (1.0, 1.0, 1.0), 1.0)
        merged = a.merge_with(b)
        assert np.array_equal(merged.velocity, np.zeros(3))
        assert np.array_equal(merged.force, np.zeros(3))

    def test_mass_conserved_over_chain(self):
        masses = [0.5, 1.25, 3.0, 7.0]
        bodies = [Body((float(i), 0.0, 0.0), mass=m) for i, m in enumerate(masses)]
        merged = bodies[0]
        for body in bodies[1:]:
            merged = merged.merge_with(body)
        assert merged.mass == sum(masses)

    def test_energy_and_momentum(self):
        body = Body((0.0, 0.0, 0.0), (3.0, 4.0, 0.0), mass=2.0)
        assert body.kinetic_energy() == 25.0
        np.testing.assert_array_equal(body.momentum(), [6.0, 8.0, 0.0])
        assert math.isclose(np.linalg.norm(body.momentum()), 10.0)


class TestConfigDefaults:
    """Omitted constants come from config.PHYSICS when the call is made."""

    def test_gravity_reads_current_config(self, monkeypatch):
        monkeypatch.setitem(config.PHYSICS, "G", 2.0)
        monkeypatch.setitem(config.PHYSICS, "softening", 0.0)
        a = Body((0.0, 0.0, 0.0), mass=1.0)
        b = Body((2.0, 0.0, 0.0), mass=3.0)
        a.apply_gravity_from(b)
        assert a.force[0] == pytest.approx(2.0 * 3.0 / 4.0)

    def test_coincidence_reads_current_config(self, monkeypatch):
        a = Body((0.0, 0.0, 0.0), mass=1.0)
        b = Body((0.5, 0.0, 0.0), mass=1.0)
        assert not a.is_coincident_with(b)
        monkeypatch.setitem(config.PHYSICS, "coincidence_eps", 1.0)
        assert a.is_coincident_with(b)
