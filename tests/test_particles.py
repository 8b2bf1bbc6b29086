"""Tests for particle advection and the stray sweep."""

import numpy as np
import pytest

from pychladni.particles import ParticleSystem, StraySweep, pixel_coordinates, sample_gradients


def _uniform_field(width: int, height: int, dx: float, dy: float) -> np.ndarray:
    gradients = np.zeros((height, width, 2), dtype=np.float32)
    gradients[..., 0] = dx
    gradients[..., 1] = dy
    return gradients


class TestConfigure:
    def test_positions_inside_bounds(self, rng):
        particles = ParticleSystem(5000, rng=rng)
        particles.configure(80, 30)
        assert particles.positions.shape == (5000, 2)
        assert np.all((particles.positions[:, 0] >= 0) & (particles.positions[:, 0] < 80))
        assert np.all((particles.positions[:, 1] >= 0) & (particles.positions[:, 1] < 30))

    def test_reconfigure_keeps_count(self, rng):
        particles = ParticleSystem(100, rng=rng)
        particles.configure(10, 10)
        particles.configure(500, 400)
        assert particles.positions.shape == (100, 2)
        assert particles.positions[:, 0].max() > 10

    def test_zero_size_grid(self, rng):
        particles = ParticleSystem(10, rng=rng)
        particles.configure(0, 0)
        assert np.all(particles.positions == 0)

    def test_negative_count(self):
        with pytest.raises(ValueError):
            ParticleSystem(-1)


class TestAdvance:
    def test_jitter_bounded(self, rng):
        particles = ParticleSystem(10000, rng=rng)
        particles.configure(100, 100)
        before = particles.positions.copy()
        particles.advance(None, 3.0)
        displacement = particles.positions - before
        assert np.all(np.abs(displacement) <= 1.5)
        assert np.all(np.abs(displacement) <= 3.0)

    def test_jitter_is_unbiased(self, rng):
        particles = ParticleSystem(20000, rng=rng)
        particles.configure(100, 100)
        before = particles.positions.copy()
        particles.advance(None, 2.0)
        mean = (particles.positions - before).mean(axis=0)
        assert np.all(np.abs(mean) < 0.02)

    def test_gradient_step(self, rng):
        particles = ParticleSystem(2, gradient_strength=0.4, rng=rng)
        particles.configure(10, 10)
        particles.positions[:] = [[4.4, 5.0], [2.0, 7.6]]
        particles.advance(_uniform_field(10, 10, 1, -1), 0.0)
        np.testing.assert_allclose(particles.positions, [[4.8, 4.6], [2.4, 7.2]])

    def test_off_grid_particles_get_no_pull(self, rng):
        particles = ParticleSystem(3, rng=rng)
        particles.configure(10, 10)
        particles.positions[:] = [[-5.0, 3.0], [3.0, 12.0], [9.6, 2.0]]
        particles.advance(_uniform_field(10, 10, 1, 1), 0.0)
        np.testing.assert_allclose(particles.positions, [[-5.0, 3.0], [3.0, 12.0], [9.6, 2.0]])

    def test_positions_not_clamped(self, rng):
        particles = ParticleSystem(1, rng=rng)
        particles.configure(10, 10)
        particles.positions[:] = [[-3.0, 11.5]]
        particles.advance(_uniform_field(10, 10, 1, 0), 0.0)
        assert particles.positions[0].tolist() == [-3.0, 11.5]


class TestSampling:
    def test_rounds_half_up(self):
        columns, rows = pixel_coordinates(np.array([[0.5, 1.49], [2.5, -0.5]]))
        assert columns.tolist() == [1, 3]
        assert rows.tolist() == [1, 0]

    def test_nearest_neighbour_lookup(self):
        gradients = np.zeros((4, 4, 2), dtype=np.float32)
        gradients[2, 1] = (-1, 1)
        directions = sample_gradients(gradients, np.array([[1.2, 1.7], [1.6, 1.7]]))
        assert directions.tolist() == [[-1.0, 1.0], [0.0, 0.0]]

    def test_empty_field(self):
        directions = sample_gradients(np.zeros((0, 0, 2), dtype=np.float32), np.array([[0.0, 0.0]]))
        assert directions.tolist() == [[0.0, 0.0]]


class TestStraySweep:
    def test_respawns_only_far_strays(self, rng):
        particles = ParticleSystem(4, rng=rng)
        particles.configure(100, 50)
        particles.positions[:] = [[-60.0, 10.0], [120.0, 10.0], [10.0, 101.0], [-49.0, 99.0]]
        assert particles.respawn_strays(50.0) == 3
        moved = particles.positions[:3]
        assert np.all((moved[:, 0] >= 0) & (moved[:, 0] < 100))
        assert np.all((moved[:, 1] >= 0) & (moved[:, 1] < 50))
        assert particles.positions[3].tolist() == [-49.0, 99.0]

    def test_runs_on_interval(self, rng):
        particles = ParticleSystem(1, rng=rng)
        particles.configure(10, 10)
        sweep = StraySweep(interval=1.0, margin=5.0)
        particles.positions[:] = [[100.0, 100.0]]
        assert sweep.update(particles, 0.6) == 0
        assert particles.positions[0].tolist() == [100.0, 100.0]
        assert sweep.update(particles, 0.6) == 1
        assert sweep.elapsed == 0.0

    def test_keeps_swarm_near_plate(self, rng):
        particles = ParticleSystem(2000, rng=rng)
        particles.configure(40, 40)
        sweep = StraySweep(interval=0.5, margin=10.0)
        for _ in range(400):
            particles.advance(None, 6.0)
            sweep.update(particles, 1 / 60)
        sweep.update(particles, 1.0)
        assert np.all(particles.positions >= -10.0)
        assert np.all(particles.positions < 50.0)
