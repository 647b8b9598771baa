#!/usr/bin/env python3
"""
Tests for swarm initialization and the Model's manual evaluation path.
"""

import numpy as np
import pytest

from PSO_ENGINE.PSO.Config import Config
from PSO_ENGINE.PSO.Model import Model
from PSO_ENGINE.PSO.Particle import Particle
from PSO_ENGINE.PSO.PSO import RunState, init, run


def rosenbrock(p, flat_dim, dimensions):
    return float(sum(100.0 * ((p[i + 1] - p[i]) ** 2) ** 2 + (1.0 - p[i]) ** 2
                     for i in range(dimensions[0] - 1)))


def lennard_jones(p, flat_dim, dimensions):
    atoms = p.reshape(dimensions)
    energy = 0.0
    for i in range(dimensions[0] - 1):
        for j in range(i + 1, dimensions[0]):
            inv = 1.0 / np.linalg.norm(atoms[i] - atoms[j])
            energy += inv ** 12 - inv ** 6
    return 4.0 * energy


def test_initial_swarm_is_inside_bounds_and_unevaluated():
    config = Config(dimensions=[3], bounds=[(-1, 1), (10, 20), (-0.5, 0.0)], swarm_size=50, seed=3)
    model = Model(config)

    assert len(model.particles) == 50
    positions = model.positions()
    assert positions.shape == (50, 3)
    assert np.all(positions >= config.lows) and np.all(positions <= config.highs)

    v_max = config.v_max_vector()
    assert np.all(np.abs(model.velocities()) <= v_max)

    for p in model.particles:
        assert p.personal_best_value == float("inf")
        np.testing.assert_array_equal(p.personal_best_position, p.position)
    assert model.global_best_value == float("inf")
    assert model.global_best_position is None
    assert model.get_x_best() is None
    assert model.evaluations_used == 0
    assert model.rounds == 0
    assert model.history == []


def test_init_does_not_evaluate():
    calls = []

    def objective(p, flat_dim, dimensions):
        calls.append(1)
        return 0.0

    pso = init(Config.uniform([2], -1, 1, swarm_size=5, t_max=50), objective)
    assert calls == []
    assert pso.state is RunState.INITIALIZED
    assert pso.model.evaluations_used == 0


def test_same_seed_gives_same_initial_swarm():
    config = Config.uniform([4], -3, 3, swarm_size=10, seed=42)
    a, b = Model(config), Model(config)
    np.testing.assert_array_equal(a.positions(), b.positions())
    np.testing.assert_array_equal(a.velocities(), b.velocities())


def test_particle_record_keeps_the_minimum():
    p = Particle([1.0, 2.0], [0.0, 0.0])
    assert p.record(5.0)
    p.position = np.array([3.0, 3.0])
    assert not p.record(7.0)
    assert p.personal_best_value == 5.0
    np.testing.assert_array_equal(p.personal_best_position, [1.0, 2.0])
    assert p.value == 7.0
    assert not p.record(float("nan"))
    assert p.personal_best_value == 5.0


def test_get_f_values_finds_rosenbrock_minimum_2d():
    config = Config(t_max=1, swarm_size=1, workers=1)
    model = run(config, rosenbrock).model

    model.particles[0].position[:] = [2.0, -2.0]
    model.get_f_values()
    assert model.get_f_best() != 0.0

    model.particles[0].position[:] = [1.0, 1.0]
    model.get_f_values()
    assert model.get_f_best() == 0.0
    np.testing.assert_array_equal(model.get_x_best(), [1.0, 1.0])


def test_get_f_values_finds_rosenbrock_minimum_3d():
    config = Config(dimensions=[3], bounds=[(-5.0, 10.0)] * 3, t_max=1, swarm_size=1, workers=1)
    model = run(config, rosenbrock).model

    model.particles[0].position[:] = [2.0, -2.0, -2.0]
    model.get_f_values()
    assert model.get_f_best() != 0.0

    model.particles[0].position[:] = [1.0, 1.0, 1.0]
    values = model.get_f_values()
    assert values == [0.0]
    assert model.get_f_best() == 0.0


def test_get_f_values_is_not_charged_against_the_budget():
    config = Config(dimensions=[2], swarm_size=3, t_max=3, workers=1)
    model = run(config, rosenbrock).model
    assert model.evaluations_used == 3
    model.get_f_values()
    assert model.evaluations_used == 3


def test_objective_receives_dimensions_for_reshaping():
    config = Config.uniform([4, 3], -2.5, 2.5, swarm_size=1, t_max=1, workers=1)
    model = run(config, lennard_jones, lambda _: True).model

    model.particles[0].position[:] = [
        -0.3616353090, 0.0439914505, 0.5828840628,
        0.2505889242, 0.6193583398, -0.1614607010,
        -0.4082757926, -0.2212115329, -0.5067996704,
        0.5193221773, -0.4421382574, 0.0853763087,
    ]
    assert model.get_error() < -5.9999999
    assert model.get_x_best().shape == (12,)


def test_get_f_values_without_objective_raises():
    model = Model(Config())
    with pytest.raises(RuntimeError):
        model.get_f_values()


def test_best_accessors_return_copies():
    config = Config(dimensions=[2], swarm_size=2, t_max=2, workers=1)
    model = run(config, rosenbrock).model
    best = model.best_position
    best[:] = 123.0
    assert not np.any(model.get_x_best() == 123.0)
    assert model.best_value == model.get_f_best()
