#!/usr/bin/env python3
"""
Tests for the round Evaluator: budget capping, parallel execution and result ordering.
"""

import random
import threading
import time

import numpy as np
import pytest

from PSO_ENGINE.PSO.Config import Config
from PSO_ENGINE.PSO.Evaluator import Evaluator, RoundEvaluation
from PSO_ENGINE.PSO.Model import Model


def sphere(p, flat_dim, dimensions):
    return float(np.sum(p ** 2))


def make_model(swarm_size=8, t_max=100, workers=1, **kwargs):
    config = Config.uniform([3], -5, 5, swarm_size=swarm_size, t_max=t_max, workers=workers, seed=7, **kwargs)
    return Model(config, sphere)


def test_full_round_returns_index_ordered_pairs():
    model = make_model()
    evaluation = Evaluator(sphere, model.config).evaluate(model)

    assert isinstance(evaluation, RoundEvaluation)
    assert not evaluation.partial
    assert evaluation.count == 8
    assert [i for i, _ in evaluation.results] == list(range(8))
    for i, value in evaluation.results:
        assert value == pytest.approx(sphere(model.particles[i].position, 3, (3,)))


def test_round_is_capped_by_remaining_budget():
    model = make_model(swarm_size=8, t_max=20)
    model.evaluations_used = 17
    evaluation = Evaluator(sphere, model.config).evaluate(model)
    assert evaluation.count == 3
    assert evaluation.partial
    assert [i for i, _ in evaluation.results] == [0, 1, 2]


def test_exhausted_budget_evaluates_nothing():
    model = make_model(swarm_size=4, t_max=4)
    model.evaluations_used = 4
    calls = []
    evaluation = Evaluator(lambda p, n, d: calls.append(1) or 0.0, model.config).evaluate(model)
    assert evaluation.count == 0
    assert calls == []


def test_evaluator_does_not_touch_the_counter():
    model = make_model()
    Evaluator(sphere, model.config).evaluate(model)
    assert model.evaluations_used == 0


def test_parallel_results_match_serial_results_regardless_of_finish_order():
    def slow_sphere(p, flat_dim, dimensions):
        time.sleep(random.uniform(0.0, 0.01))
        return sphere(p, flat_dim, dimensions)

    model = make_model(swarm_size=16, workers=8)
    with Evaluator(slow_sphere, model.config) as evaluator:
        parallel = evaluator.evaluate(model)
    serial = Evaluator(sphere, model.config.replace(workers=1)).evaluate(model)
    assert parallel.results == serial.results


def test_parallel_round_uses_several_threads():
    seen = set()
    lock = threading.Lock()

    def objective(p, flat_dim, dimensions):
        with lock:
            seen.add(threading.get_ident())
        time.sleep(0.01)
        return 0.0

    model = make_model(swarm_size=8, workers=4)
    with Evaluator(objective, model.config) as evaluator:
        evaluator.evaluate(model)
    assert len(seen) > 1


def test_objective_receives_copies_and_shape_metadata():
    received = []

    def objective(p, flat_dim, dimensions):
        received.append((flat_dim, dimensions))
        p[:] = 999.0
        return 0.0

    model = make_model(swarm_size=3)
    before = model.positions().copy()
    Evaluator(objective, model.config).evaluate(model)
    np.testing.assert_array_equal(model.positions(), before)
    assert received == [(3, (3,))] * 3


def test_objective_exceptions_propagate():
    def broken(p, flat_dim, dimensions):
        raise ZeroDivisionError("boom")

    model = make_model(workers=4)
    with Evaluator(broken, model.config) as evaluator:
        with pytest.raises(ZeroDivisionError):
            evaluator.evaluate(model)


def test_explicit_count_ignores_budget():
    model = make_model(swarm_size=5, t_max=5)
    model.evaluations_used = 5
    evaluation = Evaluator(sphere, model.config).evaluate(model, count=5)
    assert evaluation.count == 5
    assert not evaluation.partial


def test_pool_is_reused_across_rounds_until_closed():
    model = make_model(swarm_size=8, t_max=1000, workers=4)
    evaluator = Evaluator(sphere, model.config)
    assert evaluator.pool is None

    evaluator.evaluate(model)
    pool = evaluator.pool
    assert pool is not None
    evaluator.evaluate(model)
    evaluator.evaluate(model, count=3)
    assert evaluator.pool is pool

    evaluator.close()
    assert evaluator.pool is None
    evaluator.close()

    # A closed evaluator opens a new pool when used again
    evaluator.evaluate(model)
    assert evaluator.pool is not None and evaluator.pool is not pool
    evaluator.close()


def test_serial_evaluation_never_opens_a_pool():
    model = make_model(workers=1)
    with Evaluator(sphere, model.config) as evaluator:
        evaluator.evaluate(model)
        assert evaluator.pool is None


def test_context_manager_closes_the_pool():
    model = make_model(workers=2)
    with Evaluator(sphere, model.config) as evaluator:
        evaluator.evaluate(model)
        assert evaluator.pool is not None
    assert evaluator.pool is None


def test_process_pool_matches_serial_results():
    model = make_model(swarm_size=6, workers=2, executor="process")
    with Evaluator(sphere, model.config) as evaluator:
        first = evaluator.evaluate(model)
        pool = evaluator.pool
        second = evaluator.evaluate(model)
        assert evaluator.pool is pool
    serial = Evaluator(sphere, model.config.replace(workers=1)).evaluate(model)

    assert first.results == serial.results
    assert second.results == serial.results
