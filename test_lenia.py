#!/usr/bin/env python3
"""
Tests for the Lenia engine.

Verifies:
1. Parameter validation rejects bad values without mutating state
2. Kernel reconfiguration (dirty flag, rebuild, auto-rebuild on step and on read)
3. Concurrent R and beta writes never commit a degenerate pair
4. World stays in [0, 1] over many steps, for both potential paths
5. Initial state policies and seeded determinism
6. Reinitialize waits for an in-flight step
7. End-to-end run matching the reference parameter set
"""

import math
import threading
import time

import numpy as np
import pytest

from lenia_sim import (
    DegenerateKernel, InvalidParameter, Lenia, NonFiniteState, OutOfBounds,
    create_simulation,
)
from lenia_sim import lenia as lenia_module
from lenia_sim.lenia import seed_full, seed_patchy


def make_engine(**kwargs):
    params = dict(R=4, T=10, mu=0.15, sigma=0.017, beta=[1.0], seed=7)
    params.update(kwargs)
    return Lenia(32, 32, **params)


@pytest.mark.parametrize("bad", [
    {"R": 0},
    {"R": -3},
    {"R": 2.5},
    {"R": float("nan")},
    {"T": 0},
    {"T": -1.0},
    {"T": float("nan")},
    {"sigma": 0.0},
    {"sigma": float("inf")},
    {"mu": 1.5},
    {"beta": []},
    {"beta": [1.0, -0.5]},
    {"beta": "1,0.5"},
    {"R": 20},  # kernel side 41 does not fit a 32x32 grid
])
def test_create_simulation_rejects_invalid(bad):
    params = dict(R=4, T=10, mu=0.15, sigma=0.017, beta=[1.0])
    params.update(bad)
    with pytest.raises(InvalidParameter):
        create_simulation(32, 32, **params)


def test_invalid_parameter_is_value_error():
    with pytest.raises(ValueError):
        create_simulation(32, 32, R=0, T=10, mu=0.15, sigma=0.017, beta=[1.0])
    with pytest.raises(InvalidParameter):
        create_simulation(0, 32, R=4, T=10, mu=0.15, sigma=0.017, beta=[1.0])


def test_unknown_options_rejected():
    with pytest.raises(InvalidParameter):
        make_engine(strategy="gpu")
    with pytest.raises(InvalidParameter):
        make_engine(boundary="reflect")
    with pytest.raises(InvalidParameter):
        make_engine(core="gaussian")


def test_set_parameter_rejects_without_mutation():
    engine = make_engine()
    before = engine.get_params()
    kernel = engine.kernel

    for name, value in [("R", 0), ("T", 0), ("sigma", -1), ("beta", []), ("mu", -0.1)]:
        with pytest.raises(InvalidParameter):
            engine.set_parameter(name, value)
    with pytest.raises(DegenerateKernel):
        engine.set_parameter("beta", [0.0, 0.0])
    with pytest.raises(InvalidParameter):
        engine.set_parameter("gamma", 1.0)

    assert engine.get_params() == before, "Rejected values must not be applied"
    assert engine.kernel is kernel
    assert not engine.kernel_dirty


def test_set_params_is_all_or_nothing():
    engine = make_engine()
    before = engine.get_params()
    with pytest.raises(InvalidParameter):
        engine.set_params(mu=0.2, sigma=0.0)
    assert engine.get_params() == before


def test_growth_parameters_update_derived_values():
    engine = make_engine()
    engine.set_parameter("T", 20)
    assert engine.dt == pytest.approx(0.05)
    engine.set_parameter("Mu", 0.3)
    engine.set_parameter("Sigma", 0.05)
    assert engine.mu == 0.3 and engine.sigma == 0.05
    assert not engine.kernel_dirty, "mu/sigma/T do not touch the kernel"


def test_radius_change_rebuilds_kernel():
    """Changing R mid-run marks the kernel dirty; rebuild gives side 2R+1."""
    engine = make_engine()
    engine.step_n(3)
    engine.set_parameter("R", 6)
    assert engine.kernel_dirty
    assert engine.dx == pytest.approx(1 / 6)

    engine.rebuild_kernel()
    assert not engine.kernel_dirty
    assert engine.kernel.shape == (13, 13)
    assert abs(engine.kernel.sum() - 1.0) < 1e-9
    assert engine.kernel_fft.shape == (32, 32)


def test_kernel_value_follows_new_radius():
    """Reading a kernel cell right after an R change sees the new kernel."""
    engine = make_engine()
    engine.set_parameter("R", 6)
    value = engine.get_kernel_value(10, 10)
    assert not engine.kernel_dirty, "Kernel reads rebuild a dirty kernel first"
    assert engine.kernel.shape == (13, 13)
    assert value == engine.kernel[10, 10]
    assert engine.get_kernel_value(12, 6) == engine.kernel[12, 6]
    with pytest.raises(OutOfBounds):
        engine.get_kernel_value(13, 0)


def test_concurrent_structural_writes_stay_consistent(monkeypatch):
    """An R write and a beta write racing each other never combine into a degenerate kernel."""
    engine = Lenia(32, 32, R=5, T=10, mu=0.15, sigma=0.017, beta=[1.0], seed=1)
    real_build_kernel = lenia_module.build_kernel
    writers = []
    rejected = []

    def write_beta():
        try:
            # Fine for R=5, degenerate for R=2
            engine.set_parameter("beta", [1.0, 0.0, 0.0])
        except DegenerateKernel as e:
            rejected.append(e)

    def build_with_concurrent_write(*args, **kwargs):
        if not writers:
            t = threading.Thread(target=write_beta)
            writers.append(t)
            t.start()
            # Give the other writer a chance to run mid-validation
            t.join(timeout=0.1)
        return real_build_kernel(*args, **kwargs)

    monkeypatch.setattr(lenia_module, "build_kernel", build_with_concurrent_write)
    engine.set_parameter("R", 2)
    writers[0].join(timeout=5)

    assert not writers[0].is_alive()
    assert len(rejected) == 1, "The beta write must be checked against the committed R=2"
    assert engine.get_params()["R"] == 2
    assert engine.get_params()["beta"] == [1.0]
    engine.step()
    assert abs(engine.kernel.sum() - 1.0) < 1e-9


@pytest.mark.parametrize("height, width", [
    ("abc", 32), (32, "wide"), (32.5, 32), (-8, 32), ([32], None), (True, 32),
])
def test_invalid_grid_dimensions(height, width):
    with pytest.raises(InvalidParameter):
        Lenia(height, width, R=2, beta=[1.0], init=None)


def test_integral_float_dimensions_accepted():
    engine = Lenia(32.0, R=2, beta=[1.0], init=None)
    assert engine.shape == (32, 32)
    with pytest.raises(InvalidParameter):
        create_simulation("abc", 32, 2, 10, 0.15, 0.017, [1.0])


def test_seed_rejects_extra_options():
    engine = make_engine(init=None)
    assert engine.seed("full").shape == (32, 32)
    with pytest.raises(TypeError):
        engine.seed("patchy", density=0.5)


def test_step_rebuilds_dirty_kernel():
    engine = make_engine()
    engine.set_parameter("Beta", [1.0, 0.5])
    engine.step()
    assert not engine.kernel_dirty
    assert engine.get_params()["beta"] == [1.0, 0.5]
    assert abs(engine.kernel.sum() - 1.0) < 1e-9


def test_cell_and_kernel_accessors():
    engine = make_engine()
    engine.world = np.full((32, 32), 0.25)
    assert engine.get_cell_value(0, 31) == 0.25
    for row, col in [(-1, 0), (32, 0), (0, 32)]:
        with pytest.raises(OutOfBounds):
            engine.get_cell_value(row, col)

    side = engine.kernel_side
    assert engine.get_kernel_value(4, 6) == engine.kernel[4, 6]
    with pytest.raises(OutOfBounds):
        engine.get_kernel_value(side, 0)
    with pytest.raises(IndexError):
        engine.get_kernel_value(0, -1)


@pytest.mark.parametrize("strategy", ["spectral", "spatial"])
def test_world_stays_bounded(strategy):
    engine = make_engine(strategy=strategy, init="full")
    for _ in range(60):
        world = engine.step()
        assert world.min() >= 0.0 and world.max() <= 1.0


def test_saturated_world_stays_bounded():
    engine = make_engine(mu=0.9, sigma=0.5, T=1)
    engine.world = np.ones((32, 32))
    for _ in range(10):
        engine.step()
    assert engine.world.max() <= 1.0 and engine.world.min() >= 0.0


def test_zero_dt_leaves_world_unchanged():
    engine = make_engine(T=math.inf, init="full")
    assert engine.dt == 0.0
    before = engine.snapshot()
    engine.step()
    assert np.array_equal(engine.world, before)
    assert engine.generation == 1


def test_step_publishes_new_array():
    engine = make_engine(init="full")
    old = engine.world
    old_copy = old.copy()
    new = engine.step()
    assert new is engine.world
    assert new is not old
    assert np.array_equal(old, old_copy), "A published world is never mutated in place"


def test_non_finite_state_raises():
    engine = make_engine()
    bad = np.full((32, 32), 0.5)
    bad[3, 3] = np.nan
    engine.world = bad
    with pytest.raises(NonFiniteState):
        engine.step()
    assert engine.world is bad, "The previous world stays published"
    assert engine.generation == 0


def test_reinitialize_policies():
    engine = make_engine(init=None)
    assert engine.world.sum() == 0.0
    kernel = engine.kernel

    full = engine.reinitialize("full")
    assert full.min() >= 0.0 and full.max() < 1.0
    assert (full > 0).mean() > 0.99

    engine.step()
    patchy = engine.reinitialize("patchy")
    assert engine.generation == 0
    assert patchy.min() >= 0.0 and patchy.max() < 1.0
    assert (patchy == 0).any(), "Cells outside every patch stay empty"
    assert (patchy > 0).any()
    assert engine.kernel is kernel, "Reinitialize leaves the kernel alone"

    with pytest.raises(InvalidParameter):
        engine.reinitialize("checkerboard")


@pytest.mark.parametrize("shape", [(3, 3), (11, 37), (64, 64), (512, 512)])
def test_patchy_fits_any_grid(shape):
    rng = np.random.default_rng(0)
    world = seed_patchy(rng, *shape)
    assert world.shape == shape
    assert world.min() >= 0.0 and world.max() < 1.0
    assert (world > 0).any()


def test_seeded_engines_are_deterministic():
    a = make_engine(seed=42, init="patchy")
    b = make_engine(seed=42, init="patchy")
    assert np.array_equal(a.world, b.world)
    a.step_n(5)
    b.step_n(5)
    assert np.array_equal(a.world, b.world)
    assert np.array_equal(seed_full(np.random.default_rng(3), 4, 4),
                          seed_full(np.random.default_rng(3), 4, 4))


def test_threaded_transforms_match_serial():
    a = make_engine(R=6, strategy="spectral", workers=4, init="full")
    b = make_engine(R=6, strategy="spectral", workers=1, init="full")
    a.step_n(3)
    b.step_n(3)
    assert np.allclose(a.world, b.world, atol=1e-12)


def test_reinitialize_waits_for_in_flight_step():
    engine = make_engine(init=None)
    done = threading.Event()

    def reset():
        engine.reinitialize("full")
        done.set()

    # Simulate a step holding the engine lock
    with engine._lock:
        t = threading.Thread(target=reset)
        t.start()
        time.sleep(0.1)
        assert not done.is_set(), "Reinitialize must wait for the in-flight step"
        assert engine.world.sum() == 0.0
    t.join(timeout=5)
    assert done.is_set()
    assert engine.world.sum() > 0.0


def test_readers_never_see_out_of_range_values():
    engine = make_engine(init="full")
    stop = threading.Event()

    def stepper():
        while not stop.is_set():
            engine.step()

    t = threading.Thread(target=stepper)
    t.start()
    try:
        for _ in range(200):
            world = engine.world
            assert world.shape == (32, 32)
            assert 0.0 <= engine.get_cell_value(5, 5) <= 1.0
            assert world.min() >= 0.0 and world.max() <= 1.0
    finally:
        stop.set()
        t.join(timeout=5)


def test_from_preset():
    engine = Lenia.from_preset("orbium", 64, seed=1)
    assert engine.R == 2, "Preset radius is scaled from the 512 base grid"
    assert engine.get_params()["beta"] == [1.0]
    assert abs(engine.kernel.sum() - 1.0) < 1e-9
    with pytest.raises(InvalidParameter):
        Lenia.from_preset("unknown", 64)


def test_end_to_end_reference_run():
    """64x64, R=10, T=10, mu=0.23, sigma=0.024, beta=[1, 0.6, 0.3]."""
    engine = create_simulation(64, 64, R=10, T=10, mu=0.23, sigma=0.024,
                               beta=[1, 0.6, 0.3], seed=2024)
    initial = engine.reinitialize("full").copy()

    U_fft = engine.potential("spectral")
    U_direct = engine.potential("spatial")
    assert np.abs(U_fft - U_direct).max() < 1e-6, "Potential paths disagree at step 1"

    for _ in range(100):
        engine.step()

    assert engine.generation == 100
    assert engine.world.min() >= 0.0 and engine.world.max() <= 1.0
    assert not np.array_equal(engine.world, initial), "Dynamics should change the world"

    engine.set_parameter("R", 12)
    engine.rebuild_kernel()
    assert engine.kernel.shape == (25, 25)
    assert abs(engine.kernel.sum() - 1.0) < 1e-9
    engine.step()


def test_stats():
    engine = make_engine(init=None)
    engine.world = np.full((32, 32), 0.5)
    s = engine.stats
    assert s["mass"] == pytest.approx(512.0)
    assert s["mean"] == pytest.approx(0.5)
    assert s["alive_pct"] == pytest.approx(100.0)
