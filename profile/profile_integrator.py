"""
Simple profiling script for `Integrator` performance analysis.
"""

import time
import cProfile
import pstats
import io
from contextlib import contextmanager
import jax
import jax.numpy as jnp

from jax_ivp import Action, Integrator, Midpoint, RK4, SwitchingFunction
from jax_ivp.problems import BouncingSine, HarmonicOscillator

jax.config.update("jax_enable_x64", True)


@contextmanager
def timer(description):
    """Simple timing context manager."""
    start = time.perf_counter()
    print(f"Starting: {description}")
    yield
    elapsed = time.perf_counter() - start
    print(f"Completed: {description} in {elapsed:.3f}s")


def run(problem, method, step_size, with_events=True):
    integrator = Integrator(method, step_size=step_size)
    if with_events:
        for handler in problem.event_handlers():
            integrator.add_event_handler(handler, convergence=1e-10)
    t, y = integrator.integrate(problem, problem.t0, problem.y0, problem.t_final)
    y.block_until_ready()
    return integrator


def profile_integrate_cprofile(step_size=0.01, n_runs=1):
    """Profile a bouncing run using cProfile."""
    print(f"\n{'='*60}")
    print(f"Profiling Integrator with cProfile (h={step_size}, runs={n_runs})")
    print(f"{'='*60}")

    profiler = cProfile.Profile()

    profiler.enable()
    for _ in range(n_runs):
        run(BouncingSine(), Midpoint(), step_size)
    profiler.disable()

    s = io.StringIO()
    ps = pstats.Stats(profiler, stream=s)
    ps.sort_stats('cumulative')
    ps.print_stats(20)  # Top 20 functions

    print(s.getvalue())

    return profiler


def profile_event_overhead(step_size=0.01):
    """Compare runs with and without switching functions."""
    print(f"\n{'='*60}")
    print("Event Detection Overhead")
    print(f"{'='*60}")

    with timer("Harmonic oscillator, no events"):
        integrator = run(HarmonicOscillator(), RK4(), step_size, with_events=False)
    print(f"  {integrator.evaluations} evaluations")

    problem = HarmonicOscillator()
    integrator = Integrator(RK4(), step_size=step_size)
    integrator.add_event_handler(
        SwitchingFunction(lambda t, y: y[0], action=Action.CONTINUE),
        max_check_interval=0.1,
    )
    with timer("Harmonic oscillator, zero crossings of y0"):
        integrator.integrate(problem, problem.t0, problem.y0, problem.t_final)
    print(f"  {integrator.evaluations} evaluations")

    with timer("Bouncing sine, reset and stop events"):
        integrator = run(BouncingSine(), RK4(), step_size)
    print(f"  {integrator.evaluations} evaluations")


if __name__ == "__main__":
    profile_event_overhead()
    profile_integrate_cprofile()
