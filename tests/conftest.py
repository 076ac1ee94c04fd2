"""Shared fixtures for the integration tests."""

import jax
import jax.numpy as jnp
import pytest

from jax_ivp import Action, FunctionEquation

# Step-duration and root-location checks below 1e-12 need double precision.
jax.config.update("jax_enable_x64", True)


class RecordingHandler:
    """Event handler recording every event it is notified of."""

    def __init__(self, fun, action=Action.CONTINUE, reset=None, direction=0):
        self.fun = fun
        self.action = action
        self.reset = reset
        self.direction = direction
        self.events = []
        self.init_calls = 0

    def init(self, t0, y0, t_final):
        self.events = []
        self.init_calls += 1

    def g(self, t, y):
        return float(self.fun(t, y))

    def event_occurred(self, t, y, increasing):
        self.events.append((t, y, increasing))
        return self.action

    def reset_state(self, t, y):
        return self.reset(t, y)


@pytest.fixture
def recording_handler():
    """Factory for handlers that record the events they receive."""
    return RecordingHandler


@pytest.fixture
def constant_rate():
    """
    ODE: dy/dt = 1, y(0) = 0.

    Every explicit method and the cubic dense output reproduce y(t) = t
    exactly, so event times are known in closed form.
    """
    equation = FunctionEquation(lambda t, y: jnp.ones_like(y), dimension=1)
    y0 = jnp.array([0.0])
    return equation, y0
