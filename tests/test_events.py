"""Tests for event detection and the actions events trigger."""

import math

import pytest
import jax.numpy as jnp

from jax_ivp import (
    Action,
    BracketingError,
    EventDetector,
    EventSettings,
    FunctionEquation,
    HermiteInterpolator,
    Integrator,
    Midpoint,
    RunStatus,
    Step,
    StepRecorder,
    SwitchingFunction,
)
from jax_ivp.events import DetectorStatus


@pytest.fixture
def ramp_interpolator():
    """Dense output of y(t) = t over one step [0, 1.23456]."""
    step = Step(
        t=0.0,
        y=jnp.array([0.0]),
        t_next=1.23456,
        y_next=jnp.array([1.23456]),
        yp=jnp.array([1.0]),
        yp_next=jnp.array([1.0]),
    )
    return HermiteInterpolator.from_step(step)


def threshold(level):
    return lambda t, y: y[0] - level


class TestEventSettings:

    def test_defaults(self):
        settings = EventSettings()
        assert math.isinf(settings.max_check_interval)
        assert settings.window == 2.0 * settings.convergence

    def test_explicit_proximity(self):
        assert EventSettings(proximity=0.5).window == 0.5

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"max_check_interval": 0.0},
            {"convergence": 0.0},
            {"convergence": math.inf},
            {"max_iterations": 0},
            {"proximity": -1.0},
        ],
    )
    def test_invalid(self, kwargs):
        with pytest.raises(ValueError):
            EventSettings(**kwargs)


class TestSwitchingFunction:

    def test_reset_state_requires_reset(self):
        with pytest.raises(ValueError):
            SwitchingFunction(threshold(1.0), action=Action.RESET_STATE)

    def test_invalid_direction(self):
        with pytest.raises(ValueError):
            SwitchingFunction(threshold(1.0), direction=2)

    def test_callable_action(self):
        handler = SwitchingFunction(
            threshold(1.0),
            action=lambda t, y, increasing: Action.STOP if increasing else Action.CONTINUE,
        )
        y = jnp.array([1.0])
        assert handler.event_occurred(1.0, y, True) is Action.STOP
        assert handler.event_occurred(1.0, y, False) is Action.CONTINUE

    def test_args(self):
        handler = SwitchingFunction(lambda t, y, level: y[0] - level, args=(2.0,))
        assert handler.g(0.0, jnp.array([3.0])) == 1.0


class TestEventDetector:

    def test_locates_root(self, ramp_interpolator, recording_handler):
        handler = recording_handler(threshold(0.5))
        detector = EventDetector([(handler, EventSettings(convergence=1e-12))])
        detector.init(0.0, jnp.array([0.0]), 5.0)

        group = detector.scan(ramp_interpolator)

        assert detector.status is DetectorStatus.ROOT_FOUND
        assert len(group) == 1
        assert group[0].index == 0
        assert group[0].increasing
        assert abs(group[0].t - 0.5) < 1e-12
        assert handler.init_calls == 1

    def test_no_sign_change(self, ramp_interpolator, recording_handler):
        handler = recording_handler(threshold(2.0))
        detector = EventDetector([(handler, EventSettings())])
        detector.init(0.0, jnp.array([0.0]), 5.0)

        assert detector.scan(ramp_interpolator) == []
        assert detector.status is DetectorStatus.NO_EVENT

    def test_without_handlers(self, ramp_interpolator):
        detector = EventDetector([])
        detector.init(0.0, jnp.array([0.0]), 5.0)
        assert len(detector) == 0
        assert detector.scan(ramp_interpolator) == []

    def test_simultaneous_roots_prefer_lower_index(
        self, ramp_interpolator, recording_handler
    ):
        """Roots within the convergence window resolve to the lowest index."""
        late = recording_handler(threshold(0.5 + 5e-13))
        early = recording_handler(threshold(0.5))
        settings = EventSettings(convergence=1e-12)
        detector = EventDetector([(late, settings), (early, settings)])
        detector.init(0.0, jnp.array([0.0]), 5.0)

        group = detector.scan(ramp_interpolator)

        assert [occurrence.index for occurrence in group] == [0, 1]
        assert group[0].t == group[1].t
        assert group[0].t >= group[1].root

    def test_earliest_root_wins(self, ramp_interpolator, recording_handler):
        settings = EventSettings(convergence=1e-12)
        detector = EventDetector([
            (recording_handler(threshold(0.9)), settings),
            (recording_handler(threshold(0.4)), settings),
        ])
        detector.init(0.0, jnp.array([0.0]), 5.0)

        group = detector.scan(ramp_interpolator)

        assert [occurrence.index for occurrence in group] == [1]
        assert abs(group[0].t - 0.4) < 1e-12

    def test_root_at_reference_is_ignored(self, ramp_interpolator, recording_handler):
        handler = recording_handler(threshold(0.0))
        detector = EventDetector([(handler, EventSettings())])
        detector.init(0.0, jnp.array([0.0]), 5.0)
        assert detector.scan(ramp_interpolator) == []

    def test_acknowledged_event_does_not_retrigger(
        self, ramp_interpolator, recording_handler
    ):
        handler = recording_handler(threshold(0.5))
        detector = EventDetector([(handler, EventSettings(convergence=1e-12))])
        detector.init(0.0, jnp.array([0.0]), 5.0)

        occurrence, = detector.scan(ramp_interpolator)
        detector.acknowledge(occurrence)
        detector.commit(occurrence.t, ramp_interpolator.state_at(occurrence.t))
        assert not detector.states[0].armed

        remainder = ramp_interpolator.restrict(occurrence.t, ramp_interpolator.t_end)
        assert detector.scan(remainder) == []

        detector.commit(remainder.t_end, remainder.y_end)
        assert detector.states[0].armed


class TestEventActions:

    def test_stop(self, constant_rate, recording_handler):
        equation, y0 = constant_rate
        handler = recording_handler(threshold(2.5), action=Action.STOP)
        integrator = Integrator(Midpoint(), step_size=1.23456)
        integrator.add_event_handler(handler, convergence=1e-12)

        t, y = integrator.integrate(equation, 0.0, y0, 5.0)

        assert integrator.status is RunStatus.DONE
        assert abs(t - 2.5) < 1e-10
        assert jnp.allclose(y, jnp.array([2.5]), atol=1e-10)
        assert len(handler.events) == 1
        assert handler.events[0][2]  # increasing

    def test_continue_splits_steps(self, constant_rate, recording_handler):
        """Several events inside one long step, each ending a step piece."""
        equation, y0 = constant_rate
        handler = recording_handler(lambda t, y: jnp.cos(2.0 * jnp.pi * y[0]))
        recorder = StepRecorder()
        integrator = Integrator(Midpoint(), step_size=2.0)
        integrator.add_step_observer(recorder)
        integrator.add_event_handler(handler, max_check_interval=0.1, convergence=1e-12)

        t, y = integrator.integrate(equation, 0.0, y0, 4.2)

        times = [event[0] for event in handler.events]
        expected = [0.25 + 0.5 * k for k in range(8)]
        assert t == 4.2
        assert jnp.allclose(jnp.array(times), jnp.array(expected), atol=1e-10)
        # three integrator steps, split into eight more pieces by the events
        assert integrator.accepted_steps == 11
        assert all(b > a for a, b in zip(recorder.t, recorder.t[1:]))

    def test_long_steps_miss_paired_roots(self, constant_rate, recording_handler):
        equation, y0 = constant_rate
        handler = recording_handler(lambda t, y: jnp.cos(2.0 * jnp.pi * y[0]))
        integrator = Integrator(Midpoint(), step_size=2.0)
        integrator.add_event_handler(handler)

        integrator.integrate(equation, 0.0, y0, 4.2)

        assert handler.events == []

    def test_reset_state(self, constant_rate, recording_handler):
        """Sawtooth: y is sent back to zero each time it reaches one."""
        equation, y0 = constant_rate
        handler = recording_handler(
            threshold(1.0),
            action=Action.RESET_STATE,
            reset=lambda t, y: jnp.zeros_like(y),
        )
        integrator = Integrator(Midpoint(), step_size=0.3)
        integrator.add_event_handler(handler, convergence=1e-12)

        t, y = integrator.integrate(equation, 0.0, y0, 3.5)

        times = [event[0] for event in handler.events]
        assert jnp.allclose(jnp.array(times), jnp.array([1.0, 2.0, 3.0]), atol=1e-9)
        assert t == 3.5
        assert jnp.allclose(y, jnp.array([0.5]), atol=1e-9)

    def test_no_retrigger_after_reset(self, constant_rate, recording_handler):
        """A reset leaving g just below zero must not fire the same event again."""
        equation, y0 = constant_rate
        handler = recording_handler(
            threshold(2.5),
            action=Action.RESET_STATE,
            reset=lambda t, y: y - 1e-13,
        )
        integrator = Integrator(Midpoint(), step_size=0.7)
        integrator.add_event_handler(handler, convergence=1e-12)

        t, y = integrator.integrate(equation, 0.0, y0, 5.0)

        assert len(handler.events) == 1
        assert abs(handler.events[0][0] - 2.5) < 1e-10
        assert t == 5.0

    def test_reset_derivatives_restarts_from_root(self, recording_handler):
        calls = []

        def fun(t, y):
            calls.append(t)
            return jnp.ones_like(y)

        handler = recording_handler(threshold(1.0), action=Action.RESET_DERIVATIVES)
        integrator = Integrator(Midpoint(), step_size=0.75)
        integrator.add_event_handler(handler, convergence=1e-12)

        equation = FunctionEquation(fun, dimension=1)
        t, y = integrator.integrate(equation, 0.0, jnp.array([0.0]), 2.0)

        event_time = handler.events[0][0]
        assert abs(event_time - 1.0) < 1e-10
        # the derivative is evaluated afresh at the event time
        assert event_time in calls
        assert jnp.allclose(y, jnp.array([2.0]), atol=1e-10)

    @pytest.mark.parametrize("direction, fires", [(1, True), (-1, False), (0, True)])
    def test_direction_filter(self, constant_rate, direction, fires):
        equation, y0 = constant_rate
        handler = SwitchingFunction(threshold(2.5), action=Action.STOP, direction=direction)
        integrator = Integrator(Midpoint(), step_size=1.0)
        integrator.add_event_handler(handler, convergence=1e-12)

        t, _ = integrator.integrate(equation, 0.0, y0, 5.0)

        assert (abs(t - 2.5) < 1e-10) == fires
        assert (t == 5.0) == (not fires)

    def test_bracketing_failure(self, constant_rate, recording_handler):
        equation, y0 = constant_rate
        handler = recording_handler(lambda t, y: y[0] ** 3 - 15.625, action=Action.STOP)
        recorder = StepRecorder()
        integrator = Integrator(Midpoint(), step_size=1.23456)
        integrator.add_step_observer(recorder)
        integrator.add_event_handler(handler, convergence=1e-15, max_iterations=1)

        with pytest.raises(BracketingError) as excinfo:
            integrator.integrate(equation, 0.0, y0, 5.0)

        assert integrator.status is RunStatus.FAILED
        error = excinfo.value
        assert 2.46912 - 1e-9 <= min(error.lower, error.upper)
        assert max(error.lower, error.upper) <= 3.70368 + 1e-9
        # steps before the failing one were already dispatched
        assert len(recorder.t) == 3


class TestZeroAtReference:
    """Scans starting exactly on a zero of g still see the next crossing."""

    def test_zero_at_step_boundary(self, constant_rate, recording_handler):
        # the first root falls on a step end, where g is exactly zero
        equation, y0 = constant_rate
        handler = recording_handler(lambda t, y: (y[0] - 1.0) * (y[0] - 1.3))
        integrator = Integrator(Midpoint(), step_size=0.5)
        integrator.add_event_handler(handler, convergence=1e-12)

        integrator.integrate(equation, 0.0, y0, 2.0)

        times = [event[0] for event in handler.events]
        assert len(times) == 2
        assert times[0] == 1.0
        assert abs(times[1] - 1.3) < 1e-10
        assert [event[2] for event in handler.events] == [False, True]

    def test_zero_at_initial_time(self, constant_rate, recording_handler):
        equation, y0 = constant_rate
        handler = recording_handler(
            lambda t, y: y[0] * (y[0] - 0.6), action=Action.STOP
        )
        integrator = Integrator(Midpoint(), step_size=1.0)
        integrator.add_event_handler(handler, convergence=1e-12)

        t, _ = integrator.integrate(equation, 0.0, y0, 2.0)

        assert abs(t - 0.6) < 1e-10
        assert len(handler.events) == 1
        assert handler.events[0][2]


class TestBackwardEvents:

    def test_continue(self, recording_handler):
        equation = FunctionEquation(lambda t, y: jnp.ones_like(y), dimension=1)
        handler = recording_handler(lambda t, y: jnp.cos(2.0 * jnp.pi * y[0]))
        recorder = StepRecorder()
        integrator = Integrator(Midpoint(), step_size=1.0)
        integrator.add_step_observer(recorder)
        integrator.add_event_handler(handler, max_check_interval=0.1, convergence=1e-12)

        t, y = integrator.integrate(equation, 3.0, jnp.array([3.0]), 0.0)

        times = [event[0] for event in handler.events]
        expected = [2.75, 2.25, 1.75, 1.25, 0.75, 0.25]
        assert t == 0.0
        assert jnp.allclose(y, jnp.array([0.0]), atol=1e-12)
        assert jnp.allclose(jnp.array(times), jnp.array(expected), atol=1e-10)
        # g falls through zero at 2.75 when running toward smaller t
        assert [event[2] for event in handler.events] == [False, True] * 3
        assert all(b < a for a, b in zip(recorder.t, recorder.t[1:]))
        assert integrator.accepted_steps == 3 + len(expected)

    def test_stop(self, recording_handler):
        equation = FunctionEquation(lambda t, y: jnp.ones_like(y), dimension=1)
        handler = recording_handler(lambda t, y: y[0] - 1.1, action=Action.STOP)
        integrator = Integrator(Midpoint(), step_size=0.7)
        integrator.add_event_handler(handler, convergence=1e-12)

        t, y = integrator.integrate(equation, 3.0, jnp.array([3.0]), 0.0)

        assert abs(t - 1.1) < 1e-10
        assert jnp.allclose(y, jnp.array([1.1]), atol=1e-10)
        assert len(handler.events) == 1
        assert not handler.events[0][2]


class TestEventDeterminism:

    def _run(self, constant_rate, recording_handler):
        equation, y0 = constant_rate
        first = recording_handler(lambda t, y: 2.0 * (y[0] - 2.5), action=Action.STOP)
        second = recording_handler(threshold(2.5), action=Action.STOP)
        integrator = Integrator(Midpoint(), step_size=0.7)
        integrator.add_event_handler(first, convergence=1e-12)
        integrator.add_event_handler(second, convergence=1e-12)
        t, _ = integrator.integrate(equation, 0.0, y0, 5.0)
        return t, first.events, second.events

    def test_lower_index_reported(self, constant_rate, recording_handler):
        t, first, second = self._run(constant_rate, recording_handler)
        assert abs(t - 2.5) < 1e-10
        assert len(first) == 1
        assert second == []

    def test_repeatable(self, constant_rate, recording_handler):
        t1, first1, _ = self._run(constant_rate, recording_handler)
        t2, first2, _ = self._run(constant_rate, recording_handler)
        assert t1 == t2
        assert [e[0] for e in first1] == [e[0] for e in first2]

    def test_continue_notifies_whole_group(self, constant_rate, recording_handler):
        equation, y0 = constant_rate
        first = recording_handler(lambda t, y: 2.0 * (y[0] - 2.5))
        second = recording_handler(threshold(2.5))
        integrator = Integrator(Midpoint(), step_size=0.7)
        integrator.add_event_handler(first, convergence=1e-12)
        integrator.add_event_handler(second, convergence=1e-12)

        integrator.integrate(equation, 0.0, y0, 5.0)

        assert len(first.events) == 1
        assert len(second.events) == 1
        assert first.events[0][0] == second.events[0][0]
