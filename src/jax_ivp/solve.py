import logging
import time
from typing import Callable, Optional, Sequence, Tuple, Union

from jax import Array
import jax.numpy as jnp

from .equations import Equation, as_equation
from .events import EventHandler, EventSettings
from .integrator import Integrator
from .observers import DenseOutputSampler
from .timesteppers import StepperProtocol

logger = logging.getLogger(__name__)

EventSpec = Union[EventHandler, Tuple[EventHandler, EventSettings]]


def _build_integrator(
    method: StepperProtocol,
    step_size: float,
    events: Sequence[EventSpec],
    max_steps: int,
) -> Integrator:
    integrator = Integrator(method, step_size, max_steps=max_steps)
    for event in events:
        if isinstance(event, tuple):
            integrator.add_event_handler(*event)
        else:
            integrator.add_event_handler(event)
    return integrator


def solve_ivp(
    fun: Union[Callable, Equation],
    t_span: Tuple[float, float],
    y0: Array,
    method: StepperProtocol,
    step_size: float,
    args: tuple = (),
    events: Sequence[EventSpec] = (),
    max_steps: int = 100_000,
) -> Tuple[float, Array]:
    """
    Integrate dy/dt = fun(t, y, *args) over the time interval t_span.

    Args:
        fun: Callable right-hand side of system dy/dt = fun(t, y, *args),
            or an `Equation` instance (args are then ignored)
        t_span: (t_start, t_end) time interval; t_end < t_start integrates
            backward.
        y0: Initial condition, 1-D array
        method: Time-stepping method instance (e.g., Midpoint(), RK4())
        step_size: Time step size
        args: Additional arguments to pass to fun
        events: Event handlers, or (handler, EventSettings) pairs, watched
            during the run
        max_steps: Maximum number of accepted steps

    Returns:
        t_final: Time reached, t_end unless a STOP event ended the run
        y_final: Solution at t_final

    Example usage:
    ```python
    import jax.numpy as jnp
    from jax_ivp import solve_ivp, Midpoint, SwitchingFunction

    # Define ODE: dy/dt = -k*y
    def fun(t, y, k):
        return -k * y

    # Stop once y drops below 0.5
    half = SwitchingFunction(lambda t, y: y[0] - 0.5)

    y0 = jnp.array([1.0])
    t, y = solve_ivp(fun, (0.0, 2.0), y0, Midpoint(), step_size=0.01,
                     args=(1.0,), events=[half])
    ```
    """
    t_start, t_end = t_span
    y0 = jnp.asarray(y0, dtype=jnp.result_type(float))
    equation = as_equation(fun, y0, args)
    integrator = _build_integrator(method, step_size, events, max_steps)
    return integrator.integrate(equation, t_start, y0, t_end)


def solve_with_history(
    fun: Union[Callable, Equation],
    t_span: Tuple[float, float],
    y0: Array,
    method: StepperProtocol,
    step_size: float,
    t_eval: Optional[Array] = None,
    args: tuple = (),
    events: Sequence[EventSpec] = (),
    max_steps: int = 100_000,
    verbose: bool = False
) -> Tuple[Array, Array]:
    """
    Integrate dy/dt = fun(t, y, *args) over the time interval t_span,
    returning intermediate states at times `t_eval`.

    Intermediate states come from the dense output of the steps containing
    them, so t_eval does not constrain the step grid. If a STOP event ends
    the run early, only the times reached are returned.

    Args:
        fun: Right-hand side function with signature (t, y, *args) -> dydt
        t_span: (t_start, t_end) time interval
        y0: Initial condition
        method: Time-stepping method instance (e.g., Midpoint(), RK4())
        step_size: Time step size for integration.
        t_eval: Times at which to store the computed solution.
            If None, returns only the initial and final states.
            Must be ordered in the integration direction and lie within t_span.
        args: Additional arguments to pass to fun
        events: Event handlers watched during the run
        max_steps: Maximum number of accepted steps
        verbose: Log progress information at INFO level

    Returns:
        t: Array of time points, shape (n_points,)
        y: Array of solution values at times t, shape (n_points, *y0.shape)

    Example usage:
    ```python
    import jax.numpy as jnp
    from jax_ivp import solve_with_history, Midpoint

    t_eval = jnp.linspace(0, 2, 5)
    t, y = solve_with_history(
        lambda t, y: -y, (0.0, 2.0), jnp.array([1.0]), Midpoint(),
        step_size=0.01, t_eval=t_eval,
    )
    ```
    """
    t_start, t_end = float(t_span[0]), float(t_span[1])
    forward = t_end >= t_start
    lo, hi = min(t_start, t_end), max(t_start, t_end)

    # Set up evaluation times
    if t_eval is None:
        # Only save initial and final states
        t_eval = jnp.array([t_start, t_end])
    else:
        # Validate t_eval
        t_eval = jnp.asarray(t_eval)
        if jnp.any(t_eval < lo) or jnp.any(t_eval > hi):
            raise ValueError("All values in t_eval must be within t_span")
        steps = jnp.diff(t_eval)
        if jnp.any(steps < 0 if forward else steps > 0):
            raise ValueError("t_eval must be sorted in the integration direction")

        # Ensure t_start is included
        if t_eval[0] != t_start:
            t_eval = jnp.concatenate([jnp.array([t_start]), t_eval])

    y0 = jnp.asarray(y0, dtype=jnp.result_type(float))
    equation = as_equation(fun, y0, args)
    integrator = _build_integrator(method, step_size, events, max_steps)
    sampler = DenseOutputSampler(t_eval)
    integrator.add_step_observer(sampler)

    if verbose:
        logger.info("Solving with %s", integrator.name)
        logger.info(
            "Time: [%s, %s], dt=%s, ~%d total steps",
            t_start, t_end, step_size,
            int(jnp.ceil(abs(t_end - t_start) / abs(step_size))),
        )
        logger.info("Evaluating at %d time points", len(t_eval))

    start_wallclock = time.time()
    integrator.integrate(equation, t_start, y0, t_end)
    elapsed_wallclock = time.time() - start_wallclock

    if verbose:
        logger.info(
            "Completed in %.3fs (%.1f steps/s)",
            elapsed_wallclock,
            integrator.accepted_steps / max(elapsed_wallclock, 1e-12),
        )

    return sampler.as_arrays()
