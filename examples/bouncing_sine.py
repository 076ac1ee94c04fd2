import jax
import jax.numpy as jnp
from matplotlib import pyplot as plt

from jax_ivp import Integrator, Midpoint, StepRecorder, StepNormalizer
from jax_ivp.problems import BouncingSine, ErrorTracker

jax.config.update("jax_enable_x64", True)


def main(step_size=0.05, sample_step=0.01):
    """
    Integrate |sin t| as a harmonic oscillator bouncing off y = 0, then plot
    the numerical and analytical solutions.

    Arguments:
        step_size - Integrator step size (default 0.05)
        sample_step - Spacing of the plotted dense output (default 0.01)
    """
    problem = BouncingSine()

    integrator = Integrator(Midpoint(), step_size=step_size)
    for handler in problem.event_handlers():
        integrator.add_event_handler(handler, convergence=1e-10)

    # Step boundaries, a regular sampling grid, and the error against |sin t|
    recorder = StepRecorder()
    samples = []
    tracker = ErrorTracker(problem)
    integrator.add_step_observer(recorder)
    integrator.add_step_observer(
        StepNormalizer(sample_step, lambda t, y, is_last: samples.append((t, y[0])))
    )
    integrator.add_step_observer(tracker)

    print("Solving...")
    t_final, y_final = integrator.integrate(problem, problem.t0, problem.y0, problem.t_final)
    print(f"Stopped at t={t_final:.6f} after {integrator.accepted_steps} steps.")
    print(f"Max value error = {tracker.max_value_error:.3e}")
    print(f"Max event time error = {tracker.max_time_error:.3e}")

    t_steps, y_steps = recorder.as_arrays()
    t_dense = jnp.array([s[0] for s in samples])
    y_dense = jnp.array([s[1] for s in samples])

    fig, ax = plt.subplots()
    ax.plot(t_dense, y_dense, '-', label="Dense output")
    ax.plot(t_steps, y_steps[:, 0], '.', label="Step boundaries")
    ax.plot(t_dense, jnp.abs(jnp.sin(t_dense)), '--', label=r"$|\sin t|$")
    for t_event in problem.theoretical_event_times():
        ax.axvline(t_event, color='gray', linewidth=0.5)
    ax.legend()
    ax.set_xlabel('t')
    ax.set_ylabel('y')
    plt.show()


if __name__ == "__main__":
    main()
