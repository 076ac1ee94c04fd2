"""
JAX initial value problem integrators

Fixed-step explicit Runge-Kutta integration of y' = f(t, y) with dense
output and event (switching function) detection.

Main components:
- integrator: the integration driver
- timesteppers: explicit stepping schemes
- interpolators: dense output inside completed steps
- events: switching functions and the root-bracketing detector
- observers: step observers recording or sampling the trajectory

Double precision requires `jax.config.update("jax_enable_x64", True)`.
"""

# Integration driver and functional interfaces
from .integrator import Integrator, RunStatus
from .solve import solve_ivp, solve_with_history

# Equations
from .equations import Equation, FunctionEquation, as_equation

# Time-stepping schemes
from .timesteppers import AbstractStepper, ForwardEuler, Midpoint, RK4, Step, StepperProtocol

# Dense output
from .interpolators import HermiteInterpolator, InterpolatorProtocol

# Root finding
from .rootfinders import Brent, RootFinderProtocol

# Events
from .events import Action, EventDetector, EventHandler, EventSettings, SwitchingFunction

# Step observers
from .observers import DenseOutputSampler, StepNormalizer, StepObserver, StepRecorder

# Errors
from .exceptions import (
    BracketingError,
    DegenerateStepError,
    DimensionMismatchError,
    IntegrationError,
    InterpolationRangeError,
    StepExhaustionError,
)

__all__ = [
    # Integration driver
    "Integrator",
    "RunStatus",
    "solve_ivp",
    "solve_with_history",

    # Equations
    "Equation",
    "FunctionEquation",
    "as_equation",

    # Time-stepping methods
    "AbstractStepper",
    "StepperProtocol",
    "Step",
    "ForwardEuler",
    "Midpoint",
    "RK4",

    # Dense output
    "HermiteInterpolator",
    "InterpolatorProtocol",

    # Root finding
    "Brent",
    "RootFinderProtocol",

    # Events
    "Action",
    "EventHandler",
    "EventSettings",
    "EventDetector",
    "SwitchingFunction",

    # Step observers
    "StepObserver",
    "StepRecorder",
    "DenseOutputSampler",
    "StepNormalizer",

    # Errors
    "IntegrationError",
    "DimensionMismatchError",
    "DegenerateStepError",
    "BracketingError",
    "StepExhaustionError",
    "InterpolationRangeError",
]
