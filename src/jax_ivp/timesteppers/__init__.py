"""Time-stepping schemes for initial value problems."""

from .base import AbstractStepper, Step, check_step_size
from .explicit import ForwardEuler, Midpoint, RK4
from .protocol import StepperProtocol

__all__ = [
    # Base class and step record
    'AbstractStepper',
    'Step',
    'StepperProtocol',
    'check_step_size',

    # Explicit methods
    'ForwardEuler',
    'Midpoint',
    'RK4',
]
