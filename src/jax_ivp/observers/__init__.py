"""Step observers receiving the dense output of accepted steps."""

from .protocol import StepObserver
from .recorders import DenseOutputSampler, StepNormalizer, StepRecorder

__all__ = [
    "StepObserver",
    "StepRecorder",
    "DenseOutputSampler",
    "StepNormalizer",
]
