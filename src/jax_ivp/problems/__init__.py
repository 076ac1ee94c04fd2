"""
Reference problems

Initial value problems with closed-form solutions, used to measure the
accuracy of steppers, dense output and event location.
"""

from .base import ErrorTracker, ReferenceProblem
from .decay import BackwardDecay, ExponentialDecay
from .oscillators import BouncingSine, HarmonicOscillator
from .polynomial import ConstantRate, PolynomialGrowth

__all__ = [
    "ReferenceProblem",
    "ErrorTracker",
    "ExponentialDecay",
    "BackwardDecay",
    "PolynomialGrowth",
    "ConstantRate",
    "HarmonicOscillator",
    "BouncingSine",
]
