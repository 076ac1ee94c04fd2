"""Type aliases to improve type hint readability."""

from typing import Callable, TypeAlias
from jax import Array

RHSFunction: TypeAlias = Callable[..., Array]
ScalarFunction: TypeAlias = Callable[[float], float]
SwitchingFn: TypeAlias = Callable[..., float]
ResetFn: TypeAlias = Callable[..., Array]
