"""
Changes of variables reducing an arbitrary interval to one of the canonical
intervals of the kernels. Each one is a small immutable callable holding its
parameters and the wrapped integrand.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

import numpy as np


@dataclass(frozen=True)
class Integrand:
    """user integrand; list and tuple values are turned into numpy arrays."""

    f: Callable[[Any], Any]

    def __call__(self, x):
        y = self.f(x)
        if isinstance(y, (list, tuple)):
            return np.asarray(y)
        return y


def as_integrand(f: Callable[[Any], Any]) -> Callable[[Any], Any]:
    if isinstance(f, (Integrand, Shifted, Reflected, Affine)):
        return f
    return Integrand(f)


@dataclass(frozen=True)
class Shifted:
    """u -> f(u + a), maps [a, ∞) onto [0, ∞)."""

    f: Callable[[Any], Any]
    a: Any

    def __call__(self, u):
        return self.f(u + self.a)


@dataclass(frozen=True)
class Reflected:
    """u -> f(b - u), maps (-∞, b] onto [0, ∞)."""

    f: Callable[[Any], Any]
    b: Any

    def __call__(self, u):
        return self.f(self.b - u)


@dataclass(frozen=True)
class Affine:
    """u -> f(s + t·u), maps [s - t, s + t] onto [-1, 1]."""

    f: Callable[[Any], Any]
    s: Any
    t: Any

    def __call__(self, u):
        return self.f(self.s + self.t * u)
