"""
Double exponential quadrature over arbitrary intervals.

QuadDE owns one kernel of each kind and reduces an interval to the canonical
interval of one of them:

    [-1, 1]     tanh-sinh   (QuadTS)
    [0, ∞)      exp-sinh    (QuadES)
    (-∞, ∞)     sinh-sinh   (QuadSS)

    b                               given:
    ∫ f(x) dx -> ∫ f(u + a) du      [a, ∞)      u in [0, ∞)
    a             ∫ f(b - u) du     (-∞, b]     u in [0, ∞)
                 t∫ f(s + t·u) du   [a, b]      u in [-1, 1], s = (a + b)/2,
                                                              t = (b - a)/2
"""

from __future__ import annotations

import functools
import logging
from typing import Any, Callable

import numpy as np

from .num.exp_sinh import DEFAULT_N0, QuadES
from .num.general import resolve_tolerances, zero_like
from .num.sinh_sinh import QuadSS
from .num.tanh_sinh import DEFAULT_H0, QuadTS
from .precision import get_precision
from .substitution import Affine, Reflected, Shifted, as_integrand

logger = logging.getLogger(__name__)

DEFAULT_MAXLEVEL = 12


class QuadDE:
    """
    Integrate a function over an arbitrary interval with the double
    exponential formulas. Each of the endpoints may be infinite, and may also
    carry a singularity or discontinuity of the integrand.

    All weight tables are computed on construction; the object is immutable
    afterwards and may be reused (also from several threads) for any number
    of integrations.

    Arguments:
        T       : precision, see precision.get_precision
        maxlevel: maximum number of refinements of every kernel
        h0      : initial step of the tanh-sinh kernel
        n0      : initial number of divisions of the exp-sinh and sinh-sinh
                  kernels
    """

    def __init__(self, T=np.float64, maxlevel: int = DEFAULT_MAXLEVEL, h0=DEFAULT_H0, n0: int = DEFAULT_N0):
        self.precision = get_precision(T)
        self.qts = QuadTS(self.precision, maxlevel=maxlevel, h0=h0)
        self.qes = QuadES(self.precision, maxlevel=maxlevel, n0=n0)
        self.qss = QuadSS(self.precision, maxlevel=maxlevel, n0=n0)
        self.maxlevel = self.qts.maxlevel

    def __call__(
        self,
        f: Callable[[Any], Any],
        a,
        b,
        *c,
        atol=0,
        rtol=None,
        record: list[tuple[int, Any, Any]] = None,
        debug: bool = False,
    ) -> tuple[Any, Any]:
        """
        Numerically integrate f(x) over [a, b] and return the integral I and
        an estimated error E. E is not the difference from the true value, but
        I can be taken as converged if E <= max(atol, rtol*norm(I)); otherwise
        maxlevel was exhausted first and I is unreliable.

        Further endpoints c... split the interval, returning

            ∫f(x)dx in [a, b] + ∫f(x)dx in [b, c[0]] + ...

        which isolates singularities or discontinuities at the interior
        points. atol is shared equally between the segments, and the errors
        of the segments are added up.

        Arguments:
            f      : integrand, returning a scalar or an array (list and tuple
                     values are converted) of the same shape on every call
            a, b, c: endpoints, any of which may be ±inf
            atol   : absolute tolerance
            rtol   : relative tolerance, defaults to sqrt(eps) if atol is 0
            record : optional, collects (level, I, E) of every refinement, of
                     every segment
            debug  : optional, logs the refinement history
        """
        atol, rtol = resolve_tolerances(atol, rtol, self.precision)
        f = as_integrand(f)
        if not c:
            return self.integrate(f, a, b, atol, rtol, record, debug)

        endpoints = (a, b, *c)
        n = len(endpoints) - 1
        segment_atol = atol / n
        I, E = self.integrate(f, a, b, segment_atol, rtol, record, debug)
        for lower, upper in zip(endpoints[1:], endpoints[2:]):
            dI, dE = self.integrate(f, lower, upper, segment_atol, rtol, record, debug)
            I = I + dI
            E = E + dE
        return I, E

    def integrate(self, f, a, b, atol, rtol, record=None, debug=False) -> tuple[Any, Any]:
        """integrate f over the single interval [a, b], tolerances already resolved."""
        P = self.precision
        a, b = P(a), P(b)
        if P.isnan(a) or P.isnan(b):
            raise ValueError(f"interval endpoints must not be NaN, got [{a}, {b}]")

        if a > b:
            I, E = self.integrate(f, b, a, atol, rtol, record, debug)
            return -I, E

        if a == b:
            return zero_like(f(a)), P.zero

        if debug:
            logger.debug(f"integrating over [{a}, {b}]")

        a_inf, b_inf = P.isinf(a), P.isinf(b)
        if a_inf and b_inf:
            # a < b, hence (-∞, ∞)
            return self.qss(f, atol=atol, rtol=rtol, record=record, debug=debug)
        elif b_inf:
            if a == 0:
                return self.qes(f, atol=atol, rtol=rtol, record=record, debug=debug)
            return self.qes(Shifted(f, a), atol=atol, rtol=rtol, record=record, debug=debug)
        elif a_inf:
            return self.qes(Reflected(f, b), atol=atol, rtol=rtol, record=record, debug=debug)
        elif a == -1 and b == 1:
            return self.qts(f, atol=atol, rtol=rtol, record=record, debug=debug)
        else:
            s = (b + a) / 2
            t = (b - a) / 2
            I, E = self.qts(Affine(f, s, t), atol=atol / t, rtol=rtol, record=record, debug=debug)
            return I * t, E * t

    def __repr__(self) -> str:
        return (
            f"QuadDE({self.precision}, maxlevel={self.maxlevel}, "
            + f"h0={float(self.qts.h0):.3e}, n0={self.qes.n0})"
        )


@functools.lru_cache(maxsize=None)
def default_quadde() -> QuadDE:
    """
    process wide QuadDE in double precision, built on first use. It owns no
    external resources and needs no teardown.
    """
    return QuadDE(np.float64)


def quadde(f: Callable[[Any], Any], a, b, *c, atol=0, rtol=None) -> tuple[Any, Any]:
    """
    Integrate f(x) over [a, b] (split at c..., if given) with the default
    double precision QuadDE, see QuadDE.__call__.

    >>> I, E = quadde(lambda x: 2 / (1 + x**2), -1, 1)
    >>> bool(abs(I - np.pi) < 1e-12)
    True
    """
    return default_quadde()(f, a, b, *c, atol=atol, rtol=rtol)


def main():
    import math
    import time

    logging.basicConfig(encoding="utf-8", level=logging.INFO)

    cases = (
        ("2/(1+x^2)", lambda x: 2 / (1 + x**2), (-1, 1), math.pi),
        ("exp(-x)", lambda x: math.exp(-x), (0, math.inf), 1.0),
        ("exp(-x^2)", lambda x: math.exp(-x * x), (-math.inf, math.inf), math.sqrt(math.pi)),
        ("1/sqrt(x)", lambda x: 1 / math.sqrt(x), (0, 1), 2.0),
        ("log(x)", lambda x: math.log(x), (0, 1), -1.0),
        ("1/sqrt(|x|)", lambda x: 1 / math.sqrt(abs(x)), (-1, 0, 1), 4.0),
    )

    t_0 = time.time()
    q = QuadDE(np.float64)
    print(f"{q} built in {time.time() - t_0:.3f} s")

    for name, f, interval, true_val in cases:
        t_0 = time.time()
        I, E = q(f, *interval)
        t_1 = time.time()
        print(f"{name:<12} over {interval}: I = {I:.16g}, E = {E:.3e}, error = {I - true_val:.3e}, {t_1 - t_0:.4f} s")


if __name__ == "__main__":
    main()
