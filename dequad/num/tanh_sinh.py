from __future__ import annotations

import logging
from typing import Any, Callable

import numpy as np

from ..precision import Precision, get_precision
from ..substitution import as_integrand
from .general import converged, handle_record, mapsum, norm, resolve_tolerances
from .tables import generate_ts_tables

logger = logging.getLogger(__name__)

DEFAULT_H0 = 1 / 8


def ts_samplepoint(precision: Precision) -> Callable[[Any], tuple[Any, Any]]:
    half_pi = precision.pi / 2

    def samplepoint(t):
        s = half_pi * precision.sinh(t)
        x = precision.tanh(s)
        w = half_pi * precision.cosh(t) / precision.cosh(s) ** 2
        return x, w

    return samplepoint


class QuadTS:
    """
    Integrate a function over [-1, 1] using the tanh-sinh quadrature,

        x = tanh(π/2·sinh(t)),    dx/dt = π/2·cosh(t) / cosh²(π/2·sinh(t)),

    which makes the integrand decay double exponentially as t -> ±∞, so
    that singularities or discontinuities at ±1 are harmless. The trapezoidal
    rule is applied with the step h0, which is then halved up to maxlevel
    times, until two successive estimates agree to the tolerance.

    Arguments:
        T       : precision, see precision.get_precision
        maxlevel: maximum number of step halvings
        h0      : initial step size
    """

    def __init__(self, T=np.float64, maxlevel: int = 10, h0=DEFAULT_H0):
        if int(maxlevel) != maxlevel or maxlevel <= 0:
            raise ValueError(f"maxlevel must be a positive integer, got {maxlevel}")
        if not h0 > 0:
            raise ValueError(f"h0 must be positive, got {h0}")

        self.precision = get_precision(T)
        self.maxlevel = int(maxlevel)
        self.h0 = self.precision(h0)
        self.origin, self.tables = generate_ts_tables(
            ts_samplepoint(self.precision), self.maxlevel, self.h0, self.precision
        )

    def __call__(
        self,
        f: Callable[[Any], Any],
        atol=0,
        rtol=None,
        record: list[tuple[int, Any, Any]] = None,
        debug: bool = False,
    ) -> tuple[Any, Any]:
        """
        Arguments:
            f      : integrand, called with values of the precision, returning
                     a scalar or an array of fixed shape
            atol   : absolute tolerance
            rtol   : relative tolerance, defaults to sqrt(eps) if atol is 0
            record : optional, if supplied each level appends (level, I, E)
            debug  : optional, logs the refinement history

        Returns:
            I, E. The estimate I is converged if E <= max(atol, rtol*norm(I));
            otherwise maxlevel was exhausted first.
        """
        atol, rtol = resolve_tolerances(atol, rtol, self.precision)
        if record is None:
            record = []
        f = as_integrand(f)

        def sample(xw):
            x, w = xw
            return f(x) * w + f(-x) * w

        x0, w0 = self.origin
        total = f(x0) * w0
        Ih = total * self.h0
        E = self.precision.zero
        for level, table in enumerate(self.tables, start=1):
            total = total + mapsum(sample, table)
            prev_Ih, Ih = Ih, total * table.step
            E = norm(prev_Ih - Ih)
            record.append((level, Ih, E))
            # level 1 only compares against the origin term
            if level > 1 and converged(E, Ih, atol, rtol):
                break
        else:
            if debug:
                logger.debug(f"tanh-sinh: maxlevel {self.maxlevel} reached with E = {float(E):.4g}")

        if debug:
            handle_record(record, "tanh-sinh")

        return Ih, E

    def __repr__(self) -> str:
        return f"QuadTS({self.precision}, maxlevel={self.maxlevel}, h0={float(self.h0):.3e})"
