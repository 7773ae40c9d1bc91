from __future__ import annotations

import logging
from typing import Any, Callable

import numpy as np

from ..precision import Precision, get_precision
from ..substitution import as_integrand
from .exp_sinh import DEFAULT_N0
from .general import converged, handle_record, mapsum, norm, resolve_tolerances
from .tables import generate_branch_tables, search_edge_t

logger = logging.getLogger(__name__)


def ss_samplepoint(precision: Precision) -> Callable[[Any], tuple[Any, Any]]:
    half_pi = precision.pi / 2

    def samplepoint(t):
        s = half_pi * precision.sinh(t)
        x = precision.sinh(s)
        w = half_pi * precision.cosh(t) * precision.cosh(s)
        return x, w

    return samplepoint


class QuadSS:
    """
    Integrate a function over (-∞, ∞) using the sinh-sinh quadrature,

        x = sinh(π/2·sinh(t)),    dx/dt = π/2·cosh(t)·cosh(π/2·sinh(t)).

    The transform is odd, so only t > 0 is tabulated and every entry samples
    both f(x) and f(-x). Truncation and refinement follow QuadES: [0, t_max]
    is divided into n0 parts, doubled up to maxlevel times.

    Arguments:
        T       : precision, see precision.get_precision
        maxlevel: maximum number of division doublings
        n0      : initial number of divisions of [0, t_max]
    """

    def __init__(self, T=np.float64, maxlevel: int = 12, n0: int = DEFAULT_N0):
        if int(maxlevel) != maxlevel or maxlevel <= 0:
            raise ValueError(f"maxlevel must be a positive integer, got {maxlevel}")
        if int(n0) != n0 or n0 <= 0:
            raise ValueError(f"n0 must be a positive integer, got {n0}")

        self.precision = get_precision(T)
        self.maxlevel = int(maxlevel)
        self.n0 = int(n0)

        samplepoint = ss_samplepoint(self.precision)
        self.tmax = search_edge_t(samplepoint, self.precision)
        self.origin = samplepoint(self.precision.zero)
        self.table0, self.tables = generate_branch_tables(samplepoint, self.maxlevel, self.n0, self.tmax)

        logger.debug(f"{self.precision}: sinh-sinh t_max = {float(self.tmax)}")

    def __call__(
        self,
        f: Callable[[Any], Any],
        atol=0,
        rtol=None,
        record: list[tuple[int, Any, Any]] = None,
        debug: bool = False,
    ) -> tuple[Any, Any]:
        """
        see QuadES.__call__, for the interval (-∞, ∞).
        """
        atol, rtol = resolve_tolerances(atol, rtol, self.precision)
        if record is None:
            record = []
        f = as_integrand(f)

        def sample(xw):
            x, w = xw
            return f(x) * w + f(-x) * w

        x0, w0 = self.origin
        total = f(x0) * w0 + mapsum(sample, self.table0)
        Ih = total * self.table0.step
        E = self.precision.zero

        for level, table in enumerate(self.tables, start=1):
            total = total + mapsum(sample, table)
            prev_Ih, Ih = Ih, total * table.step
            E = norm(prev_Ih - Ih)
            record.append((level, Ih, E))
            if converged(E, Ih, atol, rtol):
                break
        else:
            if debug:
                logger.debug(f"sinh-sinh: maxlevel {self.maxlevel} reached with E = {float(E):.4g}")

        if debug:
            handle_record(record, "sinh-sinh")

        return Ih, E

    def __repr__(self) -> str:
        return f"QuadSS({self.precision}, maxlevel={self.maxlevel}, n0={self.n0})"
