from __future__ import annotations

import logging
from typing import Any, Callable

import numpy as np

from ..precision import Precision, get_precision
from ..substitution import as_integrand
from .general import converged, handle_record, is_negligible, mapsum, norm, resolve_tolerances
from .tables import WeightTable, generate_branch_tables, search_edge_t

logger = logging.getLogger(__name__)

DEFAULT_N0 = 7


def es_samplepoint(precision: Precision) -> Callable[[Any], tuple[Any, Any]]:
    half_pi = precision.pi / 2

    def samplepoint(t):
        x = precision.exp(half_pi * precision.sinh(t))
        w = half_pi * precision.cosh(t) * x
        return x, w

    return samplepoint


def start_index(f: Callable[[Any], Any], table: WeightTable) -> int:
    """
    first position whose term f(x)·w is not exactly zero, or len(table) if
    there is none. The table runs from the truncation edge inwards, so the
    leading run of zero terms is the far tail where the integrand has decayed
    (or the weight vanished) to nothing. Only that run is skipped; a later
    zero gap followed by non-zero terms is summed as usual.
    """
    for i in range(len(table)):
        x, w = table[i]
        if not is_negligible(f(x) * w):
            return i
    return len(table)


class QuadES:
    """
    Integrate a function over [0, ∞) using the exp-sinh quadrature,

        x = exp(π/2·sinh(t)),    dx/dt = π/2·cosh(t)·exp(π/2·sinh(t)).

    t -> +∞ sends x to ∞ and t -> -∞ sends x to 0+, so both branches of t are
    sampled, each up to the truncation point t_max at which the precision can
    no longer represent the abscissa or weight. [0, t_max] is divided into n0
    parts at first, and the number of divisions is doubled up to maxlevel
    times until two successive estimates agree to the tolerance.

    Terms in the far tail of either branch frequently vanish altogether, for
    quickly decaying integrands. Every level of each branch starts summing at
    its first non-vanishing term, which leaves the result unchanged.

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

        samplepoint = es_samplepoint(self.precision)
        self.tmax = search_edge_t(samplepoint, self.precision)
        self.origin = samplepoint(self.precision.zero)
        self.table0_pos, self.tables_pos = generate_branch_tables(samplepoint, self.maxlevel, self.n0, self.tmax)
        self.table0_neg, self.tables_neg = generate_branch_tables(samplepoint, self.maxlevel, self.n0, -self.tmax)

        logger.debug(f"{self.precision}: exp-sinh t_max = {float(self.tmax)}")

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
            return f(x) * w

        x0, w0 = self.origin
        total = f(x0) * w0
        start_pos = start_index(f, self.table0_pos)
        start_neg = start_index(f, self.table0_neg)
        total = total + mapsum(sample, self.table0_pos, start_pos)
        total = total + mapsum(sample, self.table0_neg, start_neg)
        Ih = total * self.table0_pos.step
        E = self.precision.zero

        for level, (table_pos, table_neg) in enumerate(zip(self.tables_pos, self.tables_neg), start=1):
            start_pos = start_index(f, table_pos)
            start_neg = start_index(f, table_neg)
            total = total + mapsum(sample, table_pos, start_pos)
            total = total + mapsum(sample, table_neg, start_neg)

            prev_Ih, Ih = Ih, total * table_pos.step
            E = norm(prev_Ih - Ih)
            record.append((level, Ih, E))
            if converged(E, Ih, atol, rtol):
                break
        else:
            if debug:
                logger.debug(f"exp-sinh: maxlevel {self.maxlevel} reached with E = {float(E):.4g}")

        if debug:
            logger.debug(f"exp-sinh: summation started at {start_pos} (+) and {start_neg} (-)")
            handle_record(record, "exp-sinh")

        return Ih, E

    def __repr__(self) -> str:
        return f"QuadES({self.precision}, maxlevel={self.maxlevel}, n0={self.n0})"
