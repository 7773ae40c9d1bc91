"""
Weight tables for the double exponential transforms.

Every transform x = ϕ(t) turns the integral into

      ∞
    h Σ f(ϕ(kh)) ϕ'(kh)
     k=-∞

and a table stores the (ϕ(kh), ϕ'(kh)) pairs of one refinement level. Halving
the step only adds the odd multiples of the new step, so each level holds
only the new points, and the sum of all previous levels is reused:

    level 1     : k = 1, 2, 3, ...      (step h0)
    level n > 1 : k = 1, 3, 5, ...      (step h0 / 2^(n-1))

The finite interval transform (tanh-sinh) is truncated pointwise: a level ends
as soon as the abscissa is within one eps of its limit, or the weight is no
longer a normal number. The infinite interval transforms (exp-sinh, sinh-sinh)
are truncated at a common t_max instead, found once per precision by walking
outwards until either branch stops being representable, and every level then
divides [0, t_max] into n0 * 2^level parts.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterator

from ..precision import Precision

logger = logging.getLogger(__name__)

EDGE_SEARCH_STEP = 1 / 8

SamplePoint = Callable[[Any], tuple[Any, Any]]


@dataclass(frozen=True)
class WeightTable:
    """
    pairs  : (x, w) samples of one level
    step   : the step h of the level
    outward: True if pairs run from t = 0 outwards, False if they run from the
             truncation edge inwards
    """

    pairs: tuple[tuple[Any, Any], ...]
    step: Any
    outward: bool = True

    def __len__(self) -> int:
        return len(self.pairs)

    def __getitem__(self, i):
        return self.pairs[i]

    def __iter__(self) -> Iterator[tuple[Any, Any]]:
        return iter(self.pairs)

    def ascending(self) -> tuple[tuple[Any, Any], ...]:
        """pairs ordered by increasing |t|."""
        return self.pairs if self.outward else self.pairs[::-1]


def generate_ts_tables(
    samplepoint: SamplePoint, maxlevel: int, h0, precision: Precision
) -> tuple[tuple[Any, Any], tuple[WeightTable, ...]]:
    """
    tables of a transform mapping (-∞, ∞) onto (-1, 1), for t > 0 only; the
    negative half follows from symmetry (x -> -x, w -> w).

    Returns:
        origin (ϕ(0), ϕ'(0)), tables for levels 1..maxlevel
    """
    eps, tiny = precision.eps, precision.tiny
    tables = []
    with precision.errstate():
        for level in range(1, maxlevel + 1):
            h = h0 / 2 ** (level - 1)
            k = 1
            step = 1 if level == 1 else 2
            pairs = []
            while True:
                x, w = samplepoint(k * h)
                if 1 - x <= eps:
                    break
                if w <= tiny:
                    break
                pairs.append((x, w))
                k += step
            tables.append(WeightTable(tuple(pairs), h, outward=True))

        origin = samplepoint(precision.zero)

    logger.debug(f"{precision}: tanh-sinh table sizes {[len(table) for table in tables]}")
    return origin, tuple(tables)


def representable(x, w, precision: Precision) -> bool:
    # comparisons with NaN are False
    return precision.tiny < abs(x) < precision.huge and precision.tiny < w < precision.huge


def search_edge_t(samplepoint: SamplePoint, precision: Precision, tstep=EDGE_SEARCH_STEP):
    """
    largest multiple of tstep, t, for which both samplepoint(t) and
    samplepoint(-t) are representable in the precision.
    """
    tstep = precision(tstep)
    k = 1
    with precision.errstate():
        while representable(*samplepoint(k * tstep), precision) and representable(
            *samplepoint(-k * tstep), precision
        ):
            k += 1

    if k == 1:
        raise ValueError(f"transform is not representable in {precision} even at t = ±{tstep}")

    return (k - 1) * tstep


def generate_branch_tables(
    samplepoint: SamplePoint, maxlevel: int, n0: int, tmax
) -> tuple[WeightTable, tuple[WeightTable, ...]]:
    """
    tables of one branch of a transform truncated at tmax, running from the
    edge inwards. A negative tmax gives the negative branch.

    Returns:
        level 0 table (n0 divisions), tables for levels 1..maxlevel
    """
    h0 = tmax / n0
    pairs = [samplepoint(tmax)]
    pairs.extend(samplepoint(k * h0) for k in range(n0 - 1, 0, -1))
    table0 = WeightTable(tuple(pairs), abs(h0), outward=False)

    tables = []
    n = n0
    for _ in range(maxlevel):
        n *= 2
        h = tmax / n
        tables.append(WeightTable(tuple(samplepoint(k * h) for k in range(n - 1, 0, -2)), abs(h), outward=False))

    return table0, tuple(tables)
