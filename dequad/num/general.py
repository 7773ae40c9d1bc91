from __future__ import annotations

import logging
from typing import Callable, Iterable, Sequence, TypeVar

import numpy as np

from ..precision import Precision, default_rtol

T = TypeVar("T")
logger = logging.getLogger(__name__)

# below this many terms a block is summed sequentially
PAIRWISE_BLOCK = 8


def sum_pairwise(sample: Callable[[T], object], table: Sequence[T], start: int, stop: int):
    """
    sum sample(table[i]) for start <= i < stop by recursive halving, so that
    the rounding error grows as O(log n) instead of O(n). The range must not
    be empty.
    """
    n = stop - start
    if n <= PAIRWISE_BLOCK:
        total = sample(table[start])
        for i in range(start + 1, stop):
            total = total + sample(table[i])
        return total

    mid = start + n // 2
    return sum_pairwise(sample, table, start, mid) + sum_pairwise(sample, table, mid, stop)


def mapsum(sample: Callable[[T], object], table: Sequence[T], start: int = 0):
    """pairwise sum of sample over table[start:], 0 for an empty range."""
    if start >= len(table):
        return 0
    return sum_pairwise(sample, table, start, len(table))


def norm(y):
    """
    Euclidean norm of an integrand value. Scalars (real, complex, numpy or
    mpmath) give abs(y); arrays give the 2-norm of all their elements.
    """
    if isinstance(y, np.ndarray):
        if y.dtype == object:
            return sum((abs(v) ** 2 for v in y.flat), 0) ** 0.5
        return np.linalg.norm(y)
    return abs(y)


def is_negligible(y) -> bool:
    return norm(y) == 0


def zero_like(y):
    """additive identity with the type and shape of y, without using y's value."""
    if isinstance(y, np.ndarray):
        if y.dtype == object:
            zeros = np.empty(y.shape, dtype=object)
            for i, v in enumerate(y.flat):
                zeros.flat[i] = type(v)(0)
            return zeros
        return np.zeros_like(y)
    return type(y)(0)


def resolve_tolerances(atol, rtol, precision: Precision) -> tuple:
    """
    atol: absolute tolerance, non-negative
    rtol: relative tolerance, non-negative. None selects 0 when atol is
          positive, otherwise sqrt(eps) of the precision.
    """
    if atol < 0:
        raise ValueError(f"atol must be non-negative, got {atol}")
    if rtol is None:
        rtol = precision.zero if atol > 0 else default_rtol(precision)
    elif rtol < 0:
        raise ValueError(f"rtol must be non-negative, got {rtol}")
    return atol, rtol


def converged(E, Ih, atol, rtol) -> bool:
    # a NaN error estimate compares False and terminates the refinement.
    return not E > max(norm(Ih) * rtol, atol)


def handle_record(record: Iterable[tuple[int, object, object]], header: str = "record"):
    output_string = f"\n{header}:\n"
    output_string += "{:^8}|{:^28}|{:^12}|\n".format("level", "norm(I)", "E")
    for level, Ih, E in record:
        output_string += "{:^8}|{:^28.20g}|{:^12.4g}|\n".format(level, float(norm(Ih)), float(E))

    logger.debug(output_string)
