"""
Floating point precisions the quadrature engine is parametrised over.

A precision bundles the conversion into the working type together with the
limits (eps, tiny, huge) and the elementary functions the double exponential
transforms need. Two families are supported:

    NumpyPrecision:
        fixed width IEEE types, through numpy scalars (float16, float32,
        float64, longdouble). Arithmetic between numpy scalars of the same
        type stays in that type.

    MPMathPrecision:
        arbitrary precision through a private mpmath context, so that the
        global ``mpmath.mp`` precision can change without affecting an
        engine that has already been built.
"""

from __future__ import annotations

import contextlib
from typing import Any

import mpmath
import numpy as np

# mpmath floats do not overflow, the representable range is therefore fixed
# at 2**(+-MPMATH_EMAX), the exponent range of IEEE binary128.
MPMATH_EMAX = 16384


class Precision:
    name: str = "abstract"

    eps: Any
    tiny: Any
    huge: Any
    zero: Any
    one: Any
    pi: Any

    def __call__(self, x):
        raise NotImplementedError

    def exp(self, x):
        raise NotImplementedError

    def sinh(self, x):
        raise NotImplementedError

    def cosh(self, x):
        raise NotImplementedError

    def tanh(self, x):
        raise NotImplementedError

    def sqrt(self, x):
        raise NotImplementedError

    def isinf(self, x) -> bool:
        raise NotImplementedError

    def isnan(self, x) -> bool:
        raise NotImplementedError

    def errstate(self):
        return contextlib.nullcontext()

    def __repr__(self) -> str:
        return self.name


class NumpyPrecision(Precision):
    def __init__(self, dtype=np.float64):
        dtype = np.dtype(dtype)
        if dtype.kind != "f":
            raise TypeError(f"{dtype} is not a real floating point type")

        self.dtype = dtype
        self.type = dtype.type
        self.name = dtype.name

        info = np.finfo(dtype)
        self.eps = info.eps
        self.tiny = info.tiny
        self.huge = info.max
        self.zero = self.type(0)
        self.one = self.type(1)
        self.pi = self.type(np.pi)

    def __call__(self, x):
        return self.type(x)

    def exp(self, x):
        return np.exp(x)

    def sinh(self, x):
        return np.sinh(x)

    def cosh(self, x):
        return np.cosh(x)

    def tanh(self, x):
        return np.tanh(x)

    def sqrt(self, x):
        return np.sqrt(x)

    def isinf(self, x) -> bool:
        return bool(np.isinf(x))

    def isnan(self, x) -> bool:
        return bool(np.isnan(x))

    def errstate(self):
        return np.errstate(over="ignore", under="ignore", invalid="ignore")

    def __eq__(self, other) -> bool:
        return isinstance(other, NumpyPrecision) and other.dtype == self.dtype

    def __hash__(self) -> int:
        return hash(("numpy", self.dtype))


class MPMathPrecision(Precision):
    """
    Arbitrary precision, either as decimal places ``dps`` or as bits ``prec``.

        ctx : the private mpmath.MPContext all values are created in
        emax: binary exponent bounding the representable range
    """

    def __init__(self, dps: int = None, prec: int = None, emax: int = MPMATH_EMAX):
        if (dps is None) == (prec is None):
            raise TypeError("exactly one of dps and prec must be given")
        if emax <= 0:
            raise ValueError("emax must be positive")

        ctx = mpmath.MPContext()
        if dps is not None:
            if dps <= 0:
                raise ValueError("dps must be positive")
            ctx.dps = dps
        else:
            if prec <= 1:
                raise ValueError("prec must be greater than 1")
            ctx.prec = prec

        self.ctx = ctx
        self.emax = emax
        self.name = f"mpmath(dps={ctx.dps})"

        self.eps = ctx.eps
        self.tiny = ctx.ldexp(1, -emax)
        self.huge = ctx.ldexp(1, emax)
        self.zero = ctx.zero
        self.one = ctx.one
        self.pi = +ctx.pi

    @property
    def dps(self) -> int:
        return self.ctx.dps

    @property
    def prec(self) -> int:
        return self.ctx.prec

    def __call__(self, x):
        return self.ctx.mpf(x)

    def exp(self, x):
        return self.ctx.exp(x)

    def sinh(self, x):
        return self.ctx.sinh(x)

    def cosh(self, x):
        return self.ctx.cosh(x)

    def tanh(self, x):
        return self.ctx.tanh(x)

    def sqrt(self, x):
        return self.ctx.sqrt(x)

    def isinf(self, x) -> bool:
        return bool(self.ctx.isinf(x))

    def isnan(self, x) -> bool:
        return bool(self.ctx.isnan(x))

    def __eq__(self, other) -> bool:
        return isinstance(other, MPMathPrecision) and (other.prec, other.emax) == (self.prec, self.emax)

    def __hash__(self) -> int:
        return hash(("mpmath", self.prec, self.emax))


def get_precision(T) -> Precision:
    """
    resolve the precision argument accepted throughout the package:

        Precision instance          : returned as is
        mpmath context (mpmath.mp)  : snapshot of its current binary precision
        numpy dtype, dtype name,
        or the builtin float        : NumpyPrecision
    """
    if isinstance(T, Precision):
        return T
    if isinstance(T, mpmath.MPContext):
        return MPMathPrecision(prec=T.prec)
    try:
        dtype = np.dtype(T)
    except TypeError:
        raise TypeError(f"unsupported precision type {T!r}") from None
    return NumpyPrecision(dtype)


def default_rtol(precision: Precision):
    return precision.sqrt(precision.eps)
