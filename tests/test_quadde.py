import cmath
import math
from concurrent.futures import ThreadPoolExecutor

import mpmath
import numpy as np
import pytest
from numpy.testing import assert_allclose

from dequad import MPMathPrecision, QuadDE, default_quadde, quadde

INF = math.inf


@pytest.fixture(scope="module")
def q():
    return QuadDE(np.float64)


@pytest.mark.parametrize(
    "f, interval, true_val, rtol",
    [
        (lambda x: 2 / (1 + x * x), (-1, 1), math.pi, 1e-12),
        (lambda x: math.exp(-x), (0, INF), 1.0, 1e-10),
        (lambda x: math.exp(-x * x), (-INF, INF), math.sqrt(math.pi), 1e-10),
        (lambda x: 1 / math.sqrt(x), (0, 1), 2.0, 1e-7),
        (lambda x: math.log(x), (0, 1), -1.0, 1e-9),
        (lambda x: x * x, (0, 2), 8 / 3, 1e-12),
        (lambda x: 1 / (1 + x * x), (-INF, INF), math.pi, 1e-9),
    ],
)
def test_reference_integrals(q, f, interval, true_val, rtol):
    I, E = q(f, *interval)
    assert_allclose(I, true_val, rtol=rtol)


def test_interior_singularity(q):
    I, E = q(lambda x: 1 / math.sqrt(abs(x)), -1, 0, 1)
    assert_allclose(I, 4.0, rtol=1e-7)


class TestIntervals:
    @pytest.mark.parametrize("a, b", [(0, 1), (-INF, INF), (0, INF), (-INF, 2), (2, 5)])
    def test_antisymmetry(self, q, a, b):
        f = lambda x: math.exp(-x * x)
        I, E = q(f, a, b)
        I_rev, E_rev = q(f, b, a)
        assert I_rev == -I
        assert E_rev == E

    def test_degenerate_scalar(self, q):
        I, E = q(lambda x: x * x, 0.5, 0.5)
        assert I == 0 and E == 0

    def test_degenerate_vector(self, q):
        I, E = q(lambda x: [x, 2 * x], 3, 3)
        assert isinstance(I, np.ndarray) and I.shape == (2,)
        assert_allclose(I, [0.0, 0.0])
        assert E == 0

    def test_degenerate_at_singularity(self, q):
        with np.errstate(divide="ignore"):
            I, E = q(lambda x: 1 / x, 0, 0)
        assert I == 0 and E == 0

    def test_degenerate_infinite(self, q):
        I, E = q(lambda x: math.exp(-x), INF, INF)
        assert I == 0 and E == 0

    def test_segment_additivity(self, q):
        f = lambda x: math.exp(-x) * math.cos(x)
        I, E = q(f, 0, 1, 2)
        I1, E1 = q(f, 0, 1)
        I2, E2 = q(f, 1, 2)
        assert I == I1 + I2
        assert E == E1 + E2

    def test_reflection(self, q):
        I, E = q(lambda x: math.exp(x), -INF, 0)
        assert_allclose(I, 1.0, rtol=1e-10)
        I, E = q(lambda x: math.exp(x), -INF, 1)
        assert_allclose(I, math.e, rtol=1e-10)

    def test_shift(self, q):
        I, E = q(lambda x: math.exp(-x), 1, INF)
        assert_allclose(I, math.exp(-1), rtol=1e-10)

    def test_half_line_split(self, q):
        f = lambda x: 1 / (1 + x * x)
        I, E = q(f, -INF, 0, INF)
        assert_allclose(I, math.pi, rtol=1e-9)


class TestValues:
    def test_vector_finite(self, q):
        I, E = q(lambda x: [1.0, x, x * x], -1, 1)
        assert_allclose(I, [2.0, 0.0, 2 / 3], atol=1e-12)

    def test_vector_half_line(self, q):
        I, E = q(lambda x: np.array([math.exp(-x), 2 * math.exp(-x)]), 0, INF)
        assert_allclose(I, [1.0, 2.0], rtol=1e-10)

    def test_complex(self, q):
        I, E = q(lambda x: cmath.exp(1j * x), 0, 1)
        assert_allclose(I, math.sin(1) + 1j * (1 - math.cos(1)), rtol=1e-12)


class TestPrecisions:
    def test_single_precision(self):
        q32 = QuadDE(np.float32)
        I, E = q32(lambda x: 2 / (1 + x * x), -1, 1)
        assert type(I) is np.float32
        assert abs(I - np.float32(np.pi)) < 1e-5

        I, E = q32(lambda x: np.exp(-x), 0, INF)
        assert type(I) is np.float32
        assert abs(I - 1) < 1e-5

    def test_arbitrary_precision(self):
        precision = MPMathPrecision(dps=30, emax=1024)
        q30 = QuadDE(precision, maxlevel=8)
        I, E = q30(lambda x: x * x, 0, 2)
        with mpmath.workdps(40):
            assert abs(I - mpmath.mpf(8) / 3) < mpmath.mpf(10) ** -25

        I, E = q30(lambda x: x * x, 1, 1)
        assert I == 0 and E == 0


MP256 = MPMathPrecision(prec=256, emax=1024)
CTX = MP256.ctx
PI = +CTX.pi


@pytest.fixture(scope="module")
def q256():
    return QuadDE(MP256, maxlevel=10)


@pytest.mark.parametrize(
    "f, endpoints, exact",
    [
        (lambda x: 2 / (1 + x * x), (-1, 1), PI),
        (lambda x: 2 / (1 + x * x), (-1, 0, 1), PI),
        (lambda x: 1 / (1 + (x / 2) ** 2), (-2, 2), PI),
        (lambda x: 1 / (1 + (x / 2) ** 2), (-2, 0, 2), PI),
        (lambda x: CTX.exp(-x), (0, INF), CTX.one),
        (lambda x: CTX.exp(-x), (0, 1, INF), CTX.one),
        (lambda x: CTX.exp(-(x - 1)), (1, INF), CTX.one),
        (lambda x: CTX.exp(-(x - 1)), (1, 2, INF), CTX.one),
        (lambda x: CTX.exp(x), (-INF, 0), CTX.one),
        (lambda x: CTX.exp(x), (-INF, 1, 0), CTX.one),
        (lambda x: CTX.exp(x + 1), (-INF, -1), CTX.one),
        (lambda x: CTX.exp(x + 1), (-INF, -2, -1), CTX.one),
        (lambda x: CTX.exp(-x * x), (-INF, INF), CTX.sqrt(PI)),
        (lambda x: CTX.exp(-x * x), (-INF, 0, INF), CTX.sqrt(PI)),
    ],
)
def test_tight_rtol_in_arbitrary_precision(q256, f, endpoints, exact):
    rtol = CTX.mpf("1e-30")
    I, E = q256(f, *endpoints, rtol=rtol)
    assert isinstance(I, CTX.mpf)
    assert abs(I - exact) <= 10 * rtol * abs(exact)
    assert E <= rtol * abs(I)


def test_threads_share_an_engine(q):
    f = lambda x: math.exp(-x) / math.sqrt(x)
    intervals = [(0, 1), (0, INF), (1, 2), (0, 1)] * 4
    with ThreadPoolExecutor(max_workers=4) as executor:
        results = list(executor.map(lambda ab: q(f, *ab), intervals))
    for ab, result in zip(intervals, results):
        assert result == q(f, *ab)


class TestErrors:
    @pytest.mark.parametrize(
        "kwargs", [{"maxlevel": 0}, {"maxlevel": 2.5}, {"h0": 0}, {"h0": -1}, {"n0": 0}]
    )
    def test_invalid_construction(self, kwargs):
        with pytest.raises(ValueError):
            QuadDE(np.float64, **kwargs)

    def test_unsupported_precision(self):
        with pytest.raises(TypeError):
            QuadDE(np.int64)

    def test_negative_tolerance(self, q):
        with pytest.raises(ValueError):
            q(lambda x: x, 0, 1, atol=-1e-3)

    def test_nan_endpoint(self, q):
        with pytest.raises(ValueError):
            q(lambda x: x, 0, math.nan)

    def test_missing_endpoint(self, q):
        with pytest.raises(TypeError):
            q(lambda x: x, 0)


def test_record_spans_segments(q):
    record = []
    q(lambda x: math.exp(x), 0, 1, 2, record=record)
    levels = [level for level, _, _ in record]
    assert levels.count(1) == 2
    assert all(E >= 0 for _, _, E in record)


def test_default_engine():
    assert default_quadde() is default_quadde()
    assert repr(default_quadde()) == "QuadDE(float64, maxlevel=12, h0=1.250e-01, n0=7)"
    I, E = quadde(lambda x: 2 / (1 + x**2), -1, 1)
    assert_allclose(I, math.pi, rtol=1e-12)
    I, E = quadde(lambda x: math.exp(-x), 0, INF, rtol=1e-6)
    assert_allclose(I, 1.0, rtol=1e-6)
