"""
===============================================================================
QUATERNION NUMERICS - Real-Number Layer Test Suite
===============================================================================
Tests for dtype resolution, the RealType cache, element-wise classification
at the normal/subnormal boundary of every supported precision, and the
rounding and exact conversions on plain arrays.
===============================================================================
"""

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import logging

import numpy as np
import pytest
from numpy.testing import assert_array_equal

from qnumerics.constants import SUPPORTED_DTYPES
from qnumerics.real import RealType, real_type, resolve_dtype


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture(params=SUPPORTED_DTYPES, ids=[d.name for d in SUPPORTED_DTYPES])
def rt(request):
    """Return the RealType of each supported precision in turn."""
    return real_type(request.param)


@pytest.fixture
def boundary_values(rt):
    """[+0, -0, smallest normal, half of it, inf, nan, 1] in rt's precision."""
    smallest_normal = rt.smallest_normal
    return np.array([0.0, -0.0, smallest_normal, smallest_normal / 2,
                     np.inf, np.nan, 1.0], dtype=rt.dtype)


# =============================================================================
# Test: dtype resolution
# =============================================================================

class TestResolveDtype:
    """Tests for turning user input into a supported precision."""

    @pytest.mark.parametrize("given,expected", [
        ('single', np.float32),
        ('HALF', np.float16),
        ('double', np.float64),
        ('float32', np.float32),
        (np.float64, np.float64),
        (np.dtype(np.longdouble), np.longdouble),
    ])
    def test_resolves(self, given, expected):
        assert resolve_dtype(given) == np.dtype(expected)

    @pytest.mark.parametrize("given", ['int32', np.int64, np.complex64,
                                       'nonsense', bool])
    def test_rejects_non_floating(self, given):
        with pytest.raises(TypeError):
            resolve_dtype(given)

    def test_real_type_is_cached(self):
        assert real_type('float32') is real_type(np.float32)
        assert real_type('single') is real_type(np.dtype('float32'))

    def test_direct_construction_compares_equal(self):
        assert RealType(np.float32) == real_type('float32')
        assert RealType(np.float32) != real_type('float64')
        assert repr(RealType(np.float16)) == 'RealType(float16)'


# =============================================================================
# Test: Distinguished values
# =============================================================================

class TestDistinguishedValues:
    """Tests for zero, one, nan, infinity and text parsing."""

    def test_values_carry_precision(self, rt):
        for value in (rt.zero, rt.one, rt.nan, rt.infinity):
            assert value.dtype == rt.dtype

    def test_values(self, rt):
        assert rt.zero == 0 and not np.signbit(rt.zero)
        assert rt.one == 1
        assert np.isnan(rt.nan)
        assert np.isposinf(rt.infinity)

    def test_parse_special_text(self, rt):
        assert np.signbit(rt.parse('-0.0')) and rt.parse('-0.0') == 0
        assert np.isneginf(rt.parse('-inf'))
        assert np.isnan(rt.parse('nan'))
        assert rt.parse('0.5') == 0.5

    @pytest.mark.parametrize("dtype", [np.float32, np.float64])
    def test_parse_rejects_garbage(self, dtype):
        with pytest.raises(ValueError):
            real_type(dtype).parse('one')


# =============================================================================
# Test: Classification
# =============================================================================

class TestClassification:
    """Element-wise predicates over the special values of each precision."""

    def test_is_finite(self, rt, boundary_values):
        assert_array_equal(rt.is_finite(boundary_values),
                           [True, True, True, True, False, False, True])

    def test_is_normal(self, rt, boundary_values):
        assert_array_equal(rt.is_normal(boundary_values),
                           [False, False, True, False, False, False, True])

    def test_is_subnormal(self, rt, boundary_values):
        assert_array_equal(rt.is_subnormal(boundary_values),
                           [False, False, False, True, False, False, False])

    def test_is_zero_ignores_sign(self, rt, boundary_values):
        assert_array_equal(rt.is_zero(boundary_values),
                           [True, True, False, False, False, False, False])

    def test_negative_values_classify_like_positive(self, rt, boundary_values):
        finite = boundary_values[np.isfinite(boundary_values)]
        assert_array_equal(rt.is_normal(-finite), rt.is_normal(finite))
        assert_array_equal(rt.is_subnormal(-finite), rt.is_subnormal(finite))

    def test_sign_minus_uses_sign_bit(self, rt):
        values = np.array([-0.0, 0.0, -1.0, 1.0, -np.inf], dtype=rt.dtype)
        assert_array_equal(rt.sign_minus(values),
                           [True, False, True, False, True])

    def test_scalar_input(self, rt):
        assert bool(rt.is_zero(rt.zero))
        assert not bool(rt.is_normal(rt.zero))


# =============================================================================
# Test: Representation and conversion
# =============================================================================

class TestConversion:
    """Tests for canonicalize, round and exactly on arrays."""

    def test_canonicalize_preserves_values_and_signs(self, rt):
        values = np.array([-0.0, 0.0, 1.5, -np.inf], dtype=rt.dtype)
        result = rt.canonicalize(values)
        assert result.dtype == rt.dtype
        assert_array_equal(result, values)
        assert_array_equal(np.signbit(result), np.signbit(values))

    def test_round_to_float32(self):
        result = real_type(np.float32).round([0.1, 1e300, 1e-50, -1e-50])
        assert result.dtype == np.float32
        assert result[0] == np.float32(0.1)
        assert np.isposinf(result[1])
        assert result[2] == 0.0 and not np.signbit(result[2])
        assert result[3] == 0.0 and np.signbit(result[3])

    def test_round_keeps_nan(self):
        assert np.isnan(real_type('half').round(np.nan))

    def test_exactly_accepts_representable(self):
        result = real_type(np.float16).exactly([0.5, -0.0, np.inf, 2048.0])
        assert result is not None
        assert result.dtype == np.float16
        assert_array_equal(result, [0.5, -0.0, np.inf, 2048.0])
        assert np.signbit(result[1])

    @pytest.mark.parametrize("values", [
        [0.5, 0.1],                # rounds
        [0.5, 1e6],                # overflows float16
        [0.5, 1e-10],              # underflows float16
        [0.5, 2049.0],             # needs 12 significand bits
        [0.5, np.nan],             # no value to preserve
    ])
    def test_exactly_rejects_any_inexact_element(self, values):
        assert real_type(np.float16).exactly(values) is None

    def test_exactly_widening_always_succeeds(self):
        values = np.array([0.1, 3.4e38, 1e-45, -0.0], dtype=np.float32)
        result = real_type(np.float64).exactly(values)
        assert result is not None
        assert_array_equal(result.astype(np.float32), values)

    def test_exactly_logs_rejection(self, caplog):
        with caplog.at_level(logging.DEBUG, logger='qnumerics.real'):
            real_type(np.float32).exactly([1.0, 0.1])
        assert 'component 1' in caplog.text
        assert 'not representable' in caplog.text

    def test_exactly_logs_nan_rejection(self, caplog):
        with caplog.at_level(logging.DEBUG, logger='qnumerics.real'):
            real_type(np.float32).exactly([np.nan])
        assert 'NaN' in caplog.text
