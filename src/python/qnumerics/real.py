"""
===============================================================================
QUATERNION NUMERICS - Real-Number Capability Layer
===============================================================================

A quaternion is generic over its underlying real-number type. In Python that
type parameter is a numpy binary floating-point dtype, and this module turns
each dtype into a ``RealType`` object exposing the capabilities the
quaternion needs and nothing more:

    - finite / infinite / NaN classification
    - normal / subnormal classification (from ``numpy.finfo``)
    - signed zero (sign-insensitive zero test, sign-bit test)
    - representation canonicalization
    - rounding conversion (total) and exact conversion (may fail)

All predicates are vectorised: they accept a scalar or an array and return a
boolean array of the same shape, so a quaternion classifies its four
components in one call.

Canonicalization
----------------
``canonicalize`` multiplies by the dtype's multiplicative identity. For IEEE
binary types this never changes a value and only matters for encodings with
redundant bit patterns. That holds for every dtype in ``SUPPORTED_DTYPES``;
it is an assumption, not a property verified for arbitrary real types.

===============================================================================
"""

import functools
import logging
import math
from typing import Optional, Union

import numpy as np
from numpy.typing import ArrayLike, DTypeLike

from qnumerics.constants import DTYPE_ALIASES, SUPPORTED_DTYPES

logger = logging.getLogger(__name__)

# Unsigned views of half and single, for reading the last significand bit
_BIT_VIEWS = {2: np.uint16, 4: np.uint32}


def _int_to_double(value) -> float:
    try:
        return float(value)
    except OverflowError:
        return math.inf if value > 0 else -math.inf


def resolve_dtype(dtype: Union[str, DTypeLike]) -> np.dtype:
    """
    Turn a dtype, scalar type or alias name into a supported numpy dtype.

    Parameters
    ----------
    dtype : str or numpy dtype-like
        ``np.float32``, ``np.dtype('float64')``, ``'single'``, ...

    Returns
    -------
    np.dtype
        One of ``SUPPORTED_DTYPES``.

    Raises
    ------
    TypeError
        If the argument does not name a binary floating-point type.
    """
    if isinstance(dtype, str) and dtype.lower() in DTYPE_ALIASES:
        return DTYPE_ALIASES[dtype.lower()]

    try:
        resolved = np.dtype(dtype)
    except TypeError as exc:
        raise TypeError(f"{dtype!r} is not a floating-point type") from exc

    if resolved not in SUPPORTED_DTYPES:
        raise TypeError(
            f"{resolved} is not a supported binary floating-point type; "
            f"expected one of {', '.join(str(d) for d in SUPPORTED_DTYPES)}"
        )
    return resolved


class RealType:
    """
    Capability set of one binary floating-point precision.

    Instances are obtained through :func:`real_type`, which caches one per
    dtype; constructing them directly works but skips the cache.

    The element-wise predicates (``is_finite``, ``is_normal``,
    ``is_subnormal``, ``is_zero``, ``sign_minus``) are public API for code
    classifying raw component arrays. :class:`Quaternion` combines them
    over its four components; its ``is_subnormal`` agrees with "some
    component subnormal, every other one zero".

    Attributes
    ----------
    dtype : np.dtype
        The wrapped precision.
    smallest_normal : np.floating
        Smallest positive magnitude with a full-precision significand.
    """

    def __init__(self, dtype: DTypeLike) -> None:
        self.dtype = resolve_dtype(dtype)
        self._info = np.finfo(self.dtype)
        self.smallest_normal = self._info.smallest_normal

    # =========================================================================
    # DISTINGUISHED VALUES
    # =========================================================================

    @property
    def name(self) -> str:
        return self.dtype.name

    @property
    def zero(self) -> np.floating:
        return self.dtype.type(0)

    @property
    def one(self) -> np.floating:
        return self.dtype.type(1)

    @property
    def nan(self) -> np.floating:
        return self.dtype.type('nan')

    @property
    def infinity(self) -> np.floating:
        return self.dtype.type('inf')

    def parse(self, text: str) -> np.floating:
        """Parse decimal text (including 'inf', 'nan', '-0.0') at full precision."""
        return self.dtype.type(text)

    # =========================================================================
    # CLASSIFICATION
    # =========================================================================

    def is_finite(self, values: ArrayLike) -> np.ndarray:
        return np.isfinite(values)

    def is_normal(self, values: ArrayLike) -> np.ndarray:
        """Finite with a magnitude at or above the smallest normal."""
        values = np.asarray(values)
        return np.isfinite(values) & (np.abs(values) >= self.smallest_normal)

    def is_subnormal(self, values: ArrayLike) -> np.ndarray:
        """Finite, nonzero, and below the smallest normal magnitude."""
        values = np.asarray(values)
        return (np.isfinite(values)
                & (values != 0)
                & (np.abs(values) < self.smallest_normal))

    def is_zero(self, values: ArrayLike) -> np.ndarray:
        # +0.0 and -0.0 both compare equal to zero
        return np.asarray(values) == 0

    def sign_minus(self, values: ArrayLike) -> np.ndarray:
        # Sign bit, not comparison: -0.0 and -nan are minus
        return np.signbit(values)

    # =========================================================================
    # REPRESENTATION
    # =========================================================================

    def canonicalize(self, values: ArrayLike) -> np.ndarray:
        return np.asarray(values, dtype=self.dtype) * self.one

    def round(self, values: ArrayLike) -> np.ndarray:
        """
        Convert to this precision with round-to-nearest, ties to even.

        Total: overflow produces infinities, underflow produces subnormals or
        signed zeros, NaN stays NaN. numpy's cast warnings are silenced
        because the precision loss is the requested behaviour. Python ints
        too large for a float64 round like any other value instead of
        raising ``OverflowError``.

        Returns
        -------
        np.ndarray
            Array of this dtype with the input's shape.
        """
        source = self._coerce(values)
        with np.errstate(all='ignore'):
            converted = source.astype(self.dtype)
            if self._rounds_twice(source.dtype):
                converted = self._nearest(source, converted)
        return converted

    def _coerce(self, values: ArrayLike) -> np.ndarray:
        """Numeric array for ``values``; oversized Python ints become floats."""
        source = np.asarray(values)
        if source.dtype != object:
            return source

        if self.dtype == np.longdouble:
            with np.errstate(all='ignore'):
                parsed = [np.longdouble(str(v)) for v in source.flat]
            return np.array(parsed, dtype=np.longdouble).reshape(source.shape)
        return np.array([_int_to_double(v) for v in source.flat],
                        dtype=np.float64).reshape(source.shape)

    def _rounds_twice(self, source_dtype: np.dtype) -> bool:
        # numpy narrows longdouble to half/single by way of double
        return (source_dtype == np.longdouble
                and np.finfo(np.longdouble).nmant > np.finfo(np.float64).nmant
                and self.dtype.itemsize in _BIT_VIEWS)

    def _nearest(self, source: np.ndarray, converted: np.ndarray) -> np.ndarray:
        """
        Re-round a cast result to whichever neighbour is closest to ``source``.

        ``converted`` is off by at most one step, so the answer is it or one
        of its two neighbours. Distances are measured in the source precision.
        Infinity stands for 2**maxexp, the first power of two past the
        largest finite value, which gives IEEE overflow rounding.
        """
        wide = source.dtype
        overflow = np.ldexp(wide.type(1), self._info.maxexp)
        bits = _BIT_VIEWS[self.dtype.itemsize]

        def distance(candidate):
            value = candidate.astype(wide)
            value = np.where(np.isinf(value), np.copysign(overflow, value), value)
            return np.abs(source - value)

        def is_even(candidate):
            return (np.asarray(candidate).view(bits) & 1) == 0

        finite = np.isfinite(source)
        best = converted
        best_distance = distance(best)
        for direction in (-np.inf, np.inf):
            candidate = np.nextafter(converted, self.dtype.type(direction))
            candidate_distance = distance(candidate)
            closer = finite & (
                (candidate_distance < best_distance)
                | ((candidate_distance == best_distance)
                   & is_even(candidate) & ~is_even(best))
            )
            best = np.where(closer, candidate, best)
            best_distance = np.where(closer, candidate_distance, best_distance)
        return np.asarray(best, dtype=self.dtype)

    def exactly(self, values: ArrayLike) -> Optional[np.ndarray]:
        """
        Convert to this precision only if no element changes value.

        Conversion is all-or-nothing: a single element that would round,
        overflow or underflow rejects the whole array. NaN carries no value
        to preserve and is never exactly representable; signed zeros and
        infinities are.

        Parameters
        ----------
        values : array_like
            Source values in any supported precision.

        Returns
        -------
        np.ndarray or None
            The converted array, or None if any element is not representable.
        """
        source = np.asarray(values)

        if np.isnan(source).any():
            logger.debug("Exact conversion to %s rejected: NaN component",
                         self.name)
            return None

        with np.errstate(all='ignore'):
            converted = source.astype(self.dtype)
            restored = converted.astype(source.dtype)

        mismatched = np.flatnonzero(restored != source)
        if mismatched.size:
            logger.debug(
                "Exact conversion %s -> %s rejected: component %d (%r) "
                "is not representable", source.dtype, self.name,
                int(mismatched[0]), source.flat[mismatched[0]])
            return None

        return converted

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RealType):
            return NotImplemented
        return self.dtype == other.dtype

    def __hash__(self) -> int:
        return hash(self.dtype)

    def __repr__(self) -> str:
        return f"RealType({self.name})"


@functools.lru_cache(maxsize=None)
def _cached_real_type(dtype: np.dtype) -> RealType:
    return RealType(dtype)


def real_type(dtype: Union[str, DTypeLike]) -> RealType:
    """Return the shared :class:`RealType` for ``dtype``."""
    return _cached_real_type(resolve_dtype(dtype))
