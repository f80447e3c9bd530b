"""
===============================================================================
QUATERNION NUMERICS - Quaternion Value Type
===============================================================================

A quaternion over a binary floating-point precision: one real (scalar) part
and three imaginary (vector) parts,

    q = x*i + y*j + z*k + r

This module covers the numeric classification of quaternions, their two
canonical forms, construction, and conversion between precisions. Quaternion
arithmetic, norms, transcendental functions and formatting are built on top
of it elsewhere.

Convention
----------
Components are stored scalar-last in a single numpy array:

    [x, y, z, r]

The precision is a numpy dtype (float16, float32, float64, longdouble) carried
by every instance; all four components always share it.

Special values
--------------
A quaternion with any infinite or NaN component is "not finite", and all
non-finite quaternions are treated as one point at infinity. Reading ``real``
or ``imaginary`` of such a value yields NaN, and its canonical form is
(+0, +0, +0, +inf) regardless of which component was non-finite or what the
others held. Zeros are likewise collapsed to (+0, +0, +0, +0) on
canonicalization, whatever their sign bits.

Equality is component-wise. A quaternion and its negation are different
values even though they describe the same 3D rotation; use
``canonicalized_transform`` to pick a single representative with a
non-negative real part before comparing them as transforms.

===============================================================================
"""

import logging
from typing import Optional, Tuple, Union

import numpy as np
from numpy.typing import ArrayLike, DTypeLike

from qnumerics.constants import (
    DEFAULT_DTYPE, IDX_R, IMAGINARY_SLICE, N_COMPONENTS, N_IMAGINARY,
)
from qnumerics.real import RealType, real_type, resolve_dtype

logger = logging.getLogger(__name__)

Real = Union[float, int, np.floating]


def _infer_dtype(*values) -> np.dtype:
    """
    Precision implied by the numpy floating inputs.

    Plain Python numbers carry no precision of their own and do not take
    part, so ``Quaternion(np.float32(1), (0.0, 0.0, 0.0))`` stays float32.
    With no numpy floating input the result is ``DEFAULT_DTYPE``.
    """
    floating = [
        np.asarray(v).dtype for v in values
        if isinstance(v, (np.ndarray, np.floating))
        and np.asarray(v).dtype.kind == 'f'
    ]
    if not floating:
        return DEFAULT_DTYPE
    return resolve_dtype(np.result_type(*floating))


def _imaginary_values(imaginary: ArrayLike) -> Tuple[list, np.ndarray]:
    """Validate a 3-vector; return its dtype-inference inputs and its values."""
    if isinstance(imaginary, np.ndarray):
        parts = [imaginary]
        values = imaginary
    else:
        parts = list(imaginary) if np.iterable(imaginary) else [imaginary]
        values = np.asarray(parts)
    if values.shape != (N_IMAGINARY,):
        raise ValueError(
            f"Imaginary part must have exactly {N_IMAGINARY} components, "
            f"got shape {values.shape}"
        )
    return parts, values


class Quaternion:
    """
    Quaternion over a numpy binary floating-point precision.

    Instances behave as values: every derived quaternion is a new object and
    no two instances share storage. The ``real`` and ``imaginary`` setters
    mutate in place, so call :meth:`copy` before mutating a quaternion that
    is also held elsewhere.

    Parameters
    ----------
    real : float
        Real (scalar) part.
    imaginary : array_like of 3 floats
        Coefficients of i, j and k.
    dtype : numpy dtype-like, optional
        Precision of the components. Inferred from numpy floating inputs
        when omitted, falling back to float64.

    Examples
    --------
    >>> q = Quaternion(2.0, (1.0, 0.0, -1.0))
    >>> q.is_finite, q.is_pure
    (True, False)
    >>> Quaternion(-3.0, (1.0, 2.0, 3.0)).canonicalized_transform
    Quaternion(real=3.0, imaginary=(-1.0, -2.0, -3.0), dtype=float64)
    """

    def __init__(self, real: Real = 0.0,
                 imaginary: ArrayLike = (0.0, 0.0, 0.0),
                 dtype: Optional[DTypeLike] = None) -> None:
        parts, values = _imaginary_values(imaginary)
        if dtype is None:
            resolved = _infer_dtype(real, *parts)
        else:
            resolved = resolve_dtype(dtype)

        self._real_type = real_type(resolved)
        self._q = np.empty(N_COMPONENTS, dtype=resolved)
        self._q[IMAGINARY_SLICE] = self._real_type.round(values)
        self._q[IDX_R] = self._real_type.round(real)

    @classmethod
    def _from_components(cls, components: np.ndarray,
                         rt: RealType) -> 'Quaternion':
        """Wrap a scalar-last array already in ``rt``'s precision."""
        q = cls.__new__(cls)
        q._real_type = rt
        q._q = components
        return q

    # =========================================================================
    # CONSTRUCTORS
    # =========================================================================

    @classmethod
    def from_real(cls, real: Real,
                  dtype: Optional[DTypeLike] = None) -> 'Quaternion':
        """Quaternion with the given real part and zero imaginary part."""
        return cls(real, (0, 0, 0), dtype=dtype)

    @classmethod
    def from_imaginary(cls, x: Union[Real, ArrayLike],
                       y: Optional[Real] = None,
                       z: Optional[Real] = None,
                       dtype: Optional[DTypeLike] = None) -> 'Quaternion':
        """
        Pure quaternion with the given imaginary part and zero real part.

        Accepts either three coefficients, ``from_imaginary(x, y, z)``, or
        one 3-vector, ``from_imaginary(v)``.
        """
        if y is None and z is None:
            imaginary = x
        elif y is None or z is None:
            raise ValueError("Pass either a 3-vector or all of x, y and z")
        else:
            imaginary = (x, y, z)
        return cls(0, imaginary, dtype=dtype)

    @classmethod
    def from_components(cls, components: ArrayLike,
                        dtype: Optional[DTypeLike] = None) -> 'Quaternion':
        """
        Quaternion from a raw scalar-last array ``[x, y, z, r]``.

        Raises
        ------
        ValueError
            If ``components`` does not hold exactly four values.
        """
        array = np.asarray(components)
        if array.shape != (N_COMPONENTS,):
            raise ValueError(
                f"Expected {N_COMPONENTS} components [x, y, z, r], "
                f"got shape {array.shape}"
            )
        if dtype is None:
            dtype = _infer_dtype(array)
        rt = real_type(dtype)
        return cls._from_components(rt.round(array), rt)

    # =========================================================================
    # NAMED CONSTANTS
    # =========================================================================

    @classmethod
    def zero(cls, dtype: Optional[DTypeLike] = None) -> 'Quaternion':
        """The additive identity, (+0, +0, +0, +0)."""
        return cls.from_real(0, dtype=dtype)

    @classmethod
    def one(cls, dtype: Optional[DTypeLike] = None) -> 'Quaternion':
        """The multiplicative identity, 1 + 0i + 0j + 0k."""
        return cls.from_real(1, dtype=dtype)

    @classmethod
    def i(cls, dtype: Optional[DTypeLike] = None) -> 'Quaternion':
        return cls.from_imaginary(1, 0, 0, dtype=dtype)

    @classmethod
    def j(cls, dtype: Optional[DTypeLike] = None) -> 'Quaternion':
        return cls.from_imaginary(0, 1, 0, dtype=dtype)

    @classmethod
    def k(cls, dtype: Optional[DTypeLike] = None) -> 'Quaternion':
        return cls.from_imaginary(0, 0, 1, dtype=dtype)

    @classmethod
    def infinity(cls, dtype: Optional[DTypeLike] = None) -> 'Quaternion':
        """
        The point at infinity.

        Its representation is (+0, +0, +0, +inf); it stands for every
        non-finite quaternion.
        """
        return cls.from_real(np.inf, dtype=dtype)

    # =========================================================================
    # PROPERTIES - component access
    # =========================================================================

    @property
    def dtype(self) -> np.dtype:
        return self._real_type.dtype

    @property
    def real_type(self) -> RealType:
        return self._real_type

    @property
    def components(self) -> np.ndarray:
        """
        Raw storage as a 4-element array [x, y, z, r].

        Unlike ``real`` and ``imaginary`` this is not normalized for
        non-finite values. Returns a copy.
        """
        return self._q.copy()

    @property
    def real(self) -> np.floating:
        """
        Real (scalar) part, or NaN if this quaternion is not finite.

        Assigning writes the stored component directly, without any
        normalization.
        """
        if not self.is_finite:
            return self._real_type.nan
        return self._q[IDX_R]

    @real.setter
    def real(self, value: Real) -> None:
        self._q[IDX_R] = self._real_type.round(value)

    @property
    def imaginary(self) -> np.ndarray:
        """
        Imaginary (vector) part [x, y, z], all NaN if not finite.

        Returns a new array; mutating it does not affect the quaternion.
        Assigning writes the three stored components directly.
        """
        if not self.is_finite:
            return np.full(N_IMAGINARY, self._real_type.nan, dtype=self.dtype)
        return self._q[IMAGINARY_SLICE].copy()

    @imaginary.setter
    def imaginary(self, value: ArrayLike) -> None:
        _, values = _imaginary_values(value)
        self._q[IMAGINARY_SLICE] = self._real_type.round(values)

    # =========================================================================
    # CLASSIFICATION
    # =========================================================================
    # Evaluated on the stored components. The real/imaginary accessors depend
    # on is_finite and cannot be used here.

    @property
    def is_finite(self) -> bool:
        """True if no component is infinite or NaN."""
        return bool(self._real_type.is_finite(self._q).all())

    @property
    def is_normal(self) -> bool:
        """
        True if finite and at least one component is a normal number.

        A component is normal when its exponent allows a full-precision
        significand. A quaternion mixing normal and subnormal components is
        still normal.
        """
        return self.is_finite and bool(self._real_type.is_normal(self._q).any())

    @property
    def is_subnormal(self) -> bool:
        """
        True if finite, not normal and not zero.

        Every component is then zero or subnormal, with at least one
        subnormal: underflow has occurred and precision is reduced.
        """
        return self.is_finite and not self.is_normal and not self.is_zero

    @property
    def is_zero(self) -> bool:
        """True if all four components are zero, of either sign."""
        return bool(self._real_type.is_zero(self._q).all())

    @property
    def is_real(self) -> bool:
        """True if all three imaginary components are zero."""
        return bool(self._real_type.is_zero(self._q[IMAGINARY_SLICE]).all())

    @property
    def is_pure(self) -> bool:
        """True if the real component is zero."""
        return bool(self._real_type.is_zero(self._q[IDX_R]))

    # =========================================================================
    # CANONICAL FORMS
    # =========================================================================

    @property
    def canonicalized(self) -> 'Quaternion':
        """
        Single representative of this value's equivalence class.

        - zero of any sign pattern     -> (+0, +0, +0, +0)
        - any non-finite value         -> (+0, +0, +0, +inf)
        - otherwise                    -> unchanged, each component passed
                                          through the precision's own
                                          canonicalization (a no-op for
                                          IEEE binary types)

        Intended for serialization and for handing values across language
        boundaries, where each class should have one bit pattern.
        """
        if self.is_zero:
            return Quaternion.zero(self.dtype)
        if not self.is_finite:
            logger.debug("Collapsing non-finite %r to infinity", self)
            return Quaternion.infinity(self.dtype)
        return self._from_components(
            self._real_type.canonicalize(self._q), self._real_type)

    @property
    def canonicalized_transform(self) -> 'Quaternion':
        """
        Canonical representative when q and -q are the same 3D transform.

        Takes ``canonicalized`` and negates it if the real component's sign
        bit is set, so the result has a non-negative real part. This also
        flips a finite, nonzero value whose real part is -0.0. Zero and
        infinity are already positive and pass through.
        """
        canonical = self.canonicalized
        if not self._real_type.sign_minus(canonical.real):
            return canonical
        return -canonical

    # =========================================================================
    # PRECISION CONVERSION
    # =========================================================================

    def astype(self, dtype: DTypeLike) -> 'Quaternion':
        """
        Convert to another precision, rounding each component to nearest.

        Never fails. Components may overflow to infinity or underflow to
        zero in a narrower precision.
        """
        rt = real_type(dtype)
        return self._from_components(rt.round(self._q), rt)

    @classmethod
    def exactly(cls, other: 'Quaternion',
                dtype: DTypeLike) -> Optional['Quaternion']:
        """
        ``other`` in precision ``dtype`` if every component is exactly
        representable there, otherwise None.

        All-or-nothing: one inexact component rejects the whole quaternion.
        Components containing NaN are never exactly representable.
        """
        rt = real_type(dtype)
        converted = rt.exactly(other._q)
        if converted is None:
            return None
        return cls._from_components(converted, rt)

    # =========================================================================
    # OPERATOR OVERLOADS
    # =========================================================================

    def __neg__(self) -> 'Quaternion':
        """Negate all four components, sign bits of zeros included."""
        return self._from_components(-self._q, self._real_type)

    def __eq__(self, other: object) -> bool:
        """
        Component-wise equality.

        +0 equals -0 and NaN equals nothing, as for the components
        themselves. Quaternions of different precisions compare by value.
        """
        if not isinstance(other, Quaternion):
            return NotImplemented
        return bool(np.all(self._q == other._q))

    # Mutable through the real/imaginary setters
    __hash__ = None

    def __repr__(self) -> str:
        x, y, z, r = (str(c) for c in self._q)
        return (f"Quaternion(real={r}, imaginary=({x}, {y}, {z}), "
                f"dtype={self.dtype.name})")

    def copy(self) -> 'Quaternion':
        """Return an independent copy of this quaternion."""
        return self._from_components(self._q.copy(), self._real_type)
