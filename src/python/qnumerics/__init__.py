"""
===============================================================================
QUATERNION NUMERICS
===============================================================================
Quaternion value type over numpy binary floating-point precisions: numeric
classification, canonical forms, and conversion between precisions.

Submodules:
    constants  -- supported precisions and the scalar-last component layout
    real       -- RealType, the per-precision capability set
    quaternion -- Quaternion value type
    config     -- YAML configuration for the command-line tools
    main       -- qnumerics command-line inspector
===============================================================================
"""

from qnumerics.quaternion import Quaternion
from qnumerics.real import RealType, real_type, resolve_dtype

__all__ = ['Quaternion', 'RealType', 'real_type', 'resolve_dtype']
__version__ = '0.1.0'
