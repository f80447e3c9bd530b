"""
===============================================================================
QUATERNION NUMERICS - Layout and Precision Constants
===============================================================================
Central repository for the constants shared by the real-number layer and the
quaternion type: which floating-point precisions are supported, which one is
used when none is given, and where each component lives in storage.
===============================================================================
"""

import numpy as np


# =============================================================================
# SUPPORTED PRECISIONS
# =============================================================================
# Every IEEE-754 binary type numpy ships. longdouble is platform dependent
# (x87 80-bit on most Linux/x86, plain float64 on MSVC and Apple silicon).
SUPPORTED_DTYPES = (
    np.dtype(np.float16),
    np.dtype(np.float32),
    np.dtype(np.float64),
    np.dtype(np.longdouble),
)

DEFAULT_DTYPE = np.dtype(np.float64)

# Names accepted wherever a precision is given as text (CLI, YAML config)
DTYPE_ALIASES = {
    'half': np.dtype(np.float16),
    'float16': np.dtype(np.float16),
    'single': np.dtype(np.float32),
    'float32': np.dtype(np.float32),
    'double': np.dtype(np.float64),
    'float64': np.dtype(np.float64),
    'longdouble': np.dtype(np.longdouble),
}

# =============================================================================
# COMPONENT LAYOUT
# =============================================================================
# Scalar-last storage: x*i + y*j + z*k + r  ->  [x, y, z, r]
IDX_X = 0
IDX_Y = 1
IDX_Z = 2
IDX_R = 3
IMAGINARY_SLICE = slice(IDX_X, IDX_Z + 1)
N_COMPONENTS = 4
N_IMAGINARY = 3
