# -------------------------------------
# pooledarray shared state
# -------------------------------------
"""
Shared settings for pooled arrays:
- REF_DTYPE: default unsigned integer width used for pool references
- NA_REPR: how missing cells are rendered by the formatter
- MAX_FORMAT_ITEMS: how many cells the formatter shows before truncating

Explicit ref_dtype=... arguments always win over REF_DTYPE.
"""
import numpy as np

# ============================================================
# Reference width
# ============================================================

DEFAULT_REF_DTYPE = np.dtype(np.uint16)

REF_DTYPE: np.dtype = DEFAULT_REF_DTYPE


def set_ref_dtype(dtype) -> np.dtype:
    """Set the default reference dtype, returning the previous one."""
    global REF_DTYPE
    from .refs import ref_dtype

    previous = REF_DTYPE
    REF_DTYPE = ref_dtype(dtype)
    return previous


def get_ref_dtype() -> np.dtype:
    """Return the default reference dtype."""
    return REF_DTYPE


# ============================================================
# Formatting
# ============================================================

DEFAULT_NA_REPR = "NA"
DEFAULT_MAX_FORMAT_ITEMS = 50

NA_REPR: str = DEFAULT_NA_REPR
MAX_FORMAT_ITEMS: int = DEFAULT_MAX_FORMAT_ITEMS


def set_na_repr(text: str) -> None:
    """Set the string used to render missing cells."""
    global NA_REPR
    NA_REPR = str(text)


def get_na_repr() -> str:
    """Return the string used to render missing cells."""
    return NA_REPR


def set_max_format_items(n: int) -> None:
    """Set how many cells format_pooled() shows before eliding."""
    global MAX_FORMAT_ITEMS
    if n < 1:
        raise ValueError(f"max format items must be positive, got {n}")
    MAX_FORMAT_ITEMS = int(n)


def get_max_format_items() -> int:
    """Return how many cells format_pooled() shows before eliding."""
    return MAX_FORMAT_ITEMS


def reset() -> None:
    """Restore every setting to its default."""
    global REF_DTYPE, NA_REPR, MAX_FORMAT_ITEMS
    REF_DTYPE = DEFAULT_REF_DTYPE
    NA_REPR = DEFAULT_NA_REPR
    MAX_FORMAT_ITEMS = DEFAULT_MAX_FORMAT_ITEMS
