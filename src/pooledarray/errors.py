# -------------------------------------
# Pooled array errors
# -------------------------------------
"""
Error kinds raised by pooled arrays and the pool coordination helpers.

Every error derives from PoolError, which is a ValueError, so callers that
only care about "bad input" can catch ValueError the same way they do for
parse errors elsewhere. All errors are raised synchronously by the call that
detects them; nothing is retried and nothing is rolled back.
"""


class PoolError(ValueError):
    pass


class PoolOverflow(PoolError):
    """The pool would grow beyond what the reference width can address."""


class PoolMismatch(PoolError):
    """A caller-supplied pool does not contain every required value."""


class ReferenceOutOfBounds(PoolError):
    """A reference array points beyond the end of its pool."""


class ValueNotFound(PoolError):
    """replace() was asked to replace a value that is not in the pool."""


class InvalidUsage(PoolError):
    """Operation not allowed, e.g. storing the missing marker in a pool."""


class Unimplemented(PoolError, NotImplementedError):
    """Index form that is intentionally not supported."""


__all__ = [
    "PoolError",
    "PoolOverflow",
    "PoolMismatch",
    "ReferenceOutOfBounds",
    "ValueNotFound",
    "InvalidUsage",
    "Unimplemented",
]
