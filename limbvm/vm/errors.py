"""Exceptions raised by the verified arithmetic and its oracle plumbing."""

from __future__ import annotations


class LimbVMError(Exception):
    """Base class for all LimbVM errors."""


class OracleInconsistency(LimbVMError):
    """Raised when a witness fails a range check or the terminal zero check.

    The computation that requested the witness must be abandoned; there is
    no partial result.
    """


class MalformedInput(LimbVMError, ValueError):
    """Raised when a value cannot be put into the expected limb shape."""


class OracleUnavailable(LimbVMError):
    """Raised when the remote hint server cannot produce a witness."""
