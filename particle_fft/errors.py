from __future__ import annotations

import warnings

__all__ = [
    "ParticleFFTError",
    "InvalidDomainError",
    "DimensionMismatchError",
    "IncompatibleDomainError",
    "EmptyCompositeError",
    "PotentialDefinitionError",
    "EvolutionError",
    "enable_warnings",
    "warn_once",
]


class ParticleFFTError(Exception):
    r"""Base exception for particle_fft."""


class InvalidDomainError(ParticleFFTError):
    r"""Raised for bad grid bounds, point counts, or non-conjugate domain pairs."""


class DimensionMismatchError(ParticleFFTError):
    r"""Raised when an operator is applied to a vector of the wrong length."""


class IncompatibleDomainError(DimensionMismatchError):
    r"""Raised when operators living on different domains are composed."""


class EmptyCompositeError(ParticleFFTError):
    r"""Raised when a lazy sum is built without any terms."""


class PotentialDefinitionError(ParticleFFTError):
    r"""Raised when a symbolic potential cannot be turned into grid values."""


class EvolutionError(ParticleFFTError):
    r"""Raised when an external integrator reports failure."""


_WARN_ENABLED = True
_WARNED: set[str] = set()


def enable_warnings(enabled: bool = True) -> None:
    r"""Enable or disable module-level runtime warnings."""
    global _WARN_ENABLED
    _WARN_ENABLED = enabled


def warn_once(message: str) -> None:
    r"""Emit a warning only once per unique message."""
    if not _WARN_ENABLED:
        return
    if message in _WARNED:
        return
    _WARNED.add(message)
    warnings.warn(message, RuntimeWarning, stacklevel=2)
