import warnings

import pytest

from particle_fft.errors import (
    DimensionMismatchError,
    EmptyCompositeError,
    EvolutionError,
    IncompatibleDomainError,
    InvalidDomainError,
    ParticleFFTError,
    PotentialDefinitionError,
    enable_warnings,
    warn_once,
)


def test_warn_once_toggle():
    enable_warnings(True)
    with warnings.catch_warnings(record=True) as w:
        warnings.simplefilter("always")
        warn_once("particle msg")
        warn_once("particle msg")
        assert len(w) == 1
        assert issubclass(w[0].category, RuntimeWarning)
    enable_warnings(False)
    with warnings.catch_warnings(record=True) as w:
        warnings.simplefilter("always")
        warn_once("particle msg2")
        assert len(w) == 0
    enable_warnings(True)


@pytest.mark.parametrize(
    "exc",
    [
        InvalidDomainError,
        DimensionMismatchError,
        IncompatibleDomainError,
        EmptyCompositeError,
        PotentialDefinitionError,
        EvolutionError,
    ],
)
def test_custom_exceptions_share_base(exc):
    with pytest.raises(ParticleFFTError):
        raise exc("fail")


def test_incompatible_domain_is_dimension_mismatch():
    with pytest.raises(DimensionMismatchError):
        raise IncompatibleDomainError("domains differ")
