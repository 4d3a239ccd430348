r"""
particle_fft package: FFT-linked position/momentum grids and lazy operators
for a 1-D quantum particle.

Primary user-facing symbols are re-exported here for convenience.
"""

from .domains import DualDomain, SampledDomain, dual_of  # noqa: F401
from .operators import (  # noqa: F401
    DiagonalOperator,
    LazyProduct,
    LazySum,
    Operator,
    TransformOperator,
)
from .particle import (  # noqa: F401
    hamiltonian,
    kinetic_operator,
    momentum,
    position,
    potential_operator,
    transform,
)
from .states import expect, gaussian_state, norm, normalize  # noqa: F401
from .config_utils import ParticleConfig, make_config  # noqa: F401
from .particle_api import CompiledParticleModel, build_particle_model  # noqa: F401
from .errors import (  # noqa: F401
    ParticleFFTError,
    InvalidDomainError,
    DimensionMismatchError,
    IncompatibleDomainError,
    EmptyCompositeError,
    PotentialDefinitionError,
    EvolutionError,
    enable_warnings,
    warn_once,
)

__all__ = [
    "SampledDomain",
    "DualDomain",
    "dual_of",
    "Operator",
    "DiagonalOperator",
    "TransformOperator",
    "LazySum",
    "LazyProduct",
    "position",
    "momentum",
    "potential_operator",
    "transform",
    "kinetic_operator",
    "hamiltonian",
    "gaussian_state",
    "norm",
    "normalize",
    "expect",
    "ParticleConfig",
    "make_config",
    "CompiledParticleModel",
    "build_particle_model",
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
