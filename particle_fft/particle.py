r"""
Operator constructors for a 1-D particle on a truncated grid.

These functions combine the domain and operator primitives into the objects a
time-evolution routine needs: position and momentum operators, the
position/momentum transforms, and the kinetic + potential Hamiltonian

.. math::

    H = T_{p \to x} \, \frac{(\hbar p)^2}{2m} \, T_{x \to p} + V(x),

assembled as ``LazySum(LazyProduct(Tx, K, Tp), V)`` so that applying it costs
two FFTs and two elementwise products.
"""

from __future__ import annotations

import logging
import math
from typing import Callable, Union

import numpy as np

from particle_fft.domains import Domain, DualDomain, SampledDomain
from particle_fft.errors import DimensionMismatchError, InvalidDomainError
from particle_fft.operators import (
    DiagonalOperator,
    LazyProduct,
    LazySum,
    TransformOperator,
)

logger = logging.getLogger(__name__)

__all__ = [
    "position",
    "momentum",
    "potential_operator",
    "transform",
    "grid_values",
    "kinetic_operator",
    "hamiltonian",
    "validate_mass_hbar",
]

PotentialLike = Union[Callable[[np.ndarray], object], np.ndarray, list, float]


def validate_mass_hbar(mass: float, hbar: float) -> None:
    r"""Raise ``ValueError`` unless ``mass`` and ``hbar`` are finite and positive."""
    for name, value in (("mass", mass), ("hbar", hbar)):
        if not (math.isfinite(value) and value > 0):
            raise ValueError(f"{name} must be finite and positive; got {value}.")


def position(domain: SampledDomain) -> DiagonalOperator:
    r"""Position operator, diagonal on ``domain`` with values ``x_i``."""
    if not isinstance(domain, SampledDomain):
        raise InvalidDomainError(
            f"position() needs a SampledDomain; got {type(domain).__name__}."
        )
    return DiagonalOperator(domain, domain.points)


def momentum(domain: DualDomain) -> DiagonalOperator:
    r"""Momentum operator, diagonal on ``domain`` with values ``p_i``."""
    if not isinstance(domain, DualDomain):
        raise InvalidDomainError(
            f"momentum() needs a DualDomain; got {type(domain).__name__}."
        )
    return DiagonalOperator(domain, domain.points)


def grid_values(domain: Domain, values: PotentialLike) -> np.ndarray:
    r"""Evaluate a callable or broadcast a constant/array onto the grid points."""
    if callable(values):
        values = values(domain.points)
    arr = np.asarray(values, dtype=complex)
    if arr.ndim == 0:
        return np.full(domain.npoints, complex(arr))
    if arr.shape != (domain.npoints,):
        raise DimensionMismatchError(
            f"Potential evaluated to shape {arr.shape}; expected ({domain.npoints},)."
        )
    return arr


def potential_operator(domain: Domain, potential: PotentialLike) -> DiagonalOperator:
    r"""
    Diagonal operator from potential values on ``domain``.

    ``potential`` may be a callable evaluated on ``domain.points``, an array
    of length ``N``, or a scalar constant.
    """
    return DiagonalOperator(domain, grid_values(domain, potential))


def transform(to_domain: Domain, from_domain: Domain) -> TransformOperator:
    r"""
    FFT-based transform mapping states on ``from_domain`` to ``to_domain``.

    ``transform(dual, primary)`` is the position-to-momentum transform and
    ``transform(primary, dual)`` its inverse.
    """
    return TransformOperator(to_domain, from_domain)


def kinetic_operator(
    domain: SampledDomain,
    *,
    mass: float = 1.0,
    hbar: float = 1.0,
    dual: DualDomain | None = None,
) -> LazyProduct:
    r"""Kinetic energy ``(hbar p)^2 / 2m`` acting on position-space states."""
    validate_mass_hbar(mass, hbar)
    dual = dual if dual is not None else DualDomain.from_position(domain)
    Tp = transform(dual, domain)
    Tx = transform(domain, dual)
    p = dual.points
    K = DiagonalOperator(dual, (hbar * p) ** 2 / (2.0 * mass))
    return LazyProduct(Tx, K, Tp)


def hamiltonian(
    domain: SampledDomain,
    potential: PotentialLike,
    *,
    mass: float = 1.0,
    hbar: float = 1.0,
    dual: DualDomain | None = None,
) -> LazySum:
    r"""
    Kinetic + potential Hamiltonian acting on position-space states.

    Parameters
    ----------
    domain : SampledDomain
        Position grid.
    potential : callable, array or float
        ``V(x)`` on the grid (see :func:`potential_operator`).
    mass, hbar : float
        Particle mass and reduced Planck constant in the caller's units.
    dual : DualDomain, optional
        Momentum grid; derived from ``domain`` when omitted.

    Returns
    -------
    LazySum
        ``LazySum(LazyProduct(Tx, K, Tp), V)``.
    """
    if not isinstance(domain, SampledDomain):
        raise InvalidDomainError(
            f"hamiltonian() needs a SampledDomain; got {type(domain).__name__}."
        )
    T = kinetic_operator(domain, mass=mass, hbar=hbar, dual=dual)
    V = potential_operator(domain, potential)
    logger.debug(
        "hamiltonian: N=%d mass=%g hbar=%g x in [%g, %g)",
        domain.npoints,
        mass,
        hbar,
        domain.xmin,
        domain.xmax,
    )
    return LazySum(T, V)
