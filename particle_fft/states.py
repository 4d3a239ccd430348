r"""
State vectors on sampled domains.

States are plain complex NumPy arrays holding amplitude densities, so that
``sum(|psi|^2) * spacing`` is the total probability on either grid.
"""

from __future__ import annotations

import math

import numpy as np

from particle_fft.domains import Domain, DualDomain, SampledDomain
from particle_fft.errors import DimensionMismatchError, InvalidDomainError, warn_once
from particle_fft.operators import Operator

__all__ = [
    "gaussian_state",
    "norm",
    "normalize",
    "probability_density",
    "expect",
]

# Relative edge amplitude above which a wavepacket is considered clipped.
EDGE_TOLERANCE = 1e-6


def _check_length(domain: Domain, psi: np.ndarray) -> None:
    if psi.shape[0] != domain.npoints:
        raise DimensionMismatchError(
            f"State has {psi.shape[0]} samples; domain has {domain.npoints}."
        )


def gaussian_state(
    domain: Domain, x0: float, p0: float, sigma: float, *, check_edges: bool = True
) -> np.ndarray:
    r"""
    Gaussian wavepacket centred at ``x0`` with mean momentum ``p0``.

    On a :class:`SampledDomain`

    .. math::

        \psi(x) = (\pi\sigma^2)^{-1/4}
                  e^{i p_0 (x - x_0/2) - (x - x_0)^2 / (2\sigma^2)},

    and on a :class:`DualDomain` the Fourier pair of the same packet

    .. math::

        \tilde\psi(p) = (\sigma^2/\pi)^{1/4}
                        e^{-i x_0 (p - p_0/2) - (p - p_0)^2 \sigma^2 / 2}.

    Both are normalized in the continuum; on a grid that resolves the packet
    ``norm(domain, psi)`` is 1 to within sampling error.
    """
    if sigma <= 0:
        raise ValueError(f"sigma must be positive; got {sigma}.")
    q = domain.points
    if isinstance(domain, SampledDomain):
        psi = (math.pi * sigma**2) ** -0.25 * np.exp(
            1j * p0 * (q - x0 / 2.0) - (q - x0) ** 2 / (2.0 * sigma**2)
        )
    elif isinstance(domain, DualDomain):
        psi = (sigma**2 / math.pi) ** 0.25 * np.exp(
            -1j * x0 * (q - p0 / 2.0) - (q - p0) ** 2 * sigma**2 / 2.0
        )
    else:
        raise InvalidDomainError(f"Unsupported domain type {type(domain).__name__}.")

    if check_edges:
        edge = max(abs(psi[0]), abs(psi[-1]))
        if edge > EDGE_TOLERANCE * np.max(np.abs(psi)):
            warn_once(
                "Gaussian state has significant amplitude at the grid edge; "
                "enlarge the domain or shrink sigma to avoid wrap-around."
            )
    return psi.astype(complex)


def norm(domain: Domain, psi: object) -> float:
    r"""Total probability ``sum(|psi|^2) * spacing``."""
    arr = np.asarray(psi)
    _check_length(domain, arr)
    return float(np.sum(np.abs(arr) ** 2) * domain.spacing)


def normalize(domain: Domain, psi: object) -> np.ndarray:
    r"""Return a copy of ``psi`` scaled to unit total probability."""
    arr = np.asarray(psi, dtype=complex)
    total = norm(domain, arr)
    if total == 0.0:
        raise ValueError("Cannot normalize the zero state.")
    return arr / math.sqrt(total)


def probability_density(psi: object) -> np.ndarray:
    r"""Pointwise ``|psi|^2`` for an external plotting layer."""
    return np.abs(np.asarray(psi)) ** 2


def expect(op: Operator, psi: object) -> complex:
    r"""
    Expectation value ``<psi|op|psi> / <psi|psi>`` on the operator's domain.

    The grid spacing cancels between numerator and denominator.
    """
    arr = np.asarray(psi, dtype=complex)
    dom = op.domain_in
    if dom is not None:
        _check_length(dom, arr)
    if op.domain_out is not None and op.domain_out != dom:
        raise InvalidDomainError(
            "Expectation values need an operator that maps a domain to itself."
        )
    return complex(np.vdot(arr, op.apply(arr)) / np.vdot(arr, arr))
