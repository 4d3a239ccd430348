r"""
Evenly sampled position and momentum domains.

Both domains use the same half-open sampling rule: ``npoints`` samples
``q_j = q_min + j * dq`` for ``j = 0 .. npoints - 1`` with
``dq = (q_max - q_min) / npoints``, so ``q_max`` itself is never a sample.
A conjugate pair satisfies ``dx * dp * npoints = 2 pi``, which is exactly the
relation the discrete Fourier transform needs to connect the two grids.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Union

import numpy as np

from particle_fft.errors import InvalidDomainError

logger = logging.getLogger(__name__)

__all__ = [
    "SampledDomain",
    "DualDomain",
    "Domain",
    "dual_of",
    "are_conjugate",
]


def _validate_bounds(kind: str, lower: float, upper: float, npoints: int) -> None:
    r"""Shared validation for both domain kinds."""
    if isinstance(npoints, bool) or not isinstance(npoints, (int, np.integer)):
        raise InvalidDomainError(
            f"{kind} npoints must be an integer; got {type(npoints).__name__}."
        )
    if npoints <= 0:
        raise InvalidDomainError(f"{kind} npoints must be positive; got {npoints}.")
    try:
        lower, upper = float(lower), float(upper)
    except (TypeError, ValueError) as exc:
        raise InvalidDomainError(
            f"{kind} bounds must be real numbers; got ({lower!r}, {upper!r})."
        ) from exc
    if not (math.isfinite(lower) and math.isfinite(upper)):
        raise InvalidDomainError(
            f"{kind} bounds must be finite; got ({lower}, {upper})."
        )
    if lower >= upper:
        raise InvalidDomainError(
            f"{kind} lower bound must be smaller than upper bound; "
            f"got ({lower}, {upper})."
        )


class _EvenGrid:
    r"""Mixin with the sampling arithmetic common to both domain kinds."""

    npoints: int

    def _bounds(self) -> tuple[float, float]:
        raise NotImplementedError

    @property
    def spacing(self) -> float:
        r"""Distance between neighbouring samples."""
        lower, upper = self._bounds()
        return (upper - lower) / self.npoints

    @property
    def length(self) -> float:
        r"""Width of the sampled interval, ``upper - lower``."""
        lower, upper = self._bounds()
        return upper - lower

    @property
    def points(self) -> np.ndarray:
        r"""Sample points as a fresh float array of shape ``(npoints,)``."""
        lower, _ = self._bounds()
        return lower + self.spacing * np.arange(self.npoints, dtype=float)

    def __len__(self) -> int:
        return self.npoints


@dataclass(frozen=True)
class SampledDomain(_EvenGrid):
    r"""
    Position grid covering ``[xmin, xmax)`` with ``npoints`` samples.

    Parameters
    ----------
    xmin, xmax : float
        Interval bounds; ``xmin`` is the first sample, ``xmax`` is excluded.
    npoints : int
        Number of samples ``N``.

    Examples
    --------
    >>> dom = SampledDomain(-5.0, 5.0, 100)
    >>> dom.spacing
    0.1
    """

    xmin: float
    xmax: float
    npoints: int

    def __post_init__(self) -> None:
        r"""Validate bounds and point count."""
        _validate_bounds("SampledDomain", self.xmin, self.xmax, self.npoints)

    def _bounds(self) -> tuple[float, float]:
        return self.xmin, self.xmax

    @classmethod
    def from_momentum(cls, dual: "DualDomain") -> "SampledDomain":
        r"""Position grid conjugate to ``dual``: ``[-pi/dp, pi/dp)``."""
        dp = dual.spacing
        return cls(-math.pi / dp, math.pi / dp, dual.npoints)


@dataclass(frozen=True)
class DualDomain(_EvenGrid):
    r"""
    Momentum grid covering ``[pmin, pmax)`` with ``npoints`` samples.

    Usually obtained from :meth:`from_position`, which yields
    ``pmin = -pi/dx`` and ``pmax = pi/dx``.
    """

    pmin: float
    pmax: float
    npoints: int

    def __post_init__(self) -> None:
        r"""Validate bounds and point count."""
        _validate_bounds("DualDomain", self.pmin, self.pmax, self.npoints)

    def _bounds(self) -> tuple[float, float]:
        return self.pmin, self.pmax

    @classmethod
    def from_position(cls, domain: SampledDomain) -> "DualDomain":
        r"""Momentum grid conjugate to ``domain``."""
        dx = domain.spacing
        dual = cls(-math.pi / dx, math.pi / dx, domain.npoints)
        logger.debug(
            "DualDomain.from_position: N=%d dx=%g -> p in [%g, %g) dp=%g",
            domain.npoints,
            dx,
            dual.pmin,
            dual.pmax,
            dual.spacing,
        )
        return dual


Domain = Union[SampledDomain, DualDomain]


def dual_of(domain: Domain) -> Domain:
    r"""Return the conjugate domain of either a position or a momentum grid."""
    if isinstance(domain, SampledDomain):
        return DualDomain.from_position(domain)
    if isinstance(domain, DualDomain):
        return SampledDomain.from_momentum(domain)
    raise InvalidDomainError(f"Expected a sampled domain, got {type(domain).__name__}.")


def are_conjugate(position: SampledDomain, dual: DualDomain, rtol: float = 1e-10) -> bool:
    r"""Check ``N`` equality and ``dx * dp * N == 2 pi`` within ``rtol``."""
    if position.npoints != dual.npoints:
        return False
    product = position.spacing * dual.spacing * position.npoints
    return math.isclose(product, 2.0 * math.pi, rel_tol=rtol)
