from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Mapping

from particle_fft.domains import DualDomain, SampledDomain
from particle_fft.errors import InvalidDomainError
from particle_fft.particle import validate_mass_hbar

__all__ = ["ParticleConfig", "make_config", "resolve_config"]


@dataclass(frozen=True)
class ParticleConfig:
    r"""
    Grid and physical parameters for a single particle model.

    Parameters
    ----------
    xmin, xmax : float
        Position interval ``[xmin, xmax)``.
    npoints : int
        Number of grid samples.
    mass : float, optional
        Particle mass (default 1).
    hbar : float, optional
        Reduced Planck constant in the caller's units (default 1).
    """

    xmin: float
    xmax: float
    npoints: int
    mass: float = 1.0
    hbar: float = 1.0

    def __post_init__(self) -> None:
        r"""Validate physical parameters; grid bounds are checked by the domain."""
        self.position_domain()
        validate_mass_hbar(self.mass, self.hbar)

    def position_domain(self) -> SampledDomain:
        return SampledDomain(self.xmin, self.xmax, self.npoints)

    def momentum_domain(self) -> DualDomain:
        return DualDomain.from_position(self.position_domain())

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


def make_config(
    settings: Mapping[str, Any] | None = None,
    **overrides: Any,
) -> ParticleConfig:
    """
    Build a :class:`ParticleConfig` from a mapping and/or keyword arguments.

    Keyword arguments take precedence over entries in ``settings``. Unknown
    keys are rejected so typos do not pass silently.
    """
    merged: dict[str, Any] = dict(settings or {})
    merged.update(overrides)
    known = set(ParticleConfig.__dataclass_fields__)
    unknown = sorted(set(merged) - known)
    if unknown:
        raise TypeError(
            f"Unknown ParticleConfig keys {unknown}; expected a subset of {sorted(known)}."
        )
    missing = sorted({"xmin", "xmax", "npoints"} - set(merged))
    if missing:
        raise InvalidDomainError(f"ParticleConfig is missing required keys {missing}.")
    return ParticleConfig(
        xmin=float(merged["xmin"]),
        xmax=float(merged["xmax"]),
        npoints=int(merged["npoints"]),
        mass=float(merged.get("mass", 1.0)),
        hbar=float(merged.get("hbar", 1.0)),
    )


def resolve_config(
    *,
    config: ParticleConfig | Mapping[str, Any] | None,
    **fields: Any,
) -> ParticleConfig:
    """
    Centralized config resolution for all model entry points.

    An explicit :class:`ParticleConfig` wins; a mapping is merged with
    ``fields`` (fields override); otherwise ``fields`` alone are used.
    ``None``-valued fields are ignored.
    """
    if isinstance(config, ParticleConfig):
        return config
    given = {k: v for k, v in fields.items() if v is not None}
    return make_config(config, **given)
