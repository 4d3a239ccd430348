"""
User-facing API for building grid models of a single particle.

This module intentionally stays thin: it resolves configuration, turns the
potential specification into grid values and delegates everything else to
the domain, operator and particle modules.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Literal, Mapping

import numpy as np

from particle_fft.config_utils import ParticleConfig, make_config, resolve_config
from particle_fft.domains import DualDomain, SampledDomain
from particle_fft.operators import DiagonalOperator, LazySum, TransformOperator
from particle_fft.particle import PotentialLike, hamiltonian, position
from particle_fft.potentials import potential_from_expr, potential_from_latex

logger = logging.getLogger(__name__)

__all__ = [
    "CompiledParticleModel",
    "ParticleConfig",
    "build_particle_model",
    "make_config",
]


@dataclass
class CompiledParticleModel:
    r"""Everything a time-evolution loop needs for one particle model."""

    H: LazySum
    position_domain: SampledDomain
    momentum_domain: DualDomain
    Tp: TransformOperator
    Tx: TransformOperator
    x: DiagonalOperator
    potential_values: np.ndarray
    config: ParticleConfig


def _resolve_potential(
    potential: PotentialLike | str,
    params: Mapping[str, complex],
    potential_format: Literal["auto", "expr", "latex"],
) -> PotentialLike:
    r"""Turn a string potential into a callable; pass other inputs through."""
    if not isinstance(potential, str):
        return potential
    fmt = potential_format
    if fmt == "auto":
        fmt = "latex" if "\\" in potential or "{" in potential else "expr"
    if fmt == "latex":
        return potential_from_latex(potential, params)
    if fmt == "expr":
        return potential_from_expr(potential, params)
    raise ValueError(f"Unsupported potential_format '{potential_format}'.")


def build_particle_model(
    potential: PotentialLike | str | Callable[[np.ndarray], object],
    params: Dict[str, complex] | None = None,
    *,
    config: ParticleConfig | Mapping[str, Any] | None = None,
    xmin: float | None = None,
    xmax: float | None = None,
    npoints: int | None = None,
    mass: float | None = None,
    hbar: float | None = None,
    potential_format: Literal["auto", "expr", "latex"] = "auto",
    diagnostics: bool = False,
) -> Any:
    r"""
    Build the lazy Hamiltonian, domains and transforms for a 1-D particle.

    ``potential`` may be a callable, an array of grid values, a scalar, a
    SymPy expression string, or LaTeX (``potential_format`` selects the
    parser; ``"auto"`` treats strings containing a backslash or brace as
    LaTeX). Grid settings come from ``config`` or the keyword fields.

    Set ``diagnostics=True`` to also return ``(model, diagnostics_dict)``
    where diagnostics contains ``npoints``, ``dx``, ``dp``, ``pmax`` and
    ``term_count``.
    """
    cfg = resolve_config(
        config=config,
        xmin=xmin,
        xmax=xmax,
        npoints=npoints,
        mass=mass,
        hbar=hbar,
    )
    x_dom = cfg.position_domain()
    p_dom = DualDomain.from_position(x_dom)
    V_spec = _resolve_potential(potential, params or {}, potential_format)
    H = hamiltonian(x_dom, V_spec, mass=cfg.mass, hbar=cfg.hbar, dual=p_dom)
    # H = LazySum(LazyProduct(Tx, K, Tp), V); reuse its transforms and values.
    kinetic, V_op = H.terms
    Tx, _, Tp = kinetic.terms

    model = CompiledParticleModel(
        H=H,
        position_domain=x_dom,
        momentum_domain=p_dom,
        Tp=Tp,
        Tx=Tx,
        x=position(x_dom),
        potential_values=V_op.values,
        config=cfg,
    )
    logger.debug(
        "build_particle_model: N=%d dx=%g dp=%g", x_dom.npoints, x_dom.spacing, p_dom.spacing
    )
    if not diagnostics:
        return model
    diag = {
        "npoints": x_dom.npoints,
        "dx": x_dom.spacing,
        "dp": p_dom.spacing,
        "pmax": p_dom.pmax,
        "term_count": len(H.terms),
    }
    return model, diag
