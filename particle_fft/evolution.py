r"""
Hooks for time evolution with lazily applied operators.

The operators in :mod:`particle_fft.operators` only promise an ``apply``
primitive; this module adapts that primitive to external integrators:

* :func:`schroedinger_rhs` / :func:`evolve_schroedinger` - right-hand side for
  :func:`scipy.integrate.solve_ivp` (or any ``f(t, y)`` integrator).
* :func:`as_linear_operator` - :class:`scipy.sparse.linalg.LinearOperator`
  view for iterative eigensolvers and Krylov propagators.
* :func:`to_qobj` / :func:`state_to_qobj` / :func:`qobj_to_state` - dense
  QuTiP objects for ``sesolve`` / ``mesolve`` on small grids.
* :func:`split_step_operator` / :func:`splitop_evolve` - symmetric
  split-operator propagator built from the same transform.
"""

from __future__ import annotations

import logging
import math
from typing import Callable, Sequence

import numpy as np
from qutip import Qobj  # type: ignore
from scipy.integrate import solve_ivp
from scipy.sparse.linalg import LinearOperator

from particle_fft.domains import Domain, DualDomain, SampledDomain
from particle_fft.errors import DimensionMismatchError, EvolutionError
from particle_fft.operators import DiagonalOperator, LazyProduct, Operator
from particle_fft.particle import (
    PotentialLike,
    grid_values,
    transform,
    validate_mass_hbar,
)

logger = logging.getLogger(__name__)

__all__ = [
    "schroedinger_rhs",
    "evolve_schroedinger",
    "as_linear_operator",
    "to_qobj",
    "state_to_qobj",
    "qobj_to_state",
    "split_step_operator",
    "splitop_evolve",
]


def _require_domains(op: Operator) -> tuple[Domain, Domain]:
    dom_in = op.domain_in
    dom_out = op.domain_out if op.domain_out is not None else dom_in
    if dom_in is None or dom_out is None:
        raise DimensionMismatchError(
            f"{type(op).__name__} has no fixed domain; cannot determine its shape."
        )
    return dom_in, dom_out


def schroedinger_rhs(
    H: Operator, *, hbar: float = 1.0
) -> Callable[[float, np.ndarray], np.ndarray]:
    r"""Return ``f(t, psi) = -i H psi / hbar`` for an ODE integrator."""
    scale = -1j / hbar

    def rhs(t: float, psi: np.ndarray) -> np.ndarray:
        return scale * H.apply(psi)

    return rhs


def evolve_schroedinger(
    H: Operator,
    psi0: object,
    tlist: Sequence[float],
    *,
    hbar: float = 1.0,
    method: str = "DOP853",
    rtol: float = 1e-8,
    atol: float = 1e-10,
) -> np.ndarray:
    r"""
    Integrate the Schroedinger equation with :func:`scipy.integrate.solve_ivp`.

    Returns
    -------
    np.ndarray
        States at the times in ``tlist``, shape ``(len(tlist), N)``.

    Raises
    ------
    EvolutionError
        If the integrator reports failure.
    """
    times = np.asarray(tlist, dtype=float)
    if times.ndim != 1 or times.size == 0:
        raise ValueError("tlist must be a non-empty 1-D sequence of times.")
    psi = np.asarray(psi0, dtype=complex)
    dom = H.domain_in
    if dom is not None and psi.shape != (dom.npoints,):
        raise DimensionMismatchError(
            f"Initial state must have shape ({dom.npoints},); got {psi.shape}."
        )
    if times.size == 1:
        return psi[np.newaxis, :].copy()

    logger.debug(
        "evolve_schroedinger: %d samples over t in [%g, %g] with %s",
        times.size,
        times[0],
        times[-1],
        method,
    )
    sol = solve_ivp(
        schroedinger_rhs(H, hbar=hbar),
        (times[0], times[-1]),
        psi,
        method=method,
        t_eval=times,
        rtol=rtol,
        atol=atol,
    )
    if not sol.success:
        raise EvolutionError(f"solve_ivp failed: {sol.message}")
    return sol.y.T


def as_linear_operator(op: Operator) -> LinearOperator:
    r"""
    Wrap ``op`` as a SciPy :class:`LinearOperator`.

    ``rmatvec`` is the plain conjugate transpose, obtained from the
    grid-weighted adjoint as ``A^H = (w_in / w_out) A^*``.
    """
    dom_in, dom_out = _require_domains(op)
    ratio = dom_in.spacing / dom_out.spacing
    adj = op.adjoint()

    def matvec(v: np.ndarray) -> np.ndarray:
        return op.apply(np.ravel(v))

    def rmatvec(v: np.ndarray) -> np.ndarray:
        return ratio * adj.apply(np.ravel(v))

    def matmat(V: np.ndarray) -> np.ndarray:
        return op.apply(V)

    return LinearOperator(
        shape=(dom_out.npoints, dom_in.npoints),
        matvec=matvec,
        rmatvec=rmatvec,
        matmat=matmat,
        dtype=complex,
    )


def to_qobj(op: Operator) -> Qobj:
    r"""
    Dense QuTiP operator in the orthonormal (spacing-weighted) representation.

    States converted with :func:`state_to_qobj` have unit QuTiP norm, and
    ``to_qobj(op) * state_to_qobj(psi)`` corresponds to ``op.apply(psi)``.
    """
    dom_in, dom_out = _require_domains(op)
    scale = math.sqrt(dom_out.spacing / dom_in.spacing)
    return Qobj(scale * op.dense())


def state_to_qobj(domain: Domain, psi: object) -> Qobj:
    r"""Ket with amplitudes ``psi * sqrt(spacing)``."""
    arr = np.asarray(psi, dtype=complex)
    if arr.shape != (domain.npoints,):
        raise DimensionMismatchError(
            f"State must have shape ({domain.npoints},); got {arr.shape}."
        )
    return Qobj(arr.reshape(-1, 1) * math.sqrt(domain.spacing))


def qobj_to_state(domain: Domain, ket: Qobj) -> np.ndarray:
    r"""Inverse of :func:`state_to_qobj`."""
    arr = np.asarray(ket.full(), dtype=complex).ravel()
    if arr.shape != (domain.npoints,):
        raise DimensionMismatchError(
            f"Ket has {arr.size} amplitudes; domain has {domain.npoints}."
        )
    return arr / math.sqrt(domain.spacing)


def split_step_operator(
    domain: SampledDomain,
    potential: PotentialLike,
    dt: float,
    *,
    mass: float = 1.0,
    hbar: float = 1.0,
    dual: DualDomain | None = None,
) -> LazyProduct:
    r"""
    Second-order split-operator propagator for one step ``dt``.

    .. math::

        U(dt) \approx e^{-i V dt / 2\hbar} \, T_{p \to x} \,
        e^{-i \hbar p^2 dt / 2m} \, T_{x \to p} \, e^{-i V dt / 2\hbar}
    """
    validate_mass_hbar(mass, hbar)
    dual = dual if dual is not None else DualDomain.from_position(domain)
    Tp = transform(dual, domain)
    Tx = transform(domain, dual)
    V = grid_values(domain, potential)
    expV_half = DiagonalOperator(domain, np.exp(-1j * V * (dt / 2.0) / hbar))
    p = dual.points
    expT = DiagonalOperator(dual, np.exp(-1j * hbar * p**2 * dt / (2.0 * mass)))
    logger.debug("split_step_operator: N=%d dt=%g", domain.npoints, dt)
    return LazyProduct(expV_half, Tx, expT, Tp, expV_half)


def splitop_evolve(
    propagator: Operator,
    psi0: object,
    steps: int,
    *,
    return_traj: bool = True,
    sample_stride: int = 1,
) -> np.ndarray:
    r"""
    Apply ``propagator`` ``steps`` times.

    Parameters
    ----------
    propagator : Operator
        One-step propagator, usually from :func:`split_step_operator`.
    psi0 : array_like
        Initial state.
    steps : int
        Number of steps.
    return_traj : bool
        Return sampled trajectory if True, else only final state.
    sample_stride : int
        Sampling stride for trajectory; sample 0 is the initial state.

    Returns
    -------
    np.ndarray
        ``(steps // sample_stride + 1, N)`` trajectory or the final ``(N,)``
        state.
    """
    if steps < 0:
        raise ValueError(f"steps must be non-negative; got {steps}.")
    if sample_stride <= 0:
        raise ValueError(f"sample_stride must be positive; got {sample_stride}.")

    psi = np.array(psi0, dtype=complex)
    n_samples = steps // sample_stride + 1
    if return_traj:
        traj = np.empty((n_samples,) + psi.shape, dtype=complex)
        traj[0] = psi
    s_idx = 1

    for k in range(steps):
        psi = propagator.apply(psi)
        if return_traj and ((k + 1) % sample_stride == 0):
            traj[s_idx] = psi
            s_idx += 1

    return traj if return_traj else psi
