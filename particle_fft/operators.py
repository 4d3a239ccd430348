r"""
Lazily applied operators on sampled particle domains.

Four kinds of operator are provided:

* :class:`DiagonalOperator` - one complex value per sample, applied by
  elementwise multiplication.
* :class:`TransformOperator` - FFT-based map between a position grid and its
  conjugate momentum grid.
* :class:`LazySum` - weighted sum of terms, each applied to the same input.
* :class:`LazyProduct` - ordered product, rightmost term applied first.

No operator ever materializes a dense matrix unless :meth:`Operator.dense`
is called explicitly. States are plain NumPy arrays of shape ``(N,)`` or
``(N, M)`` (``M`` column states); application always returns a new array.

Adjoints are taken with respect to the grid-weighted inner products
``<phi, psi>_x = dx * sum(conj(phi) * psi)`` and
``<phi, psi>_p = dp * sum(conj(phi) * psi)``. Under that inner product the
transform is unitary, so ``T.adjoint()`` is the inverse transform.
"""

from __future__ import annotations

import abc
import logging
import math
import numbers
from typing import Sequence

import numpy as np

from particle_fft.domains import Domain, DualDomain, SampledDomain, are_conjugate
from particle_fft.errors import (
    DimensionMismatchError,
    EmptyCompositeError,
    IncompatibleDomainError,
    InvalidDomainError,
)

logger = logging.getLogger(__name__)

__all__ = [
    "Operator",
    "DiagonalOperator",
    "TransformOperator",
    "LazySum",
    "LazyProduct",
]

_INV_SQRT_2PI = 1.0 / math.sqrt(2.0 * math.pi)


def _as_state(psi: object) -> np.ndarray:
    r"""Coerce input to a complex array of rank 1 or 2 without copying."""
    arr = np.asarray(psi, dtype=complex)
    if arr.ndim not in (1, 2):
        raise DimensionMismatchError(
            f"State must be a 1-D vector or a 2-D stack of columns; got ndim={arr.ndim}."
        )
    return arr


def _columnwise(values: np.ndarray, psi: np.ndarray) -> np.ndarray:
    r"""Broadcast a per-sample vector against ``psi`` along axis 0."""
    return values if psi.ndim == 1 else values[:, np.newaxis]


def _same_domain(a: Domain | None, b: Domain | None) -> bool:
    return a is None or b is None or a == b


def _readonly(arr: np.ndarray) -> np.ndarray:
    arr.setflags(write=False)
    return arr


class Operator(abc.ABC):
    r"""
    Abstract lazily applied linear operator.

    Subclasses implement :meth:`_apply` and :meth:`adjoint`; the base class
    handles input coercion, length checks and the arithmetic sugar that builds
    :class:`LazySum` and :class:`LazyProduct` composites.
    """

    @property
    @abc.abstractmethod
    def domain_in(self) -> Domain | None:
        r"""Domain of accepted states (``None`` means any length)."""

    @property
    @abc.abstractmethod
    def domain_out(self) -> Domain | None:
        r"""Domain of returned states (``None`` means same as the input)."""

    @abc.abstractmethod
    def _apply(self, psi: np.ndarray) -> np.ndarray:
        r"""Apply to an already validated state array."""
        raise NotImplementedError("Operator must implement _apply.")

    @abc.abstractmethod
    def adjoint(self) -> "Operator":
        r"""Adjoint with respect to the grid-weighted inner products."""
        raise NotImplementedError("Operator must implement adjoint.")

    def apply(self, psi: object) -> np.ndarray:
        r"""
        Apply the operator to ``psi`` and return a new array.

        Raises
        ------
        DimensionMismatchError
            If ``psi`` does not have ``N`` rows for the input domain.
        """
        arr = _as_state(psi)
        dom = self.domain_in
        if dom is not None and arr.shape[0] != dom.npoints:
            raise DimensionMismatchError(
                f"{type(self).__name__} expects {dom.npoints} samples; "
                f"got a state with {arr.shape[0]}."
            )
        return self._apply(arr)

    __call__ = apply

    def dense(self) -> np.ndarray:
        r"""Materialize the operator as a dense ``(N_out, N_in)`` matrix."""
        dom = self.domain_in
        if dom is None:
            raise DimensionMismatchError(
                "Cannot materialize an operator without an input domain."
            )
        return self.apply(np.eye(dom.npoints, dtype=complex))

    def __add__(self, other: object) -> "LazySum":
        if not isinstance(other, Operator):
            return NotImplemented
        return LazySum(self, other)

    def __sub__(self, other: object) -> "LazySum":
        if not isinstance(other, Operator):
            return NotImplemented
        return LazySum(self, other, factors=(1.0, -1.0))

    def __neg__(self) -> "LazyProduct":
        return LazyProduct(self, factor=-1.0)

    def __matmul__(self, other: object) -> "LazyProduct":
        if not isinstance(other, Operator):
            return NotImplemented
        return LazyProduct(self, other)

    def __mul__(self, other: object) -> "LazyProduct":
        if isinstance(other, Operator):
            return LazyProduct(self, other)
        if isinstance(other, numbers.Number):
            return LazyProduct(self, factor=complex(other))
        return NotImplemented

    def __rmul__(self, other: object) -> "LazyProduct":
        if isinstance(other, numbers.Number):
            return LazyProduct(self, factor=complex(other))
        return NotImplemented


class DiagonalOperator(Operator):
    r"""
    Operator diagonal in the sample basis of ``domain``.

    Parameters
    ----------
    domain : SampledDomain or DualDomain
        Grid the values are attached to.
    values : array_like
        One complex value per sample point; copied and frozen.
    """

    def __init__(self, domain: Domain, values: object) -> None:
        arr = np.array(values, dtype=complex)
        if arr.shape != (domain.npoints,):
            raise DimensionMismatchError(
                f"Diagonal values must have shape ({domain.npoints},); got {arr.shape}."
            )
        self._domain = domain
        self._values = _readonly(arr)

    @property
    def domain(self) -> Domain:
        return self._domain

    @property
    def domain_in(self) -> Domain:
        return self._domain

    @property
    def domain_out(self) -> Domain:
        return self._domain

    @property
    def values(self) -> np.ndarray:
        r"""Read-only view of the diagonal entries."""
        return self._values

    def _apply(self, psi: np.ndarray) -> np.ndarray:
        return _columnwise(self._values, psi) * psi

    def adjoint(self) -> "DiagonalOperator":
        return DiagonalOperator(self._domain, np.conj(self._values))

    def dense(self) -> np.ndarray:
        return np.diag(self._values)

    def __repr__(self) -> str:
        return f"DiagonalOperator(domain={self._domain!r})"


class TransformOperator(Operator):
    r"""
    Fourier transform between a position grid and its conjugate momentum grid.

    The forward direction (position to momentum) evaluates

    .. math::

        \tilde\psi(p_k) = \frac{dx}{\sqrt{2\pi}} \sum_j \psi(x_j) e^{-i p_k x_j}

    and the inverse direction

    .. math::

        \psi(x_j) = \frac{dp}{\sqrt{2\pi}} \sum_k \tilde\psi(p_k) e^{+i p_k x_j}.

    Writing ``x_j = xmin + j dx`` and ``p_k = pmin + k dp`` with
    ``dx dp N = 2 pi`` splits the kernel into a phase that depends only on
    ``j``, one that depends only on ``k``, and the plain DFT kernel
    ``exp(-2 pi i j k / N)``. Each application is therefore a phase multiply,
    one FFT, and a second phase multiply: ``O(N log N)``.

    Parameters
    ----------
    to_domain, from_domain : SampledDomain or DualDomain
        One of each kind, forming a conjugate pair.
    """

    def __init__(self, to_domain: Domain, from_domain: Domain) -> None:
        if isinstance(from_domain, SampledDomain) and isinstance(to_domain, DualDomain):
            position, dual, forward = from_domain, to_domain, True
        elif isinstance(from_domain, DualDomain) and isinstance(
            to_domain, SampledDomain
        ):
            position, dual, forward = to_domain, from_domain, False
        else:
            raise InvalidDomainError(
                "transform needs one SampledDomain and one DualDomain; got "
                f"{type(to_domain).__name__} <- {type(from_domain).__name__}."
            )
        if not are_conjugate(position, dual):
            raise InvalidDomainError(
                "Domains are not a conjugate pair: need equal npoints and "
                f"dx*dp*N == 2*pi; got N=({position.npoints}, {dual.npoints}), "
                f"dx={position.spacing:g}, dp={dual.spacing:g}."
            )

        self._to = to_domain
        self._from = from_domain
        self._forward = forward

        x = position.points
        p = dual.points
        dx = position.spacing
        dp = dual.spacing
        if forward:
            self._pre = _readonly(np.exp(-1j * dual.pmin * (x - position.xmin)))
            self._post = _readonly(dx * _INV_SQRT_2PI * np.exp(-1j * p * position.xmin))
        else:
            n = position.npoints
            self._pre = _readonly(np.exp(1j * (p - dual.pmin) * position.xmin))
            self._post = _readonly(n * dp * _INV_SQRT_2PI * np.exp(1j * dual.pmin * x))

        logger.debug(
            "TransformOperator: %s N=%d dx=%g dp=%g",
            "forward" if forward else "inverse",
            position.npoints,
            dx,
            dp,
        )

    @property
    def domain_in(self) -> Domain:
        return self._from

    @property
    def domain_out(self) -> Domain:
        return self._to

    @property
    def is_forward(self) -> bool:
        r"""True for position to momentum."""
        return self._forward

    def _apply(self, psi: np.ndarray) -> np.ndarray:
        shaped = _columnwise(self._pre, psi) * psi
        if self._forward:
            out = np.fft.fft(shaped, axis=0)
        else:
            out = np.fft.ifft(shaped, axis=0)
        return _columnwise(self._post, out) * out

    def inverse(self) -> "TransformOperator":
        r"""Transform in the opposite direction."""
        return TransformOperator(self._from, self._to)

    def adjoint(self) -> "TransformOperator":
        return self.inverse()

    def __repr__(self) -> str:
        return f"TransformOperator(to={self._to!r}, from_={self._from!r})"


class LazySum(Operator):
    r"""
    Weighted sum ``sum_i factors[i] * terms[i]`` applied term by term.

    Parameters
    ----------
    *terms : Operator
        At least one operator; all must share input and output domains.
    factors : sequence of complex, optional
        One scalar per term; defaults to all ones.

    Raises
    ------
    EmptyCompositeError
        If no terms are given.
    IncompatibleDomainError
        If the terms do not act between the same domains.
    """

    def __init__(self, *terms: Operator, factors: Sequence[complex] | None = None) -> None:
        if not terms:
            raise EmptyCompositeError("LazySum requires at least one term.")
        for t in terms:
            if not isinstance(t, Operator):
                raise TypeError(f"LazySum terms must be Operators; got {type(t).__name__}.")
        if factors is None:
            factors = (1.0,) * len(terms)
        if len(factors) != len(terms):
            raise ValueError(
                f"Got {len(factors)} factors for {len(terms)} LazySum terms."
            )

        dom_in: Domain | None = None
        dom_out: Domain | None = None
        has_identity = False
        for t in terms:
            t_out = t.domain_out if t.domain_out is not None else t.domain_in
            if t.domain_in is None and t_out is None:
                # a domain-free identity maps its input domain onto itself
                has_identity = True
                continue
            if not (_same_domain(dom_in, t.domain_in) and _same_domain(dom_out, t_out)):
                raise IncompatibleDomainError(
                    "LazySum terms act between different domains: "
                    f"{t!r} vs in={dom_in!r}, out={dom_out!r}."
                )
            dom_in = dom_in if dom_in is not None else t.domain_in
            dom_out = dom_out if dom_out is not None else t_out
        if has_identity:
            if not _same_domain(dom_in, dom_out):
                raise IncompatibleDomainError(
                    "LazySum mixes an identity with a term mapping "
                    f"{dom_in!r} to {dom_out!r}."
                )
            dom_in = dom_in if dom_in is not None else dom_out
            dom_out = dom_in

        self._terms = tuple(terms)
        self._factors = tuple(complex(f) for f in factors)
        self._domain_in = dom_in
        self._domain_out = dom_out

    @property
    def terms(self) -> tuple[Operator, ...]:
        return self._terms

    @property
    def factors(self) -> tuple[complex, ...]:
        return self._factors

    @property
    def domain_in(self) -> Domain | None:
        return self._domain_in

    @property
    def domain_out(self) -> Domain | None:
        return self._domain_out

    def _apply(self, psi: np.ndarray) -> np.ndarray:
        result = None
        for factor, term in zip(self._factors, self._terms):
            contrib = term.apply(psi)
            if factor != 1.0:
                contrib = factor * contrib
            result = contrib if result is None else result + contrib
        return result

    def adjoint(self) -> "LazySum":
        return LazySum(
            *(t.adjoint() for t in self._terms),
            factors=[f.conjugate() for f in self._factors],
        )

    def __repr__(self) -> str:
        return f"LazySum(nterms={len(self._terms)}, factors={self._factors})"


class LazyProduct(Operator):
    r"""
    Ordered product of operators; for ``[A, B, C]`` applies ``A(B(C(psi)))``.

    An empty product is the identity on any input length. ``factor`` scales
    the final result.

    Raises
    ------
    IncompatibleDomainError
        If the output domain of a term does not match the input domain of the
        term to its left.
    """

    def __init__(self, *terms: Operator, factor: complex = 1.0) -> None:
        for t in terms:
            if not isinstance(t, Operator):
                raise TypeError(
                    f"LazyProduct terms must be Operators; got {type(t).__name__}."
                )

        current: Domain | None = None
        for t in reversed(terms):
            if not _same_domain(t.domain_in, current):
                raise IncompatibleDomainError(
                    f"LazyProduct term {t!r} expects {t.domain_in!r} but the term "
                    f"to its right produces {current!r}."
                )
            if t.domain_out is not None:
                current = t.domain_out

        self._terms = tuple(terms)
        self._factor = complex(factor)
        self._domain_in = next(
            (t.domain_in for t in reversed(terms) if t.domain_in is not None), None
        )
        self._domain_out = next(
            (t.domain_out for t in terms if t.domain_out is not None), None
        )

    @property
    def terms(self) -> tuple[Operator, ...]:
        return self._terms

    @property
    def factor(self) -> complex:
        return self._factor

    @property
    def is_identity(self) -> bool:
        r"""True for an empty product with unit factor."""
        return not self._terms and self._factor == 1.0

    @property
    def domain_in(self) -> Domain | None:
        return self._domain_in

    @property
    def domain_out(self) -> Domain | None:
        return self._domain_out

    def _apply(self, psi: np.ndarray) -> np.ndarray:
        if not self._terms:
            return self._factor * psi if self._factor != 1.0 else psi.copy()
        out = psi
        for term in reversed(self._terms):
            out = term.apply(out)
        if self._factor != 1.0:
            out = self._factor * out
        return out

    def adjoint(self) -> "LazyProduct":
        return LazyProduct(
            *(t.adjoint() for t in reversed(self._terms)),
            factor=self._factor.conjugate(),
        )

    def __repr__(self) -> str:
        return f"LazyProduct(nterms={len(self._terms)}, factor={self._factor})"
