r"""
Potential functions for grid Hamiltonians.

Closed-form potentials are plain NumPy functions. Symbolic potentials can be
given either as SymPy-parsable strings (``"0.5*omega**2*x**2"``) or as LaTeX
(``r"\frac{1}{2} \omega^{2} x^{2}"``); both are compiled with
:func:`sympy.lambdify` into a callable ``V(x)`` once all non-coordinate
symbols have been bound from a parameter dictionary.
"""

from __future__ import annotations

import logging
from typing import Callable, Mapping

import numpy as np
import sympy as sp
from sympy.parsing.latex import parse_latex

from particle_fft.errors import PotentialDefinitionError
from particle_fft.param_utils import normalize_symbol_name, resolve_param

logger = logging.getLogger(__name__)

__all__ = [
    "harmonic_potential",
    "morse_potential",
    "potential_from_expr",
    "potential_from_latex",
]


def harmonic_potential(
    x: np.ndarray, omega: float = 1.0, mass: float = 1.0, x0: float = 0.0
) -> np.ndarray:
    r"""Harmonic trap ``V(x) = m omega^2 (x - x0)^2 / 2``."""
    return 0.5 * mass * omega**2 * (np.asarray(x) - x0) ** 2


def morse_potential(
    r: np.ndarray, De: float, a: float, re: float, *, shift: str = "bottom"
) -> np.ndarray:
    r"""
    Morse potential V(r) = De * (1 - exp(-a (r - re)))^2 + shift.

    Parameters
    ----------
    r : ndarray
        Coordinate array.
    De : float
        Dissociation energy.
    a : float
        Range parameter.
    re : float
        Equilibrium bond distance.
    shift : {"bottom", "zero"}
        - "bottom": set V(re) = 0 (default)
        - "zero"  : set V(inf) = 0 (subtract De)
    """
    V = De * (1.0 - np.exp(-a * (np.asarray(r) - re))) ** 2
    if shift == "zero":
        V = V - De
    elif shift != "bottom":
        raise ValueError("shift must be 'bottom' or 'zero'")
    return V


def _bind_parameters(
    expr: sp.Expr, params: Mapping[str, complex], variable: str
) -> tuple[sp.Symbol, sp.Expr]:
    r"""
    Replace every free symbol other than ``variable`` with its numeric value.

    Returns the coordinate symbol and the bound expression.
    """
    x_sym = sp.Symbol(variable)
    replacements: dict[sp.Symbol, object] = {}
    for s in expr.free_symbols:
        name = normalize_symbol_name(s.name)
        if name == variable:
            replacements[s] = x_sym
            continue
        _, value = resolve_param(name, params, warn_on_multiple=True, logger=logger)
        replacements[s] = sp.sympify(value)
    bound = expr.xreplace(replacements) if replacements else expr

    leftover = {str(s) for s in bound.free_symbols} - {variable}
    if leftover:
        raise PotentialDefinitionError(
            f"Potential may depend only on '{variable}'; unbound symbols: "
            f"{sorted(leftover)}."
        )
    return x_sym, bound


def _lambdify_potential(
    expr: sp.Expr, params: Mapping[str, complex], variable: str
) -> Callable[[np.ndarray], np.ndarray]:
    x_sym, bound = _bind_parameters(expr, params, variable)
    fn = sp.lambdify(x_sym, bound, modules="numpy")
    logger.debug("potential: compiled V(%s) = %s", variable, bound)

    def potential(x: np.ndarray) -> np.ndarray:
        r"""Evaluate the compiled potential on grid points."""
        arr = np.asarray(x, dtype=float)
        vals = np.asarray(fn(arr), dtype=complex)
        if vals.shape != arr.shape:
            vals = np.broadcast_to(vals, arr.shape).copy()
        return vals

    return potential


def potential_from_expr(
    expr: str | sp.Expr,
    params: Mapping[str, complex] | None = None,
    *,
    variable: str = "x",
) -> Callable[[np.ndarray], np.ndarray]:
    r"""
    Build ``V(x)`` from a SymPy expression or a string SymPy can parse.

    Examples
    --------
    >>> V = potential_from_expr("k*x**2/2", {"k": 2.0})
    >>> V(np.array([1.0, 2.0])).real
    array([1., 4.])
    """
    if isinstance(expr, str):
        try:
            expr = sp.sympify(expr)
        except (sp.SympifyError, SyntaxError, TypeError) as exc:
            raise PotentialDefinitionError(
                f"Could not parse potential expression {expr!r}: {exc}"
            ) from exc
    return _lambdify_potential(expr, params or {}, variable)


def potential_from_latex(
    latex: str,
    params: Mapping[str, complex] | None = None,
    *,
    variable: str = "x",
) -> Callable[[np.ndarray], np.ndarray]:
    r"""
    Build ``V(x)`` from a LaTeX expression such as ``\frac{1}{2} \omega^{2} x^{2}``.

    Greek-letter and subscripted symbols are matched against ``params`` with
    the usual alias rules (``\omega_{0}`` matches ``"omega_0"`` or
    ``"omega0"``).
    """
    logger.debug("potential_from_latex: parsing %s", latex)
    try:
        expr = parse_latex(latex)
    except Exception as exc:  # parse_latex raises its own LaTeXParsingError
        raise PotentialDefinitionError(
            f"Could not parse LaTeX potential {latex!r}: {exc}"
        ) from exc
    return _lambdify_potential(expr, params or {}, variable)
