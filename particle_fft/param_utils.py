from __future__ import annotations

import logging
from typing import Mapping

from particle_fft.errors import PotentialDefinitionError

__all__ = [
    "normalize_symbol_name",
    "param_aliases",
    "resolve_param",
]


def normalize_symbol_name(raw: str) -> str:
    r"""
    Normalize SymPy symbol names coming from LaTeX or string parsing.

    Examples:
        "x_{0}"      -> "x_0"
        "\\omega"    -> "omega"
    """
    return raw.replace("{", "").replace("}", "").lstrip("\\")


def param_aliases(name: str) -> list[str]:
    r"""Generate alias spellings for a parameter name."""
    name_str = str(name)
    candidates: list[str] = [name_str]
    no_braces = name_str.replace("{", "").replace("}", "")
    if no_braces not in candidates:
        candidates.append(no_braces)
    no_slash = no_braces.lstrip("\\")
    if no_slash not in candidates:
        candidates.append(no_slash)
    no_underscore = no_slash.replace("_", "")
    if no_underscore not in candidates:
        candidates.append(no_underscore)
    return candidates


def resolve_param(
    name: str,
    params: Mapping[str, complex],
    *,
    warn_on_multiple: bool = False,
    logger: logging.Logger | None = None,
) -> tuple[str, complex]:
    r"""
    Resolve ``name`` in ``params`` using :func:`param_aliases`.

    Parameters
    ----------
    name : str
        Symbol name to resolve.
    params : mapping
        Parameter values provided by the user.
    warn_on_multiple : bool, optional
        If True, emit a warning via ``logger`` when multiple aliases
        match and the first match is chosen.
    logger : logging.Logger or None, optional
        Logger used for warnings when ``warn_on_multiple`` is True.

    Returns
    -------
    (str, complex)
        Tuple of the matched key in ``params`` and its value.

    Raises
    ------
    PotentialDefinitionError
        If no alias matches.
    """
    candidates = param_aliases(name)
    matches = [key for key in candidates if key in params]
    if matches:
        if warn_on_multiple and logger is not None and len(matches) > 1:
            logger.warning(
                "Parameter name '%s' matched multiple keys %s; using first match '%s'.",
                name,
                matches,
                matches[0],
            )
        key = matches[0]
        return key, params[key]
    raise PotentialDefinitionError(
        f"Missing numeric value for symbol '{name}' in parameters dict. "
        f"Tried keys: {candidates}. Available keys: {sorted(params.keys())}."
    )
