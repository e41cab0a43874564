"""Shared domain utilities.

Example usage:
    >>> from shift.domain.shared import Ok, Err, flat_map
    >>>
    >>> flat_map(Ok(["writing"]), lambda names: Ok(names[0]))
    Ok(value='writing')
"""

from shift.domain.shared.result import Err, Ok, Result, flat_map

__all__ = [
    "Ok",
    "Err",
    "Result",
    "flat_map",
]
