"""One-directional structural comparison of desired and actual state."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import BaseModel


def matches(desired: Any, actual: Any) -> bool:
    """Check whether ``actual`` already satisfies ``desired``.

    Every key present in a desired mapping must be present in the actual
    mapping with a matching value; keys only present in ``actual`` are
    ignored, since gateway records carry generated fields (ids, timestamps,
    plugin defaults) the portal never declares. Sequences must have the same
    length and match element by element. Other values compare with ``==``,
    except that booleans never equal numbers.

    Example:
        >>> matches({"a": 1}, {"a": 1, "b": 2})
        True
        >>> matches({"a": 1, "b": 2}, {"a": 1})
        False
    """
    if isinstance(desired, BaseModel):
        desired = desired.model_dump(exclude_none=True)
    if isinstance(actual, BaseModel):
        actual = actual.model_dump(exclude_none=True)

    if isinstance(desired, Mapping):
        if not isinstance(actual, Mapping):
            return False
        return all(key in actual and matches(value, actual[key]) for key, value in desired.items())

    if isinstance(desired, Sequence) and not isinstance(desired, (str, bytes)):
        if not isinstance(actual, Sequence) or isinstance(actual, (str, bytes)):
            return False
        if len(desired) != len(actual):
            return False
        return all(matches(d, a) for d, a in zip(desired, actual, strict=True))

    if isinstance(desired, bool) or isinstance(actual, bool):
        return isinstance(desired, bool) and isinstance(actual, bool) and desired == actual

    return bool(desired == actual)
