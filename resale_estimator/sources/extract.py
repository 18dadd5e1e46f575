"""Field extraction helpers for heterogeneous provider payloads.

Each canonical field is described by an ordered list of extractor functions.
Extractors are tried in order and the first one that yields a usable value
wins, so several known response shapes can be supported side by side.
"""

from __future__ import annotations

import math
import re
from typing import Any, Callable, Iterable, List, Optional, Sequence, Union

Extractor = Callable[[Any], Any]
PathKey = Union[str, int]

# Commas are only accepted as thousands separators ("1,299.99"), never as a decimal mark
GROUPED_NUMBER_RE = re.compile(r"^[+-]?\d{1,3}(,\d{3})+(\.\d*)?$", re.ASCII)


def dig(*path: PathKey) -> Extractor:
    """
    Build an extractor that walks a path of dict keys and list indices.

    Missing keys, out-of-range indices and type mismatches yield None.
    """

    def extract(data: Any) -> Any:
        current = data
        for key in path:
            if isinstance(key, int):
                if isinstance(current, list) and -len(current) <= key < len(current):
                    current = current[key]
                else:
                    return None
            elif isinstance(current, dict):
                current = current.get(key)
            else:
                return None
            if current is None:
                return None
        return current

    return extract


def parse_price(value: Any) -> Optional[float]:
    """
    Parse a raw price value to a finite float.

    Accepts ints, floats and numeric strings (``$`` and thousands separators
    are stripped). Booleans, empty strings, strings where a comma may be a
    decimal separator ("10,50") and non-finite results give None.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        cleaned = value.replace("$", "").strip()
        if not cleaned:
            return None
        if "," in cleaned:
            if not GROUPED_NUMBER_RE.match(cleaned):
                return None
            cleaned = cleaned.replace(",", "")
        try:
            number = float(cleaned)
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def first_price(record: Any, extractors: Iterable[Extractor]) -> Optional[float]:
    """Return the first extracted value that parses to a finite price."""
    for extractor in extractors:
        price = parse_price(extractor(record))
        if price is not None:
            return price
    return None


def first_text(record: Any, extractors: Iterable[Extractor]) -> Optional[str]:
    """Return the first extracted value that is a non-empty scalar, as a string."""
    for extractor in extractors:
        value = extractor(record)
        if value is None or isinstance(value, (dict, list)):
            continue
        text = str(value).strip()
        if text:
            return text
    return None


def first_list(data: Any, extractors: Sequence[Extractor]) -> List[Any]:
    """Locate the result array; degrade to an empty list if no shape matches."""
    for extractor in extractors:
        value = extractor(data)
        if isinstance(value, list):
            return value
    return []
