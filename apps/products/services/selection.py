"""
Selection of options on a product page: a map of attribute id -> option id.

Selections are compared structurally over a sorted key set, so two selections
with the same pairs are equal whatever order the request supplied them in.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, Mapping, Optional, Tuple

from apps.products.exceptions import InvalidSelection


def _to_id(value) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise InvalidSelection(f"'{value}' is not a valid identifier.")


@dataclass(frozen=True)
class Selection:
    pairs: Tuple[Tuple[int, int], ...] = ()

    @classmethod
    def from_pairs(cls, pairs: Iterable[Tuple[int, int]]) -> 'Selection':
        normalised = {}
        for attribute_id, option_id in pairs:
            attribute_id = _to_id(attribute_id)
            if attribute_id in normalised:
                raise InvalidSelection('An attribute can only be selected once.')
            normalised[attribute_id] = _to_id(option_id)
        return cls(tuple(sorted(normalised.items())))

    @classmethod
    def from_mapping(cls, mapping: Optional[Mapping]) -> 'Selection':
        """
        Build a selection from request data, e.g. {"3": "7", "4": "9"}.
        Empty values are treated as "not selected yet".
        """
        if not mapping:
            return cls()
        if not isinstance(mapping, Mapping):
            raise InvalidSelection('Options must be a map of attribute to option.')
        return cls.from_pairs(
            (k, v) for k, v in mapping.items() if v not in (None, '')
        )

    def __bool__(self):
        return bool(self.pairs)

    def __len__(self):
        return len(self.pairs)

    def __iter__(self):
        return iter(self.pairs)

    @property
    def attribute_ids(self):
        return frozenset(a for a, _ in self.pairs)

    def as_dict(self) -> Dict[int, int]:
        return dict(self.pairs)

    def contains(self, other: 'Selection') -> bool:
        """True if every pair of ``other`` is also part of this selection."""
        return set(other.pairs) <= set(self.pairs)
