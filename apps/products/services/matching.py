"""
Matching of option selections against product variations.

Variations are only considered when enabled and valid. A valid variation has
exactly one option for every attribute of its product; a variation with an
option missing is invalid data and is never matched, narrowed to or orderable.
An exact match needs the same attributes and options as the selection,
nothing more and nothing less.
"""

from typing import Iterable, List, Optional

from .selection import Selection


def _as_selection(selection) -> Selection:
    if isinstance(selection, Selection):
        return selection
    return Selection.from_mapping(selection)


def _attribute_set(variations, attribute_ids):
    # Without the product's attributes, every attribute used by a variation is one
    if attribute_ids is not None:
        return frozenset(int(a) for a in attribute_ids)
    found = set()
    for variation in variations:
        found |= variation.get_selection().attribute_ids
    return frozenset(found)


def _is_candidate(variation, attribute_ids) -> bool:
    return variation.is_enabled() and variation.get_selection().attribute_ids == attribute_ids


def find_exact_match(variations: Iterable, selection, attribute_ids=None) -> Optional[object]:
    """
    Return the first enabled, valid variation whose options are exactly
    ``selection``, or None when no variation corresponds to it.

    ``attribute_ids`` are the attributes of the product; a selection that
    does not choose an option for each of them never matches.
    """
    selection = _as_selection(selection)
    variations = list(variations)
    attribute_ids = _attribute_set(variations, attribute_ids)
    if not selection or selection.attribute_ids != attribute_ids:
        return None
    for variation in variations:
        if _is_candidate(variation, attribute_ids) and variation.get_selection() == selection:
            return variation
    return None


def filter_by_selection(variations: Iterable, partial_selection, attribute_ids=None) -> List[object]:
    """
    Narrow variations down to the enabled, valid ones carrying every chosen
    option. Attributes not chosen yet are left unconstrained.

    Example:
        partial_selection = {color_id: red_id}
        -> every enabled Red variation, whatever its size
    """
    partial_selection = _as_selection(partial_selection)
    variations = list(variations)
    attribute_ids = _attribute_set(variations, attribute_ids)
    return [
        variation for variation in variations
        if _is_candidate(variation, attribute_ids)
        and variation.get_selection().contains(partial_selection)
    ]


def options_for_next_attribute(filtered_variations: Iterable, next_attribute_id) -> List[object]:
    """
    Distinct options chosen for ``next_attribute_id`` across the variations,
    in the order they are first seen. An empty list means the current
    selection has no valid continuation.
    """
    options = []
    seen = set()
    for variation in filtered_variations:
        option = variation.get_option_for_attribute(next_attribute_id)
        if option is not None and option.pk not in seen:
            seen.add(option.pk)
            options.append(option)
    return options
