"""
Template partials are plain ordered mappings of logical ID to resource
definition. Builders return one partial each and callers merge them.
"""

from typing import Dict, Mapping


def merge_partials(*partials: Mapping) -> Dict:
    """
    Merge template partials into a new mapping.

    Keys keep the position of their first insertion. On a duplicate key the
    later partial wins; no collision detection is performed, which is what
    lets every method re-emit the shared role and model.
    """
    merged = {}
    for partial in partials:
        merged.update(partial)
    return merged
