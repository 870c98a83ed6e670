"""
Location deduplication helpers.
"""

from typing import Iterable, List

from .models import Location


def dedupe_locations(locations: Iterable[Location]) -> List[Location]:
    """Drop repeated locations, keeping the first occurrence of each."""
    seen = set()
    unique: List[Location] = []
    for location in locations:
        if location in seen:
            continue
        seen.add(location)
        unique.append(location)
    return unique


def merge_locations(*location_lists: Iterable[Location]) -> List[Location]:
    """Union several location lists in order of first appearance."""
    merged: List[Location] = []
    for locations in location_lists:
        merged.extend(locations)
    return dedupe_locations(merged)
