#!/usr/bin/env python3
"""
Display helpers for operator-facing text.
Setting values are only ever shown masked.
"""

from typing import Iterable, List

from .models import ConfigEntry, StoredSelection

VISIBLE_CHARS = 3
MASK = "*" * 5


def mask_value(value: str) -> str:
    """First three characters (all of a shorter value) followed by five asterisks"""
    return f"{value[:VISIBLE_CHARS]}{MASK}"


def format_entries(entries: Iterable[ConfigEntry]) -> List[str]:
    """One `KEY: abc*****` line per entry, in file order"""
    return [f"  {entry.key}: {mask_value(entry.value)}" for entry in entries]


def format_upload_summary(environment: str, entries: Iterable[ConfigEntry]) -> str:
    """Text shown before asking for upload confirmation"""
    lines = ["", "Configuration to be uploaded:", f"Environment: {environment}", "Variables:"]
    lines.extend(format_entries(entries))
    return "\n".join(lines)


def format_stored_selection(stored: StoredSelection) -> str:
    """Reuse question for a stored selection"""
    when = stored.last_used_at
    if when is not None:
        shown = when.astimezone().strftime("%Y-%m-%d %H:%M:%S") if when.tzinfo else when.strftime("%Y-%m-%d %H:%M:%S")
    else:
        shown = stored.last_used
    return (
        f"Use last configuration from {shown}?\n"
        f"  App: {stored.app_name}\n"
        f"  Resource Group: {stored.resource_group}\n"
        f"  Environment: {stored.environment}"
    )
