"""Defines the in-memory representation of a keynotes file.

The most important class is :class:`Section`.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional


@dataclass
class Section:
    """A named group of entries (key-value pairs).

    Instances do not enforce that keys are unique across a whole file; that is the responsibility of
    :class:`keynotes.store.KeynoteFile`, which checks every section before calling :meth:`add_entry`.
    """

    name: str
    """The section name, as it appears between ``<`` and ``>`` in the header line."""

    entries: Dict[str, str] = field(default_factory=dict)
    """Maps each key in the section to its value. Iteration order is not meaningful."""

    def add_entry(self, key: str, value: str) -> None:
        """Stores the pair, overwriting any existing value for the key."""
        self.entries[key] = value

    def remove_entry(self, key: str) -> Optional[str]:
        """Removes the key and returns its value, or None if the section did not contain it."""
        return self.entries.pop(key, None)

    def as_json(self) -> dict:
        """Returns a dict representing the instance, suitable for serializing as json."""
        return {
            'name': self.name,
            'entries': dict(sorted(self.entries.items())),
        }
