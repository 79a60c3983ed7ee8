"""
Activity taxonomy used by the admission filter.

Loaded once at startup and passed explicitly to the components that need
it; never mutated afterwards.
"""

import json
import logging
from dataclasses import dataclass
from typing import FrozenSet, Iterable, Optional

from .errors import ConfigurationError

logger = logging.getLogger("reel_analyzer")


@dataclass(frozen=True)
class ActivityTaxonomy:
    """Immutable set of bookable activity names, lower-cased"""
    names: FrozenSet[str]

    @classmethod
    def from_names(cls, names: Iterable[str]) -> 'ActivityTaxonomy':
        cleaned = frozenset(
            name.strip().lower() for name in names
            if isinstance(name, str) and name.strip()
        )
        return cls(names=cleaned)

    @classmethod
    def from_file(cls, path: str) -> 'ActivityTaxonomy':
        """
        Load the taxonomy from a JSON file.

        Accepts a list of names, a list of objects with a "name" key, or an
        object holding either form under "activities".

        Raises:
            ConfigurationError: if the file is missing or malformed
        """
        try:
            with open(path, 'r', encoding='utf-8') as taxonomy_file:
                data = json.load(taxonomy_file)
        except (OSError, ValueError) as e:
            raise ConfigurationError(f"Cannot load activity taxonomy from {path}: {e}")

        if isinstance(data, dict):
            data = data.get('activities')

        if not isinstance(data, list):
            raise ConfigurationError(f"Activity taxonomy {path} must contain a list of activities")

        names = [entry.get('name') if isinstance(entry, dict) else entry for entry in data]
        taxonomy = cls.from_names(names)

        if not taxonomy.names:
            raise ConfigurationError(f"Activity taxonomy {path} is empty")

        logger.info(f"Loaded {len(taxonomy.names)} activities from {path}")
        return taxonomy

    def matches(self, activity: Optional[str]) -> bool:
        """Exact match, or either name containing the other, ignoring case"""
        if not activity or not activity.strip():
            return False

        candidate = activity.strip().lower()
        if candidate in self.names:
            return True

        return any(name in candidate or candidate in name for name in self.names)

    def __len__(self) -> int:
        return len(self.names)
