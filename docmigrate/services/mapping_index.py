"""Read-only lookups over a parsed migration mapping."""

import fnmatch
import logging
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from ..exceptions import MappingError
from ..models.schema import (
    FieldRule,
    HandlerConfig,
    MapDirection,
    MapSide,
    MigrationMapping,
)

logger = logging.getLogger(__name__)


def _opposite(direction: MapDirection) -> MapDirection:
    if direction == MapDirection.SOURCE:
        return MapDirection.DESTINATION
    return MapDirection.SOURCE


def _matches(pattern: str, name: str) -> bool:
    if "*" in pattern:
        return fnmatch.fnmatchcase(name, pattern)
    return pattern == name


class MappingIndex:
    """
    Lookup from a parsed mapping.

    Answers three questions, always relative to a direction:
    - which document a document corresponds to on the other side
    - which field a field corresponds to on the other side
    - which handlers are bound to a (document, field) pair

    Unlisted documents and fields map to themselves. Ignored ones map to
    None. Exact rules take precedence over wildcard rules.
    """

    def __init__(self, mapping: MigrationMapping):
        """
        Initialize the index.

        Args:
            mapping: Parsed mapping to index
        """
        self.mapping = mapping
        self._exact_rules: Dict[MapDirection, Dict[Tuple[str, str], List[FieldRule]]] = {}
        self._wildcard_rules: Dict[MapDirection, List[FieldRule]] = {}
        self._reverse_renames: Dict[MapDirection, Dict[str, str]] = {}
        self._field_cache: Dict[Tuple[str, str, MapDirection], Optional[str]] = {}

        for direction in MapDirection:
            side = mapping.side(direction)
            exact: Dict[Tuple[str, str], List[FieldRule]] = {}
            wildcards: List[FieldRule] = []
            for rule in side.field_rules:
                if rule.is_wildcard:
                    wildcards.append(rule)
                else:
                    exact.setdefault((rule.document, rule.field), []).append(rule)
            self._exact_rules[direction] = exact
            self._wildcard_rules[direction] = wildcards
            self._reverse_renames[direction] = self._build_reverse_renames(side)

    @staticmethod
    def _build_reverse_renames(side: MapSide) -> Dict[str, str]:
        reverse = {}
        for original, renamed in side.renamed_documents.items():
            if renamed in reverse:
                raise MappingError(
                    f"Documents {reverse[renamed]} and {original} are both renamed to {renamed}"
                )
            reverse[renamed] = original
        return reverse

    def is_document_ignored(self, name: str, direction: MapDirection) -> bool:
        """Check whether a document is excluded on the given side."""
        side = self.mapping.side(direction)
        return any(_matches(pattern, name) for pattern in side.ignored_documents)

    def document_target(self, name: str, direction: MapDirection) -> Optional[str]:
        """
        Resolve the document on the other side.

        Args:
            name: Document name on the ``direction`` side
            direction: Side the name belongs to

        Returns:
            Corresponding document name, or None when either side ignores it
        """
        if self.is_document_ignored(name, direction):
            return None

        side = self.mapping.side(direction)
        opposite = _opposite(direction)
        target = side.renamed_documents.get(name)
        if target is None:
            target = self._reverse_renames[opposite].get(name, name)

        if self.is_document_ignored(target, opposite):
            return None
        return target

    def field_target(self, document: str, field_name: str, direction: MapDirection) -> Optional[str]:
        """
        Resolve the field on the other side.

        Returns:
            Target field name, or None when the field (or its document) is ignored
        """
        key = (document, field_name, direction)
        if key not in self._field_cache:
            self._field_cache[key] = self._resolve_field_target(document, field_name, direction)
        return self._field_cache[key]

    def _resolve_field_target(self, document: str, field_name: str, direction: MapDirection) -> Optional[str]:
        target_document = self.document_target(document, direction)
        if target_document is None:
            return None

        target_field = field_name
        for rule in self._matching_rules(document, field_name, direction):
            if rule.ignore:
                return None
            if rule.move:
                target_field = rule.move.split(".")[-1]
                break

        # The other side may drop the field as well
        for rule in self._matching_rules(target_document, target_field, _opposite(direction)):
            if rule.ignore:
                return None
            if rule.move:
                break

        return target_field

    def handler_configs(self, document: str, field_name: str, direction: MapDirection) -> List[HandlerConfig]:
        """Handlers bound to a field, in declaration order."""
        for rule in self._matching_rules(document, field_name, direction):
            if rule.handlers:
                return list(rule.handlers)
        return []

    def has_handler(self, document: str, field_name: str, direction: MapDirection) -> bool:
        """Check whether any handler is bound to a field."""
        return bool(self.handler_configs(document, field_name, direction))

    def _matching_rules(self, document: str, field_name: str, direction: MapDirection) -> List[FieldRule]:
        rules = list(self._exact_rules[direction].get((document, field_name), []))
        for rule in self._wildcard_rules[direction]:
            if _matches(rule.document, document) and _matches(rule.field, field_name):
                rules.append(rule)
        return rules


class MappingRegistry:
    """
    Registry of parsed mappings keyed by profile name.

    Supports:
    - Loading mapping files from a directory
    - Registering mappings programmatically
    - Building (and caching) a MappingIndex per profile
    """

    def __init__(self, mappings_dir: Optional[str] = None):
        """
        Initialize the registry.

        Args:
            mappings_dir: Directory containing mapping JSON files
        """
        self.mappings: Dict[str, MigrationMapping] = {}
        self._indexes: Dict[str, MappingIndex] = {}

        if mappings_dir:
            self.load_mappings_from_directory(mappings_dir)

    def load_mappings_from_directory(self, directory: str) -> int:
        """
        Load all mapping files from a directory.

        Args:
            directory: Path to directory containing mapping JSON files

        Returns:
            Number of mappings loaded
        """
        loaded = 0
        path = Path(directory)

        if not path.exists():
            logger.warning(f"Mappings directory does not exist: {directory}")
            return 0

        for file_path in sorted(path.glob("**/*.json")):
            mapping = MigrationMapping.from_json_file(str(file_path))
            self.register_mapping(mapping)
            loaded += 1
            logger.info(f"Loaded mapping: {mapping.name} from {file_path}")

        return loaded

    def register_mapping(self, mapping: MigrationMapping) -> None:
        """Register a migration mapping under its name."""
        self.mappings[mapping.name] = mapping
        self._indexes.pop(mapping.name, None)

    def get_index(self, profile: str = "map_file") -> MappingIndex:
        """Get the index for a mapping profile."""
        if profile not in self._indexes:
            mapping = self.mappings.get(profile)
            if mapping is None:
                raise MappingError(f"Mapping profile not found: {profile}")
            self._indexes[profile] = MappingIndex(mapping)
        return self._indexes[profile]

    def list_mappings(self) -> List[str]:
        """List all registered mapping names."""
        return list(self.mappings.keys())
