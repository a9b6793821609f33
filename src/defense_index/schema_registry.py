"""Schema Registry for the stat definitions and categories of one domain.

The registry is a view over entity data, not a constraint on it: entities
may carry stat keys the registry does not define, and a defined stat an
entity lacks reads as zero.

Example usage:
    registry = SchemaRegistry()

    # Register a stat; the id defaults to a slug of the label
    registry.add(label="Active Personnel", category="Logistics")

    # Categories are plain tags; deleting one orphans its stats
    registry.add_category("Cyber")
    registry.remove_category("Cyber")

    # Removing a stat notifies listeners so entity data is stripped
    registry.on_stat_removed(store.strip_stat)
    registry.remove("activePersonnel")
"""

from typing import Any, Callable, Dict, Iterable, List, Optional

from defense_index.exceptions import DuplicateIdError
from defense_index.logging_config import create_logger
from defense_index.models import StatDefinition, StatFormat
from defense_index.utils import slugify_label

logger = create_logger(__name__)


class SchemaRegistry:
    """Ordered registry of stat definitions and category tags."""

    def __init__(
        self,
        definitions: Optional[Iterable[StatDefinition]] = None,
        categories: Optional[Iterable[str]] = None,
    ):
        """Initialize the registry.

        Args:
            definitions: Initial stat definitions, in display order
            categories: Initial category tags, in display order
        """
        self._definitions: List[StatDefinition] = []
        self._categories: List[str] = []
        self._removed_listeners: List[Callable[[str], None]] = []

        for definition in definitions or []:
            self.add(definition)
        for category in categories or []:
            self.add_category(category)

    # ------------------------------------------------------------------
    # Stat definitions
    # ------------------------------------------------------------------

    @property
    def definitions(self) -> List[StatDefinition]:
        return list(self._definitions)

    def ids(self) -> List[str]:
        return [definition.id for definition in self._definitions]

    def get(self, stat_id: str) -> Optional[StatDefinition]:
        for definition in self._definitions:
            if definition.id == stat_id:
                return definition
        return None

    def __contains__(self, stat_id: str) -> bool:
        return self.get(stat_id) is not None

    def __len__(self) -> int:
        return len(self._definitions)

    def add(
        self,
        definition: Optional[StatDefinition] = None,
        *,
        label: Optional[str] = None,
        category: str = "",
        format: StatFormat = StatFormat.NUMBER,
        stat_id: Optional[str] = None,
    ) -> StatDefinition:
        """Register a new stat definition.

        Either pass a complete ``definition`` or the individual fields. When
        no id is given it is derived from the label.

        Args:
            definition: Complete definition to register
            label: Display label
            category: Category tag
            format: Display format
            stat_id: Explicit id

        Returns:
            The registered definition

        Raises:
            ValueError: If neither an id nor a label is provided
            DuplicateIdError: If the id is already registered
        """
        if definition is None:
            if not stat_id and not (label and label.strip()):
                raise ValueError("Stat definition requires a label or an id")
            resolved_id = stat_id or slugify_label(label)
            definition = StatDefinition(
                id=resolved_id,
                label=label or resolved_id,
                category=category,
                format=format,
            )

        if definition.id in self:
            raise DuplicateIdError("Stat", definition.id)

        self._definitions.append(definition)
        logger.debug(f"Registered stat '{definition.id}' ({definition.format.value})")
        return definition

    def remove(self, stat_id: str) -> bool:
        """Remove a stat definition and signal the cascade strip.

        Args:
            stat_id: Id of the stat to remove

        Returns:
            True if a definition was removed, False if the id was absent
        """
        definition = self.get(stat_id)
        if definition is None:
            return False

        self._definitions.remove(definition)
        logger.debug(f"Removed stat '{stat_id}'")
        for listener in list(self._removed_listeners):
            listener(stat_id)
        return True

    def on_stat_removed(self, listener: Callable[[str], None]) -> Callable[[], None]:
        """Register a listener called with the id of every removed stat.

        Returns:
            A function that unregisters the listener
        """
        self._removed_listeners.append(listener)

        def _unregister() -> None:
            if listener in self._removed_listeners:
                self._removed_listeners.remove(listener)

        return _unregister

    # ------------------------------------------------------------------
    # Categories
    # ------------------------------------------------------------------

    @property
    def categories(self) -> List[str]:
        return list(self._categories)

    def add_category(self, name: str) -> bool:
        """Add a category tag; blank or existing names are ignored."""
        name = (name or "").strip()
        if not name or name in self._categories:
            return False
        self._categories.append(name)
        return True

    def remove_category(self, name: str) -> bool:
        """Remove a category tag.

        Stat definitions that reference the category are left untouched.
        """
        if name not in self._categories:
            return False
        self._categories.remove(name)
        orphaned = [d.id for d in self._definitions if d.category == name]
        if orphaned:
            logger.info(f"Category '{name}' removed, orphaned stats: {', '.join(orphaned)}")
        return True

    def stats_by_category(self) -> Dict[str, List[StatDefinition]]:
        """Group definitions by category, categories first in registry order.

        Stats whose category is not registered are grouped under their own
        tag after the registered ones.
        """
        grouped: Dict[str, List[StatDefinition]] = {c: [] for c in self._categories}
        for definition in self._definitions:
            grouped.setdefault(definition.category, []).append(definition)
        return grouped

    # ------------------------------------------------------------------
    # Copies and serialization
    # ------------------------------------------------------------------

    def copy(self) -> "SchemaRegistry":
        """Independent registry with the same content and no listeners."""
        clone = SchemaRegistry()
        clone._definitions = [
            StatDefinition(d.id, d.label, d.category, d.format) for d in self._definitions
        ]
        clone._categories = list(self._categories)
        return clone

    def definitions_to_list(self) -> List[Dict[str, Any]]:
        return [definition.to_dict() for definition in self._definitions]

    def load(self, definitions: Optional[List[Dict[str, Any]]], categories: Optional[List[str]]) -> None:
        """Replace content from shared document fields.

        ``None`` leaves the corresponding part unchanged. Duplicate ids in
        stored data keep the first occurrence; unreadable definitions are
        skipped.
        """
        if definitions is not None:
            loaded: List[StatDefinition] = []
            seen = set()
            for raw in definitions:
                try:
                    definition = StatDefinition.from_dict(raw)
                except (AttributeError, KeyError, TypeError, ValueError) as e:
                    logger.warning(f"Skipping malformed stat definition {raw!r}: {e}")
                    continue
                if definition.id in seen:
                    logger.warning(f"Ignoring duplicate stat id '{definition.id}' in stored data")
                    continue
                seen.add(definition.id)
                loaded.append(definition)
            self._definitions = loaded

        if categories is not None:
            self._categories = []
            for category in categories:
                self.add_category(category)
