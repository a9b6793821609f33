"""Entity Store: the ranked entity list of one domain.

Every mutation re-runs the ranking engine before listeners are notified, so
an observer never sees a rank that disagrees with the scores.
"""

from typing import Callable, Iterable, List, Optional

from defense_index.logging_config import create_logger
from defense_index.models import DomainSpec, Entity
from defense_index.ranking import rerank
from defense_index.schema_registry import SchemaRegistry
from defense_index.utils import new_entity_id

logger = create_logger(__name__)

DEFAULT_NEW_SCORE = 50


class EntityStore:
    """Ordered, always-ranked list of entities.

    Attributes:
        spec: Domain the entities belong to
    """

    def __init__(self, spec: DomainSpec, entities: Optional[Iterable[Entity]] = None):
        self.spec = spec
        self._entities: List[Entity] = rerank(entities or [])
        self._listeners: List[Callable[[List[Entity]], None]] = []

    @property
    def entities(self) -> List[Entity]:
        """Copies of the entities in rank order."""
        return [entity.copy() for entity in self._entities]

    def __len__(self) -> int:
        return len(self._entities)

    def ids(self) -> List[str]:
        return [entity.id for entity in self._entities]

    def get(self, entity_id: str) -> Optional[Entity]:
        for entity in self._entities:
            if entity.id == entity_id:
                return entity.copy()
        return None

    def find_by_name(self, query: str) -> Optional[Entity]:
        """First entity (in rank order) whose name contains ``query``, ignoring case."""
        needle = (query or "").strip().lower()
        if not needle:
            return None
        for entity in self._entities:
            if needle in entity.name.lower():
                return entity.copy()
        return None

    def subscribe(self, listener: Callable[[List[Entity]], None]) -> Callable[[], None]:
        """Register a listener called with the ranked list after each change."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def upsert(self, entity: Entity) -> None:
        """Replace the entity with the same id wholesale, or append it."""
        entities = list(self._entities)
        for index, existing in enumerate(entities):
            if existing.id == entity.id:
                entities[index] = entity.copy()
                break
        else:
            entities.append(entity.copy())
        self._commit(entities)

    def remove(self, entity_id: str) -> bool:
        """Remove an entity; absent ids are a no-op."""
        entities = [entity for entity in self._entities if entity.id != entity_id]
        if len(entities) == len(self._entities):
            return False
        self._commit(entities)
        return True

    def strip_stat(self, stat_id: str) -> None:
        """Remove a stat key from every entity (cascade of a stat delete)."""
        stripped = []
        for entity in self._entities:
            stats = {key: value for key, value in entity.stats.items() if key != stat_id}
            stripped.append(entity.copy(stats=stats))
        self._commit(stripped)

    def seed_stat(self, stat_id: str, value: float) -> None:
        """Give every entity lacking ``stat_id`` the initial ``value``."""
        seeded = []
        for entity in self._entities:
            stats = dict(entity.stats)
            stats.setdefault(stat_id, value)
            seeded.append(entity.copy(stats=stats))
        self._commit(seeded)

    def replace_all(self, entities: Iterable[Entity]) -> None:
        """Load a complete list, e.g. from the shared document.

        Duplicate ids in stored data keep the first occurrence.
        """
        unique: List[Entity] = []
        seen = set()
        for entity in entities:
            if entity.id in seen:
                logger.warning(f"Ignoring duplicate {self.spec.name} id '{entity.id}' in stored data")
                continue
            seen.add(entity.id)
            unique.append(entity)
        self._commit(unique)

    def _commit(self, entities: List[Entity]) -> None:
        self._entities = rerank(entities)
        snapshot = self.entities
        for listener in list(self._listeners):
            listener(snapshot)

    # ------------------------------------------------------------------
    # Templates and copies
    # ------------------------------------------------------------------

    def new_entity(self, registry: SchemaRegistry) -> Entity:
        """Template for the admin "add new" path.

        Every registered stat is seeded with its format's initial value.
        """
        stats = {d.id: d.format.initial_value for d in registry.definitions}
        return Entity(
            id=new_entity_id(),
            name=self.spec.new_entity_name,
            score=DEFAULT_NEW_SCORE,
            profile=self.spec.new_profile(),
            rank=len(self._entities) + 1,
            description="Description...",
            stats=stats,
        )

    def copy(self) -> "EntityStore":
        """Independent store with the same entities and no listeners."""
        clone = EntityStore(self.spec)
        clone._entities = self.entities
        return clone

    def to_list(self):
        return [entity.to_dict() for entity in self._entities]
