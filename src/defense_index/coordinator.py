"""Domain Coordinator: one schema registry and one entity store per domain.

The coordinator is the only surface the presentation layer talks to. It
exposes the ranked entity list and the schema, and routes the admin
mutations to the shared document.

Mutations never touch local state directly. Each one computes the next
collections on copies of the registry and store, merges them into the
shared document, and local state changes only when the channel delivers
the committed document back (echo-back). A failed save therefore leaves
local state exactly as it was.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from defense_index.auth import AuthState
from defense_index.comparison import Comparison, compare_entities
from defense_index.entity_store import EntityStore
from defense_index.exceptions import ConfigurationError, InvalidCandidateError
from defense_index.generation import GenerationValidator, should_generate
from defense_index.logging_config import create_logger
from defense_index.models import DomainSpec, Entity, StatDefinition, StatFormat
from defense_index.producers import ComparisonAnalysis, EntityProducer
from defense_index.schema_registry import SchemaRegistry
from defense_index.sync.channel import SyncChannel
from defense_index.utils import is_finite_number, is_number

logger = create_logger(__name__)


@dataclass
class DomainSnapshot:
    """Read-only view of a domain handed to subscribers."""

    domain: str
    entities: List[Entity]
    stat_definitions: List[StatDefinition]
    categories: List[str]
    loaded: bool


@dataclass
class SearchResult:
    """Outcome of a search: an existing match or a newly generated entity."""

    entity: Entity
    generated: bool


class DomainCoordinator:
    """Binds a registry, a store and the shared document for one domain.

    Attributes:
        spec: Domain description (nations or aircraft)
        channel: Shared synchronization channel
        auth: Authentication state guarding mutations
        producer: Optional generator for new entities
    """

    def __init__(
        self,
        spec: DomainSpec,
        channel: SyncChannel,
        auth: AuthState,
        producer: Optional[EntityProducer] = None,
    ):
        self.spec = spec
        self.channel = channel
        self.auth = auth
        self.producer = producer
        self.validator = GenerationValidator(spec)

        self._registry = SchemaRegistry()
        self._store = EntityStore(spec)
        self._loaded = False
        self._listeners: List[Callable[[DomainSnapshot], None]] = []
        self._dispose_subscription: Optional[Callable[[], None]] = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Subscribe to the shared document; the first delivery resolves loading."""
        if self._dispose_subscription is not None:
            return
        self._dispose_subscription = self.channel.subscribe(self._on_document)
        logger.info(f"{self.spec.label} coordinator started")

    def dispose(self) -> None:
        """Stop receiving updates. Safe to call more than once."""
        if self._dispose_subscription is None:
            return
        self._dispose_subscription()
        self._dispose_subscription = None
        self._listeners.clear()
        logger.info(f"{self.spec.label} coordinator disposed")

    def subscribe(self, listener: Callable[[DomainSnapshot], None]) -> Callable[[], None]:
        """Register a listener for domain snapshots; the current one is pushed now."""
        self._listeners.append(listener)
        listener(self.snapshot())

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    @property
    def entities(self) -> List[Entity]:
        """Entities in rank order."""
        return self._store.entities

    @property
    def stat_definitions(self) -> List[StatDefinition]:
        return self._registry.definitions

    @property
    def categories(self) -> List[str]:
        return self._registry.categories

    @property
    def stats_by_category(self) -> Dict[str, List[StatDefinition]]:
        return self._registry.stats_by_category()

    def get(self, entity_id: str) -> Optional[Entity]:
        return self._store.get(entity_id)

    def stat_value(self, entity: Entity, stat_id: str) -> float:
        return entity.stat(stat_id)

    def new_entity(self) -> Entity:
        """Unsaved template for the "add new" path."""
        return self._store.new_entity(self._registry)

    def snapshot(self) -> DomainSnapshot:
        return DomainSnapshot(
            domain=self.spec.name,
            entities=self.entities,
            stat_definitions=self.stat_definitions,
            categories=self.categories,
            loaded=self._loaded,
        )

    def compare(self, left_id: str, right_id: str) -> Comparison:
        """Stat-by-stat comparison of two entities.

        Raises:
            KeyError: If either id is unknown
        """
        left, right = self.get(left_id), self.get(right_id)
        if left is None or right is None:
            missing = left_id if left is None else right_id
            raise KeyError(f"Unknown {self.spec.name} id '{missing}'")
        return compare_entities(left, right, self._registry)

    def analyze(self, left_id: str, right_id: str) -> Optional[ComparisonAnalysis]:
        """Narrative comparison from the producer, or None if unavailable."""
        comparison = self.compare(left_id, right_id)
        analyze = getattr(self.producer, "analyze", None)
        if analyze is None:
            return None
        return analyze(comparison.left, comparison.right)

    # ------------------------------------------------------------------
    # Entity mutations
    # ------------------------------------------------------------------

    def save_entity(self, entity: Entity) -> None:
        """Add a new entity or replace the one with the same id.

        Raises:
            NotAuthenticatedError: If no admin is signed in
            ValueError: If the score or a stat value is NaN or infinite
        """
        self.auth.require_user(f"save a {self.spec.label.lower()}")
        if not is_finite_number(entity.score):
            logger.warning(f"Refusing to save {self.spec.name} '{entity.id}' with score {entity.score!r}")
            raise ValueError(f"Score of '{entity.id}' must be a finite number, got {entity.score!r}")
        bad_stats = sorted(k for k, v in entity.stats.items() if is_number(v) and not is_finite_number(v))
        if bad_stats:
            raise ValueError(f"Stats of '{entity.id}' must be finite numbers: {', '.join(bad_stats)}")
        store = self._store.copy()
        store.upsert(entity)
        self._save({self.spec.entities_field: store.to_list()})

    def delete_entity(self, entity_id: str) -> bool:
        """Delete an entity; unknown ids are a no-op and nothing is written."""
        self.auth.require_user(f"delete a {self.spec.label.lower()}")
        store = self._store.copy()
        if not store.remove(entity_id):
            return False
        self._save({self.spec.entities_field: store.to_list()})
        return True

    # ------------------------------------------------------------------
    # Schema mutations
    # ------------------------------------------------------------------

    def add_stat(
        self,
        label: Optional[str] = None,
        category: Optional[str] = None,
        format: StatFormat = StatFormat.NUMBER,
        stat_id: Optional[str] = None,
    ) -> StatDefinition:
        """Register a stat and seed it into every entity in one write.

        Existing entities receive the format's initial value (``1.0`` for
        sliders, otherwise ``0``).

        Raises:
            ValueError: If neither label nor id is given
            DuplicateIdError: If the id is already registered
        """
        self.auth.require_user("add a stat")
        registry = self._registry.copy()
        if category is None:
            category = registry.categories[0] if registry.categories else ""
        definition = registry.add(
            label=label, category=category, format=StatFormat.parse(format), stat_id=stat_id
        )

        store = self._store.copy()
        store.seed_stat(definition.id, definition.format.initial_value)
        self._save(
            {
                self.spec.stats_field: registry.definitions_to_list(),
                self.spec.entities_field: store.to_list(),
            }
        )
        return definition

    def remove_stat(self, stat_id: str) -> bool:
        """Remove a stat and strip it from every entity in the same write."""
        self.auth.require_user("remove a stat")
        registry = self._registry.copy()
        store = self._store.copy()
        registry.on_stat_removed(store.strip_stat)
        if not registry.remove(stat_id):
            return False
        self._save(
            {
                self.spec.stats_field: registry.definitions_to_list(),
                self.spec.entities_field: store.to_list(),
            }
        )
        return True

    def add_category(self, name: str) -> bool:
        """Add a category; blank or existing names are ignored."""
        self.auth.require_user("add a category")
        registry = self._registry.copy()
        if not registry.add_category(name):
            return False
        self._save({self.spec.categories_field: registry.categories})
        return True

    def remove_category(self, name: str) -> bool:
        """Remove a category; stats referencing it keep their category tag."""
        self.auth.require_user("remove a category")
        registry = self._registry.copy()
        if not registry.remove_category(name):
            return False
        self._save({self.spec.categories_field: registry.categories})
        return True

    # ------------------------------------------------------------------
    # Search and generation
    # ------------------------------------------------------------------

    def search_or_generate(self, query: str) -> Optional[SearchResult]:
        """Find an entity by name, generating it only when nothing matches.

        An existing entity whose name contains ``query`` (ignoring case) is
        returned without calling the producer. Otherwise one candidate is
        produced, validated against the live schema and saved.

        Returns:
            The match or the generated entity; None for a blank query

        Raises:
            ConfigurationError: If no producer is configured
            InvalidCandidateError: If nothing was produced or the candidate
                fails validation
            PersistenceError: If the generated entity cannot be saved
        """
        query = (query or "").strip()
        if not query:
            return None

        if not should_generate(query, self._store.entities):
            return SearchResult(entity=self._store.find_by_name(query), generated=False)

        if self.producer is None:
            raise ConfigurationError(f"No generator configured for {self.spec.name}")

        logger.info(f"No {self.spec.name} matches '{query}', generating")
        candidate = self.producer.produce(query, len(self._store) + 1, self._registry.definitions)
        if candidate is None:
            raise InvalidCandidateError(f"Could not generate {self.spec.label.lower()} data for '{query}'")

        entity = self.validator.validate(candidate, self._registry, self._store.entities)
        store = self._store.copy()
        store.upsert(entity)
        self._save({self.spec.entities_field: store.to_list()})
        return SearchResult(entity=store.get(entity.id) or entity, generated=True)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _save(self, partial: Dict[str, Any]) -> None:
        self.channel.save(partial)

    def _on_document(self, document: Optional[Dict[str, Any]]) -> None:
        try:
            if document is not None:
                self._registry.load(
                    document.get(self.spec.stats_field),
                    document.get(self.spec.categories_field),
                )
                raw_entities = document.get(self.spec.entities_field)
                if raw_entities is not None:
                    self._store.replace_all(self._parse_entities(raw_entities))
            elif not self._loaded:
                logger.info(f"No {self.spec.name} data available yet")
        finally:
            # Loading resolves even when stored data cannot be read
            self._loaded = True
            snapshot = self.snapshot()
            for listener in list(self._listeners):
                listener(snapshot)

    def _parse_entities(self, raw_entities: List[Dict[str, Any]]) -> List[Entity]:
        entities = []
        for raw in raw_entities:
            try:
                entities.append(Entity.from_dict(raw, self.spec))
            except (AttributeError, KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed {self.spec.name} record: {e}")
        return entities
