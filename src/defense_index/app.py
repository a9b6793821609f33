"""Application wiring: one channel, one auth state, two domain coordinators.

Example usage:
    with DefenseIndexApp.from_config() as app:
        for nation in app.nations.entities:
            print(nation.rank, nation.name)
"""

from typing import Dict, Optional

from defense_index import config
from defense_index.auth import AuthState
from defense_index.coordinator import DomainCoordinator
from defense_index.defaults import default_document
from defense_index.exceptions import ConfigurationError
from defense_index.logging_config import create_logger
from defense_index.models import AIRCRAFT, DOMAINS, NATIONS, DomainSpec
from defense_index.producers import OpenAIEntityProducer
from defense_index.sync.backends import (
    DocumentBackend,
    DuckDBDocumentBackend,
    InMemoryDocumentBackend,
    S3DocumentBackend,
)
from defense_index.sync.channel import SyncChannel

logger = create_logger(__name__)


def build_backend(kind: Optional[str] = None) -> DocumentBackend:
    """Build the document backend selected by configuration.

    Raises:
        ConfigurationError: If the backend kind is unknown
    """
    kind = (kind or config.STORAGE_BACKEND).lower()
    if kind == "memory":
        return InMemoryDocumentBackend()
    if kind == "duckdb":
        return DuckDBDocumentBackend(config.DUCKDB_PATH, config.DOCUMENT_PATH)
    if kind == "s3":
        return S3DocumentBackend(config.S3_BUCKET_NAME, config.S3_DOCUMENT_KEY)
    raise ConfigurationError(f"Unsupported storage backend '{kind}'")


def build_producer(spec: DomainSpec) -> Optional[OpenAIEntityProducer]:
    """Build the entity generator for a domain, or None without an API key."""
    if not config.LLM_API_KEY:
        return None
    return OpenAIEntityProducer(
        spec,
        model=config.LLM_MODEL,
        api_key=config.LLM_API_KEY,
        base_url=config.LLM_BASE_URL,
    )


class DefenseIndexApp:
    """Owns the shared channel and both coordinators.

    Construct, ``start()``, and ``shutdown()`` when done; the instance is
    also a context manager.
    """

    def __init__(
        self,
        backend: DocumentBackend,
        auth: Optional[AuthState] = None,
        producers: Optional[Dict[str, object]] = None,
        seed_defaults: bool = True,
    ):
        self.channel = SyncChannel(backend)
        self.auth = auth or AuthState()
        self.seed_defaults = seed_defaults
        producers = producers or {}
        self.nations = DomainCoordinator(NATIONS, self.channel, self.auth, producers.get(NATIONS.name))
        self.aircraft = DomainCoordinator(AIRCRAFT, self.channel, self.auth, producers.get(AIRCRAFT.name))
        self._started = False

    @classmethod
    def from_config(cls) -> "DefenseIndexApp":
        config.validate_config()
        producers = {name: build_producer(spec) for name, spec in DOMAINS.items()}
        return cls(build_backend(), producers=producers)

    def domain(self, name: str) -> DomainCoordinator:
        """Coordinator for ``nations`` or ``aircraft``."""
        if name == NATIONS.name:
            return self.nations
        if name == AIRCRAFT.name:
            return self.aircraft
        raise KeyError(f"Unknown domain '{name}', expected one of: {', '.join(DOMAINS)}")

    def start(self) -> None:
        """Seed the shared document if absent, then subscribe both domains."""
        if self._started:
            return
        if self.seed_defaults:
            self.channel.bootstrap(default_document())
        self.nations.start()
        self.aircraft.start()
        self._started = True
        logger.info("Global Defense Index started")

    def shutdown(self) -> None:
        """Dispose subscriptions and release the backend."""
        self.nations.dispose()
        self.aircraft.dispose()
        self.channel.close()
        self._started = False
        logger.info("Global Defense Index stopped")

    def __enter__(self) -> "DefenseIndexApp":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown()
