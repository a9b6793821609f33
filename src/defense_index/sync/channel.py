"""Synchronization channel over the shared document.

The channel is a single-writer, multi-reader broadcast over one document
held by a pluggable backend:

- ``subscribe`` delivers the current document immediately (or ``None``
  when it does not exist or cannot be read), then every later revision,
  including the ones this process wrote itself
- ``save`` merges top-level fields into the document and broadcasts the
  committed result; local consumers only change state when that echo
  arrives
- ``poll`` / ``watch`` pick up revisions written by other processes

Deliveries go through one FIFO queue. A listener that saves while being
notified queues the next delivery instead of nesting it, so every
subscriber sees revisions in the same order and no two deliveries
interleave.
"""

import asyncio
import copy
from collections import deque
from typing import Any, Callable, Deque, Dict, List, Optional, Tuple

from defense_index.exceptions import PersistenceError, TransportInterruptedError
from defense_index.logging_config import create_logger
from defense_index.models import DOCUMENT_FIELDS
from defense_index.sync.backends import Document, DocumentBackend

logger = create_logger(__name__)

Listener = Callable[[Optional[Document]], None]

_UNSET = object()


class _Subscription:
    def __init__(self, listener: Listener):
        self.listener = listener
        self.active = True


class SyncChannel:
    """Broadcasts the shared document to local subscribers.

    Attributes:
        backend: Storage holding the shared document
    """

    def __init__(self, backend: DocumentBackend):
        self.backend = backend
        self._subscriptions: List[_Subscription] = []
        self._queue: Deque[Tuple[Optional[_Subscription], Optional[Document]]] = deque()
        self._draining = False
        self._last_revision: Any = _UNSET
        self._interrupted = False
        self._closed = False

    # ------------------------------------------------------------------
    # Subscription
    # ------------------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener and deliver the current document to it.

        Args:
            listener: Called with the full document, or ``None`` when the
                document does not exist or cannot be read

        Returns:
            Disposer that stops further deliveries; safe to call more than
            once and from inside a listener
        """
        subscription = _Subscription(listener)
        self._subscriptions.append(subscription)

        document = self._read_for_delivery()
        self._enqueue(subscription, document)
        self._drain()

        def _dispose() -> None:
            subscription.active = False
            if subscription in self._subscriptions:
                self._subscriptions.remove(subscription)

        return _dispose

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def save(self, partial: Dict[str, Any]) -> None:
        """Merge top-level fields into the shared document.

        Fields present in ``partial`` fully replace the stored value (lists
        are replaced wholesale); absent fields are untouched.

        Raises:
            ValueError: If ``partial`` names a field outside the document shape
            PersistenceError: If the write cannot be committed
        """
        unknown = [key for key in partial if key not in DOCUMENT_FIELDS]
        if unknown:
            raise ValueError(f"Unknown document fields: {', '.join(unknown)}")
        if not partial:
            return

        try:
            self.backend.merge(copy.deepcopy(partial))
        except PersistenceError as e:
            logger.error(f"Save failed for fields {sorted(partial)}: {e}")
            raise

        logger.info(f"Saved fields: {', '.join(sorted(partial))}")
        self.poll()

    def bootstrap(self, default_document: Document) -> bool:
        """Seed the shared document if it does not exist yet.

        Never overwrites an existing document.

        Returns:
            True if the defaults were written
        """
        created = self.backend.create_if_absent(copy.deepcopy(default_document))
        if created:
            logger.info("Shared document was empty, seeded default dataset")
            self.poll()
        else:
            logger.info("Shared document already exists, skipping seed")
        return created

    # ------------------------------------------------------------------
    # Remote change detection
    # ------------------------------------------------------------------

    def poll(self) -> bool:
        """Broadcast the document if its revision changed since the last delivery.

        Returns:
            True if a delivery was queued
        """
        try:
            result = self.backend.read()
        except TransportInterruptedError as e:
            if self._interrupted:
                return False
            logger.error(f"Subscription transport interrupted: {e}")
            self._interrupted = True
            self._last_revision = _UNSET
            self._broadcast(None)
            return True

        if self._interrupted:
            logger.info("Subscription transport restored")
            self._interrupted = False

        revision = result[1] if result is not None else None
        if revision == self._last_revision:
            return False

        self._last_revision = revision
        self._broadcast(result[0] if result is not None else None)
        return True

    async def watch(self, interval: float, stop_event: Optional[asyncio.Event] = None) -> None:
        """Poll cooperatively until ``stop_event`` is set or the channel closes."""
        logger.info(f"Watching shared document every {interval}s")
        while not self._closed and not (stop_event and stop_event.is_set()):
            self.poll()
            if stop_event is None:
                await asyncio.sleep(interval)
                continue
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=interval)
            except asyncio.TimeoutError:
                pass

    def close(self) -> None:
        """Drop all subscriptions and release the backend."""
        self._closed = True
        for subscription in self._subscriptions:
            subscription.active = False
        self._subscriptions.clear()
        self._queue.clear()
        self.backend.close()

    # ------------------------------------------------------------------
    # Delivery
    # ------------------------------------------------------------------

    def _read_for_delivery(self) -> Optional[Document]:
        try:
            result = self.backend.read()
        except TransportInterruptedError as e:
            logger.error(f"Initial read failed, delivering empty state: {e}")
            return None
        if result is None:
            logger.info("Document does not exist yet")
            if self._last_revision is _UNSET:
                self._last_revision = None
            return None
        if self._last_revision is _UNSET:
            self._last_revision = result[1]
        return result[0]

    def _broadcast(self, document: Optional[Document]) -> None:
        self._enqueue(None, document)
        self._drain()

    def _enqueue(self, subscription: Optional[_Subscription], document: Optional[Document]) -> None:
        self._queue.append((subscription, document))

    def _drain(self) -> None:
        if self._draining:
            return
        self._draining = True
        try:
            while self._queue:
                target, document = self._queue.popleft()
                recipients = [target] if target is not None else list(self._subscriptions)
                for subscription in recipients:
                    if not subscription.active:
                        continue
                    try:
                        subscription.listener(copy.deepcopy(document))
                    except Exception:
                        logger.exception("Subscriber failed while handling a document update")
        finally:
            self._draining = False
