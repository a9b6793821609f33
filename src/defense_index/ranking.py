"""Ranking engine: derive rank from score."""

from typing import Iterable, List

from defense_index.models import Entity


def rerank(entities: Iterable[Entity]) -> List[Entity]:
    """Sort entities by score, highest first, and assign ranks 1..N.

    The sort is stable, so entities with equal scores keep their relative
    order from the input. The full list is recomputed on every call.

    Args:
        entities: Entities in their current order

    Returns:
        New entity objects in rank order
    """
    ordered = sorted(entities, key=lambda entity: entity.score, reverse=True)
    return [entity.copy(rank=index + 1) for index, entity in enumerate(ordered)]


def is_consistent(entities: List[Entity]) -> bool:
    """Check that ranks are 1..N and never increase with a lower rank's score."""
    for index, entity in enumerate(entities):
        if entity.rank != index + 1:
            return False
        if index and entities[index - 1].score < entity.score:
            return False
    return True
