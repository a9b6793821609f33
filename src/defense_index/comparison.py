"""Head-to-head comparison of two entities over the registered stats."""

from dataclasses import dataclass
from typing import List, Optional

from defense_index.models import Entity, StatDefinition, StatFormat
from defense_index.schema_registry import SchemaRegistry

LEFT = "left"
RIGHT = "right"


@dataclass
class StatComparison:
    """One stat row of a comparison."""

    definition: StatDefinition
    left_value: float
    right_value: float

    @property
    def leader(self) -> Optional[str]:
        if self.left_value > self.right_value:
            return LEFT
        if self.right_value > self.left_value:
            return RIGHT
        return None


@dataclass
class Comparison:
    left: Entity
    right: Entity
    rows: List[StatComparison]

    @property
    def score_leader(self) -> Optional[str]:
        if self.left.score > self.right.score:
            return LEFT
        if self.right.score > self.left.score:
            return RIGHT
        return None

    def stats_won(self, side: str) -> int:
        return sum(1 for row in self.rows if row.leader == side)


def compare_entities(left: Entity, right: Entity, registry: SchemaRegistry) -> Comparison:
    """Compare two entities stat by stat, in registry order.

    Stats an entity does not carry count as zero; stat keys outside the
    registry are not compared.
    """
    rows = [
        StatComparison(definition, left.stat(definition.id), right.stat(definition.id))
        for definition in registry.definitions
    ]
    return Comparison(left=left, right=right, rows=rows)


def format_stat_value(definition: StatDefinition, value: float) -> str:
    """Render a stat value for display."""
    if definition.format is StatFormat.SLIDER:
        return f"{value:.2f}/10"
    if float(value).is_integer():
        text = f"{int(value):,}"
    else:
        text = f"{value:,}"
    if definition.format is StatFormat.CURRENCY:
        return f"${text}"
    return text
