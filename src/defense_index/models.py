"""Data model shared by both ranking domains.

This module defines:
- Stat definitions and their display formats
- The generic ranked Entity with a small per-domain profile extension
- DomainSpec, the static description of one domain and the document
  fields it owns

Every model converts to and from the camelCase JSON shape stored in the
shared document.
"""

import copy
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Type, Union

from defense_index.utils import coerce_number


class StatFormat(str, Enum):
    """Display formats for stat values."""

    NUMBER = "number"
    CURRENCY = "currency"
    SLIDER = "slider"  # Bounded power index, 1.0 - 10.0

    @property
    def initial_value(self) -> float:
        """Value a freshly seeded stat starts with."""
        return 1.0 if self is StatFormat.SLIDER else 0

    @classmethod
    def parse(cls, value: Any) -> "StatFormat":
        if isinstance(value, cls):
            return value
        if not value:
            return cls.NUMBER
        return cls(str(value).lower())


SLIDER_MIN = 1.0
SLIDER_MAX = 10.0


@dataclass
class StatDefinition:
    """A named, categorized, formatted attribute entities may carry."""

    id: str
    label: str
    category: str = ""
    format: StatFormat = StatFormat.NUMBER

    def __post_init__(self):
        self.format = StatFormat.parse(self.format)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "label": self.label,
            "category": self.category,
            "format": self.format.value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StatDefinition":
        return cls(
            id=str(data["id"]),
            label=str(data.get("label") or data["id"]),
            category=str(data.get("category") or ""),
            format=StatFormat.parse(data.get("format")),
        )


@dataclass
class NationProfile:
    """Nation-only fields."""

    flag_code: str = "un"

    REQUIRED_FIELDS = ("flagCode",)

    def to_dict(self) -> Dict[str, Any]:
        return {"flagCode": self.flag_code}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NationProfile":
        return cls(flag_code=str(data.get("flagCode") or ""))


@dataclass
class AircraftProfile:
    """Aircraft-only fields."""

    origin: str = "Unknown"
    image: Optional[str] = None

    REQUIRED_FIELDS = ("origin",)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"origin": self.origin}
        if self.image:
            data["image"] = self.image
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AircraftProfile":
        return cls(
            origin=str(data.get("origin") or ""),
            image=data.get("image") or None,
        )


EntityProfile = Union[NationProfile, AircraftProfile]


@dataclass
class Entity:
    """A ranked record (nation or aircraft).

    ``rank`` is derived from ``score`` by the ranking engine; values set
    by callers are overwritten on the next rerank.
    """

    id: str
    name: str
    score: float
    profile: EntityProfile
    rank: int = 0
    description: str = ""
    stats: Dict[str, float] = field(default_factory=dict)
    is_generated: bool = False

    def stat(self, stat_id: str) -> float:
        """Value of a stat, ``0`` when the entity does not carry it."""
        return self.stats.get(stat_id, 0)

    def copy(self, **changes) -> "Entity":
        """Independent copy, optionally with some fields replaced."""
        clone = replace(self, **changes)
        if "stats" not in changes:
            clone.stats = dict(self.stats)
        if "profile" not in changes:
            clone.profile = copy.copy(self.profile)
        return clone

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"id": self.id, "name": self.name}
        data.update(self.profile.to_dict())
        data.update(
            {
                "score": self.score,
                "rank": self.rank,
                "description": self.description,
                "stats": dict(self.stats),
                "isGenerated": self.is_generated,
            }
        )
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any], spec: "DomainSpec") -> "Entity":
        stats = data.get("stats") or {}
        return cls(
            id=str(data["id"]),
            name=str(data.get("name") or ""),
            score=coerce_number(data.get("score")),
            profile=spec.profile_type.from_dict(data),
            rank=int(coerce_number(data.get("rank"))),
            description=str(data.get("description") or ""),
            stats={str(k): coerce_number(v) for k, v in stats.items()},
            is_generated=bool(data.get("isGenerated", False)),
        )


@dataclass(frozen=True)
class DomainSpec:
    """Static description of one ranking domain."""

    name: str
    label: str
    entities_field: str
    stats_field: str
    categories_field: str
    profile_type: Type
    new_entity_name: str

    @property
    def document_fields(self) -> Tuple[str, str, str]:
        return (self.entities_field, self.stats_field, self.categories_field)

    @property
    def required_fields(self) -> Tuple[str, ...]:
        """Fields a generated candidate must carry."""
        return ("id", "name", "score", "rank", "stats") + self.profile_type.REQUIRED_FIELDS

    def new_profile(self) -> EntityProfile:
        return self.profile_type()


NATIONS = DomainSpec(
    name="nations",
    label="Nation",
    entities_field="countries",
    stats_field="statDefinitions",
    categories_field="categories",
    profile_type=NationProfile,
    new_entity_name="New Nation",
)

AIRCRAFT = DomainSpec(
    name="aircraft",
    label="Aircraft",
    entities_field="aircrafts",
    stats_field="aircraftStats",
    categories_field="aircraftCats",
    profile_type=AircraftProfile,
    new_entity_name="New Aircraft",
)

DOMAINS: Dict[str, DomainSpec] = {NATIONS.name: NATIONS, AIRCRAFT.name: AIRCRAFT}

# The only top-level fields of the shared document
DOCUMENT_FIELDS: Tuple[str, ...] = NATIONS.document_fields + AIRCRAFT.document_fields
