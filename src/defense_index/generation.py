"""Generation Validator for AI-produced candidate entities.

Admission of generated data is all-or-nothing: a candidate either passes
every check and becomes an Entity, or it is rejected as a whole with
InvalidCandidateError and nothing is inserted.

Stat key policy: the candidate's ``stats`` keys must equal the registered
stat ids exactly. Missing keys and extra keys are both rejected.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from defense_index.exceptions import InvalidCandidateError
from defense_index.logging_config import create_logger
from defense_index.models import SLIDER_MAX, SLIDER_MIN, DomainSpec, Entity, StatFormat
from defense_index.schema_registry import SchemaRegistry
from defense_index.utils import is_finite_number

logger = create_logger(__name__)


class ProblemKind(str, Enum):
    """Categories of candidate problems."""

    MISSING_FIELD = "missing_field"
    INVALID_FIELD = "invalid_field"
    STAT_KEYS = "stat_keys"
    STAT_VALUE = "stat_value"
    COLLISION = "collision"


@dataclass
class CandidateProblem:
    """One reason a candidate was rejected."""

    kind: ProblemKind
    message: str
    field: Optional[str] = None

    def __str__(self) -> str:
        field_str = f" [{self.field}]" if self.field else ""
        return f"{self.kind.value}{field_str}: {self.message}"


class GenerationValidator:
    """Checks candidates against the live schema of one domain."""

    def __init__(self, spec: DomainSpec):
        self.spec = spec

    def check(
        self,
        candidate: Any,
        registry: SchemaRegistry,
        existing: Iterable[Entity] = (),
    ) -> List[CandidateProblem]:
        """Collect every problem with a candidate.

        Args:
            candidate: Parsed JSON produced by the generator
            registry: Current schema registry of the domain
            existing: Entities currently in the domain

        Returns:
            List of problems, empty when the candidate is admissible
        """
        if not isinstance(candidate, dict):
            return [CandidateProblem(ProblemKind.INVALID_FIELD, "candidate must be a JSON object")]

        problems: List[CandidateProblem] = []

        for field_name in self.spec.required_fields:
            if field_name not in candidate or candidate[field_name] is None:
                problems.append(
                    CandidateProblem(ProblemKind.MISSING_FIELD, "required field is missing", field_name)
                )

        for field_name in ("id", "name") + self.spec.profile_type.REQUIRED_FIELDS:
            value = candidate.get(field_name)
            if value is not None and (not isinstance(value, str) or not value.strip()):
                problems.append(
                    CandidateProblem(ProblemKind.INVALID_FIELD, "must be a non-empty string", field_name)
                )

        score = candidate.get("score")
        if score is not None and not is_finite_number(score):
            problems.append(CandidateProblem(ProblemKind.INVALID_FIELD, "must be a finite number", "score"))

        rank = candidate.get("rank")
        if rank is not None and not _is_integral(rank):
            problems.append(CandidateProblem(ProblemKind.INVALID_FIELD, "must be an integer", "rank"))

        stats = candidate.get("stats")
        if stats is not None:
            problems.extend(self._check_stats(stats, registry))

        problems.extend(self._check_collisions(candidate, existing))
        return problems

    def validate(
        self,
        candidate: Any,
        registry: SchemaRegistry,
        existing: Iterable[Entity] = (),
    ) -> Entity:
        """Admit a candidate or reject it as a whole.

        Returns:
            The candidate as an Entity flagged ``is_generated``

        Raises:
            InvalidCandidateError: If any check fails
        """
        existing = list(existing)
        problems = self.check(candidate, registry, existing)
        if problems:
            logger.warning(
                f"Rejected generated {self.spec.name} candidate with {len(problems)} problem(s)"
            )
            raise InvalidCandidateError(
                f"Generated {self.spec.label.lower()} candidate rejected",
                [str(problem) for problem in problems],
            )

        entity = Entity.from_dict(candidate, self.spec)
        entity.is_generated = True
        entity.description = str(candidate.get("description") or "")
        logger.info(f"Admitted generated {self.spec.name} candidate '{entity.id}'")
        return entity

    def _check_stats(self, stats: Any, registry: SchemaRegistry) -> List[CandidateProblem]:
        if not isinstance(stats, dict):
            return [CandidateProblem(ProblemKind.INVALID_FIELD, "must be an object", "stats")]

        problems: List[CandidateProblem] = []
        expected = registry.ids()
        missing = [stat_id for stat_id in expected if stat_id not in stats]
        extra = [key for key in stats if key not in registry]
        if missing:
            problems.append(
                CandidateProblem(ProblemKind.STAT_KEYS, f"missing stat keys: {', '.join(missing)}", "stats")
            )
        if extra:
            problems.append(
                CandidateProblem(ProblemKind.STAT_KEYS, f"unregistered stat keys: {', '.join(extra)}", "stats")
            )

        for definition in registry.definitions:
            if definition.id not in stats:
                continue
            value = stats[definition.id]
            if not is_finite_number(value):
                problems.append(
                    CandidateProblem(ProblemKind.STAT_VALUE, "must be a finite number", f"stats.{definition.id}")
                )
            elif definition.format is StatFormat.SLIDER and not SLIDER_MIN <= value <= SLIDER_MAX:
                problems.append(
                    CandidateProblem(
                        ProblemKind.STAT_VALUE,
                        f"power index {value} outside {SLIDER_MIN}-{SLIDER_MAX}",
                        f"stats.{definition.id}",
                    )
                )
            elif definition.format is not StatFormat.SLIDER and value < 0:
                problems.append(
                    CandidateProblem(ProblemKind.STAT_VALUE, "must not be negative", f"stats.{definition.id}")
                )
        return problems

    def _check_collisions(self, candidate: Dict[str, Any], existing: Iterable[Entity]) -> List[CandidateProblem]:
        problems: List[CandidateProblem] = []
        candidate_id = candidate.get("id")
        candidate_name = candidate.get("name")
        name_key = candidate_name.strip().lower() if isinstance(candidate_name, str) else None

        for entity in existing:
            if candidate_id is not None and entity.id == candidate_id:
                problems.append(
                    CandidateProblem(ProblemKind.COLLISION, f"id already used by '{entity.name}'", "id")
                )
            if name_key and entity.name.strip().lower() == name_key:
                problems.append(
                    CandidateProblem(ProblemKind.COLLISION, f"name duplicates entity '{entity.id}'", "name")
                )
        return problems


def validate_candidate(
    candidate: Any,
    spec: DomainSpec,
    registry: SchemaRegistry,
    existing: Iterable[Entity] = (),
) -> Entity:
    """Validate one candidate for ``spec`` without keeping a validator around."""
    return GenerationValidator(spec).validate(candidate, registry, existing)


def should_generate(query: str, existing: Iterable[Entity]) -> bool:
    """Generation is only attempted when no existing name contains the query.

    The match is a case-insensitive substring test. Blank queries never
    trigger generation.
    """
    needle = (query or "").strip().lower()
    if not needle:
        return False
    return not any(needle in entity.name.lower() for entity in existing)


def _is_integral(value: Any) -> bool:
    if not is_finite_number(value):
        return False
    return float(value).is_integer()
