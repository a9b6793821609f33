"""Unit tests for the generation validator.

Tests cover:
- Required identity fields
- Exact stat key matching (missing and extra keys)
- Stat value ranges
- Id and name collisions
- The search-before-generate rule
"""

import json

import pytest

from defense_index.exceptions import InvalidCandidateError
from defense_index.generation import GenerationValidator, ProblemKind, should_generate, validate_candidate
from defense_index.models import AIRCRAFT, NATIONS, StatDefinition, StatFormat
from defense_index.schema_registry import SchemaRegistry


@pytest.fixture
def validator():
    return GenerationValidator(NATIONS)


@pytest.fixture
def candidate():
    """A well-formed nation candidate for the conftest registry."""
    return {
        "id": "xyz",
        "name": "Xyzland",
        "flagCode": "xy",
        "rank": 3,
        "score": 96,
        "description": "A fictional test nation.",
        "stats": {"activePersonnel": 1000, "tanks": 20, "cyberCap": 5.5},
    }


def kinds(problems):
    return {problem.kind for problem in problems}


# ============================================================================
# Admission Tests
# ============================================================================

@pytest.mark.unit
class TestValidCandidate:
    """Test admission of well-formed candidates."""

    def test_valid_candidate_admitted(self, validator, candidate, nation_registry, sample_nations):
        entity = validator.validate(candidate, nation_registry, sample_nations)

        assert entity.id == "xyz"
        assert entity.is_generated is True
        assert entity.profile.flag_code == "xy"
        assert entity.description == "A fictional test nation."
        assert entity.stats == candidate["stats"]

    def test_description_optional(self, validator, candidate, nation_registry):
        del candidate["description"]

        entity = validator.validate(candidate, nation_registry)

        assert entity.description == ""

    def test_validate_candidate_function(self, candidate, nation_registry, sample_nations):
        entity = validate_candidate(candidate, NATIONS, nation_registry, sample_nations)
        assert entity.is_generated is True

    def test_aircraft_requires_origin(self, nation_registry):
        validator = GenerationValidator(AIRCRAFT)
        candidate = {
            "id": "gripen",
            "name": "Saab JAS 39 Gripen",
            "rank": 5,
            "score": 85,
            "stats": {"activePersonnel": 0, "tanks": 0, "cyberCap": 1.0},
        }

        problems = validator.check(candidate, nation_registry)

        assert [p.field for p in problems] == ["origin"]
        assert problems[0].kind is ProblemKind.MISSING_FIELD


# ============================================================================
# Rejection Tests
# ============================================================================

@pytest.mark.unit
class TestRejectedCandidate:
    """Test all-or-nothing rejection."""

    def test_not_an_object(self, validator, nation_registry):
        problems = validator.check(["xyz"], nation_registry)
        assert kinds(problems) == {ProblemKind.INVALID_FIELD}

    @pytest.mark.parametrize("field_name", ["id", "name", "score", "rank", "stats", "flagCode"])
    def test_missing_required_field(self, validator, candidate, nation_registry, field_name):
        del candidate[field_name]

        with pytest.raises(InvalidCandidateError) as exc_info:
            validator.validate(candidate, nation_registry)

        assert any(field_name in problem for problem in exc_info.value.problems)

    def test_null_field_counts_as_missing(self, validator, candidate, nation_registry):
        candidate["name"] = None

        problems = validator.check(candidate, nation_registry)

        assert kinds(problems) == {ProblemKind.MISSING_FIELD}

    @pytest.mark.parametrize(
        "field_name,value",
        [("name", "   "), ("id", 42), ("score", "high"), ("score", True), ("rank", 2.5), ("stats", [])],
    )
    def test_invalid_field_types(self, validator, candidate, nation_registry, field_name, value):
        candidate[field_name] = value

        problems = validator.check(candidate, nation_registry)

        assert ProblemKind.INVALID_FIELD in kinds(problems)

    @pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
    def test_non_finite_score_rejected(self, validator, candidate, nation_registry, value):
        candidate["score"] = value

        problems = validator.check(candidate, nation_registry)

        assert [(p.kind, p.field) for p in problems] == [(ProblemKind.INVALID_FIELD, "score")]

    def test_nan_literal_from_json_rejected(self, validator, candidate, nation_registry):
        """json.loads accepts NaN, so a parsed reply can carry one."""
        parsed = json.loads('{"score": NaN}')
        candidate["score"] = parsed["score"]

        with pytest.raises(InvalidCandidateError, match="finite"):
            validator.validate(candidate, nation_registry)

    @pytest.mark.parametrize("stat_id", ["tanks", "cyberCap"])
    @pytest.mark.parametrize("value", [float("nan"), float("inf")])
    def test_non_finite_stat_rejected(self, validator, candidate, nation_registry, stat_id, value):
        candidate["stats"][stat_id] = value

        problems = validator.check(candidate, nation_registry)

        assert [(p.kind, p.field) for p in problems] == [(ProblemKind.STAT_VALUE, f"stats.{stat_id}")]

    def test_integral_float_rank_accepted(self, validator, candidate, nation_registry):
        candidate["rank"] = 3.0
        assert validator.check(candidate, nation_registry) == []

    def test_missing_stat_key(self, validator, candidate, nation_registry):
        del candidate["stats"]["tanks"]

        problems = validator.check(candidate, nation_registry)

        assert len(problems) == 1
        assert problems[0].kind is ProblemKind.STAT_KEYS
        assert "tanks" in problems[0].message

    def test_extra_stat_key_rejected(self, validator, candidate, nation_registry):
        """Stats with every registered key plus an extra one are rejected."""
        candidate["stats"]["foo"] = 1

        with pytest.raises(InvalidCandidateError, match="unregistered stat keys: foo"):
            validator.validate(candidate, nation_registry)

    def test_non_numeric_stat(self, validator, candidate, nation_registry):
        candidate["stats"]["tanks"] = "many"

        problems = validator.check(candidate, nation_registry)

        assert [(p.kind, p.field) for p in problems] == [(ProblemKind.STAT_VALUE, "stats.tanks")]

    @pytest.mark.parametrize("value", [0.5, 10.5, -1])
    def test_slider_out_of_range(self, validator, candidate, nation_registry, value):
        candidate["stats"]["cyberCap"] = value

        problems = validator.check(candidate, nation_registry)

        assert [p.field for p in problems] == ["stats.cyberCap"]

    @pytest.mark.parametrize("value", [1, 1.0, 10])
    def test_slider_bounds_inclusive(self, validator, candidate, nation_registry, value):
        candidate["stats"]["cyberCap"] = value
        assert validator.check(candidate, nation_registry) == []

    def test_negative_count_rejected(self, validator, candidate, nation_registry):
        candidate["stats"]["tanks"] = -5

        problems = validator.check(candidate, nation_registry)

        assert [p.message for p in problems] == ["must not be negative"]

    def test_id_collision(self, validator, candidate, nation_registry, sample_nations):
        candidate["id"] = "usa"

        problems = validator.check(candidate, nation_registry, sample_nations)

        assert [(p.kind, p.field) for p in problems] == [(ProblemKind.COLLISION, "id")]

    def test_name_collision_ignores_case(self, validator, candidate, nation_registry, sample_nations):
        candidate["name"] = " RUSSIA "

        problems = validator.check(candidate, nation_registry, sample_nations)

        assert [(p.kind, p.field) for p in problems] == [(ProblemKind.COLLISION, "name")]

    def test_all_problems_reported(self, validator, candidate, nation_registry):
        candidate["score"] = "high"
        candidate["stats"]["foo"] = 1
        del candidate["flagCode"]

        with pytest.raises(InvalidCandidateError) as exc_info:
            validator.validate(candidate, nation_registry)

        assert len(exc_info.value.problems) == 3

    def test_stats_checked_against_live_schema(self, validator, candidate):
        """A stat added after the prompt was built makes the candidate stale."""
        registry = SchemaRegistry(
            [
                StatDefinition("activePersonnel", "Active Personnel"),
                StatDefinition("tanks", "Tanks"),
                StatDefinition("cyberCap", "Cyber Warfare", format=StatFormat.SLIDER),
                StatDefinition("drones", "Drones"),
            ]
        )

        problems = validator.check(candidate, registry)

        assert "drones" in problems[0].message


# ============================================================================
# Search Rule Tests
# ============================================================================

@pytest.mark.unit
class TestShouldGenerate:
    """Test that generation only happens for unmatched queries."""

    def test_existing_substring_blocks_generation(self, sample_nations):
        assert should_generate("united", sample_nations) is False

    def test_unknown_name_generates(self, sample_nations):
        assert should_generate("Xyzland", sample_nations) is True

    @pytest.mark.parametrize("query", ["", "  ", None])
    def test_blank_query_never_generates(self, sample_nations, query):
        assert should_generate(query, sample_nations) is False
