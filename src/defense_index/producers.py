"""Generative producers for new entities and comparison analysis.

The core only relies on the producer contract: given a query name, the
current entity count and the live stat definitions, return at most one
candidate JSON object, or ``None``. Producers never raise for model or
transport failures; they log and return ``None``.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Sequence

from openai import OpenAI, OpenAIError

from defense_index.logging_config import create_logger
from defense_index.models import NATIONS, DomainSpec, Entity, StatDefinition, StatFormat

logger = create_logger(__name__)


class EntityProducer(Protocol):
    def produce(
        self,
        query_name: str,
        current_count: int,
        stat_definitions: Sequence[StatDefinition],
    ) -> Optional[Dict[str, Any]]:
        ...


@dataclass
class ComparisonAnalysis:
    """Narrative comparison of two entities."""

    analysis: str
    winner: str
    factors: List[str] = field(default_factory=list)


NATION_PROMPT = """Generate a realistic JSON object for the country "{name}" for a military strategy app.
Estimate statistics based on real-world public data.

REQUIRED FIELDS:
- id: unique 3 letter slug
- name: the country's common English name
- flagCode: ISO 2-letter code
- rank: estimation > {current_count}
- score: An integer estimate of military power between 10 and 100 (Higher is better). USA is ~98, North Korea ~40.
- description: two sentences on the country's military posture
- stats: A JSON object containing ONLY numerical values for these specific keys: {stat_keys}.

Monetary values are raw USD with no suffix."""

AIRCRAFT_PROMPT = """Generate a realistic JSON object for the military aircraft "{name}".
Estimate statistics based on real-world public data.

REQUIRED FIELDS:
- id: unique slug (e.g. f22_raptor)
- name: Full name (e.g. Lockheed Martin F-22 Raptor)
- origin: Country of origin
- rank: estimation > {current_count}
- score: An integer estimate of combat capability between 10 and 100. F-22 is ~99.
- description: two sentences on the aircraft's role
- stats: A JSON object containing ONLY numerical values for these keys: {stat_keys}."""

SLIDER_NOTE = """
IMPORTANT: The following fields are Power Indices and MUST be a float value between 1.0 (Very Low) and 10.0 (Elite/Superpower): {slider_keys}. Example: 1.0, 5.5, 9.75."""

COMPARISON_PROMPT = """Compare the military strength of {left_name} and {right_name}.

Score {left_name}: {left_score}
Stats {left_name}: {left_stats}

Score {right_name}: {right_score}
Stats {right_name}: {right_stats}

Provide a strategic analysis of a hypothetical conventional conflict.
Identify key factors for each side.
Predict a winner in a neutral setting or defensive scenarios.

Return JSON with the keys "analysis" (string), "winner" (string) and "factors" (array of strings)."""


def build_entity_prompt(
    spec: DomainSpec,
    query_name: str,
    current_count: int,
    stat_definitions: Sequence[StatDefinition],
) -> str:
    """Build the generation prompt for one domain."""
    template = NATION_PROMPT if spec is NATIONS else AIRCRAFT_PROMPT
    prompt = template.format(
        name=query_name,
        current_count=current_count,
        stat_keys=", ".join(d.id for d in stat_definitions),
    )
    slider_keys = [d.id for d in stat_definitions if d.format is StatFormat.SLIDER]
    if slider_keys:
        prompt += SLIDER_NOTE.format(slider_keys=", ".join(slider_keys))
    return prompt


class OpenAIEntityProducer:
    """Producer backed by an OpenAI-compatible chat completions endpoint.

    Attributes:
        spec: Domain the produced candidates belong to
        model: Chat model name
    """

    def __init__(
        self,
        spec: DomainSpec,
        model: str,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        client: Optional[OpenAI] = None,
    ):
        self.spec = spec
        self.model = model
        self.client = client or OpenAI(api_key=api_key, base_url=base_url)

    def produce(
        self,
        query_name: str,
        current_count: int,
        stat_definitions: Sequence[StatDefinition],
    ) -> Optional[Dict[str, Any]]:
        prompt = build_entity_prompt(self.spec, query_name, current_count, stat_definitions)
        data = self._complete_json(prompt)
        if data is None:
            logger.error(f"Could not generate {self.spec.name} data for '{query_name}'")
        return data

    def analyze(self, left: Entity, right: Entity) -> Optional[ComparisonAnalysis]:
        """Ask the model for a narrative comparison of two entities."""
        prompt = COMPARISON_PROMPT.format(
            left_name=left.name,
            left_score=left.score,
            left_stats=json.dumps(left.stats),
            right_name=right.name,
            right_score=right.score,
            right_stats=json.dumps(right.stats),
        )
        data = self._complete_json(prompt)
        if data is None:
            return None
        factors = data.get("factors") or []
        return ComparisonAnalysis(
            analysis=str(data.get("analysis") or ""),
            winner=str(data.get("winner") or ""),
            factors=[str(f) for f in factors] if isinstance(factors, list) else [],
        )

    def _complete_json(self, prompt: str) -> Optional[Dict[str, Any]]:
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": "You answer with a single JSON object and nothing else."},
                    {"role": "user", "content": prompt},
                ],
                response_format={"type": "json_object"},
            )
        except OpenAIError as e:
            logger.error(f"Generation request failed: {e}")
            return None

        if not response.choices:
            return None
        content = response.choices[0].message.content
        if not content:
            return None
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            logger.error(f"Generation returned invalid JSON: {e}")
            return None
        if not isinstance(data, dict):
            logger.error("Generation returned JSON that is not an object")
            return None
        return data
