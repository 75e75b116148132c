"""Story graph models.

A story is an arena of pages keyed by id. Edges are plain id references
held by each page's choices, so the graph may contain cycles,
convergences, and orphaned pages without any ownership problems: the
``nodes`` mapping owns every page.

JSON interchange uses camelCase keys. Files written by earlier versions
of the authoring tool (``dialogue``, ``prediction``, ``endingConditions``)
load unchanged.
"""

from __future__ import annotations

from typing import Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from branchbook.observability.logging import get_logger

log = get_logger(__name__)

OutcomeCategory = Literal["good", "bad", "mixed", "none"]

# Categories that count towards an ending; "none" is never scored.
SCORED_CATEGORIES: tuple[Literal["good", "bad", "mixed"], ...] = ("good", "bad", "mixed")

_MODEL_CONFIG = ConfigDict(alias_generator=to_camel, populate_by_name=True)

# Synonyms accepted on input.
_CATEGORY_ALIASES = {"favorable": "good", "unfavorable": "bad"}
_KNOWN_CATEGORIES = frozenset({*SCORED_CATEGORIES, "none"})


def _normalize_category(value: object) -> object:
    """Read an outcome label leniently.

    Synonyms map to their category. Any other unrecognised label, such as
    the "ending" tag older files put on ending-path choices, is read as
    "none" so it never counts towards an ending.
    """
    if value is None:
        return "none"
    if not isinstance(value, str):
        return value
    label = value.strip().lower()
    label = _CATEGORY_ALIASES.get(label, label)
    if label not in _KNOWN_CATEGORIES:
        log.warning("unknown_outcome_category", label=value, read_as="none")
        return "none"
    return label


class Choice(BaseModel):
    """One outgoing decision edge from a page.

    ``next_node_id`` is None for an unexplored stub. ``is_chosen`` is a
    historical marker only; it plays no part in traversal.
    """

    model_config = _MODEL_CONFIG

    id: str = Field(min_length=1)
    text: str = ""
    next_node_id: str | None = None
    is_chosen: bool = False
    outcome_category: OutcomeCategory = Field(
        default="none",
        validation_alias=AliasChoices("outcomeCategory", "outcome_category", "prediction"),
        serialization_alias="outcomeCategory",
    )
    outcome_rationale: str = Field(
        default="",
        validation_alias=AliasChoices(
            "outcomeRationale", "outcome_rationale", "predictionRationale"
        ),
        serialization_alias="outcomeRationale",
    )

    @field_validator("outcome_category", mode="before")
    @classmethod
    def normalize_category(cls, value: object) -> object:
        return _normalize_category(value)

    @property
    def is_resolved(self) -> bool:
        """True when the choice points at a page."""
        return self.next_node_id is not None


class StoryNode(BaseModel):
    """One authored page: prose, optional artwork, ordered choices."""

    model_config = _MODEL_CONFIG

    id: str = Field(min_length=1)
    text: str = Field(
        default="",
        validation_alias=AliasChoices("text", "dialogue"),
        serialization_alias="text",
    )
    illustration_url: str | None = None
    choices: list[Choice] = Field(default_factory=list)


class EndingThresholds(BaseModel):
    """Per-category choice counts after which the story must conclude."""

    model_config = _MODEL_CONFIG

    good: int = Field(default=3, ge=1)
    bad: int = Field(default=3, ge=1)
    mixed: int = Field(default=3, ge=1)


class Story(BaseModel):
    """The whole story graph plus its book metadata.

    Attributes:
        nodes: Page id to page. Insertion order carries no meaning.
        start_node_id: The root page. Never deleted.
        end_node_ids: Pages flagged as endings, in the order they were flagged.
        ending_thresholds: Counts that force an ending along a path.
    """

    model_config = _MODEL_CONFIG

    nodes: dict[str, StoryNode]
    start_node_id: str
    end_node_ids: list[str] = Field(default_factory=list)
    ending_thresholds: EndingThresholds = Field(
        default_factory=EndingThresholds,
        validation_alias=AliasChoices(
            "endingThresholds", "ending_thresholds", "endingConditions"
        ),
        serialization_alias="endingConditions",
    )
    title: str = ""
    prompt: str = ""
    art_style: str = ""
    cover_image_url: str = ""

    def has_start(self) -> bool:
        """True when the root page exists in the graph."""
        return self.start_node_id in self.nodes

    def is_ending(self, node_id: str) -> bool:
        return node_id in self.end_node_ids

    def to_json(self) -> str:
        """Serialize with camelCase keys."""
        return self.model_dump_json(by_alias=True, indent=2)


class ProducedChoice(BaseModel):
    """A candidate choice returned by the content producer."""

    model_config = _MODEL_CONFIG

    text: str
    outcome_category: OutcomeCategory = Field(
        default="none",
        validation_alias=AliasChoices("outcomeCategory", "outcome_category", "prediction"),
    )
    outcome_rationale: str = Field(
        default="No rationale provided.",
        validation_alias=AliasChoices(
            "outcomeRationale", "outcome_rationale", "predictionRationale"
        ),
    )

    @field_validator("outcome_category", mode="before")
    @classmethod
    def normalize_category(cls, value: object) -> object:
        return _normalize_category(value)


class ProducedNode(BaseModel):
    """Content producer output: new page text and candidate choices."""

    model_config = _MODEL_CONFIG

    text: str = Field(validation_alias=AliasChoices("text", "dialogue"))
    choices: list[ProducedChoice] = Field(default_factory=list)
