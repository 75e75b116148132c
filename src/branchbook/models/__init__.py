"""Pydantic models for story graphs and content producer results."""

from branchbook.models.story import (
    SCORED_CATEGORIES,
    Choice,
    EndingThresholds,
    OutcomeCategory,
    ProducedChoice,
    ProducedNode,
    Story,
    StoryNode,
)

__all__ = [
    "SCORED_CATEGORIES",
    "Choice",
    "EndingThresholds",
    "OutcomeCategory",
    "ProducedChoice",
    "ProducedNode",
    "Story",
    "StoryNode",
]
