"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING, Any

import pytest

from tests.fixtures.story_fixtures import make_choice, make_node, make_story

if TYPE_CHECKING:
    from branchbook.models import Story


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def cyclic_story() -> Story:
    """Root with an open stub and a resolved branch that loops back.

    R --C1--> (unwritten)
    R --C2 (good)--> N2 --C3 (bad)--> R
    """
    return make_story(
        make_node("R", choices=[make_choice("C1"), make_choice("C2", "N2", "good")]),
        make_node("N2", choices=[make_choice("C3", "R", "bad")]),
    )


@pytest.fixture
def branching_story() -> Story:
    """A small branching story with a convergence, an orphan and two endings.

    R -> A (good), R -> B (bad)
    A -> C (good), A -> D (mixed)
    B -> D (bad), B -> unwritten
    Z -> C, but nothing leads to Z. C and D are endings.
    """
    return make_story(
        make_node("R", choices=[make_choice("r_a", "A", "good"), make_choice("r_b", "B", "bad")]),
        make_node(
            "A", choices=[make_choice("a_c", "C", "good"), make_choice("a_d", "D", "mixed")]
        ),
        make_node("B", choices=[make_choice("b_d", "D", "bad"), make_choice("b_open")]),
        make_node("C"),
        make_node("D"),
        make_node("Z", choices=[make_choice("z_c", "C", "good")]),
        endings=["C", "D"],
    )


@pytest.fixture
def story_file(tmp_path: Path, branching_story: Story) -> Path:
    """Branching story written to disk in camelCase JSON."""
    path = tmp_path / "book.cyoa.json"
    path.write_text(branching_story.to_json(), encoding="utf-8")
    return path


@pytest.fixture
def legacy_story_data() -> dict[str, Any]:
    """Story JSON as written by the earlier authoring tool."""
    return json.loads(
        """
        {
          "title": "Legacy",
          "prompt": "An old save file.",
          "artStyle": "ink",
          "startNodeId": "n1",
          "endNodeIds": ["n2"],
          "endingConditions": {"good": 2, "bad": 4, "mixed": 5},
          "nodes": {
            "n1": {
              "id": "n1",
              "dialogue": "You wake up in a cave.",
              "choices": [
                {
                  "id": "c1",
                  "text": "Walk towards the light",
                  "nextNodeId": "n2",
                  "isChosen": true,
                  "prediction": "good",
                  "predictionRationale": "Light means safety."
                }
              ]
            },
            "n2": {"id": "n2", "dialogue": "You escape.", "choices": []}
          }
        }
        """
    )
