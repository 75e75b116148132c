"""Story graph integrity checks.

The engine tolerates broken references by skipping them. These checks
report them so an author can repair an imported file.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from branchbook.graph.errors import GraphCorruptionError

if TYPE_CHECKING:
    from branchbook.models.story import Story


def find_violations(story: Story) -> list[str]:
    """List every broken invariant in ``story``.

    Checks:
        - The root page exists.
        - Every resolved choice targets an existing page.
        - Every ending id names an existing page.
        - Page ids match their mapping keys.
        - Choice ids are unique within a page.
    """
    violations: list[str] = []
    if story.start_node_id not in story.nodes:
        violations.append(f"start page '{story.start_node_id}' does not exist")

    for node_id, node in story.nodes.items():
        if node.id != node_id:
            violations.append(f"page stored under '{node_id}' has id '{node.id}'")

        seen_choices: set[str] = set()
        for choice in node.choices:
            if choice.id in seen_choices:
                violations.append(f"page '{node_id}' repeats choice id '{choice.id}'")
            seen_choices.add(choice.id)
            if choice.next_node_id is not None and choice.next_node_id not in story.nodes:
                violations.append(
                    f"choice '{choice.id}' on page '{node_id}' targets "
                    f"missing page '{choice.next_node_id}'"
                )

    for end_id in story.end_node_ids:
        if end_id not in story.nodes:
            violations.append(f"ending '{end_id}' does not exist")

    return violations


def check_integrity(story: Story) -> None:
    """Raise if ``story`` has any integrity violation.

    Raises:
        GraphCorruptionError: Listing every violation found.
    """
    violations = find_violations(story)
    if violations:
        raise GraphCorruptionError(violations=violations)
