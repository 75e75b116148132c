"""Story graph error types.

These errors signal host programming mistakes, such as addressing a page
or choice that does not exist. Recoverable conditions (missing root,
dangling targets, unreachable pages, refusing to delete the root) are
never raised; the engine returns empty or unchanged results for them.

Each error can format itself as user-facing feedback with close-match
suggestions, so a CLI or UI can show it directly.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from difflib import get_close_matches


class StoryGraphError(Exception):
    """Base class for story graph errors.

    Subclasses must implement describe() to provide a readable message
    for the author.
    """

    def describe(self) -> str:
        """Format error as readable feedback.

        Returns:
            Multi-line message explaining what's wrong and how to fix it.
        """
        raise NotImplementedError


def _format_available(lines: list[str], label: str, available: list[str]) -> None:
    if not available:
        return
    lines.append(f"{label}:")
    for a in sorted(available)[:10]:
        lines.append(f"  - {a}")
    if len(available) > 10:
        lines.append(f"  - ... and {len(available) - 10} more")


@dataclass
class NodeNotFoundError(StoryGraphError):
    """Raised when referencing a page that is not in the story.

    Attributes:
        node_id: The ID that was referenced but doesn't exist.
        available: Page IDs that could be used instead.
        context: Description of where the reference occurred.
    """

    node_id: str
    available: list[str] = field(default_factory=list)
    context: str = ""

    def __post_init__(self) -> None:
        msg = f"Page '{self.node_id}' not found"
        if self.context:
            msg += f" ({self.context})"
        super().__init__(msg)

    def suggestions(self) -> list[str]:
        """Find similar IDs that might be typos."""
        return get_close_matches(self.node_id, self.available, n=3, cutoff=0.6)

    def describe(self) -> str:
        lines = [f"Page '{self.node_id}' does not exist in this story."]
        if self.context:
            lines.append(f"Context: {self.context}")

        suggestions = self.suggestions()
        if suggestions:
            lines.append("Did you mean: " + ", ".join(suggestions) + "?")
        _format_available(lines, "Known pages", self.available)
        return "\n".join(lines)


@dataclass
class ChoiceNotFoundError(StoryGraphError):
    """Raised when a choice id is not among a page's choices.

    Attributes:
        choice_id: The choice that was referenced.
        node_id: The page that was searched.
        available: Choice IDs present on that page.
    """

    choice_id: str
    node_id: str
    available: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        super().__init__(f"Choice '{self.choice_id}' not found on page '{self.node_id}'")

    def describe(self) -> str:
        lines = [f"Page '{self.node_id}' has no choice '{self.choice_id}'."]
        matches = get_close_matches(self.choice_id, self.available, n=3, cutoff=0.6)
        if matches:
            lines.append("Did you mean: " + ", ".join(matches) + "?")
        _format_available(lines, "Choices on this page", self.available)
        return "\n".join(lines)


@dataclass
class GraphCorruptionError(StoryGraphError):
    """Raised when an integrity check finds broken invariants.

    Attributes:
        violations: Human-readable descriptions of each violation.
    """

    violations: list[str]

    def __post_init__(self) -> None:
        super().__init__(f"Story graph has {len(self.violations)} integrity violation(s)")

    def describe(self) -> str:
        lines = ["Story graph integrity violations:"]
        for v in self.violations[:10]:
            lines.append(f"  - {v}")
        if len(self.violations) > 10:
            lines.append(f"  - ... and {len(self.violations) - 10} more")
        return "\n".join(lines)
