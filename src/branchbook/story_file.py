"""Reading and writing story files.

Story files are the camelCase JSON written by the JSON exporter and by
earlier versions of the authoring tool.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import ValidationError

from branchbook.models.story import Story
from branchbook.observability.logging import get_logger

if TYPE_CHECKING:
    from pathlib import Path

log = get_logger(__name__)


class StoryFileError(Exception):
    """Raised when a story file cannot be read or parsed."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot load story from {path}: {reason}")


def load_story(path: Path) -> Story:
    """Load a story from a JSON file.

    Raises:
        StoryFileError: If the file is missing or is not a valid story.
    """
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise StoryFileError(path, e.strerror or str(e)) from e

    try:
        story = Story.model_validate_json(raw)
    except ValidationError as e:
        raise StoryFileError(path, f"{e.error_count()} validation error(s)\n{e}") from e

    log.debug("story_loaded", path=str(path), nodes=len(story.nodes))
    return story


def save_story(story: Story, path: Path) -> Path:
    """Write a story as camelCase JSON, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(story.to_json(), encoding="utf-8")
    log.debug("story_saved", path=str(path), nodes=len(story.nodes))
    return path
