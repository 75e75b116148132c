"""Graph package - the story graph engine.

Pure functions over a ``Story`` snapshot: page numbering, path scoring,
cascading deletion, and the controlled mutation API. None of them block,
perform I/O, or call the content producer.
"""

from branchbook.graph.errors import (
    ChoiceNotFoundError,
    GraphCorruptionError,
    NodeNotFoundError,
    StoryGraphError,
)
from branchbook.graph.integrity import check_integrity, find_violations
from branchbook.graph.metrics import estimate_story_size, story_stats, word_diff_stats
from branchbook.graph.mutations import (
    add_choice,
    clear_illustration,
    edit_node_text,
    fold_produced_node,
    follow_choice,
    mark_as_ending,
    new_story,
    remove_choice,
    replace_choices,
    set_ending_thresholds,
    set_illustration,
)
from branchbook.graph.numbering import assign_page_numbers, find_orphans
from branchbook.graph.outline import build_outline, render_outline
from branchbook.graph.pruning import collect_descendants, delete_node
from branchbook.graph.scoring import (
    PathScores,
    build_parent_map,
    determine_ending,
    reconstruct_path,
    score_path,
)

__all__ = [
    "ChoiceNotFoundError",
    "GraphCorruptionError",
    "NodeNotFoundError",
    "PathScores",
    "StoryGraphError",
    "add_choice",
    "assign_page_numbers",
    "build_outline",
    "build_parent_map",
    "check_integrity",
    "clear_illustration",
    "collect_descendants",
    "delete_node",
    "determine_ending",
    "edit_node_text",
    "estimate_story_size",
    "find_orphans",
    "find_violations",
    "fold_produced_node",
    "follow_choice",
    "mark_as_ending",
    "new_story",
    "reconstruct_path",
    "remove_choice",
    "render_outline",
    "replace_choices",
    "score_path",
    "set_ending_thresholds",
    "set_illustration",
    "story_stats",
    "word_diff_stats",
]
