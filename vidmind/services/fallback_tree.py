"""Deterministic mindmap used when generation or parsing fails."""

from typing import Any, List

from vidmind.schemas.mindmap import DEFAULT_MINDMAP_NAME, MindmapDocument, MindmapMeta, MindmapNode
from vidmind.services.text_utils import normalize_timepoints

COLOR_SCHEMES = {
    "green": {"main": "#44D7B6", "sub": "#7AEACD"},
    "blue": {"main": "#3DA0FF", "sub": "#70BBFF"},
    "orange": {"main": "#FF9500", "sub": "#FFB870"},
    "purple": {"main": "#B36DFF", "sub": "#CFA2FF"},
    "red": {"main": "#FF6B6B", "sub": "#FFA8A8"},
}
ROOT_BACKGROUND = "#4A4A4A"
MAIN_FOREGROUND = "#FFFFFF"
SUB_FOREGROUND = "#333333"

KEYWORD_TOPIC_LIMIT = 50
SUMMARY_TOPIC_LIMIT = 100
TIMEPOINT_SUMMARY_LIMIT = 40
MAX_TIMEPOINT_NODES = 5


def _branch(node_id: str, topic: str, direction: str, scheme: str, children: List[MindmapNode]) -> MindmapNode:
    return MindmapNode(
        id=node_id,
        topic=topic,
        direction=direction,
        expanded=True,
        background_color=COLOR_SCHEMES[scheme]["main"],
        foreground_color=MAIN_FOREGROUND,
        children=children,
    )


def _leaf(node_id: str, topic: str, direction: str, scheme: str) -> MindmapNode:
    return MindmapNode(
        id=node_id,
        topic=topic,
        direction=direction,
        background_color=COLOR_SCHEMES[scheme]["sub"],
        foreground_color=SUB_FOREGROUND,
    )


def build_fallback_mindmap(
    keywords: Any,
    summary: Any,
    key_timepoints: Any,
    error_message: str,
) -> MindmapDocument:
    """
    Build the error-marked mindmap from the raw inputs.

    Same inputs, same document: no randomness and no I/O.
    """
    keyword_list = keywords if isinstance(keywords, list) else []
    timepoints = normalize_timepoints(key_timepoints)[:MAX_TIMEPOINT_NODES]

    error_node = MindmapNode(
        id="error",
        topic=f"解析错误: {error_message}",
        direction="right",
        expanded=True,
        background_color=COLOR_SCHEMES["red"]["main"],
        foreground_color=MAIN_FOREGROUND,
    )

    keyword_branch = _branch(
        "keywords", "关键词", "left", "green",
        [
            _leaf(f"keyword_{i}", str(keyword)[:KEYWORD_TOPIC_LIMIT], "left", "green")
            for i, keyword in enumerate(keyword_list)
        ],
    )

    summary_branch = _branch(
        "summary", "摘要", "right", "blue",
        [_leaf("summary_content", str(summary or "")[:SUMMARY_TOPIC_LIMIT] + "...", "right", "blue")],
    )

    timepoint_branch = _branch(
        "timepoints", "关键时间点", "right", "orange",
        [
            _leaf(
                f"timepoint_{i}",
                f"{tp.title}: {tp.summary[:TIMEPOINT_SUMMARY_LIMIT]}...",
                "right",
                "orange",
            )
            for i, tp in enumerate(timepoints)
        ],
    )

    return MindmapDocument(
        meta=MindmapMeta(),
        format="node_tree",
        data=MindmapNode(
            id="root",
            topic=DEFAULT_MINDMAP_NAME,
            background_color=ROOT_BACKGROUND,
            foreground_color=MAIN_FOREGROUND,
            children=[error_node, keyword_branch, summary_branch, timepoint_branch],
        ),
    )
