"""
jsMind ``node_tree`` document models.

Validation here is the structural gate every generated document has to pass:
``format == "node_tree"``, a root with non-empty ``id`` and ``topic`` and
ids unique across the whole tree. Keys the model invents are kept as extras.
"""

from __future__ import annotations

from typing import Any, Iterator, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

DEFAULT_MINDMAP_NAME = "视频内容思维导图"


def _coerce_scalar(v: Any) -> Any:
    if isinstance(v, (int, float)) and not isinstance(v, bool):
        return str(v)
    return v


class MindmapNode(BaseModel):
    """A single node in the mind map tree (recursive)."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str = Field(..., min_length=1)
    topic: str = ""
    direction: Optional[Literal["left", "right"]] = None
    expanded: Optional[bool] = None
    background_color: Optional[str] = Field(default=None, alias="background-color")
    foreground_color: Optional[str] = Field(default=None, alias="foreground-color")
    children: Optional[List[MindmapNode]] = None

    @field_validator("id", "topic", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> Any:
        return _coerce_scalar(v)

    @field_validator("direction", mode="before")
    @classmethod
    def normalize_direction(cls, v: Any) -> Any:
        # Only "left"/"right" mean anything to jsMind; anything else is dropped.
        if isinstance(v, str) and v.strip().lower() in ("left", "right"):
            return v.strip().lower()
        return None

    def walk(self) -> Iterator[MindmapNode]:
        """Depth-first, pre-order traversal."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            if node.children:
                stack.extend(reversed(node.children))


MindmapNode.model_rebuild()


class MindmapMeta(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str = DEFAULT_MINDMAP_NAME
    author: str = "AI Assistant"
    version: str = "1.0"

    @field_validator("name", "author", "version", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> Any:
        return _coerce_scalar(v)


class MindmapDocument(BaseModel):
    """Full jsMind document: ``{meta, format, data}``."""

    model_config = ConfigDict(extra="allow")

    meta: MindmapMeta = Field(default_factory=MindmapMeta)
    format: Literal["node_tree"]
    data: MindmapNode

    @model_validator(mode="after")
    def check_tree(self) -> MindmapDocument:
        if not self.data.topic.strip():
            raise ValueError("root node topic must not be empty")

        seen: set[str] = set()
        for node in self.data.walk():
            if node.id in seen:
                raise ValueError(f"duplicate node id: {node.id!r}")
            seen.add(node.id)
        return self

    def node_ids(self) -> List[str]:
        return [node.id for node in self.data.walk()]

    def to_jsmind(self) -> dict:
        """Plain dict in the shape jsMind's ``show()`` expects."""
        return self.model_dump(by_alias=True, exclude_none=True)
