# src/document/models.py - v1
"""Typed view over Portable Text (the CMS rich-text format).

A document body is an ordered list of blocks. Blocks form a closed union:
text, image, code, and an opaque fallback for anything else (including known
types whose required fields are missing). Every variant keeps the raw JSON
keys it does not interpret, so `parse_blocks` followed by `dump_blocks` gives
back the original list.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Union

TEXT_BLOCK_TYPE = "block"
IMAGE_BLOCK_TYPE = "image"
CODE_BLOCK_TYPE = "code"
SPAN_TYPE = "span"


@dataclass(frozen=True)
class Span:
    """Text-bearing child of a text block. Only `text` is ever rewritten."""

    text: str
    attrs: dict[str, Any] = field(default_factory=dict)

    def with_text(self, text: str) -> Span:
        return replace(self, text=text)

    def to_raw(self) -> dict[str, Any]:
        return {**self.attrs, "_type": SPAN_TYPE, "text": self.text}


@dataclass(frozen=True)
class InlineNode:
    """Any non-span child of a text block, carried opaquely.

    `node_type` is the raw `_type` tag, or None when the child has none.
    """

    node_type: str | None
    payload: dict[str, Any]

    def to_raw(self) -> dict[str, Any]:
        return dict(self.payload)


Child = Union[Span, InlineNode]


@dataclass(frozen=True)
class TextBlock:
    children: tuple[Child, ...]
    attrs: dict[str, Any] = field(default_factory=dict)

    def to_raw(self) -> dict[str, Any]:
        return {
            **self.attrs,
            "_type": TEXT_BLOCK_TYPE,
            "children": [child.to_raw() for child in self.children],
        }


@dataclass(frozen=True)
class ImageBlock:
    asset_ref: str
    attrs: dict[str, Any] = field(default_factory=dict)

    def to_raw(self) -> dict[str, Any]:
        raw = dict(self.attrs)
        raw["_type"] = IMAGE_BLOCK_TYPE
        return raw


@dataclass(frozen=True)
class CodeBlock:
    attrs: dict[str, Any] = field(default_factory=dict)

    def to_raw(self) -> dict[str, Any]:
        return {**self.attrs, "_type": CODE_BLOCK_TYPE}


@dataclass(frozen=True)
class UnknownBlock:
    """Unrecognised or malformed block, passed through untouched."""

    node_type: str | None
    payload: dict[str, Any]

    def to_raw(self) -> dict[str, Any]:
        return dict(self.payload)


Block = Union[TextBlock, ImageBlock, CodeBlock, UnknownBlock]


@dataclass(frozen=True)
class ExtractedText:
    """A translatable span located by its block and child index."""

    block_index: int
    span_index: int
    text: str

    @property
    def path(self) -> str:
        return f"blocks[{self.block_index}].children[{self.span_index}].text"


@dataclass(frozen=True)
class StructureValidation:
    is_valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class ContentSummary:
    total_blocks: int
    text_blocks: int
    image_blocks: int
    code_blocks: int
    other_blocks: int
    total_characters: int
    estimated_cost: float


# --- Raw JSON conversion ---


def _type_tag(raw: dict[str, Any]) -> str | None:
    tag = raw.get("_type")
    return tag if isinstance(tag, str) and tag else None


def parse_child(raw: Any) -> Child:
    if not isinstance(raw, dict):
        return InlineNode(node_type=None, payload={"value": raw})
    tag = _type_tag(raw)
    if tag == SPAN_TYPE and isinstance(raw.get("text"), str):
        attrs = {k: v for k, v in raw.items() if k not in ("_type", "text")}
        return Span(text=raw["text"], attrs=attrs)
    return InlineNode(node_type=tag, payload=dict(raw))


def parse_block(raw: Any) -> Block:
    if not isinstance(raw, dict):
        return UnknownBlock(node_type=None, payload={"value": raw})
    tag = _type_tag(raw)
    if tag == TEXT_BLOCK_TYPE and isinstance(raw.get("children"), list):
        attrs = {k: v for k, v in raw.items() if k not in ("_type", "children")}
        return TextBlock(
            children=tuple(parse_child(c) for c in raw["children"]),
            attrs=attrs,
        )
    if tag == IMAGE_BLOCK_TYPE:
        asset = raw.get("asset")
        ref = asset.get("_ref") if isinstance(asset, dict) else None
        if isinstance(ref, str) and ref:
            attrs = {k: v for k, v in raw.items() if k != "_type"}
            return ImageBlock(asset_ref=ref, attrs=attrs)
    if tag == CODE_BLOCK_TYPE:
        return CodeBlock(attrs={k: v for k, v in raw.items() if k != "_type"})
    return UnknownBlock(node_type=tag, payload=dict(raw))


def parse_blocks(raw: list[Any] | None) -> list[Block]:
    """Parse a raw Portable Text array into typed blocks."""
    return [parse_block(item) for item in raw or []]


def dump_blocks(blocks: list[Block]) -> list[dict[str, Any]]:
    """Convert typed blocks back to raw Portable Text JSON."""
    return [block.to_raw() for block in blocks]
