# src/document/portable_text.py - v1
"""Extract, reinject, validate and sanitize translatable Portable Text.

These functions are the only code allowed to read or rewrite span text. They
never mutate their input: injection and sanitization build new block lists.
"""

from __future__ import annotations

import logging
from typing import Any

from tabilingo.document.models import (
    IMAGE_BLOCK_TYPE,
    SPAN_TYPE,
    TEXT_BLOCK_TYPE,
    Block,
    CodeBlock,
    ContentSummary,
    ExtractedText,
    ImageBlock,
    InlineNode,
    Span,
    StructureValidation,
    TextBlock,
    UnknownBlock,
)

logger = logging.getLogger(__name__)

DEFAULT_LARGE_CONTENT_THRESHOLD = 10_000
DEFAULT_PRICE_PER_MILLION = 20.0


def is_text_block(block: Block) -> bool:
    """A text block holding at least one span."""
    return isinstance(block, TextBlock) and any(
        isinstance(child, Span) for child in block.children
    )


def is_image_block(block: Block) -> bool:
    return isinstance(block, ImageBlock)


def is_code_block(block: Block) -> bool:
    return isinstance(block, CodeBlock)


def extract_texts(blocks: list[Block]) -> list[ExtractedText]:
    """Collect every non-blank span in document order."""
    texts: list[ExtractedText] = []
    for block_index, block in enumerate(blocks):
        if not isinstance(block, TextBlock):
            continue
        for span_index, child in enumerate(block.children):
            if isinstance(child, Span) and child.text.strip():
                texts.append(ExtractedText(block_index, span_index, child.text))
    return texts


def inject_texts(
    blocks: list[Block],
    extracted: list[ExtractedText],
    translations: list[str],
) -> list[Block]:
    """Return a copy of `blocks` with extracted spans replaced by translations.

    Translations are matched to `extracted` by position. Positions without a
    translation keep their original text.
    """
    replacements: dict[tuple[int, int], str] = {}
    for item, translation in zip(extracted, translations):
        replacements[(item.block_index, item.span_index)] = translation

    result: list[Block] = []
    for block_index, block in enumerate(blocks):
        if not isinstance(block, TextBlock):
            result.append(block)
            continue
        children = tuple(
            child.with_text(replacements[(block_index, span_index)])
            if isinstance(child, Span) and (block_index, span_index) in replacements
            else child
            for span_index, child in enumerate(block.children)
        )
        result.append(TextBlock(children=children, attrs=block.attrs))
    return result


def count_characters(blocks: list[Block]) -> int:
    return sum(len(item.text) for item in extract_texts(blocks))


def validate_structure(
    blocks: list[Block],
    large_content_threshold: int = DEFAULT_LARGE_CONTENT_THRESHOLD,
) -> StructureValidation:
    """Check that a body is safe to translate.

    Errors make the document untranslatable; warnings are informational.
    """
    errors: list[str] = []
    warnings: list[str] = []

    for index, block in enumerate(blocks):
        if isinstance(block, UnknownBlock):
            if block.node_type is None:
                errors.append(f"Block at index {index} is missing _type")
            elif block.node_type == TEXT_BLOCK_TYPE:
                errors.append(f"Text block at index {index} is missing children array")
            elif block.node_type == IMAGE_BLOCK_TYPE:
                errors.append(f"Image block at index {index} is missing asset reference")
            continue
        if not isinstance(block, TextBlock):
            continue
        for child_index, child in enumerate(block.children):
            if not isinstance(child, InlineNode):
                continue
            if child.node_type is None:
                errors.append(
                    f"Child at block[{index}].children[{child_index}] is missing _type"
                )
            elif child.node_type == SPAN_TYPE:
                errors.append(
                    f"Span at block[{index}].children[{child_index}] is missing text string"
                )

    if not any(is_text_block(block) for block in blocks):
        warnings.append("No text blocks found - nothing to translate")

    total = count_characters(blocks)
    if total > large_content_threshold:
        warnings.append(
            f"Content is quite large ({total} characters) - may consume significant API quota"
        )

    return StructureValidation(is_valid=not errors, errors=errors, warnings=warnings)


def _is_valid_child(child: Span | InlineNode) -> bool:
    if isinstance(child, Span):
        return True
    return child.node_type is not None and child.node_type != SPAN_TYPE


def sanitize_blocks(blocks: list[Block]) -> list[Block]:
    """Drop malformed blocks, and malformed children inside text blocks."""
    sanitized: list[Block] = []
    for block in blocks:
        if isinstance(block, UnknownBlock) and block.node_type in (
            None,
            TEXT_BLOCK_TYPE,
            IMAGE_BLOCK_TYPE,
        ):
            continue
        if isinstance(block, TextBlock):
            children = tuple(c for c in block.children if _is_valid_child(c))
            if len(children) != len(block.children):
                logger.debug(
                    "Dropped malformed children",
                    extra={"data": {"dropped": len(block.children) - len(children)}},
                )
            block = TextBlock(children=children, attrs=block.attrs)
        sanitized.append(block)
    return sanitized


def summarize_content(
    blocks: list[Block],
    price_per_million: float = DEFAULT_PRICE_PER_MILLION,
) -> ContentSummary:
    text_blocks = sum(1 for b in blocks if is_text_block(b))
    image_blocks = sum(1 for b in blocks if is_image_block(b))
    code_blocks = sum(1 for b in blocks if is_code_block(b))
    total_characters = count_characters(blocks)
    return ContentSummary(
        total_blocks=len(blocks),
        text_blocks=text_blocks,
        image_blocks=image_blocks,
        code_blocks=code_blocks,
        other_blocks=len(blocks) - text_blocks - image_blocks - code_blocks,
        total_characters=total_characters,
        estimated_cost=total_characters / 1_000_000 * price_per_million,
    )


def extract_image_references(blocks: list[Block]) -> list[str]:
    """Unique image asset refs anywhere in the tree, in first-seen order."""
    refs: dict[str, None] = {}

    def visit(node: Any) -> None:
        if isinstance(node, dict):
            asset = node.get("asset")
            if node.get("_type") == IMAGE_BLOCK_TYPE and isinstance(asset, dict):
                ref = asset.get("_ref")
                if ref:
                    refs.setdefault(ref, None)
            for value in node.values():
                visit(value)
        elif isinstance(node, list):
            for value in node:
                visit(value)

    for block in blocks:
        visit(block.to_raw())
    return list(refs)
