"""Line-based renderer for the Markdown subset the model is asked to use.

Recognized constructs: headings (#, ##, ###), bullet items (- ), numbered
items (1. ), bold spans (**text**), code fence lines (skipped) and blank
lines. Everything else renders as literal paragraph text.
"""

import re
from enum import Enum

from pydantic import BaseModel, ConfigDict

BOLD_PATTERN = re.compile(r"(\*\*.*?\*\*)")
ORDERED_ITEM_PATTERN = re.compile(r"^(\d+\.)\s")

HEADING_PREFIXES = (("### ", 3), ("## ", 2), ("# ", 1))
CODE_FENCE = "```"


class BlockKind(str, Enum):
    """Kinds of block-level render instructions."""

    HEADING = "heading"
    LIST_ITEM = "list_item"
    ORDERED_ITEM = "ordered_item"
    SPACER = "spacer"
    PARAGRAPH = "paragraph"


class InlineSpan(BaseModel):
    """A styled run of text within one line."""

    model_config = ConfigDict(frozen=True)

    text: str
    bold: bool = False


class RenderBlock(BaseModel):
    """One block-level render instruction.

    Attributes:
        kind: Block kind.
        spans: Inline spans of the block text (empty for spacers).
        level: Heading level 1-3 (headings only).
        label: Fixed "<digits>." label (ordered items only).
    """

    model_config = ConfigDict(frozen=True)

    kind: BlockKind
    spans: tuple[InlineSpan, ...] = ()
    level: int | None = None
    label: str | None = None


def parse_inline(text: str) -> list[InlineSpan]:
    """Split a line into plain and bold spans.

    Only fully paired ``**`` markers within the line produce bold spans;
    an unpaired marker stays in the plain text.
    """
    spans: list[InlineSpan] = []
    # re.split with one capture group puts the captured markers at odd indices
    for i, part in enumerate(BOLD_PATTERN.split(text)):
        if i % 2 == 1:
            spans.append(InlineSpan(text=part[2:-2], bold=True))
        elif part:
            spans.append(InlineSpan(text=part))
    return spans


def render_line(line: str) -> RenderBlock | None:
    """Classify a single line. Returns None for lines that render nothing."""
    for prefix, level in HEADING_PREFIXES:
        if line.startswith(prefix):
            return RenderBlock(
                kind=BlockKind.HEADING,
                level=level,
                spans=tuple(parse_inline(line[len(prefix):])),
            )

    stripped = line.strip()

    if stripped.startswith("- "):
        return RenderBlock(kind=BlockKind.LIST_ITEM, spans=tuple(parse_inline(stripped[2:])))

    ordered = ORDERED_ITEM_PATTERN.match(stripped)
    if ordered:
        return RenderBlock(
            kind=BlockKind.ORDERED_ITEM,
            label=ordered.group(1),
            spans=tuple(parse_inline(stripped[ordered.end():])),
        )

    # Fence lines are dropped; lines between fences are not tracked
    if line.startswith(CODE_FENCE):
        return None

    if not stripped:
        return RenderBlock(kind=BlockKind.SPACER)

    return RenderBlock(kind=BlockKind.PARAGRAPH, spans=tuple(parse_inline(line)))


def render_markup(content: str) -> list[RenderBlock]:
    """Convert turn content into an ordered list of render blocks.

    Args:
        content: Raw turn text.

    Returns:
        Block render instructions, one per visible line.
    """
    blocks: list[RenderBlock] = []
    for line in content.split("\n"):
        block = render_line(line)
        if block is not None:
            blocks.append(block)
    return blocks
