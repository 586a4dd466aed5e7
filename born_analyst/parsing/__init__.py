"""Text processing for uploads and model output.

Responsibilities:
    - Markdown-subset rendering of model turns into block instructions
    - Context upload decoding (text files and PDF via pypdf)
    - Base64 encoding of mid-conversation attachments

Pure functions only; no UI or network access.
"""

from born_analyst.parsing.attachments import (
    encode_attachment,
    read_context_text,
)
from born_analyst.parsing.markup import (
    BlockKind,
    InlineSpan,
    RenderBlock,
    parse_inline,
    render_markup,
)
from born_analyst.parsing.pdf_parser import PDFContent, PDFParseError, extract_pdf_text

__all__ = [
    "BlockKind",
    "InlineSpan",
    "PDFContent",
    "PDFParseError",
    "RenderBlock",
    "encode_attachment",
    "extract_pdf_text",
    "parse_inline",
    "read_context_text",
    "render_markup",
]
