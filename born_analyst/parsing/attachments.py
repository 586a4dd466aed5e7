"""Reading and encoding of uploaded files.

Two upload paths exist:
    - Initial context upload: decoded to text and appended to the system prompt.
    - Mid-conversation update: sent to the model as a base64 inline attachment,
      whatever its declared MIME type.
"""

import base64
import logging

from born_analyst.errors import AttachmentError
from born_analyst.models.schemas import InlineData, InlinePart
from born_analyst.parsing.pdf_parser import extract_pdf_text

logger = logging.getLogger(__name__)

MAX_CONTEXT_SIZE = 5 * 1024 * 1024  # 5MB
MAX_ATTACHMENT_SIZE = 20 * 1024 * 1024  # 20MB, Gemini inline request limit
DEFAULT_MIME_TYPE = "application/octet-stream"
CONTEXT_ENCODINGS = ("utf-8-sig", "cp949")


def _check_size(content: bytes, limit: int) -> None:
    if not content:
        raise AttachmentError("Empty file provided")
    if len(content) > limit:
        size_mb = len(content) / (1024 * 1024)
        raise AttachmentError(
            f"File size ({size_mb:.1f}MB) exceeds maximum allowed ({limit // (1024 * 1024)}MB)"
        )


def read_context_text(filename: str, content: bytes) -> str:
    """Decode an initial context upload into text.

    PDF files are run through the pypdf extractor. Everything else is
    decoded as UTF-8, falling back to CP949 for Korean spreadsheet exports.

    Args:
        filename: Original file name.
        content: Raw file bytes.

    Returns:
        The decoded text.

    Raises:
        AttachmentError: If the file is too large or holds no readable text.
    """
    _check_size(content, MAX_CONTEXT_SIZE)

    if filename.lower().endswith(".pdf"):
        pdf = extract_pdf_text(content)
        text = pdf.text
        logger.info(f"Extracted context from {filename} ({pdf.pages} pages)")
    else:
        text = _decode_text(filename, content)

    if not text.strip():
        raise AttachmentError(f"No readable text in {filename}")
    return text


def _decode_text(filename: str, content: bytes) -> str:
    for encoding in CONTEXT_ENCODINGS:
        try:
            text = content.decode(encoding)
        except UnicodeDecodeError:
            continue
        logger.info(f"Loaded context from {filename} ({len(text)} chars, {encoding})")
        return text

    raise AttachmentError(f"Cannot decode {filename} as text")


def encode_attachment(content: bytes, mime_type: str | None) -> InlinePart:
    """Encode file bytes as a base64 inline attachment part.

    Args:
        content: Raw file bytes.
        mime_type: MIME type reported by the browser, may be empty.

    Returns:
        InlinePart ready to be sent to the model.

    Raises:
        AttachmentError: If the file is empty or too large.
    """
    _check_size(content, MAX_ATTACHMENT_SIZE)
    return InlinePart(
        inline_data=InlineData(
            mime_type=mime_type or DEFAULT_MIME_TYPE,
            data=base64.b64encode(content).decode("ascii"),
        )
    )
