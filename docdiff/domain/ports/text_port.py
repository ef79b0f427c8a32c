"""PageTextPort protocol for ground-truth page text extraction."""

from __future__ import annotations

from typing import BinaryIO, Protocol


class PageTextPort(Protocol):
    """Extracts text per page from an open PDF.

    Returns a mapping keyed by 1-based page number. Raises OSError when the
    document cannot be read.
    """

    def extract_text_by_page(self, fileobj: BinaryIO) -> dict[int, str]: ...
