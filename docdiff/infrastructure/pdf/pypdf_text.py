from __future__ import annotations

import logging
from typing import BinaryIO

from pypdf import PdfReader
from pypdf.errors import PdfReadError

from docdiff.domain.ports.text_port import PageTextPort

logger = logging.getLogger(__name__)


class PypdfPageTextExtractor(PageTextPort):
    """Page text via pypdf; keys are 1-based page numbers."""

    def extract_text_by_page(self, fileobj: BinaryIO) -> dict[int, str]:
        try:
            reader = PdfReader(fileobj)
            pages: dict[int, str] = {}
            for idx, page in enumerate(reader.pages, start=1):
                try:
                    pages[idx] = page.extract_text() or ""
                except (KeyError, ValueError, TypeError) as exc:
                    # One broken content stream should not hide the other pages
                    logger.warning("page_text_extract_failed", extra={"page": idx, "error": str(exc)})
                    pages[idx] = ""
            return pages
        except PdfReadError as exc:
            raise OSError(f"PDF could not be read: {exc}") from exc
