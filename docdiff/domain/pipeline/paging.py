"""Page-number conversions.

Three numbering schemes meet in the pipeline: text extraction is 1-based,
the structuring service's per-page list is 0-based, and the report is
0-based. Every conversion goes through this module.
"""

from __future__ import annotations


def structured_index_to_page_number(index: int) -> int:
    return index + 1


def page_number_to_report_index(page_number: int) -> int:
    return page_number - 1


def report_index_to_page_number(index: int) -> int:
    return index + 1


def page_range(max_page: int) -> range:
    """1-based page numbers covered by a report; never empty."""
    return range(1, max(max_page, 1) + 1)
