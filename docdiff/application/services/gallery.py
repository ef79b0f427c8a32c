"""Listing and serving page images already present in the artifact roots."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

from docdiff.domain.pipeline.constants import IMAGE_SUFFIXES

logger = logging.getLogger(__name__)

RECENT_FALLBACK_LIMIT = 60


def _images_under(root: Path) -> list[Path]:
    if not root.is_dir():
        return []
    try:
        return [p for p in root.rglob("*") if p.suffix.lower() in IMAGE_SUFFIXES and p.is_file()]
    except OSError as exc:
        logger.debug("gallery_scan_failed", extra={"path": str(root), "error": str(exc)})
        return []


def list_work_images(work_id: str, roots: Iterable[Path]) -> tuple[list[Path], bool]:
    """Images whose path mentions work_id, root by root in lexicographic order.

    When nothing matches, the most recently modified images across all roots
    are returned instead; the second element tells the caller which happened.
    """
    roots = list(roots)
    needle = work_id.lower()
    matched: list[Path] = []
    for root in roots:
        found = sorted((p for p in _images_under(root) if needle in str(p).lower()), key=str)
        logger.debug("gallery_root_scanned", extra={"path": str(root), "status": f"{len(found)} matched"})
        matched.extend(found)
    if matched:
        return matched, False

    everything: list[Path] = []
    for root in roots:
        everything.extend(_images_under(root))

    def _mtime(p: Path) -> float:
        try:
            return p.stat().st_mtime
        except OSError:
            return 0.0

    recent = sorted(everything, key=_mtime, reverse=True)[:RECENT_FALLBACK_LIMIT]
    logger.info("gallery_fallback", extra={"work_id": work_id, "status": f"{len(recent)} recent"})
    return recent, True


def resolve_served_image(path: str, roots: Iterable[Path]) -> Path | None:
    """Return the image when it sits under one of the roots, else None."""
    if not path:
        return None
    candidate = Path(path).resolve()
    if candidate.suffix.lower() not in IMAGE_SUFFIXES or not candidate.is_file():
        return None
    for root in roots:
        try:
            candidate.relative_to(Path(root).resolve())
        except ValueError:
            continue
        return candidate
    return None
