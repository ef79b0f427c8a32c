"""Render every page of a PDF into image files.

Usage::

    python render_pages.py <source.pdf> <output_dir> <base_id> <display_name> [--dpi 200] [--format png]

Writes ``<base_id>_page_<n>.<fmt>`` (1-based n) and a ``manifest.json`` into
output_dir. Exit code is non-zero when nothing could be rendered.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from pdf2image import convert_from_path
from pdf2image.exceptions import PDFInfoNotInstalledError, PDFPageCountError, PDFSyntaxError

_PIL_FORMATS = {"png": "PNG", "jpg": "JPEG", "jpeg": "JPEG"}


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Render PDF pages to images")
    p.add_argument("source")
    p.add_argument("output_dir")
    p.add_argument("base_id")
    p.add_argument("display_name")
    p.add_argument("--dpi", type=int, default=200)
    p.add_argument("--format", dest="fmt", choices=sorted(_PIL_FORMATS), default="png")
    return p


def render(source: Path, output_dir: Path, base_id: str, display_name: str, *, dpi: int, fmt: str) -> dict:
    output_dir.mkdir(parents=True, exist_ok=True)
    images = convert_from_path(str(source), dpi=dpi)
    pages = []
    for n, image in enumerate(images, start=1):
        target = output_dir / f"{base_id}_page_{n}.{fmt}"
        image.save(target, _PIL_FORMATS[fmt])
        pages.append({"page": n, "file": target.name, "width": image.width, "height": image.height})
    manifest = {
        "base_id": base_id,
        "display_name": display_name,
        "source": str(source),
        "dpi": dpi,
        "format": fmt,
        "pages": pages,
    }
    (output_dir / "manifest.json").write_text(json.dumps(manifest, ensure_ascii=False, indent=2), encoding="utf-8")
    return manifest


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        manifest = render(
            Path(args.source),
            Path(args.output_dir),
            args.base_id,
            args.display_name,
            dpi=args.dpi,
            fmt=args.fmt,
        )
    except (PDFInfoNotInstalledError, PDFPageCountError, PDFSyntaxError, OSError) as exc:
        print(f"render failed: {exc}", file=sys.stderr)
        return 2
    print(json.dumps({"pages": len(manifest["pages"])}))
    return 0 if manifest["pages"] else 1


if __name__ == "__main__":
    sys.exit(main())
