# src/wowhead/output.py

import logging
from pathlib import Path
from typing import Iterable

from .schemas import PageItem

logger = logging.getLogger(__name__)


def join_items(items: Iterable[PageItem]) -> str:
    """Non-empty page blocks in page order, each followed by a blank line."""
    out = []
    for item in sorted(items, key=lambda i: i.id):
        if not item.content:
            continue
        block = item.content if item.content.endswith("\n") else item.content + "\n"
        out.append(block + "\n")
    return "".join(out)


def write_items(items: Iterable[PageItem], path: Path) -> int:
    """Write the SQL of every page to `path`; returns the number of blocks written."""
    items = list(items)
    text = join_items(items)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    written = sum(1 for item in items if item.content)
    logger.info(f"Wrote {written} SQL blocks ({len(items)} pages) to {path}")
    return written
