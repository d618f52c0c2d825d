#!/usr/bin/env python3
"""
Download Wowhead list pages, turn their listview rows into SQL and write
everything to one .sql file under data/sql.
"""
import argparse
import logging
import sys
import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import List, Optional, Tuple

import requests
from requests.exceptions import HTTPError, RequestException

# ── Ensure src/ is on import path ────────────────────────────────────────────
SCRIPT_DIR   = Path(__file__).parent.resolve()
PROJECT_ROOT = SCRIPT_DIR.parent
if str(PROJECT_ROOT / "src") not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT / "src"))

from wowhead.config import Settings, load_settings
from wowhead.errors import ExtractionError
from wowhead.output import write_items
from wowhead.parsers import PARSERS, PageParser
from wowhead.schemas import Locale, PageItem

# ── Paths ────────────────────────────────────────────────────────────────────
OUT_DIR = PROJECT_ROOT / "data" / "sql"
LOG_DIR = PROJECT_ROOT / "logs" / "parse_pages"

logger = logging.getLogger(__name__)

headers = {"User-Agent": "Mozilla/5.0 (wowhead-sql)"}


# ── Resilient GET with exponential backoff ───────────────────────────────────
def safe_get(session, url, max_attempts=5, **kwargs):
    for attempt in range(1, max_attempts + 1):
        resp = session.get(url, **kwargs)
        if resp.status_code == 429:
            wait = 2 ** attempt
            logger.warning(f"Rate limited fetching {url}, retrying in {wait}s (attempt {attempt}/{max_attempts})")
            time.sleep(wait)
            continue
        resp.raise_for_status()
        return resp
    raise HTTPError(f"Rate limited: failed to fetch {url} after {max_attempts} attempts")


def fetch_page(session, page_id: int, url: str, timeout: float) -> Tuple[int, Optional[str]]:
    try:
        resp = safe_get(session, url, headers=headers, timeout=timeout)
    except RequestException as e:
        logger.error(f"Failed to fetch page {page_id} ({url}): {e}")
        return page_id, None
    return page_id, resp.text


def parse_page(parser: PageParser, page_id: int, text: Optional[str]) -> PageItem:
    """Per-page parse; a page without listview data yields an empty item."""
    if text is None:
        return PageItem(id=page_id)
    try:
        return parser.parse(text, page_id)
    except ExtractionError as e:
        logger.warning(f"Skipping page {page_id}: {e}")
        return PageItem(id=page_id)


def run(parser: PageParser, settings: Settings, single_batch: bool = False,
        limit: Optional[int] = None, session=None) -> List[PageItem]:
    """
    Fetch every page of `parser` on a thread pool and parse it.

    single_batch: collect all rows into one builder and render it once
    every download has finished, instead of one SQL block per page.
    """
    session = session or requests.Session()
    urls = list(parser.page_urls())
    if limit is not None:
        urls = urls[:limit]
    logger.info(f"Fetching {len(urls)} pages with {settings.threads} threads")

    builder = parser.new_builder() if single_batch else None
    items: List[PageItem] = []

    pool = ThreadPoolExecutor(max_workers=settings.threads)
    futures = [pool.submit(fetch_page, session, pid, url, settings.timeout) for pid, url in urls]
    try:
        # page order, so single-batch output does not depend on download timing
        for fut in futures:
            page_id, text = fut.result()
            if builder is None:
                items.append(parse_page(parser, page_id, text))
                continue
            if text is None:
                continue
            try:
                parser.parse_into(builder, text, page_id)
            except ExtractionError as e:
                logger.warning(f"Skipping page {page_id}: {e}")
    except BaseException:
        # drop queued downloads; only page-level extraction errors are recoverable
        pool.shutdown(wait=False, cancel_futures=True)
        raise
    pool.shutdown()

    if builder is not None:
        items.append(PageItem(id=0, content=builder.render()))
    return items


def main(argv=None):
    ap = argparse.ArgumentParser(description="Wowhead list pages to SQL")
    ap.add_argument("--parser", choices=sorted(PARSERS), default="npc_locale")
    ap.add_argument("--settings", type=Path, default=None, help="settings.json to use")
    ap.add_argument("--locale", choices=[l.value for l in Locale], default=None,
                    help="override the locale from settings")
    ap.add_argument("--single-batch", action="store_true",
                    help="render all rows as one batch instead of one per page")
    ap.add_argument("--limit", type=int, default=None, help="only fetch the first N pages")
    ap.add_argument("--out", type=Path, default=None)
    args = ap.parse_args(argv)

    LOG_DIR.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        filename=str(LOG_DIR / "parse_pages.log"),
        level=logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s"
    )

    settings = load_settings(args.settings)
    if args.locale:
        settings = settings.model_copy(update={"locale": Locale(args.locale)})
    parser = PARSERS[args.parser](settings)

    out = args.out or OUT_DIR / f"{args.parser}_{settings.locale.value}.sql"
    try:
        items = run(parser, settings, single_batch=args.single_batch, limit=args.limit)
        written = write_items(items, out)
    except Exception:
        logger.exception("parse_pages.py failed")
        raise
    print(f"✅ Wrote {written} SQL blocks to {out}")


if __name__ == "__main__":
    main()
