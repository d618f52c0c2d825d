# src/wowhead/extractor.py
"""
Pull listview rows out of a Wowhead page.

List pages embed their rows as a JavaScript array on one line:

    new Listview({template: 'npc', id: 'npcs', ..., data: [{"id":1,"name":"..."}, ...]});

Each object becomes one Record: the key field plus the requested text
fields in order.
"""
import json
import logging
import re
from typing import Any, Dict, List, Optional, Sequence

from .errors import ExtractionError, ExtractionKind
from .schemas import Record
from .sql_builder import format_value
from .text import escape_text

logger = logging.getLogger(__name__)

# One listview data array per line
DATA_PATTERN = re.compile(r"data:\s*(\[.*)")

# A double-quoted string (kept as is) or a bare object key to be quoted
BARE_KEY_PATTERN = re.compile(
    r'("(?:[^"\\]|\\.)*")|([{,]\s*)([A-Za-z_$][\w$]*)(\s*:)'
)

_decoder = json.JSONDecoder()


def quote_keys(text: str) -> str:
    """Rewrite JS object literals ({id:1}) into JSON ({"id":1})."""
    def repl(m):
        if m.group(1) is not None:
            return m.group(1)
        return f'{m.group(2)}"{m.group(3)}"{m.group(4)}'
    return BARE_KEY_PATTERN.sub(repl, text)


def decode_block(text: str) -> List[Any]:
    """Decode the array at the start of `text`, ignoring whatever follows it."""
    try:
        data, _ = _decoder.raw_decode(text)
    except json.JSONDecodeError:
        data, _ = _decoder.raw_decode(quote_keys(text))
    if not isinstance(data, list):
        raise ValueError(f"expected an array, got {type(data).__name__}")
    return data


def find_blocks(page: str, page_id, anchor: Optional[str] = None) -> List[List[Any]]:
    """
    Decode every listview data array in `page`.

    Scanning starts at `anchor` when the page contains it.
    Raises ExtractionError(NotFound) when there is no data array at all and
    ExtractionError(Malformed) when one cannot be decoded.
    """
    if anchor:
        pos = page.find(anchor)
        if pos >= 0:
            page = page[pos:]

    matches = DATA_PATTERN.findall(page)
    if not matches:
        raise ExtractionError(ExtractionKind.NotFound, page_id)

    blocks = []
    for raw in matches:
        try:
            blocks.append(decode_block(raw))
        except ValueError as e:
            raise ExtractionError(ExtractionKind.Malformed, page_id, str(e)) from e
    return blocks


def read_field(obj: Dict[str, Any], name: str) -> str:
    """Field text for `name`, '' when the object does not carry it."""
    if name not in obj:
        return ""
    value = obj[name]
    if value is None:
        return ""
    return escape_text(format_value(value))


def extract(
    page: str,
    page_id,
    fields: Sequence[str] = ("name", "tag"),
    key_field: str = "id",
    anchor: Optional[str] = None,
) -> List[Record]:
    """
    Reduce one page to records, in the order the page lists them.

    - fields: object properties copied into each record's values, in order
    - key_field: object property used as the record key
    - anchor: text marking where the relevant listview starts (e.g. "'npcs'")
    """
    records: List[Record] = []
    for block in find_blocks(page, page_id, anchor):
        for obj in block:
            if not isinstance(obj, dict) or obj.get(key_field) is None:
                logger.warning(f"Page {page_id}: skipping row without '{key_field}': {obj!r}")
                continue
            key = obj[key_field]
            if not isinstance(key, (int, str)) or isinstance(key, bool):
                key = format_value(key)
            records.append(Record(key=key, values=tuple(read_field(obj, f) for f in fields)))

    logger.debug(f"Page {page_id}: extracted {len(records)} records")
    return records
