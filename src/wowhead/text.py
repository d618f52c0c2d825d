# src/wowhead/text.py
import html


def escape_text(value: str) -> str:
    """
    Turn listview display text into something safe to put between single
    quotes in a MySQL statement: decode HTML entities, then double
    backslashes and single quotes.
    """
    if not value:
        return ""
    text = html.unescape(value)
    return text.replace("\\", "\\\\").replace("'", "''")
