# src/wowhead/schemas.py

from enum import Enum
from typing import Any, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

from .errors import InvalidSemantics


class QueryType(str, Enum):
    Update       = "update"
    Insert       = "insert"
    InsertIgnore = "insert-ignore"
    Replace      = "replace"


# Numeric codes used by older settings files (None = 0, Max = 5)
QUERY_TYPE_CODES = {
    1: QueryType.Update,
    2: QueryType.Replace,
    3: QueryType.Insert,
    4: QueryType.InsertIgnore,
}


def parse_query_type(value: Any) -> QueryType:
    """
    Resolve a query type from an enum member, its value ('insert-ignore'),
    its name ('InsertIgnore') or a legacy numeric code.

    Raises InvalidSemantics for anything else.
    """
    if isinstance(value, QueryType):
        return value
    if isinstance(value, bool):
        raise InvalidSemantics(value)
    if isinstance(value, int):
        if value in QUERY_TYPE_CODES:
            return QUERY_TYPE_CODES[value]
        raise InvalidSemantics(value)
    if isinstance(value, str):
        text = value.strip()
        for qt in QueryType:
            if text.lower() == qt.value or text == qt.name:
                return qt
    raise InvalidSemantics(value)


class Locale(str, Enum):
    English = "english"
    Korean  = "korean"
    French  = "french"
    German  = "german"
    Chinese = "chinese"
    Spanish = "spanish"
    Russian = "russian"


# Wowhead serves each language from its own subdomain
LOCALE_SUBDOMAINS = {
    Locale.English: "www",
    Locale.Korean:  "ko",
    Locale.French:  "fr",
    Locale.German:  "de",
    Locale.Chinese: "cn",
    Locale.Spanish: "es",
    Locale.Russian: "ru",
}

# Column suffix in the locales_* tables
LOCALE_POSTFIXES = {
    Locale.English: "",
    Locale.Korean:  "loc1",
    Locale.French:  "loc2",
    Locale.German:  "loc3",
    Locale.Chinese: "loc4",
    Locale.Spanish: "loc6",
    Locale.Russian: "loc8",
}


class TableSchema(BaseModel):
    model_config = ConfigDict(frozen=True)

    table_name: str = Field(..., min_length=1, description="Target table, e.g. 'creature_template'")
    key_name: str = Field("entry", min_length=1, description="Key column, e.g. 'entry' or 'guid'")
    fields: Tuple[str, ...] = Field(..., min_length=1, description="Ordered value columns")


class Record(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: Union[int, str]
    values: Tuple[str, ...]


class PageItem(BaseModel):
    id: int = Field(..., description="Page (or id range) this SQL was built from")
    content: str = Field("", description="Rendered SQL block, empty when the page had no records")
