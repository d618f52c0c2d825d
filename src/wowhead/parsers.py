# src/wowhead/parsers.py
"""
Page parsers: bind a Wowhead list page to a target table.

Each parser knows which pages to request (address template + id range) and
which table schema its rows land in. Localized runs write into the
locales_* table; English runs write into the base table.
"""
import logging
from typing import Dict, Iterator, Tuple, Type

from .config import Settings
from .extractor import extract
from .schemas import LOCALE_POSTFIXES, LOCALE_SUBDOMAINS, Locale, PageItem, TableSchema
from .sql_builder import SqlBuilder

logger = logging.getLogger(__name__)

BASE_URL = "https://{subdomain}.wowhead.com/"

# Ids covered by one filtered list page
PAGE_STEP = 200


class PageParser:
    address: str = ""
    max_count: int = 0
    anchor: str = ""
    key_field: str = "id"
    source_fields: Tuple[str, ...] = ()

    def __init__(self, settings: Settings):
        self.settings = settings
        self.locale: Locale = settings.locale

    @property
    def has_locales(self) -> bool:
        return self.locale is not Locale.English

    @property
    def locale_postfix(self) -> str:
        return LOCALE_POSTFIXES[self.locale]

    @property
    def schema(self) -> TableSchema:
        raise NotImplementedError

    def page_urls(self, step: int = PAGE_STEP) -> Iterator[Tuple[int, str]]:
        """Yield (page id, url) pairs covering ids 0..max_count."""
        root = BASE_URL.format(subdomain=LOCALE_SUBDOMAINS[self.locale])
        for start in range(0, self.max_count, step):
            end = min(start + step, self.max_count) - 1
            yield start, root + self.address.format(start, end)

    def new_builder(self) -> SqlBuilder:
        return SqlBuilder.from_schema(self.schema, self.settings)

    def parse_into(self, builder: SqlBuilder, page: str, page_id: int) -> int:
        """Append the page's rows to `builder`; returns the number of rows."""
        records = extract(
            page, page_id,
            fields=self.source_fields,
            key_field=self.key_field,
            anchor=self.anchor,
        )
        for record in records:
            builder.append(record.key, record.values)
        return len(records)

    def parse(self, page: str, page_id: int) -> PageItem:
        builder = self.new_builder()
        count = self.parse_into(builder, page, page_id)
        logger.info(f"Parsed {count} rows from page {page_id} into `{builder.table_name}`")
        return PageItem(id=page_id, content=builder.render())


class NpcLocaleParser(PageParser):
    """NPC names and subnames (the listview 'tag')."""

    address = "npcs?filter=cr=37:37;crs=1:4;crv={0}:{1}"
    max_count = 59000
    anchor = "'npcs'"
    source_fields = ("name", "tag")

    @property
    def schema(self) -> TableSchema:
        if self.has_locales:
            return npc_locale_schema(self.locale_postfix)
        return NPC_BASE_SCHEMA


NPC_BASE_SCHEMA = TableSchema(table_name="creature_template", key_name="entry",
                              fields=("name", "subname"))


def npc_locale_schema(postfix: str) -> TableSchema:
    return TableSchema(table_name="locales_creature", key_name="entry",
                       fields=(f"name_{postfix}", f"subname_{postfix}"))


PARSERS: Dict[str, Type[PageParser]] = {
    "npc_locale": NpcLocaleParser,
}
