# tests/conftest.py

import sys
import pytest
from pathlib import Path

PROJECT_ROOT = Path(__file__).parent.parent

# Point at the src/ and scripts/ directories
for d in (PROJECT_ROOT / "src", PROJECT_ROOT / "scripts"):
    if str(d) not in sys.path:
        sys.path.insert(0, str(d))

from wowhead.config import Settings, SETTINGS_ENV


def make_page(*rows: str, anchor: str = "'npcs'") -> str:
    """Minimal Wowhead list page with one listview holding `rows` (JS literals)."""
    return (
        "<html><head><title>NPCs</title></head><body>\n"
        "<script type=\"text/javascript\">//<![CDATA[\n"
        f"new Listview({{template: 'npc', id: {anchor}, name: LANG.tab_npcs, "
        f"data: [{','.join(rows)}]}});\n"
        "//]]></script>\n</body></html>\n"
    )


@pytest.fixture
def two_npc_page():
    return make_page('{id:1,name:"A",tag:"B"}', '{id:2,name:"",tag:"C"}')


@pytest.fixture
def english_settings():
    return Settings(query_type="insert")


@pytest.fixture(autouse=True)
def no_settings_env(monkeypatch):
    monkeypatch.delenv(SETTINGS_ENV, raising=False)
