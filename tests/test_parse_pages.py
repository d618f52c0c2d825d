import threading

import pytest
import requests

import parse_pages
from conftest import make_page
from wowhead.config import Settings
from wowhead.errors import ArgumentError
from wowhead.parsers import NpcLocaleParser


class DummyResponse:
    def __init__(self, text="", status_code=200):
        self.text = text
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"HTTP {self.status_code}")


class DummySession:
    def __init__(self, pages):
        # url fragment -> list of responses, served in order
        self.pages = pages
        self.calls = []

    def get(self, url, headers=None, timeout=None):
        self.calls.append(url)
        for fragment, responses in self.pages.items():
            if fragment in url:
                return responses.pop(0) if len(responses) > 1 else responses[0]
        return DummyResponse("", 404)


@pytest.fixture(autouse=True)
def no_sleep(monkeypatch):
    monkeypatch.setattr(parse_pages.time, "sleep", lambda s: None)


def pages():
    return {
        "crv=0:199": [DummyResponse(make_page('{id:1,name:"A",tag:"B"}'))],
        "crv=200:399": [DummyResponse(make_page('{id:250,name:"Z"}'))],
        "crv=400:599": [DummyResponse("<html>nothing here</html>")],
    }


def test_run_one_block_per_page():
    settings = Settings(query_type="insert", threads=2)
    session = DummySession(pages())
    items = parse_pages.run(NpcLocaleParser(settings), settings, limit=4, session=session)

    assert [i.id for i in items] == [0, 200, 400, 600]
    assert "('1', 'A', 'B');" in items[0].content
    assert "('250', 'Z', '');" in items[1].content
    assert items[2].content == ""  # no listview
    assert items[3].content == ""  # 404
    assert len(session.calls) == 4


def test_run_single_batch():
    settings = Settings(query_type="replace", append_delete_query=True, threads=3)
    items = parse_pages.run(NpcLocaleParser(settings), settings, single_batch=True,
                            limit=3, session=DummySession(pages()))
    assert len(items) == 1
    assert items[0].content == (
        "DELETE FROM `creature_template` WHERE `entry` = '1';\n"
        "REPLACE INTO `creature_template` (`entry`, `name`, `subname`) VALUES\n"
        "('1', 'A', 'B'),\n"
        "('250', 'Z', '');\n"
    )


def test_safe_get_retries_on_rate_limit():
    session = DummySession({"x": [DummyResponse("", 429), DummyResponse("ok")]})
    resp = parse_pages.safe_get(session, "http://x")
    assert resp.text == "ok"
    assert len(session.calls) == 2


def test_safe_get_gives_up():
    session = DummySession({"x": [DummyResponse("", 429)]})
    with pytest.raises(requests.HTTPError):
        parse_pages.safe_get(session, "http://x", max_attempts=3)
    assert len(session.calls) == 3


def test_main_writes_sql_file(tmp_path, monkeypatch):
    settings_path = tmp_path / "settings.json"
    settings_path.write_text('{"query_type": "insert", "threads": 1}', encoding="utf-8")
    monkeypatch.setattr(parse_pages, "LOG_DIR", tmp_path / "logs")
    monkeypatch.setattr(parse_pages.requests, "Session", lambda: DummySession(pages()))

    out = tmp_path / "npc.sql"
    parse_pages.main(["--settings", str(settings_path), "--limit", "2", "--out", str(out)])

    text = out.read_text(encoding="utf-8")
    assert text == (
        "INSERT INTO `creature_template` (`entry`, `name`, `subname`) VALUES\n"
        "('1', 'A', 'B');\n\n"
        "INSERT INTO `creature_template` (`entry`, `name`, `subname`) VALUES\n"
        "('250', 'Z', '');\n\n"
    )


class GatedSession(DummySession):
    """Serves the first page at once; later requests wait until the gate opens."""

    def __init__(self, pages):
        super().__init__(pages)
        self.gate = threading.Event()

    def get(self, url, headers=None, timeout=None):
        resp = super().get(url, headers=headers, timeout=timeout)
        if len(self.calls) > 1:
            self.gate.wait(5)
        return resp


class BrokenParser(NpcLocaleParser):
    def parse(self, page, page_id):
        raise ArgumentError("declare fields before appending values")

    def parse_into(self, builder, page, page_id):
        raise ArgumentError("declare fields before appending values")


@pytest.mark.parametrize("single_batch", [False, True])
def test_argument_error_stops_remaining_downloads(single_batch):
    settings = Settings(query_type="insert", threads=1)
    session = GatedSession({"crv=": [DummyResponse(make_page('{id:1,name:"A"}'))]})

    with pytest.raises(ArgumentError):
        parse_pages.run(BrokenParser(settings), settings, single_batch=single_batch,
                        limit=40, session=session)
    session.gate.set()

    # the page in flight may finish, the other 38 queued pages are cancelled
    assert len(session.calls) <= 2
