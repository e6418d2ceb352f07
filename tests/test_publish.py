"""Tests for post-publish status promotion."""

import asyncio
import logging

from notion_mirror.publish import promote_ready_pages

from notion_fakes import FakeStore, make_page


def test_promotes_ready_pages_only():
    store = FakeStore(
        [
            make_page("a", status="Ready for Web"),
            make_page("b", status="Published"),
            make_page("c", status="Ready for Web"),
            make_page("d", status="Draft"),
        ]
    )

    updated = asyncio.run(promote_ready_pages(store, "db"))

    assert updated == 2
    assert store.updates == [("a", "Published"), ("c", "Published")]
    assert store.queries[0][0] == {"property": "Status", "select": {"equals": "Ready for Web"}}


def test_update_failure_is_not_fatal(caplog):
    store = FakeStore([make_page("a", status="Ready for Web")], fail_updates=True)
    logger = logging.getLogger("test_promote_failure")

    with caplog.at_level(logging.WARNING, logger="test_promote_failure"):
        updated = asyncio.run(promote_ready_pages(store, "db", logger=logger))

    assert updated == 0
    assert "non-critical" in caplog.text


def test_nothing_to_promote():
    store = FakeStore([make_page("a", status="Published")])
    assert asyncio.run(promote_ready_pages(store, "db")) == 0
    assert store.updates == []
