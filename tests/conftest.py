"""Shared fixtures for the release feed tests."""

from datetime import datetime, timedelta, timezone

import pytest

import feed_log
from config import FeedConfig
from models import ListingEntry


@pytest.fixture(autouse=True)
def log_file(tmp_path):
    """Keep log lines out of the source tree."""
    path = tmp_path / "feed_log.txt"
    previous = feed_log.LOG_FILE
    feed_log.set_log_file(str(path))
    yield path
    feed_log.set_log_file(previous)


@pytest.fixture
def config(tmp_path, log_file):
    return FeedConfig(
        repository_url="http://svn.example.com/repo/tags/",
        link_base="http://www.example.com/svn/",
        cache_file=str(tmp_path / "cache" / "rss20.cache"),
        log_file=str(log_file),
        title="Example Releases",
        description="Example library change log",
        link="http://www.example.com/svn/",
        syndication_url="http://www.example.com/svn/feed/rss",
        author="Example Software",
        editor="Example Software",
        author_email="support@example.com",
        editor_email="support@example.com",
    )


@pytest.fixture
def make_entries():
    def _make(count, author=""):
        start = datetime(2006, 1, 1, tzinfo=timezone.utc)
        return [
            ListingEntry(
                name=f"1.0.{i}",
                link=f"http://www.example.com/svn/1.0.{i}/",
                date=start + timedelta(days=i),
                author=author,
            )
            for i in range(1, count + 1)
        ]
    return _make
