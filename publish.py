#!/usr/bin/env python3
# publish.py
# Builds the release feed from the repository listing, stores it in the cache and returns the stored bytes

import sys

from config import FeedConfig
from errors import FeedError, PersistenceFailure
from feed_cache import FeedCache
from feed_log import cleanup_old_logs, log_message, set_log_file
from listing import ListingFetcher
from models import FeedDocument, FeedItem
from serializer import FeedgenSerializer


def select_recent(entries, n):
    """The last n entries in fetch order, most recent first."""
    if n <= 0:
        return []
    selected = []
    i = len(entries) - 1
    while i >= 0 and len(selected) < n:
        selected.append(entries[i])
        i -= 1
    return selected


def empty_document(config):
    return FeedDocument(
        title=config.title,
        description=config.description,
        link=config.link,
        syndication_url=config.syndication_url,
        author=config.author,
        editor=config.editor,
        author_email=config.author_email,
        editor_email=config.editor_email,
        language=config.language,
    )


def describe(config, entry):
    date = entry.date.strftime("%Y-%m-%d") if entry.date else "unknown date"
    return config.description_template.format(
        name=entry.name, link=entry.link, date=date, author=entry.author or config.author,
    )


def to_item(config, entry):
    return FeedItem(
        title=entry.name,
        link=entry.link,
        source=entry.link,
        author=entry.author or config.author,
        date=entry.date,
        description=describe(config, entry),
        author_email=config.author_email,
        editor_email=config.editor_email,
    )


def build_document(config, entries):
    document = empty_document(config)
    for entry in select_recent(entries, config.max_items):
        document.add_item(to_item(config, entry))
    return document


class FeedPublisher:
    def __init__(self, config, cache=None, serializer=None, fetcher=None):
        self.config = config
        self.cache = cache or FeedCache.from_config(config)
        self.serializer = serializer or FeedgenSerializer()
        self.fetcher = fetcher or ListingFetcher.from_config(config)
        if not self.serializer.supports_format(config.feed_format):
            raise FeedError(f"Serializer does not support {config.feed_format}")

    def publish(self):
        """Return the feed bytes, republishing from the repository unless the cache may be reused."""
        if self.cache.is_fresh():
            cached = self.cache.load()
            if cached is not None:
                log_message("Serving cached feed")
                return cached

        entries = self.fetcher(self.config.repository_url)
        if not entries:
            return self.serve_as_is()

        document = build_document(self.config, entries)
        log_message(f"Selected {len(document.items)} of {len(entries)} entries")
        data = self.serializer.serialize(document, self.config.feed_format)
        with self.cache.locked():
            self.cache.save(data)
            stored = self.cache.load()
        if stored is None:
            raise PersistenceFailure(f"Feed cache {self.cache.key} vanished after write")
        log_message(f"Published feed with {len(document.items)} entries to {self.cache.key}")
        return stored

    def serve_as_is(self):
        cached = self.cache.load()
        if cached is not None:
            log_message("Repository listing unavailable, serving previous feed")
            return cached
        log_message("Repository listing unavailable and no cached feed, serving empty feed")
        return self.serializer.serialize(empty_document(self.config), self.config.feed_format)


def main():
    config = FeedConfig.from_env()
    set_log_file(config.log_file)
    log_message("=== Starting release feed publish ===")
    cleanup_old_logs()
    try:
        data = FeedPublisher(config).publish()
    except PersistenceFailure as e:
        log_message(f"=== Release feed publish failed: {e} ===")
        return 1
    log_message(f"=== Release feed publish completed ({len(data)} bytes) ===")
    return 0


if __name__ == "__main__":
    sys.exit(main())
