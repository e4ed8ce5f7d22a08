# serializer.py
# Feed serialization behind a small interface: feedgen writes, feedparser reads back

from datetime import datetime, timezone

import feedparser
from feedgen.feed import FeedGenerator

from errors import UnsupportedFormatError
from models import FeedDocument, FeedItem

RSS20 = "rss2.0"
ATOM10 = "atom1.0"

FORMAT_ALIASES = {
    "rss": RSS20,
    "rss2": RSS20,
    "rss2.0": RSS20,
    "rss20": RSS20,
    "atom": ATOM10,
    "atom1.0": ATOM10,
}

MIMETYPES = {
    RSS20: "application/rss+xml",
    ATOM10: "application/atom+xml",
}

GENERATOR = "Python Release Feed"


def normalize_format(format_id):
    key = (format_id or "").strip().lower()
    if key not in FORMAT_ALIASES:
        raise UnsupportedFormatError(f"Unsupported feed format: {format_id!r}")
    return FORMAT_ALIASES[key]


def mimetype_for(format_id):
    return MIMETYPES[normalize_format(format_id)]


def _contact(name, email):
    contact = {"name": name}
    if email:
        contact["email"] = email
    return contact


class FeedSerializer:
    """Turns a FeedDocument into bytes for one or more feed dialects."""

    def supports_format(self, format_id):
        raise NotImplementedError

    def serialize(self, document, format_id):
        raise NotImplementedError


class FeedgenSerializer(FeedSerializer):
    formats = (RSS20, ATOM10)

    def __init__(self, pretty=True, generator=GENERATOR):
        self.pretty = pretty
        self.generator = generator

    def supports_format(self, format_id):
        try:
            return normalize_format(format_id) in self.formats
        except UnsupportedFormatError:
            return False

    def build(self, document):
        now = datetime.now(timezone.utc)
        fg = FeedGenerator()
        fg.id(document.syndication_url or document.link)
        fg.title(document.title)
        fg.description(document.description or document.title)
        fg.link(href=document.link, rel="alternate")
        if document.syndication_url:
            fg.link(href=document.syndication_url, rel="self")
        if document.author:
            fg.author(_contact(document.author, document.author_email))
        if document.editor_email:
            fg.managingEditor(f"{document.editor_email} ({document.editor})")
        fg.language(document.language)
        fg.lastBuildDate(now)
        fg.generator(self.generator)
        for item in document.items:
            fe = fg.add_entry(order="append")
            guid = item.guid or item.link
            fe.id(guid)
            fe.guid(guid, permalink=True)
            fe.title(item.title)
            fe.link(href=item.link)
            if item.source:
                fe.source(url=item.source, title=document.title)
            if item.author:
                fe.author(_contact(item.author, item.author_email))
            if item.date is not None:
                fe.pubDate(item.date)
            fe.updated(item.date or now)
            fe.description(item.description)
        return fg

    def serialize(self, document, format_id=RSS20):
        format_id = normalize_format(format_id)
        if format_id not in self.formats:
            raise UnsupportedFormatError(f"{type(self).__name__} cannot write {format_id}")
        fg = self.build(document)
        if format_id == ATOM10:
            return fg.atom_str(pretty=self.pretty)
        return fg.rss_str(pretty=self.pretty)


def _parsed_date(entry):
    for field in ("published_parsed", "updated_parsed"):
        value = entry.get(field)
        if value:
            return datetime(*value[:6], tzinfo=timezone.utc)
    return None


def parse_feed(data):
    """Read a serialized feed back into a FeedDocument."""
    parsed = feedparser.parse(data)
    feed = parsed.feed
    author = feed.get("author_detail", {})
    document = FeedDocument(
        title=feed.get("title", ""),
        description=feed.get("subtitle", feed.get("description", "")),
        link=feed.get("link", ""),
        author=author.get("name", ""),
        author_email=author.get("email", ""),
        language=feed.get("language", "en"),
    )
    for link in feed.get("links", []):
        if link.get("rel") == "self":
            document.syndication_url = link.get("href", "")
    for entry in parsed.entries:
        entry_author = entry.get("author_detail", {})
        source = entry.get("source", {})
        document.add_item(FeedItem(
            title=entry.get("title", ""),
            link=entry.get("link", ""),
            source=source.get("href", "") if source else "",
            author=entry_author.get("name", entry.get("author", "")),
            date=_parsed_date(entry),
            description=entry.get("summary", ""),
            author_email=entry_author.get("email", ""),
            guid=entry.get("id"),
        ))
    return document
