# models.py
# Data types passed between the listing fetcher, the publisher and the serializer

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class ListingEntry:
    """One item discovered in the remote tags directory."""

    name: str
    link: str
    date: datetime | None = None
    author: str = ""


@dataclass
class FeedItem:
    title: str
    link: str
    source: str
    author: str
    date: datetime | None
    description: str
    author_email: str = ""
    editor_email: str = ""
    guid: str | None = None


@dataclass
class FeedDocument:
    """A feed ready for serialization. Items are kept in output order."""

    title: str
    description: str
    link: str
    syndication_url: str = ""
    author: str = ""
    editor: str = ""
    author_email: str = ""
    editor_email: str = ""
    language: str = "en"
    items: list[FeedItem] = field(default_factory=list)

    def add_item(self, item):
        self.items.append(item)
