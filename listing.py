# listing.py
# Fetches the tags directory listing from the repository server and scrapes it into ListingEntry items

import re
from datetime import timezone
from urllib.parse import urljoin, urlparse

import requests
from bs4 import BeautifulSoup
from bs4.element import NavigableString
from dateutil import parser as dateparser

from feed_log import log_message, logger
from models import ListingEntry

PARENT_NAMES = {"..", "parent directory"}
_DIGIT = re.compile(r"\d")
# "2006-03-01 12:00", "01-Mar-2006 12:00", "03/01/2006 12:00:00"
_DATE_LIKE = re.compile(
    r"\d{1,4}[-/.][A-Za-z0-9]{1,3}[-/.]\d{2,4}"
    r"(?:[\sT]+\d{1,2}:\d{2}(?::\d{2})?(?:\s*(?:Z|[+-]\d{2}:?\d{2}|GMT|UTC))?)?"
)


def _as_directory(url):
    return url if url.endswith("/") else url + "/"


def parse_date(text):
    """Best-effort parse of the date column of a listing row. Returns None when nothing looks like a date."""
    text = (text or "").strip()
    if not text or not _DIGIT.search(text):
        return None
    match = _DATE_LIKE.search(text)
    try:
        if match:
            parsed = dateparser.parse(match.group(0))
        else:
            parsed = dateparser.parse(text, fuzzy=True)
    except (ValueError, OverflowError) as e:
        logger.debug(f"Failed to parse listing date {text!r}: {e}")
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _row_text(anchor):
    """Text printed after the anchor on the same listing row."""
    cell = anchor.find_parent("td")
    if cell is not None:
        # Apache "fancy" index: name, last modified, size, description columns
        for sibling in cell.find_next_siblings("td"):
            text = sibling.get_text(" ", strip=True)
            if parse_date(text) is not None:
                return text
        return ""
    # <pre> index: "<a href=..>name</a>   01-Mar-2006 12:00    - "
    following = anchor.next_sibling
    if isinstance(following, NavigableString):
        return str(following).split("\n", 1)[0]
    return ""


def _child_path(base_url, href):
    """Path of href relative to the listing, or None if it does not point at a child entry."""
    if not href or href.startswith(("?", "#")):
        return None
    resolved = urljoin(base_url, href)
    if not resolved.startswith(base_url) or resolved == base_url:
        return None
    relative = resolved[len(base_url):]
    parsed = urlparse(relative)
    if parsed.query or parsed.fragment or relative.startswith(".."):
        return None
    return relative


def parse_listing(html, base_url, link_base=None, default_author=""):
    """Scrape a directory listing page into entries, in the order they appear."""
    base_url = _as_directory(base_url)
    link_base = _as_directory(link_base) if link_base else base_url
    soup = BeautifulSoup(html, "html.parser")
    entries = []
    seen = set()
    for anchor in soup.find_all("a", href=True):
        name = anchor.get_text(strip=True)
        if not name or name.lower() in PARENT_NAMES:
            continue
        relative = _child_path(base_url, anchor["href"])
        if relative is None or relative in seen:
            continue
        seen.add(relative)
        date_text = _row_text(anchor)
        date = parse_date(date_text)
        if date is None:
            logger.debug(f"No usable date for listing entry {name!r}")
        entries.append(ListingEntry(
            name=name.rstrip("/"),
            link=urljoin(link_base, relative),
            date=date,
            author=default_author,
        ))
    return entries


class ListingFetcher:
    """Reads the repository tags directory over HTTP. Upstream failures yield an empty list."""

    def __init__(self, link_base=None, default_author="", timeout=15.0, user_agent=None, session=None):
        self.link_base = link_base
        self.default_author = default_author
        self.timeout = timeout
        self.session = session or requests.Session()
        if user_agent:
            self.session.headers.update({"User-Agent": user_agent})

    @classmethod
    def from_config(cls, config):
        return cls(
            link_base=config.link_base,
            default_author=config.author,
            timeout=config.fetch_timeout,
            user_agent=config.user_agent,
        )

    def fetch(self, repository_url):
        log_message(f"Fetching repository listing {repository_url}")
        try:
            response = self.session.get(repository_url, timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.Timeout:
            log_message(f"Timeout error for {repository_url}")
            return []
        except requests.exceptions.RequestException as e:
            log_message(f"Request error for {repository_url}: {e}")
            return []
        entries = parse_listing(response.text, repository_url, self.link_base, self.default_author)
        if not entries:
            log_message(f"Warning: No entries found in listing {repository_url}")
        else:
            log_message(f"Parsed {len(entries)} entries from {repository_url}")
        return entries

    __call__ = fetch
