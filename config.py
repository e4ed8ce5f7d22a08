# config.py
# Feed settings: module defaults, overridable through RELEASE_FEED_* environment variables

import os
from dataclasses import dataclass, fields

from errors import ConfigError, UnsupportedFormatError
from feed_cache import REFRESH_POLICIES
from serializer import normalize_format

BASE_DIR = os.path.dirname(__file__)
ENV_PREFIX = "RELEASE_FEED_"

REPOSITORY_URL = "http://72.9.228.230/svn/jsvn/tags/"
LINK_BASE = "http://tmate.org/svn/"
CACHE_FILE = os.path.join(BASE_DIR, "rss20.cache")
LOG_FILE = os.path.join(BASE_DIR, "feed_log.txt")
CONTACT = "TMate Software"
CONTACT_EMAIL = "support@tmatesoft.com"
MAX_ITEMS = 4
USER_AGENT = "Mozilla/5.0 (ReleaseFeed/1.0; +http://tmate.org/svn/)"


@dataclass
class FeedConfig:
    repository_url: str = REPOSITORY_URL
    link_base: str = LINK_BASE
    cache_file: str = CACHE_FILE
    log_file: str = LOG_FILE
    title: str = "TMate JavaSVN"
    description: str = "TMate JavaSVN Library Change Log"
    link: str = "http://tmate.org/svn/"
    syndication_url: str = "http://tmate.org/svn/feed/rss.php"
    author: str = CONTACT
    editor: str = CONTACT
    author_email: str = CONTACT_EMAIL
    editor_email: str = CONTACT_EMAIL
    language: str = "en"
    max_items: int = MAX_ITEMS
    feed_format: str = "rss2.0"
    refresh_policy: str = "always"
    max_age: float = 3600.0
    fetch_timeout: float = 15.0
    user_agent: str = USER_AGENT
    description_template: str = "Release {name} is available at {link}"

    def __post_init__(self):
        self.validate()

    def validate(self):
        if not isinstance(self.max_items, int) or self.max_items < 1:
            raise ConfigError(f"max_items must be a positive integer, got {self.max_items!r}")
        if self.refresh_policy not in REFRESH_POLICIES:
            raise ConfigError(
                f"Unknown refresh policy {self.refresh_policy!r}, expected one of {', '.join(REFRESH_POLICIES)}"
            )
        if self.max_age < 0:
            raise ConfigError(f"max_age must not be negative, got {self.max_age!r}")
        if not self.repository_url:
            raise ConfigError("repository_url is required")
        try:
            self.description_template.format(name="1.0.0", link=self.link, date="2006-01-01", author=self.author)
        except (KeyError, IndexError, ValueError) as e:
            raise ConfigError(f"Invalid description_template {self.description_template!r}: {e!r}") from e
        try:
            self.feed_format = normalize_format(self.feed_format)
        except UnsupportedFormatError as e:
            raise ConfigError(str(e)) from e

    @property
    def cache_dir(self):
        return os.path.dirname(os.path.abspath(self.cache_file))

    @property
    def cache_key(self):
        return os.path.basename(self.cache_file)

    @classmethod
    def from_env(cls, environ=None):
        """Build a config from defaults plus RELEASE_FEED_* overrides."""
        environ = os.environ if environ is None else environ
        values = {}
        for field in fields(cls):
            raw = environ.get(ENV_PREFIX + field.name.upper())
            if raw is None:
                continue
            try:
                if field.type in (int, "int"):
                    values[field.name] = int(raw)
                elif field.type in (float, "float"):
                    values[field.name] = float(raw)
                else:
                    values[field.name] = raw
            except ValueError as e:
                raise ConfigError(f"Invalid value for {ENV_PREFIX + field.name.upper()}: {raw!r}") from e
        # RELEASE_FEED_FORMAT and RELEASE_FEED_REFRESH are the documented short names
        if "RELEASE_FEED_FORMAT" in environ:
            values["feed_format"] = environ["RELEASE_FEED_FORMAT"]
        if "RELEASE_FEED_REFRESH" in environ:
            values["refresh_policy"] = environ["RELEASE_FEED_REFRESH"]
        return cls(**values)
