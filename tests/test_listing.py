"""Tests for the repository listing fetcher."""

from datetime import datetime, timezone
from unittest.mock import Mock

import requests

from listing import ListingFetcher, parse_date, parse_listing

BASE = "http://svn.example.com/repo/tags/"
LINK_BASE = "http://www.example.com/svn/"

SVN_INDEX = """<html><head><title>Revision 1234: /tags</title></head>
<body>
<h2>Revision 1234: /tags</h2>
<ul>
  <li><a href="../">..</a></li>
  <li><a href="1.0.0/">1.0.0/</a></li>
  <li><a href="1.0.1/">1.0.1/</a></li>
  <li><a href="1.0.2/">1.0.2/</a></li>
</ul>
<hr noshade><em>Powered by <a href="http://subversion.tigris.org/">Subversion</a> version 1.2.3.</em>
</body></html>"""

APACHE_TABLE_INDEX = """<html><body><h1>Index of /repo/tags</h1>
<table>
<tr><th><a href="?C=N;O=D">Name</a></th><th><a href="?C=M;O=A">Last modified</a></th><th><a href="?C=S;O=A">Size</a></th></tr>
<tr><td valign="top"><img src="/icons/back.gif" alt="[DIR]"></td><td><a href="/repo/">Parent Directory</a></td><td>&nbsp;</td><td align="right">  - </td></tr>
<tr><td valign="top"><a href="1.0.0/"><img src="/icons/folder.gif" alt="[DIR]"></a></td><td><a href="1.0.0/">1.0.0/</a></td><td align="right">2006-03-01 12:00  </td><td align="right">  - </td></tr>
<tr><td valign="top"><a href="1.0.1/"><img src="/icons/folder.gif" alt="[DIR]"></a></td><td><a href="1.0.1/">1.0.1/</a></td><td align="right">  </td><td align="right">  - </td></tr>
</table></body></html>"""

APACHE_PRE_INDEX = """<html><body><h1>Index of /repo/tags</h1>
<pre><a href="?C=N;O=D">Name</a>                    <a href="?C=M;O=A">Last modified</a>      <a href="?C=S;O=A">Size</a>
<hr><a href="/repo/">Parent Directory</a>                             -
<a href="1.0.0/">1.0.0/</a>                  01-Mar-2006 12:00    -
<a href="1.0.1/">1.0.1/</a>                  someday              -
</pre></body></html>"""


def _response(text="", status=200):
    response = Mock()
    response.text = text
    response.status_code = status
    if status >= 400:
        response.raise_for_status.side_effect = requests.exceptions.HTTPError(f"{status} error")
    else:
        response.raise_for_status.return_value = None
    return response


class TestParseListing:
    def test_svn_index_entries_in_page_order(self):
        entries = parse_listing(SVN_INDEX, BASE, LINK_BASE, "Example Software")

        assert [e.name for e in entries] == ["1.0.0", "1.0.1", "1.0.2"]
        assert entries[0].link == "http://www.example.com/svn/1.0.0/"
        assert all(e.author == "Example Software" for e in entries)
        # mod_dav_svn prints no dates
        assert all(e.date is None for e in entries)

    def test_parent_and_external_links_skipped(self):
        names = [e.name for e in parse_listing(SVN_INDEX, BASE)]

        assert ".." not in names
        assert "Subversion" not in names

    def test_links_default_to_repository_url(self):
        entries = parse_listing(SVN_INDEX, BASE.rstrip("/"))

        assert entries[0].link == BASE + "1.0.0/"

    def test_apache_table_dates(self):
        entries = parse_listing(APACHE_TABLE_INDEX, BASE, LINK_BASE)

        assert [e.name for e in entries] == ["1.0.0", "1.0.1"]
        assert entries[0].date == datetime(2006, 3, 1, 12, 0, tzinfo=timezone.utc)
        assert entries[1].date is None

    def test_apache_pre_dates(self):
        entries = parse_listing(APACHE_PRE_INDEX, BASE, LINK_BASE)

        assert [e.name for e in entries] == ["1.0.0", "1.0.1"]
        assert entries[0].date == datetime(2006, 3, 1, 12, 0, tzinfo=timezone.utc)
        assert entries[1].date is None

    def test_page_without_entries(self):
        assert parse_listing("<html><body>Forbidden</body></html>", BASE) == []


class TestParseDate:
    def test_iso_date(self):
        assert parse_date("2006-03-01 12:00") == datetime(2006, 3, 1, 12, 0, tzinfo=timezone.utc)

    def test_blank_and_dash(self):
        assert parse_date("") is None
        assert parse_date("  - ") is None
        assert parse_date(None) is None

    def test_keeps_timezone(self):
        parsed = parse_date("2006-03-01T12:00:00+02:00")
        assert parsed.utcoffset().total_seconds() == 7200


class TestListingFetcher:
    def _fetcher(self, session):
        return ListingFetcher(link_base=LINK_BASE, default_author="Example Software", timeout=5, session=session)

    def test_fetch_parses_listing(self):
        session = Mock()
        session.get.return_value = _response(SVN_INDEX)

        entries = self._fetcher(session).fetch(BASE)

        assert len(entries) == 3
        session.get.assert_called_once_with(BASE, timeout=5)

    def test_fetcher_is_callable(self):
        session = Mock()
        session.get.return_value = _response(SVN_INDEX)

        assert len(self._fetcher(session)(BASE)) == 3

    def test_connection_error_returns_empty(self):
        session = Mock()
        session.get.side_effect = requests.exceptions.ConnectionError("refused")

        assert self._fetcher(session).fetch(BASE) == []

    def test_timeout_returns_empty(self):
        session = Mock()
        session.get.side_effect = requests.exceptions.Timeout("slow")

        assert self._fetcher(session).fetch(BASE) == []

    def test_http_error_returns_empty(self):
        session = Mock()
        session.get.return_value = _response("Not found", status=404)

        assert self._fetcher(session).fetch(BASE) == []

    def test_failures_are_logged(self, log_file):
        session = Mock()
        session.get.side_effect = requests.exceptions.ConnectionError("refused")

        self._fetcher(session).fetch(BASE)

        assert "Request error" in log_file.read_text()

    def test_user_agent_applied(self):
        fetcher = ListingFetcher(user_agent="ReleaseFeedTest/1.0")

        assert fetcher.session.headers["User-Agent"] == "ReleaseFeedTest/1.0"
