"""Tests for the Reddit target URL validator."""

import pytest

from services.errors import ErrorCode
from services.fetchers.types import Invalid, Valid
from validators import validate_target

from conftest import VALID_THREAD, VALID_THREAD_JSON_URL


class TestValidationRules:

    @pytest.mark.parametrize("raw, code", [
        (None, ErrorCode.MISSING_URL),
        ("", ErrorCode.MISSING_URL),
        ("not a url", ErrorCode.INVALID_URL),
        ("https://", ErrorCode.INVALID_URL),
        ("https://www.reddit.com:99999/r/test/comments/abc", ErrorCode.INVALID_URL),
        ("http://www.reddit.com/r/test/comments/abc123", ErrorCode.HTTPS_REQUIRED),
        ("http://example.com/r/test/comments/abc123", ErrorCode.HTTPS_REQUIRED),
        ("ftp://www.reddit.com/r/test/comments/abc123", ErrorCode.HTTPS_REQUIRED),
        ("https://example.com/r/test/comments/abc123", ErrorCode.HOST_NOT_ALLOWED),
        ("https://reddit.com/r/test/comments/abc123", ErrorCode.HOST_NOT_ALLOWED),
        ("https://www.reddit.com.evil.com/r/test/comments/abc123", ErrorCode.HOST_NOT_ALLOWED),
        ("https://www.reddit.com/r/test", ErrorCode.INVALID_PATH),
        ("https://www.reddit.com/", ErrorCode.INVALID_PATH),
        ("https://www.reddit.com/r/te-st/comments/abc123", ErrorCode.INVALID_PATH),
        ("https://www.reddit.com/r/test/comments/ABC123", ErrorCode.INVALID_PATH),
        ("https://www.reddit.com/user/test/comments/abc123", ErrorCode.INVALID_PATH),
        ("https://www.reddit.com/r/x/comments/abc/../../../../api/v1/me", ErrorCode.INVALID_PATH),
        ("https://www.reddit.com/r/x/comments/abc/%2e%2e/%2E%2E/.%2e/%2e./api/v1/me", ErrorCode.INVALID_PATH),
        ("https://www.reddit.com/r/x/comments/abc/./../../..", ErrorCode.INVALID_PATH),
    ])
    def test_single_rule_failure(self, raw, code):
        """Each broken rule yields exactly its own error code."""
        assert validate_target(raw) == Invalid(code)

    def test_rules_are_ordered(self):
        """http + foreign host + bad path reports the scheme first."""
        assert validate_target("http://example.com/nope") == Invalid(ErrorCode.HTTPS_REQUIRED)

    def test_valid_thread(self):
        outcome = validate_target(VALID_THREAD)

        assert isinstance(outcome, Valid)
        assert outcome.target.upstream_url == VALID_THREAD_JSON_URL
        assert outcome.target.hostname == "www.reddit.com"
        assert outcome.target.canonical_path == "/r/test/comments/abc123/some_title"

    def test_thread_without_slug(self):
        outcome = validate_target("https://old.reddit.com/r/Python_3/comments/xyz9")

        assert isinstance(outcome, Valid)
        assert outcome.target.upstream_url == "https://old.reddit.com/r/Python_3/comments/xyz9.json"

    def test_trailing_slash_is_stripped(self):
        with_slash = validate_target("https://www.reddit.com/r/x/comments/abc/title/")
        without_slash = validate_target("https://www.reddit.com/r/x/comments/abc/title")

        assert with_slash == without_slash
        assert with_slash.target.upstream_url == "https://www.reddit.com/r/x/comments/abc/title.json"

    def test_query_and_fragment_are_dropped(self):
        outcome = validate_target(VALID_THREAD + "/?utm_source=share#comment")

        assert outcome.target.upstream_url == VALID_THREAD_JSON_URL

    def test_upstream_url_round_trip(self):
        """Re-validating the derived upstream URL yields the same target."""
        first = validate_target(VALID_THREAD)
        second = validate_target(first.target.upstream_url)

        assert second == first

    def test_dot_segments_inside_thread_are_resolved(self):
        outcome = validate_target("https://www.reddit.com/r/x/comments/abc/title/../other/./")

        assert outcome.target.upstream_url == "https://www.reddit.com/r/x/comments/abc/other.json"
        assert ".." not in outcome.target.canonical_path
