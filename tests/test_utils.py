"""Tests for internal utilities."""

import unittest
from unittest.mock import MagicMock, patch

from apicseed._utils import REDACTED, clean_string, get_path, redact_body, redact_headers, sanitize_url, sleep


class TestSanitizeUrl(unittest.TestCase):
    """Tests for sanitize_url()."""

    def test_collapses_duplicate_slashes_in_path(self):
        self.assertEqual(sanitize_url("https://host//api///orgs"), "https://host/api/orgs")

    def test_strips_trailing_slash(self):
        self.assertEqual(sanitize_url("https://host/api/orgs/"), "https://host/api/orgs")

    def test_keeps_scheme_slashes(self):
        self.assertEqual(sanitize_url("http://host/api"), "http://host/api")

    def test_unchanged_when_already_clean(self):
        url = "https://manager.ns1.cluster.dev.example.com/api/me"
        self.assertEqual(sanitize_url(url), url)


class TestCleanString(unittest.TestCase):
    """Tests for clean_string()."""

    def test_flattens_line_breaks_and_spaces(self):
        self.assertEqual(clean_string('{\n  "message":   "boom"\n}'), '{ "message": "boom" }')

    def test_empty_and_none_become_empty_string(self):
        self.assertEqual(clean_string(""), "")
        self.assertEqual(clean_string(None), "")


class TestRedaction(unittest.TestCase):
    """Tests for redact_headers() and redact_body()."""

    def test_authorization_header_is_hidden_case_insensitively(self):
        headers = {"authorization": "Bearer abc", "Accept": "application/json"}

        redacted = redact_headers(headers)

        self.assertEqual(redacted["authorization"], REDACTED)
        self.assertEqual(redacted["Accept"], "application/json")

    def test_original_headers_are_not_modified(self):
        headers = {"Authorization": "Bearer abc"}

        redact_headers(headers)

        self.assertEqual(headers["Authorization"], "Bearer abc")

    def test_none_headers_become_empty_dict(self):
        self.assertEqual(redact_headers(None), {})

    def test_sign_in_secrets_are_hidden(self):
        body = {"username": "owner", "password": "s3cret", "client_secret": "xyz", "grant_type": "password"}

        redacted = redact_body(body)

        self.assertEqual(redacted["password"], REDACTED)
        self.assertEqual(redacted["client_secret"], REDACTED)
        self.assertEqual(redacted["username"], "owner")
        self.assertEqual(redacted["grant_type"], "password")

    def test_non_dict_body_is_returned_as_is(self):
        self.assertEqual(redact_body("raw"), "raw")
        self.assertIsNone(redact_body(None))


class TestGetPath(unittest.TestCase):
    """Tests for get_path()."""

    def test_reads_nested_dicts_and_lists(self):
        data = {"org": {"urls": ["u1", "u2"]}}
        self.assertEqual(get_path(data, "org.urls.1"), "u2")

    def test_returns_none_for_missing_segments(self):
        data = {"org": {"urls": ["u1"]}}
        self.assertIsNone(get_path(data, "org.name"))
        self.assertIsNone(get_path(data, "org.urls.5"))
        self.assertIsNone(get_path(None, "org"))

    def test_single_segment(self):
        self.assertEqual(get_path({"name": "acme"}, "name"), "acme")


class TestSleep(unittest.TestCase):
    """Tests for sleep()."""

    @patch("apicseed._utils.time.sleep")
    def test_delegates_to_time_sleep(self, mock_sleep: MagicMock):
        sleep(1.5)
        mock_sleep.assert_called_once_with(1.5)

    def test_rejects_negative_duration(self):
        with self.assertRaises(AssertionError):
            sleep(-1)


if __name__ == "__main__":
    unittest.main()
