"""Tests for http_client module."""

import re
import unittest

from certin_mapper.http_client import USER_AGENT, create_session, get_default_headers


class TestUserAgent(unittest.TestCase):
    """Tests for USER_AGENT constant."""

    def test_user_agent_has_version(self):
        """Test USER_AGENT includes a version."""
        # Format: certin-mapper/X.Y.Z
        name, version_part = USER_AGENT.split("/")
        self.assertEqual(name, "certin-mapper")
        version_pattern = r"^\d+\.\d+(\.\d+)?(-[\w.]+)?$"
        is_valid_version = re.match(version_pattern, version_part) is not None
        self.assertTrue(
            is_valid_version or version_part == "unknown",
            f"Version '{version_part}' is neither a valid version pattern nor 'unknown'",
        )


class TestGetDefaultHeaders(unittest.TestCase):
    """Tests for get_default_headers function."""

    def test_default_headers_minimal(self):
        """Test get_default_headers with no arguments."""
        headers = get_default_headers()
        self.assertEqual(headers, {"User-Agent": USER_AGENT})

    def test_default_headers_with_token(self):
        """Test get_default_headers with token."""
        headers = get_default_headers(token="test-token-123")
        self.assertEqual(headers["Authorization"], "Bearer test-token-123")

    def test_default_headers_with_content_type(self):
        """Test get_default_headers with content_type."""
        headers = get_default_headers(content_type="application/json")
        self.assertEqual(headers["Content-Type"], "application/json")


class TestCreateSession(unittest.TestCase):
    """Tests for create_session function."""

    def test_session_carries_user_agent(self):
        session = create_session()
        try:
            self.assertEqual(session.headers["User-Agent"], USER_AGENT)
            self.assertNotIn("Authorization", session.headers)
        finally:
            session.close()
