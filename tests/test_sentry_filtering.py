"""Test Sentry error filtering for user vs system errors."""

import unittest
from unittest.mock import patch

from certin_mapper.cli.main import initialize_sentry
from certin_mapper.exceptions import ConfigurationError, FileProcessingError, SBOMValidationError


class TestSentryFiltering(unittest.TestCase):
    def _before_send(self):
        with patch("certin_mapper.cli.main.sentry_sdk.init") as mock_init:
            initialize_sentry("https://public@sentry.example.com/1")
        mock_init.assert_called_once()
        return mock_init.call_args.kwargs["before_send"]

    def test_no_dsn_does_not_initialize(self):
        """Sentry stays off unless a DSN is configured."""
        with patch("certin_mapper.cli.main.sentry_sdk.init") as mock_init:
            initialize_sentry(None)
        mock_init.assert_not_called()

    def test_sentry_filters_validation_errors(self):
        """SBOMValidationError is a user input error and is not reported."""
        before_send = self._before_send()
        error = SBOMValidationError("Test validation error")
        hint = {"exc_info": (SBOMValidationError, error, None)}

        self.assertIsNone(before_send({"exception": {}}, hint))

    def test_sentry_filters_configuration_errors(self):
        """ConfigurationError is a user error and is not reported."""
        before_send = self._before_send()
        error = ConfigurationError("Test config error")
        hint = {"exc_info": (ConfigurationError, error, None)}

        self.assertIsNone(before_send({"exception": {}}, hint))

    def test_sentry_reports_other_errors(self):
        """Tool errors are still reported."""
        before_send = self._before_send()
        event = {"exception": {"values": [{"type": "FileProcessingError"}]}}
        hint = {"exc_info": (FileProcessingError, FileProcessingError("disk full"), None)}

        self.assertEqual(before_send(event, hint), event)

    def test_events_without_exception_pass_through(self):
        before_send = self._before_send()
        event = {"message": "hello"}

        self.assertEqual(before_send(event, {}), event)
