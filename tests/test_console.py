"""Tests for the console module."""

import unittest
from unittest.mock import patch

from certin_mapper.console import (
    print_enrichment_summary,
    print_final_failure,
    print_final_success,
    print_summary_table,
    summarize_property_sets,
)


class TestSummarizePropertySets(unittest.TestCase):
    """Tests for property coverage counting."""

    def test_counts_meaningful_values(self):
        property_sets = [
            {
                "Usage Restrictions": "Permissive license - Minimal restrictions",
                "Patch Status": "Up to date",
                "End-of-Life Date": "NA",
                "Component Supplier": "Vendor",
            },
            {
                "Usage Restrictions": "GPL License - Copyleft restrictions apply",
                "Patch Status": "Update available (latest 2.0.0)",
                "End-of-Life Date": "31-12-2026",
            },
        ]

        stats = summarize_property_sets(property_sets)

        self.assertEqual(stats["total"], 2)
        self.assertEqual(stats["resolved"]["Usage Restrictions"], 2)
        self.assertEqual(stats["resolved"]["End-of-Life Date"], 1)
        self.assertEqual(stats["resolved"]["Component Supplier"], 1)
        self.assertEqual(stats["updates_available"], 1)

    def test_missing_keys_count_as_unresolved(self):
        stats = summarize_property_sets([{"Component Origin": "NA"}])

        self.assertEqual(stats["resolved"]["Component Supplier"], 0)
        self.assertEqual(stats["resolved"]["Component Origin"], 0)
        self.assertEqual(stats["updates_available"], 0)

    def test_undetermined_patch_status_is_not_an_update(self):
        stats = summarize_property_sets([{"Patch Status": "NA"}])

        self.assertEqual(stats["resolved"]["Patch Status"], 0)
        self.assertEqual(stats["updates_available"], 0)

    def test_empty_run(self):
        stats = summarize_property_sets([])
        self.assertEqual(stats["total"], 0)


class TestPrintHelpers(unittest.TestCase):
    """Tests for Rich output helpers."""

    def test_summary_table_skips_empty_rows(self):
        with patch("certin_mapper.console.console") as mock_console:
            print_summary_table("Empty", [("Nothing", 0)])
        mock_console.print.assert_not_called()

    def test_summary_table_shown_when_forced(self):
        with patch("certin_mapper.console.console") as mock_console:
            print_summary_table("Forced", [("Nothing", 0)], show_if_empty=True)
        mock_console.print.assert_called_once()

    def test_enrichment_summary_prints_table(self):
        with patch("certin_mapper.console.console") as mock_console:
            print_enrichment_summary([{"Component Supplier": "Vendor"}])
        table = mock_console.print.call_args.args[0]
        self.assertEqual(table.title, "CERT-In Enrichment Summary")

    def test_final_messages(self):
        with patch("certin_mapper.console.console") as mock_console:
            print_final_success("out.json")
            print_final_failure("boom")
        printed = " ".join(str(call.args[0]) for call in mock_console.print.call_args_list if call.args)
        self.assertIn("out.json", printed)
        self.assertIn("boom", printed)
