"""Unit tests for the anchor-based line scanner."""
import re

from jailwatch.parsers.scanner import (
    clean_line,
    extract_ips,
    extract_number,
    extract_section,
    find_value_after_anchor,
    split_list,
    validate_output,
)


class TestFindValueAfterAnchor:
    """Locating a number at or after a label line."""

    def test_value_on_anchor_line(self):
        assert find_value_after_anchor(["Total requests: 800"], "Total requests") == 800

    def test_value_on_following_line(self):
        lines = ["Блокирани IP:", "  231"]
        assert find_value_after_anchor(lines, "Блокирани IP") == 231

    def test_digits_before_anchor_are_read(self):
        assert find_value_after_anchor(["1234 total requests"], "total", 3) == 1234
        assert find_value_after_anchor(["requests: 5 total"], "total", 0) == 5

    def test_anchor_line_label_digits_win_by_default(self):
        assert find_value_after_anchor(["404 грешки:", "  231"], "404 грешки") == 404

    def test_label_digits_skipped_after_anchor_only(self):
        """The '404' inside the label must never be returned as the count."""
        lines = ["404 errors:", "none recorded", "17"]
        anchor = re.compile(r"^404\s+errors")
        assert find_value_after_anchor(lines, anchor, after_anchor_only=True) == 17
        assert find_value_after_anchor(["404 грешки:", "  231"], "404 грешки", after_anchor_only=True) == 231

    def test_first_integer_inside_text(self):
        assert find_value_after_anchor(["Label:", "about 12 of 30"], "Label") == 12

    def test_max_search_window(self):
        lines = ["Label:", "", "", "", "7"]
        assert find_value_after_anchor(lines, "Label", max_search=3) is None
        assert find_value_after_anchor(lines, "Label", max_search=4) == 7

    def test_zero_window_reads_anchor_line_only(self):
        assert find_value_after_anchor(["Label:", "5"], "Label", max_search=0) is None
        assert find_value_after_anchor(["Label: 3", "5"], "Label", max_search=0) == 3

    def test_missing_anchor(self):
        assert find_value_after_anchor(["a: 1", "b: 2"], "c") is None

    def test_first_matching_line_is_used(self):
        lines = ["Count: 1", "Count: 2"]
        assert find_value_after_anchor(lines, "Count") == 1

    def test_accepts_raw_text(self):
        assert find_value_after_anchor("x\nWebDAV атаки: 4\n", "WebDAV") == 4


class TestExtractSection:
    """Lines strictly between two anchors."""

    TEXT = "head\nSTART\none\ntwo\nEND\ntail"

    def test_between_anchors(self):
        assert extract_section(self.TEXT, "START", "END") == ["one", "two"]

    def test_no_end_anchor_runs_to_end(self):
        assert extract_section(self.TEXT, "START") == ["one", "two", "END", "tail"]

    def test_end_anchor_not_found(self):
        assert extract_section(self.TEXT, "START", "MISSING") == ["one", "two", "END", "tail"]

    def test_missing_start_is_empty(self):
        assert extract_section(self.TEXT, "NOPE", "END") == []

    def test_regex_anchors(self):
        lines = ["📊 NGINX", "a", "💾 SYSTEM", "b"]
        assert extract_section(lines, re.compile(r"NGINX"), re.compile(r"SYSTEM")) == ["a"]


class TestExtractIps:
    """IPv4 extraction."""

    def test_order_and_duplicates_kept(self):
        text = "203.0.113.5 10.0.0.1, 10.0.0.1"
        assert extract_ips(text) == ["203.0.113.5", "10.0.0.1", "10.0.0.1"]

    def test_out_of_range_octets_rejected(self):
        assert extract_ips("999.1.1.1 256.0.0.1 1.2.3.4") == ["1.2.3.4"]

    def test_empty_and_none(self):
        assert extract_ips("") == []
        assert extract_ips(None) == []
        assert extract_ips("no addresses here") == []


class TestSmallHelpers:
    """clean_line, split_list, extract_number, validate_output."""

    def test_clean_line_strips_tree_prefix(self):
        assert clean_line("`- Jail list:\tsshd") == "Jail list:\tsshd"
        assert clean_line("   |- Currently banned:\t2") == "Currently banned:\t2"

    def test_split_list(self):
        assert split_list(" sshd, ,nginx-404 ,") == ["sshd", "nginx-404"]
        assert split_list("") == []

    def test_extract_number_default_pattern(self):
        assert extract_number("abc 17 def 3") == 17
        assert extract_number("no digits") is None
        assert extract_number(None) is None

    def test_extract_number_with_group(self):
        pattern = re.compile(r"banned:\s*(\d+)")
        assert extract_number("Total banned: 42", pattern) == 42

    def test_validate_output(self):
        assert validate_output(None) == (False, "Output is null")
        assert validate_output(5) == (False, "Output is not a string")
        assert validate_output("  \n ") == (False, "Output is empty")
        assert validate_output("Status") == (True, None)
