"""Tests for specflow.lib.fields module."""

from specflow.lib.fields import (
    bracket_tokens,
    find_field,
    match_field,
    name_to_slug,
    split_list,
    strip_tokens,
)


class TestMatchField:
    def test_bold_label(self):
        field = match_field("**Depends on**: auth, billing", "Depends on")
        assert field.value == "auth, billing"
        assert field.comment is None
        assert field.placeholder is False

    def test_plain_label_case_insensitive(self):
        field = match_field("  depends ON: auth", "Depends on")
        assert field.value == "auth"

    def test_trailing_comment_removed(self):
        field = match_field("**Depends on**: auth <!-- added later -->", "Depends on")
        assert field.value == "auth"
        assert field.comment == "<!-- added later -->"

    def test_placeholder_only(self):
        field = match_field("**Depends on**: <!-- slugs -->", "Depends on")
        assert field.value == ""
        assert field.comment == "<!-- slugs -->"

    def test_other_label_does_not_match(self):
        assert match_field("**Status**: Draft", "Depends on") is None

    def test_label_must_start_line(self):
        assert match_field("This depends on: nothing", "Depends on") is None


class TestFindField:
    def test_first_match_wins(self):
        content = "# Title\n\nDepends on: a\nDepends on: b\n"
        assert find_field(content, "Depends on").value == "a"

    def test_absent(self):
        assert find_field("# Title\n", "Depends on") is None


class TestSplitList:
    def test_drops_empty_entries(self):
        assert split_list(" a, ,b ,, c") == ["a", "b", "c"]


class TestBracketTokens:
    def test_any_order(self):
        assert bracket_tokens("- Scan [freq=weekly] [id=scan]") == {"freq": "weekly", "id": "scan"}

    def test_first_occurrence_wins(self):
        assert bracket_tokens("- x [id=a] [id=b]")["id"] == "a"

    def test_no_tokens(self):
        assert bracket_tokens("- plain bullet") == {}

    def test_strip_tokens(self):
        assert strip_tokens("- Run scan [id=scan] [freq=weekly]", ("id", "freq")) == "Run scan"
        assert strip_tokens("* [id=a] Rotate keys", ("id", "freq")) == "Rotate keys"

    def test_strip_tokens_keeps_other_keys(self):
        assert strip_tokens("- See [ref=rfc] [id=a]", ("id",)) == "See [ref=rfc]"


class TestNameToSlug:
    def test_basic(self):
        assert name_to_slug("User Auth") == "user-auth"

    def test_collapses_punctuation(self):
        assert name_to_slug("  OAuth 2.0 -- Login!! ") == "oauth-2-0-login"

    def test_empty_when_nothing_alphanumeric(self):
        assert name_to_slug("!!! ---") == ""
