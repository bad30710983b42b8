"""Tests for specflow.lib.checks module."""

from specflow.lib.checks import (
    check_design,
    check_implementation,
    check_specification,
    count_requirement_keywords,
    has_heading,
    task_progress,
)
from specflow.lib.templates import render

from conftest import spec_doc


class TestHasHeading:
    def test_case_insensitive_substring(self):
        assert has_heading("## 3. requirements\n", "Requirements")

    def test_body_text_is_not_a_heading(self):
        assert not has_heading("The requirements are below.\n", "Requirements")


class TestCheckSpecification:
    def test_complete_document(self):
        result = check_specification(spec_doc())
        assert result.errors == []
        assert result.warnings == []
        assert result.ok

    def test_missing_required_sections(self):
        result = check_specification("# Specification: X\n\n## Abstract\n")
        assert any("Introduction" in e for e in result.errors)
        assert any("Requirements" in e for e in result.errors)
        assert not any("Abstract" in e for e in result.errors)

    def test_missing_recommended_sections_are_warnings(self):
        content = "## Abstract\n## Introduction\n## Requirements\nIt MUST work.\n"
        result = check_specification(content)
        assert result.errors == []
        assert len(result.warnings) == 3

    def test_normative_language(self):
        content = spec_doc().replace("The system MUST work.", "It works.")
        result = check_specification(content)
        assert any("normative" in w for w in result.warnings)

    def test_extra_required_sections(self):
        result = check_specification(spec_doc(), ["Rollout"])
        assert any("Rollout" in e for e in result.errors)

    def test_unfilled_template(self):
        content = render("proposal/specification.md", {"name": "Auth", "slug": "auth"})
        result = check_specification(content)
        assert result.errors == []
        assert "Document contains unfilled template comments" in result.warnings


class TestCheckDesign:
    def test_template_passes(self):
        content = render("proposal/design.md", {"name": "Auth", "slug": "auth"})
        result = check_design(content)
        assert result.errors == []
        assert result.warnings == []

    def test_title_required(self):
        result = check_design("# Auth design\n")
        assert any("Title should be 'Design: [Feature Name]'" in e for e in result.errors)

    def test_single_option(self):
        content = render("proposal/design.md", {"name": "Auth", "slug": "auth"}).replace("### Option 2\n", "")
        result = check_design(content)
        assert any("Only one option" in w for w in result.warnings)


class TestCheckImplementation:
    def test_phases_required(self):
        result = check_implementation("- [ ] task\n")
        assert result.errors == ["Missing phases - implementation should be broken into phases"]

    def test_checkboxes_recommended(self):
        result = check_implementation("## Phase 1\n\nDo things.\n")
        assert result.errors == []
        assert any("checkboxes" in w for w in result.warnings)


class TestTaskProgress:
    def test_counts(self):
        content = "## Phase 1\n- [x] one\n- [ ] two\n  - [X] nested\n* [ ] star bullet\n"
        assert task_progress(content) == (3, 2)

    def test_empty(self):
        assert task_progress(None) == (0, 0)
        assert task_progress("") == (0, 0)


class TestCountRequirementKeywords:
    def test_strongest_keyword_per_line(self):
        content = (
            "## Requirements\n"
            "- The client MUST retry.\n"
            "- The server MUST NOT log secrets, and SHOULD rotate keys.\n"
            "- Callers SHOULD cache responses.\n"
            "- Callers MAY batch requests.\n"
            "Plain prose.\n"
        )
        assert count_requirement_keywords(content) == (2, 1, 1)

    def test_case_insensitive(self):
        assert count_requirement_keywords("it must work\nit may fail\n") == (1, 0, 1)

    def test_empty(self):
        assert count_requirement_keywords("") == (0, 0, 0)
