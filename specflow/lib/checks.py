"""
Document checks for proposal validation.

Each checker inspects one document's markdown and reports errors
(required sections or metadata missing) and warnings (recommended
sections, unfilled template comments).
"""

from dataclasses import dataclass, field

from specflow.lib.constants import DESIGN_DOC, IMPLEMENTATION_DOC, SPECIFICATION_DOC


@dataclass
class DocumentCheck:
    """Errors and warnings for a single document."""
    document: str
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors and not self.warnings


def has_heading(content: str, text: str) -> bool:
    """True if a markdown heading contains text (case-insensitive)."""
    needle = text.lower()
    for line in content.splitlines():
        trimmed = line.strip()
        if trimmed.startswith("#") and needle in trimmed.lower():
            return True
    return False


def _contains(content: str, text: str) -> bool:
    return text.lower() in content.lower()


def _has_template_comments(content: str) -> bool:
    return "<!-- " in content and " -->" in content


SPECIFICATION_REQUIRED = [
    ("Abstract", "Add a 2-4 sentence summary of the specification"),
    ("Introduction", "Add context for why this specification exists"),
    ("Requirements", "List requirements using MUST/SHOULD/MAY language"),
]

SPECIFICATION_RECOMMENDED = [
    ("Examples", "Provide concrete, runnable examples"),
    ("Security Considerations", "Address security implications"),
    ("Error Handling", "Define error conditions and responses"),
]

DESIGN_REQUIRED = [
    ("Context", "Establish the technical landscape and constraints"),
    ("Goals and Non-Goals", "Define goals and explicitly excluded items"),
    ("Options Considered", "Document at least 2 viable approaches"),
    ("Decision", "State the chosen approach and rationale"),
    ("Detailed Design", "Describe architecture, components, data, or API design"),
    ("Cross-Cutting Concerns", "Address security, performance, reliability, testing"),
    ("Implementation Plan", "Define phased approach and milestones"),
]

DESIGN_RECOMMENDED = [
    ("Open Questions", "List unresolved items with owners and blocking status"),
]


def check_specification(content: str, extra_sections: list[str] | None = None) -> DocumentCheck:
    result = DocumentCheck(SPECIFICATION_DOC)
    required = SPECIFICATION_REQUIRED + [(s, "Required by workspace configuration") for s in extra_sections or []]

    for name, hint in required:
        if not has_heading(content, name):
            result.errors.append(f"Missing required section: {name} - {hint}")
    for name, hint in SPECIFICATION_RECOMMENDED:
        if not has_heading(content, name):
            result.warnings.append(f"Missing recommended section: {name} - {hint}")

    if has_heading(content, "Requirements"):
        if not any(_contains(content, word) for word in ("MUST", "SHOULD", "MAY")):
            result.warnings.append("Requirements section should use normative language (MUST/SHOULD/MAY)")

    if _has_template_comments(content):
        result.warnings.append("Document contains unfilled template comments")
    return result


def check_design(content: str) -> DocumentCheck:
    result = DocumentCheck(DESIGN_DOC)

    for name, hint in DESIGN_REQUIRED:
        if not has_heading(content, name):
            result.errors.append(f"Missing required section: {name} - {hint}")
    for name, hint in DESIGN_RECOMMENDED:
        if not has_heading(content, name):
            result.warnings.append(f"Missing recommended section: {name} - {hint}")

    if not _contains(content, "# Design:"):
        result.errors.append("Missing metadata: Title should be 'Design: [Feature Name]'")
    if not _contains(content, "Specification Reference"):
        result.warnings.append("Missing metadata: Specification Reference")
    if not _contains(content, "Status:"):
        result.warnings.append("Missing metadata: Status (Draft | Review | Approved | Superseded)")

    has_first = has_heading(content, "Option 1") or has_heading(content, "Option A")
    has_second = has_heading(content, "Option 2") or has_heading(content, "Option B")
    if has_first and not has_second:
        result.warnings.append("Only one option documented - at least 2 alternatives or a justification expected")

    if _has_template_comments(content):
        result.warnings.append("Document contains unfilled template comments")
    return result


def check_implementation(content: str) -> DocumentCheck:
    result = DocumentCheck(IMPLEMENTATION_DOC)

    if not has_heading(content, "Phase"):
        result.errors.append("Missing phases - implementation should be broken into phases")
    if "- [ ]" not in content and "- [x]" not in content.lower():
        result.warnings.append("No task checkboxes found - consider adding actionable tasks")

    if _has_template_comments(content):
        result.warnings.append("Document contains unfilled template comments")
    return result


def task_progress(content: str | None) -> tuple[int, int]:
    """Count (total, completed) task checkboxes in an implementation document."""
    if not content:
        return 0, 0
    total = completed = 0
    for line in content.splitlines():
        trimmed = line.strip()
        if trimmed.startswith("- [ ]"):
            total += 1
        elif trimmed.startswith(("- [x]", "- [X]")):
            total += 1
            completed += 1
    return total, completed


def count_requirement_keywords(content: str) -> tuple[int, int, int]:
    """Count (MUST, SHOULD, MAY) lines in a specification.

    Each line counts once, under the strongest keyword it contains.
    """
    must = should = may = 0
    for line in content.splitlines():
        upper = line.upper()
        if "MUST" in upper:
            must += 1
        elif "SHOULD" in upper:
            should += 1
        elif "MAY" in upper:
            may += 1
    return must, should, may
