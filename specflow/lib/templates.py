"""
Document templates used when scaffolding workspace files.

render(name, data) looks up a template by name and fills it from data
(keys: "name", "slug").
"""

from typing import Callable


def _specification(data: dict) -> str:
    return f'''# Specification: {data["name"]}

**Slug**: {data["slug"]}
**Depends on**: <!-- comma-separated proposal slugs, or "none" -->

## Abstract

<!-- 2-4 sentence summary of what this specification defines. -->

## Introduction

<!-- Why this specification exists and what problem it solves. -->

## Requirements

<!-- Use MUST / SHOULD / MAY language. -->

## Examples

## Error Handling

## Security Considerations
'''


def _design(data: dict) -> str:
    return f'''# Design: {data["name"]}

Specification Reference: {data["slug"]}
Status: Draft

## Context

## Goals and Non-Goals

## Options Considered

### Option 1

### Option 2

## Decision

## Detailed Design

## Cross-Cutting Concerns

## Implementation Plan

## Open Questions
'''


def _implementation(data: dict) -> str:
    return f'''# Implementation: {data["name"]}

## Phase 1

- [ ] <!-- first task -->
'''


def _maintenance(data: dict) -> str:
    return f'''# Maintenance: {data["name"]}

Recurring requirements. Each bullet needs a unique [id=...] token and may
carry a [freq=...] token (daily, weekly, biweekly, monthly, quarterly, yearly).
Requirements without a frequency are always due.

## Requirements

- Review this item [id=review] [freq=monthly]
'''


def _rule(data: dict) -> str:
    return f'''# {data["name"]}

<!-- Describe the rule. Rules are permanent and apply to every proposal. -->
'''


def _project(data: dict) -> str:
    return '''# Project

<!-- Describe the project, its architecture and its constraints. -->
'''


TEMPLATES: dict[str, Callable[[dict], str]] = {
    "proposal/specification.md": _specification,
    "proposal/design.md": _design,
    "proposal/implementation.md": _implementation,
    "maintenance.md": _maintenance,
    "rule.md": _rule,
    "project.md": _project,
}


def render(template_name: str, data: dict) -> str:
    """Render a named template.

    Raises:
        KeyError: If the template is unknown
    """
    if template_name not in TEMPLATES:
        raise KeyError(f"Unknown template: {template_name}")
    return TEMPLATES[template_name](data)
