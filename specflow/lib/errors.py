"""
Error taxonomy for specflow.

Every engine operation either returns a value or raises one of these.
CLI commands catch SpecflowError and map it to an exit code.
"""

from pathlib import Path


class SpecflowError(Exception):
    """Base class for all engine errors."""
    exit_code = 2


class NotFound(SpecflowError):
    """Referenced proposal, maintenance item or requirement does not exist."""

    def __init__(self, kind: str, name: str, message: str = None):
        self.kind = kind
        self.name = name
        super().__init__(message or f"{kind} '{name}' does not exist")


class AlreadyExists(SpecflowError):
    """Create targeted a slug that already exists."""

    def __init__(self, kind: str, name: str):
        self.kind = kind
        self.name = name
        super().__init__(f"{kind} '{name}' already exists")


class InvalidSlug(SpecflowError):
    """Name normalised to an empty slug."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(
            f"Invalid name '{name}': must contain at least one alphanumeric character"
        )


class Malformed(SpecflowError):
    """A document or record could not be parsed.

    Carries the offending line (1-indexed) or field path when known.
    """

    def __init__(self, message: str, line: int = None, field: str = None):
        self.line = line
        self.field = field
        prefix = f"line {line}: " if line is not None else ""
        suffix = f" at {field}" if field else ""
        super().__init__(f"{prefix}{message}{suffix}")


class MalformedState(Malformed):
    """The persisted state file is unreadable or fails schema validation."""


class DependencyUnmet(SpecflowError):
    """Activation blocked by dependencies without a completed specification."""

    def __init__(self, slug: str, missing: list[str]):
        self.slug = slug
        self.missing = list(missing)
        super().__init__(
            f"Cannot activate '{slug}': missing completed dependencies: {', '.join(self.missing)}"
        )


class CyclicDependency(SpecflowError):
    """Activation blocked because the proposal sits on a dependency cycle."""

    def __init__(self, slug: str, cycles: list[list[str]]):
        self.slug = slug
        self.cycles = [list(c) for c in cycles]
        rendered = "; ".join(" -> ".join(c) for c in self.cycles)
        super().__init__(f"Cannot activate '{slug}': circular dependency {rendered}")


class InvalidTransition(SpecflowError):
    """Lifecycle trigger is not allowed from the proposal's current state."""

    def __init__(self, slug: str, trigger: str, state: str, message: str = None):
        self.slug = slug
        self.trigger = trigger
        self.state = state
        super().__init__(message or f"Cannot {trigger} proposal '{slug}' while {state}")


class IOFailure(SpecflowError):
    """Underlying filesystem error, wrapped with operation and path."""
    exit_code = 1

    def __init__(self, operation: str, path: Path, cause: OSError):
        self.operation = operation
        self.path = path
        self.cause = cause
        super().__init__(f"Failed to {operation} {path}: {cause}")
