"""Shared constants for specflow."""

# Workspace layout (relative to the workspace root)
DEFAULT_ROOT_DIRNAME = "spec"
PROPOSAL_DIR = "proposal"
SECTION_DIR = "section"
ARCHIVE_DIR = "archive"
MAINTENANCE_DIR = "maintenance"
RULE_DIR = "rule"
PROJECT_FILE = "project.md"
STATE_FILE = ".specflow.json"
CONFIG_FILE = "specflow.yaml"
ABANDONED_MARKER = ".abandoned"

# Tracked proposal documents, in display order
SPECIFICATION_DOC = "specification.md"
DESIGN_DOC = "design.md"
IMPLEMENTATION_DOC = "implementation.md"
PROPOSAL_DOC_FILES = (SPECIFICATION_DOC, DESIGN_DOC, IMPLEMENTATION_DOC)
ARCHIVED_ON_COMPLETE = (DESIGN_DOC, IMPLEMENTATION_DOC)

STATE_VERSION = 1

# Maintenance frequencies
FREQUENCIES = ("daily", "weekly", "biweekly", "monthly", "quarterly", "yearly")
