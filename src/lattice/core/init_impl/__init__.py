"""
Package initialization utilities for Lattice.

This package contains modular implementations for package scaffolding:
- validation.py - Name validation and sanitization
- templates.py - Template copying and variable substitution
- project.py - Main init_project logic
"""

from __future__ import annotations

from .project import init_project, template_variables
from .templates import (
    TEMPLATES_DIR,
    copy_template,
    substitute_template_vars,
    template_dir,
)
from .validation import (
    RESERVED_NAMES,
    InitError,
    c_identifier,
    sanitize_name,
    validate_package_name,
)

__all__ = [
    # Errors
    "InitError",
    # Validation
    "RESERVED_NAMES",
    "validate_package_name",
    "sanitize_name",
    "c_identifier",
    # Templates
    "TEMPLATES_DIR",
    "template_dir",
    "substitute_template_vars",
    "copy_template",
    # Project init
    "template_variables",
    "init_project",
]
