"""
Package name validation and sanitization.

Package names double as artifact file names and as dependency directory
names under lattice_modules/, so they are restricted to a portable subset.
"""

from __future__ import annotations

import re

from ..errors import InitError

__all__ = [
    "InitError",
    "RESERVED_NAMES",
    "validate_package_name",
    "sanitize_name",
    "c_identifier",
]

# Names that collide with lattice's own directories or are invalid on Windows
RESERVED_NAMES = {
    "lattice_modules",
    "node_modules",
    "dist",
    "con",
    "prn",
    "aux",
    "nul",
}

_NAME_PATTERN = re.compile(r"^(@[a-z0-9][a-z0-9._-]*/)?[a-z0-9][a-z0-9._-]*$")


def validate_package_name(name: str) -> tuple[bool, str | None]:
    """
    Validate a package name.

    Args:
        name: Package name to validate, optionally scoped ("@scope/name")

    Returns:
        (is_valid, error_message)

    Examples:
        validate_package_name("my-app")        # -> (True, None)
        validate_package_name("@acme/strings") # -> (True, None)
        validate_package_name("My App")        # -> (False, "...")
    """
    if not name:
        return (False, "Package name cannot be empty")

    if len(name) > 214:
        return (False, "Package name cannot be longer than 214 characters")

    bare = name.rsplit("/", 1)[-1]
    if bare in RESERVED_NAMES:
        return (False, f"Package name '{name}' is reserved. Try '{bare}-app' instead")

    if not _NAME_PATTERN.match(name):
        return (
            False,
            f"Package name '{name}' must be lowercase and contain only letters, numbers, "
            "'-', '_' and '.', optionally prefixed by a scope ('@scope/')",
        )

    return (True, None)


def sanitize_name(name: str, validate: bool = True) -> str:
    """
    Convert free-form text to a valid package name.

    Args:
        name: Project name (can include spaces, capitals)
        validate: If True, raises InitError for names that stay invalid

    Returns:
        Lowercase package name

    Raises:
        InitError: If validate=True and the name is reserved

    Examples:
        "My Project" -> "my-project"
        "@Acme/My Lib" -> "@acme/my-lib"
    """
    scope = ""
    if name.startswith("@") and "/" in name:
        scope, name = name.split("/", 1)
        scope = "@" + _slug(scope[1:]) + "/"

    final_name = scope + (_slug(name) or "my-lattice-app")

    if validate:
        is_valid, error_msg = validate_package_name(final_name)
        if not is_valid:
            raise InitError(error_msg or "Invalid package name")

    return final_name


def c_identifier(name: str) -> str:
    """Turn a package name into a C identifier ("@acme/my-lib" -> "acme_my_lib")."""
    ident = re.sub(r"[^a-z0-9_]", "_", name.lower().lstrip("@"))
    ident = re.sub(r"_+", "_", ident).strip("_")
    if not ident or ident[0].isdigit():
        ident = f"lib_{ident}"
    return ident


def _slug(text: str) -> str:
    text = text.strip().lower()
    text = re.sub(r"[^a-z0-9._-]+", "-", text)
    return re.sub(r"-+", "-", text).strip("-._")
