"""
Template copying and variable substitution.

Handles copying template directories and substituting {{variable}} patterns,
both in file contents and in file names.
"""

from __future__ import annotations

import shutil
from pathlib import Path

from .validation import InitError

TEMPLATES_DIR = Path(__file__).resolve().parent.parent.parent / "templates"


def template_dir(kind: str) -> Path:
    """Bundled template directory for an artifact kind ("binary" or "library")."""
    return TEMPLATES_DIR / kind


def substitute_template_vars(content: str, variables: dict[str, str]) -> str:
    """
    Substitute {{variable}} patterns in template content.

    Examples:
        substitute_template_vars("Hello {{name}}", {"name": "World"})
        # -> "Hello World"
    """
    for key, value in variables.items():
        pattern = f"{{{{{key}}}}}"
        content = content.replace(pattern, value)

    return content


def copy_template(
    source_dir: Path,
    target_dir: Path,
    variables: dict[str, str] | None = None,
    allow_existing: bool = False,
) -> list[Path]:
    """
    Copy a template directory to target, substituting variables.

    Args:
        source_dir: Source template directory
        target_dir: Destination directory
        variables: Optional dict for template variable substitution
        allow_existing: If True, allow target_dir to exist (init in place)

    Returns:
        Paths of the files written

    Raises:
        InitError: If target exists (and allow_existing=False) or copy fails
    """
    if target_dir.exists() and not allow_existing:
        raise InitError(f"Directory already exists: {target_dir}")

    if not source_dir.exists():
        raise InitError(f"Template not found: {source_dir}")

    variables = variables or {}
    written: list[Path] = []

    try:
        target_dir.mkdir(parents=True, exist_ok=allow_existing)

        for src_path in sorted(source_dir.rglob("*")):
            if not src_path.is_file():
                continue

            rel_path = substitute_template_vars(
                src_path.relative_to(source_dir).as_posix(), variables
            )
            dst_path = target_dir / rel_path

            # Never overwrite files when initializing in place
            if allow_existing and dst_path.exists():
                continue

            dst_path.parent.mkdir(parents=True, exist_ok=True)
            try:
                content = src_path.read_text(encoding="utf-8")
                dst_path.write_text(substitute_template_vars(content, variables), encoding="utf-8")
            except UnicodeDecodeError:
                # Binary file, just copy
                shutil.copy2(src_path, dst_path)
            written.append(dst_path)

    except OSError as e:
        # Clean up on failure (only if we created the directory)
        if target_dir.exists() and not allow_existing:
            shutil.rmtree(target_dir, ignore_errors=True)
        raise InitError(f"Failed to copy template: {e}") from e

    return written
