"""
Pre-flight checks for story publishing.

Both checks run before any network call. Each returns a ValidationResult;
run_preflight turns the first failure into a PreflightError so the
publish task aborts without side effects.
"""

from __future__ import annotations

import re
import subprocess
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Any

from loguru import logger

from storykit.exceptions import DirtyWorkspaceError, ProjectDateError
from storykit.settings import Settings

YEAR_RE = re.compile(r"^[12][0-9]{3}$")
MONTH_RE = re.compile(r"^(1[0-2]|0[1-9])$")
UPLOAD_CACHE_RE = re.compile(r"\.storykit-cache-.+\.json")

DIRTY_WORKSPACE_MSG = "Please commit changes before publishing."
MALFORMED_DATE_MSG = 'Please enter the project initial year as YYYY (ex. "2017") and month as MM (ex. "01")'
MISSING_DATE_MSG = "You must supply projectInitDate with year and month in the project configuration"


@dataclass
class ValidationResult:
    """Result of a single pre-flight check."""

    is_valid: bool
    errors: list[str] = field(default_factory=list)
    details: dict[str, str] = field(default_factory=dict)


def check_project_date(year: Any, month: Any) -> ValidationResult:
    if year in (None, "") or month in (None, ""):
        return ValidationResult(False, [MISSING_DATE_MSG])
    if not isinstance(year, str) or not isinstance(month, str):
        return ValidationResult(False, [MALFORMED_DATE_MSG], {"year": repr(year), "month": repr(month)})
    if not YEAR_RE.fullmatch(year) or not MONTH_RE.fullmatch(month):
        return ValidationResult(False, [MALFORMED_DATE_MSG], {"year": year, "month": month})
    return ValidationResult(True)


def _is_upload_cache(status_line: str) -> bool:
    # porcelain v1: "XY path" or "XY old -> new", quoted when unusual characters occur
    path = status_line[3:].split(" -> ")[-1].strip().strip('"')
    return UPLOAD_CACHE_RE.fullmatch(PurePosixPath(path).name) is not None


def check_workspace_clean(cwd: Path) -> ValidationResult:
    """Check that git reports no uncommitted or untracked files under ``cwd``.

    Upload cache files written by publish-assets are not counted.
    """
    try:
        proc = subprocess.run(
            ["git", "status", "--porcelain"],
            cwd=str(cwd),
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            check=False,
        )
    except FileNotFoundError:
        return ValidationResult(False, ["git executable not found"])

    if proc.returncode != 0:
        stderr = proc.stderr.decode("utf-8", errors="replace").strip()
        return ValidationResult(False, [stderr or "git status failed"], {"cwd": str(cwd)})

    changed = [
        line
        for line in proc.stdout.decode("utf-8", errors="replace").splitlines()
        if line.strip() and not _is_upload_cache(line)
    ]
    if changed:
        return ValidationResult(False, [DIRTY_WORKSPACE_MSG], {"changed": str(len(changed))})
    return ValidationResult(True)


def require_project_date(settings: Settings) -> None:
    """Raise ProjectDateError unless projectInitDate is a valid YYYY / MM pair."""
    date = settings.project_init_date
    date_check = check_project_date(date.year, date.month)
    if not date_check.is_valid:
        raise ProjectDateError(date_check.errors[0], date_check.details)


def run_preflight(settings: Settings, cwd: Path) -> None:
    """Run every pre-flight check, raising on the first failure.

    Raises:
        DirtyWorkspaceError: The working tree has uncommitted changes.
        ProjectDateError: projectInitDate is missing or malformed.
    """
    workspace = check_workspace_clean(cwd)
    if not workspace.is_valid:
        message = workspace.errors[0]
        if message != DIRTY_WORKSPACE_MSG:
            message = f"{DIRTY_WORKSPACE_MSG} ({message})"
        raise DirtyWorkspaceError(message, workspace.details)

    require_project_date(settings)

    logger.debug("Pre-flight checks passed for {}", cwd)


__all__ = [
    "ValidationResult",
    "check_project_date",
    "check_workspace_clean",
    "require_project_date",
    "run_preflight",
]
