"""Run configuration model."""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..files.paths import normalize_rel_path


class BackupConfig(BaseModel):
    """Settings for one backup run.

    Keys may be spelled with hyphens (``projects-dir``) as on the command
    line, or with underscores.
    """

    model_config = ConfigDict(
        extra="forbid",
        populate_by_name=True,
        alias_generator=lambda name: name.replace("_", "-"),
    )

    projects_dir: Path
    backup_dir: Path
    remote_branch: str = "origin"
    force_include: list[str] = Field(default_factory=list)
    dry_run: bool = False
    compare_permissions: bool = False

    @field_validator("projects_dir", "backup_dir", mode="before")
    @classmethod
    def _expand_home(cls, value: object) -> object:
        if isinstance(value, (str, Path)):
            return Path(value).expanduser()
        return value

    @field_validator("remote_branch")
    @classmethod
    def _check_remote(cls, value: str) -> str:
        value = value.strip()
        if not value or any(ch.isspace() for ch in value):
            raise ValueError(f"invalid remote name: {value!r}")
        return value

    @field_validator("force_include")
    @classmethod
    def _check_force_include(cls, value: list[str]) -> list[str]:
        seen: dict[str, None] = {}
        for raw in value:
            rel_path = normalize_rel_path(raw)
            if not rel_path:
                continue
            if os.path.isabs(rel_path) or rel_path.startswith(("/", "\\")):
                raise ValueError(f"force-include path must be relative: {raw}")
            if rel_path == os.pardir or rel_path.startswith(os.pardir + os.sep):
                raise ValueError(f"force-include path escapes the project: {raw}")
            seen.setdefault(rel_path, None)
        return list(seen)
