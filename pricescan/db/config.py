"""
Environment loading and catalog database URL resolution.
"""

from __future__ import annotations

import os
from pathlib import Path

ENV_FILES = (".env", ".env.local")
DATABASE_URL_VARIABLES = ("DATABASE_URL", "LOCAL_DATABASE_URL")

_PSYCOPG_SCHEMES = {
    "postgres://": "postgresql+psycopg://",
    "postgresql://": "postgresql+psycopg://",
}


def _parse_env_line(raw_line: str) -> tuple[str, str] | None:
    line = raw_line.strip()
    if line.startswith("export "):
        line = line[len("export ") :].lstrip()
    if not line or line.startswith("#") or "=" not in line:
        return None
    key, value = line.split("=", 1)
    key = key.strip()
    if not key:
        return None
    return key, value.strip().strip('"').strip("'")


def load_env_files(project_root: Path | None = None) -> None:
    """
    Populate os.environ from `.env` then `.env.local` in the working directory.

    Variables already present in the process environment win.
    """

    root = project_root or Path.cwd()
    for filename in ENV_FILES:
        env_path = root / filename
        if not env_path.is_file():
            continue
        for raw_line in env_path.read_text(encoding="utf-8").splitlines():
            parsed = _parse_env_line(raw_line)
            if parsed is not None:
                os.environ.setdefault(*parsed)


def normalize_postgres_url(url: str) -> str:
    """
    Point bare postgres URLs at the psycopg 3 driver; other URLs pass through.
    """

    for prefix, replacement in _PSYCOPG_SCHEMES.items():
        if url.startswith(prefix):
            return replacement + url[len(prefix) :]
    return url


def resolve_database_url() -> str:
    """
    First non-empty of DATABASE_URL, LOCAL_DATABASE_URL.

    Raises RuntimeError when neither is set.
    """

    load_env_files()
    for name in DATABASE_URL_VARIABLES:
        value = (os.getenv(name) or "").strip()
        if value:
            return normalize_postgres_url(value)

    raise RuntimeError(
        "No catalog database configured. Set DATABASE_URL or LOCAL_DATABASE_URL, "
        "or pass --catalog-json."
    )
