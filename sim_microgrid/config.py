from __future__ import annotations

import os
from pathlib import Path
from typing import Dict


def _load_dotenv(path: str = ".env") -> Dict[str, str]:
    """
    Minimal .env reader: KEY=VALUE lines are added to os.environ without
    overriding variables that are already set.
    Returns a mapping of parsed key/value pairs.
    """
    env_path = Path(path)
    if not env_path.exists():
        return {}

    parsed: Dict[str, str] = {}
    for line in env_path.read_text(encoding="utf-8").splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#") or "=" not in stripped:
            continue
        key, value = stripped.split("=", 1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        os.environ.setdefault(key, value)
        parsed[key] = value
    return parsed


_load_dotenv()


def get_database_url() -> str:
    """
    Determine the SQLAlchemy database URL.

    ``POSTGRES_DSN`` wins when set; otherwise a SQLite file at
    ``SIM_MICROGRID_DB_PATH`` (relative paths resolve against the working
    directory).

    Returns:
        Database connection string compatible with SQLAlchemy.
    """
    dsn = os.getenv("POSTGRES_DSN")
    if dsn:
        return dsn

    db_path = Path(os.getenv("SIM_MICROGRID_DB_PATH", "sim_microgrid.db")).expanduser()
    if not db_path.is_absolute():
        db_path = Path.cwd() / db_path
    db_path.parent.mkdir(parents=True, exist_ok=True)
    return f"sqlite+pysqlite:///{db_path}"


def get_results_dir() -> Path:
    """Directory receiving reports and exported comparisons."""
    return Path(os.getenv("SIM_MICROGRID_RESULTS_DIR", "results")).expanduser()


def api_saves_outputs() -> bool:
    """Whether API-triggered comparisons also write reports (``SIM_MICROGRID_API_SAVE_OUTPUTS``)."""
    return os.getenv("SIM_MICROGRID_API_SAVE_OUTPUTS", "").strip().lower() in {"1", "true", "yes"}
