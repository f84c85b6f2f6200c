from __future__ import annotations

import os
from pathlib import Path
from typing import List, Optional

_DEFAULT_CORS_ORIGINS = "http://localhost:3000,http://127.0.0.1:3000"


def levels_file() -> Optional[Path]:
    raw = os.getenv("FRACTION_LEVELS_FILE", "").strip()
    return Path(raw) if raw else None


def admin_token() -> str:
    return os.getenv("ADMIN_TOKEN") or ""


def cors_origins() -> List[str]:
    raw = os.getenv("CORS_ORIGINS", _DEFAULT_CORS_ORIGINS)
    return [o.strip() for o in raw.split(",") if o.strip()]
