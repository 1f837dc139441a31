"""Convenience launcher for the RestFiles development server.

Usage:
    Windows: python start_dev.py
    Linux:   python3 start_dev.py

Press Ctrl+C to stop. The script detects a virtual environment and uses it
to run Uvicorn with --reload. Run from the repository root.
"""

from __future__ import annotations

import os
import subprocess
import sys
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parent
BACKEND_DIR = ROOT_DIR / "backend"

VENV_PYTHON = ROOT_DIR / ".venv" / ("Scripts/python.exe" if os.name == "nt" else "bin/python")

USE_COLOR = sys.stdout.isatty() and not os.environ.get("NO_COLOR")
COLORS = {"info": "\033[36m", "start": "\033[32m", "error": "\033[31m"}
RESET = "\033[0m"


def log(level: str, msg: str) -> None:
    if USE_COLOR:
        print(f"{COLORS.get(level, '')}[{level}]{RESET} {msg}")
    else:
        print(f"[{level}] {msg}")


def resolve_python() -> str:
    """Prefer the project virtualenv, fall back to the running interpreter."""
    if VENV_PYTHON.exists():
        return str(VENV_PYTHON)
    log("info", "No venv found, using system Python")
    return sys.executable


def check_dependencies(python: str) -> bool:
    """Verify the server stack is importable."""
    result = subprocess.run(
        [python, "-c", "import fastapi, uvicorn, multipart, pydantic_settings"],
        capture_output=True,
        text=True,
    )
    if result.returncode != 0:
        log("error", f"Missing dependencies. Run: cd {ROOT_DIR} && pip install -e '.[dev]'")
        return False
    return True


def main() -> int:
    python = resolve_python()
    if not check_dependencies(python):
        return 1

    env = dict(os.environ)
    env.setdefault("RESTFILES_DEBUG", "true")
    env.setdefault("RESTFILES_LOG_LEVEL", "INFO")
    env.setdefault("RESTFILES_ENVIRONMENT", "development")

    port = env.get("RESTFILES_PORT", "8000")
    cmd = [python, "-m", "uvicorn", "restfiles.main:app", "--reload", "--port", port]
    log("start", " ".join(cmd))
    log("info", f"Files API at http://localhost:{port}/api/files, docs at /docs")

    try:
        # Ctrl+C reaches uvicorn directly since it shares our process group
        return subprocess.run(cmd, cwd=BACKEND_DIR, env=env).returncode
    except KeyboardInterrupt:
        log("info", "Stopped")
        return 0


if __name__ == "__main__":
    raise SystemExit(main())
