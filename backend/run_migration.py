#!/usr/bin/env python3
"""Run an Alembic command against the kanban database.

    python run_migration.py                 # upgrade head
    python run_migration.py downgrade -1
    python run_migration.py current
"""
from __future__ import annotations

import os
import subprocess
import sys

BACKEND_DIR = os.path.dirname(os.path.abspath(__file__))


def alembic_command(argv: list[str]) -> list[str]:
    return ["alembic", *(argv or ["upgrade", "head"])]


def main(argv: list[str]) -> int:
    if not os.environ.get("DATABASE_URL") and not os.path.exists(os.path.join(BACKEND_DIR, ".env")):
        print("DATABASE_URL is not set and no backend/.env was found.")
        return 1

    command = alembic_command(argv)
    try:
        result = subprocess.run(command, cwd=BACKEND_DIR, check=True, capture_output=True, text=True)
    except subprocess.CalledProcessError as e:
        print(f"{' '.join(command[1:])} failed!")
        print(e.stderr)
        return 1
    except FileNotFoundError:
        print("Alembic not found. Install the project first: pip install -e .")
        return 1

    print(f"{' '.join(command[1:])} finished.")
    print(result.stdout or result.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
