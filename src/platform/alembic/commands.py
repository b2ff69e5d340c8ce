"""Alembic command shortcuts for project scripts."""

from pathlib import Path
import subprocess
import sys

ALEMBIC_INI = Path(__file__).parent / 'alembic.ini'


def run_alembic(args: list[str]) -> int:
    cmd = ['alembic', '-c', str(ALEMBIC_INI), *args]
    return subprocess.call(cmd)


def upgrade() -> int:
    """Upgrade database to latest migration."""
    return run_alembic(['upgrade', 'head'])


def downgrade() -> int:
    """Downgrade database by one migration."""
    return run_alembic(['downgrade', '-1'])


def make_migration() -> int:
    if len(sys.argv) < 2:
        print("Usage: make-migration 'migration message'")
        return 1
    return run_alembic(['revision', '--autogenerate', '-m', ' '.join(sys.argv[1:])])
