#!/usr/bin/env python3
"""
Run the azarchgen CLI from a source checkout without installing it.

    python archgen.py generate architecture.json -o architecture.drawio
    python archgen.py list-types --category networking
"""

import sys
from pathlib import Path

SRC_PATH = Path(__file__).resolve().parent / "src"


def run() -> None:
    """Put ``src`` on the import path and hand over to the click entry point."""
    if str(SRC_PATH) not in sys.path:
        sys.path.insert(0, str(SRC_PATH))
    try:
        from azarchgen.cli import main
    except ImportError as e:
        # click or rich may be the missing module, so report with plain stderr
        sys.stderr.write(f"Cannot import azarchgen from {SRC_PATH}: {e}\n")
        sys.stderr.write("Install the dependencies with: pip install -e .\n")
        sys.exit(1)
    main()


if __name__ == "__main__":
    run()
