"""Execution script.

Why it exists:
- Lets the CLI run with `python -m main` during development.
- Keeps a simple entrypoint next to the installed `wsl2backup` script.
"""

from __future__ import annotations

import sys

# wsl.exe output is decoded to text that may not fit the console code page
# (cp1252 vs utf-8) when printed by Rich.
if sys.platform == "win32":
    sys.stdout.reconfigure(encoding="utf-8")
    sys.stderr.reconfigure(encoding="utf-8")

from cli.main import run


def main() -> None:
    run()


if __name__ == "__main__":
    main()
