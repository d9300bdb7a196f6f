# lovelypack/__main__.py
from __future__ import annotations

from lovelypack.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
