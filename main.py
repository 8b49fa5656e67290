"""Development entrypoint for the Nexus Dominion tools."""

from __future__ import annotations

from dominion.main import main

if __name__ == "__main__":
    raise SystemExit(main())
