from __future__ import annotations

from zipbox.cli.main import main as _cli_main

if __name__ == "__main__":
    raise SystemExit(_cli_main())
