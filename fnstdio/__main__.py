from __future__ import annotations

from fnstdio.cli import main

raise SystemExit(main())
