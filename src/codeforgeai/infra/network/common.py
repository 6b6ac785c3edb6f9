from __future__ import annotations

from codeforgeai import __version__

USER_AGENT = f"CodeforgeAI-Client/{__version__}"
DEFAULT_TIMEOUT = 60
CATALOG_TIMEOUT = 30
