from __future__ import annotations

"""
Network Communication Infrastructure.

Shared HTTP constants for the model backends.
"""

from codeforgeai.infra.network.common import CATALOG_TIMEOUT, DEFAULT_TIMEOUT, USER_AGENT

__all__ = [
    "USER_AGENT",
    "DEFAULT_TIMEOUT",
    "CATALOG_TIMEOUT",
]
