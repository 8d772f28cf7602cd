"""Fantasy Premier League bootstrap provider.

Pydantic v2 models for the ``elements`` and ``teams`` arrays of the
bootstrap payload plus the async client that fetches it.
"""

from .types import BootstrapSnapshot, PlayerElement, TeamEntry
from .client import FPLClient

__all__ = [
    "BootstrapSnapshot",
    "PlayerElement",
    "TeamEntry",
    "FPLClient",
]
