"""Provider integrations.

This package contains the two external sources the registry is synced from.
"""

from . import crossref as crossref  # re-export namespace
from . import fpl as fpl  # re-export namespace

__all__ = ["crossref", "fpl"]
