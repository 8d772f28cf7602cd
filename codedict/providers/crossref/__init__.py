from .client import CrossRefClient, CrossRefMapping, parse_crossref_csv

__all__ = ["CrossRefClient", "CrossRefMapping", "parse_crossref_csv"]
