"""College directory search, filter synchronisation and result caching."""

__version__ = "0.1.0"
