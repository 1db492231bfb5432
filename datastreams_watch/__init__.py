"""Terminal watcher for signed Data Streams market-data reports."""

__version__ = "0.1.0"
