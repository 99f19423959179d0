"""Mail Topic Tracker - sort a mailbox into per-topic Excel reports."""

__version__ = "0.1.0"
