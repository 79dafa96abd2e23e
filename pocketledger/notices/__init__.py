"""User-facing notices package."""

from pocketledger.notices.notifier import LedgerNotifier, NoticeSink, setup_logging

__all__ = ["LedgerNotifier", "NoticeSink", "setup_logging"]
