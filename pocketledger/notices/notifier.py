"""
Ledger Notifier

DESIGN DECISION: Every ledger mutation raises a notice. This provides:
1. Feedback for the user (a UI turns notices into toasts)
2. A structured log line for debugging

The notifier:
- Always logs locally through structlog
- Forwards the notice to an optional sink (the UI)
- Gracefully handles sink failures (a broken toast never breaks the ledger)
"""

import logging
from typing import Callable, Optional

import structlog

from pocketledger.config import AppSettings, get_settings
from pocketledger.models.entries import LedgerEntry, TransactionType
from pocketledger.models.notice import (
    Notice,
    NoticeBuilder,
    NoticeType,
    NoticeVariant,
)
from pocketledger.models.reports import ImportReport


def _configure_structlog(json_output: bool = True) -> None:
    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


# Configure structlog for local logging
_configure_structlog()


def setup_logging(settings: Optional[AppSettings] = None) -> None:
    """
    Apply the configured log level and renderer.

    Call once at startup, before anything logs.
    """
    settings = settings or get_settings().app
    logging.basicConfig(format="%(message)s", level=settings.log_level_number)
    logging.getLogger("pocketledger").setLevel(settings.log_level_number)
    _configure_structlog(json_output=settings.log_json)


NoticeSink = Callable[[Notice], None]

_ERROR_NOTICES = {NoticeType.IMPORT_FAILED, NoticeType.PERSISTENCE_FAILED}


class LedgerNotifier:
    """
    Central notice service.

    Sends every notice to:
    1. The structured local log
    2. The sink, if one is attached (e.g. a toast renderer)
    """

    def __init__(
        self,
        sink: Optional[NoticeSink] = None,
    ):
        """
        Initialize notifier.

        Args:
            sink: Callable receiving each notice.
                  If None, notices are only logged.
        """
        self._sink = sink
        self._logger = structlog.get_logger("pocketledger.notices")

    def notify(self, notice: Notice) -> bool:
        """
        Emit a notice.

        Returns True if the sink accepted it (or no sink is attached).
        """
        log_dict = notice.to_log_dict()

        if notice.notice_type in _ERROR_NOTICES:
            self._logger.error("ledger_notice", **log_dict)
        elif notice.variant == NoticeVariant.DESTRUCTIVE:
            self._logger.warning("ledger_notice", **log_dict)
        else:
            self._logger.info("ledger_notice", **log_dict)

        if self._sink:
            try:
                self._sink(notice)
            except Exception as e:
                self._logger.error(
                    "notice_sink_failed",
                    error=str(e),
                    notice_id=str(notice.notice_id),
                )
                return False

        return True

    def entry_added(self, entry: LedgerEntry) -> None:
        """Announce a new entry."""
        self.notify(NoticeBuilder.entry_added(entry))

    def entry_updated(self, entry: LedgerEntry) -> None:
        """Announce an updated entry."""
        self.notify(NoticeBuilder.entry_updated(entry))

    def entry_deleted(self, kind: TransactionType, entry_id: str) -> None:
        """Announce a deletion."""
        self.notify(NoticeBuilder.entry_deleted(kind, entry_id))

    def entries_replaced(
        self,
        kind: TransactionType,
        accepted: int,
        rejected: int,
    ) -> None:
        """Announce that a collection was replaced wholesale."""
        self.notify(NoticeBuilder.entries_replaced(kind, accepted, rejected))

    def import_filtered(self, kind: TransactionType, rejected: int) -> None:
        """Announce that some records were dropped during a replace."""
        self.notify(NoticeBuilder.import_filtered(kind, rejected))

    def import_succeeded(self, report: ImportReport) -> None:
        """Announce a completed backup import."""
        self.notify(NoticeBuilder.import_succeeded(
            accepted=report.total_accepted,
            rejected=report.total_rejected,
        ))

    def import_failed(self, reason: str) -> None:
        """Announce an aborted backup import."""
        self.notify(NoticeBuilder.import_failed(reason))

    def persistence_failed(
        self,
        kind: Optional[TransactionType],
        storage_key: str,
        error_message: str,
    ) -> None:
        """Announce a failed write; in-memory state stays authoritative."""
        self.notify(NoticeBuilder.persistence_failed(kind, storage_key, error_message))
