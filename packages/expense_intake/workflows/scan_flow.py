# ruff: noqa: I001
"""Workflow orchestrator for the receipt-scan flow.

Composes image loading, the analysis backend, the editable batch and the
store behind one call. The interactive part is injected as a ``review``
callback so the same flow serves the CLI and tests.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import date
from os import PathLike
from pathlib import Path

from ..logging_setup import get_logger
from ..receipt_analyzer import guess_mime_type, make_analyzer
from ..reconcile import BatchReconciler, CommitResult, Empty, Failed, ImageAnalyzer, Ready
from ..store import ExpenseStore

_logger = get_logger("expense_intake.workflows.scan_flow")

type ReviewCallback = Callable[[BatchReconciler], bool]
"""Inspect/edit the ``Ready`` batch; return ``True`` to commit, ``False`` to cancel."""


@dataclass(frozen=True, slots=True)
class ScanOutcome:
    """What happened to one scanned image.

    Exactly one of these holds: ``failure`` is set (the scan failed),
    ``cancelled`` is true (the user discarded the batch), or ``results``
    holds one :class:`CommitResult` per committed item.
    """

    results: tuple[CommitResult, ...] = ()
    failure: str | None = None
    cancelled: bool = False

    @property
    def inserted_count(self) -> int:
        return sum(1 for r in self.results if r.ok)


def scan_receipt(
    image_bytes: bytes,
    store: ExpenseStore,
    *,
    analyzer: ImageAnalyzer,
    review: ReviewCallback | None = None,
    today: Callable[[], date] = date.today,
    on_progress: Callable[[str], None] | None = None,
) -> ScanOutcome:
    """Analyze one image, let ``review`` edit the batch, then commit it.

    Without a ``review`` callback every decoded item is committed as-is. A
    failed scan never touches the store.
    """

    reconciler = BatchReconciler(today=today)
    state = reconciler.scan(image_bytes, analyzer)

    if isinstance(state, Failed):
        _logger.warning("Receipt scan failed: %s", state.message)
        return ScanOutcome(failure=state.message)
    assert isinstance(state, Ready)

    if on_progress:
        on_progress(f"Found {len(state.items)} item(s).")

    if review is not None and not review(reconciler):
        if not isinstance(reconciler.state, Empty):
            reconciler.cancel()
        if on_progress:
            on_progress("Discarded the scanned batch.")
        return ScanOutcome(cancelled=True)

    results = reconciler.commit(store)
    outcome = ScanOutcome(results=tuple(results))
    if on_progress:
        on_progress(f"Saved {outcome.inserted_count} of {len(results)} item(s).")
    return outcome


def scan_receipt_file(
    image_path: str | PathLike[str],
    store: ExpenseStore,
    *,
    analyzer: ImageAnalyzer | None = None,
    review: ReviewCallback | None = None,
    today: Callable[[], date] = date.today,
    on_progress: Callable[[str], None] | None = None,
) -> ScanOutcome:
    """End-to-end: image file → analysis → decode → review → commit.

    Parameters
    ----------
    image_path:
        Receipt image on disk. Its suffix selects the MIME type.
    store:
        Destination for committed records.
    analyzer:
        ``bytes -> raw text`` backend. Defaults to the OpenAI analyzer.
    review:
        Optional callback run while the batch is ``Ready``; return ``False``
        to discard the batch.
    on_progress:
        Optional callable to receive short status lines (e.g., ``print``).
    """

    path = Path(image_path)
    image_bytes = path.read_bytes()
    if analyzer is None:
        analyzer = make_analyzer(mime_type=guess_mime_type(path.name))
    if on_progress:
        on_progress(f"Analyzing {path.name} ...")
    return scan_receipt(
        image_bytes,
        store,
        analyzer=analyzer,
        review=review,
        today=today,
        on_progress=on_progress,
    )


__all__ = ["ReviewCallback", "ScanOutcome", "scan_receipt", "scan_receipt_file"]
