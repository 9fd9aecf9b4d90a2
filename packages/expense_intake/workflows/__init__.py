"""High-level workflows composing analysis, review and persistence."""

from .scan_flow import ScanOutcome, scan_receipt, scan_receipt_file

__all__ = ["ScanOutcome", "scan_receipt", "scan_receipt_file"]
