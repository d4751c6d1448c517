"""Session statistics for invoice generation.

This module provides a GenerationTracker class that accumulates counters for
the current UI session: single and bulk invoices produced, batches run,
shortfalls reported, failures, and the total amount invoiced.
"""

import threading
from typing import Dict, Any


class GenerationTracker:
    """Track what the generator produced during a session.

    Accumulates counters for:
    - Single invoices and bulk batches
    - Bulk invoices produced and requested
    - Shortfalls and failed runs
    - Gross and tax totals across all invoices
    """

    def __init__(self):
        """Initialize tracker with zero counters."""
        self._lock = threading.Lock()
        self._reset_counters()

    def _reset_counters(self):
        self.single_invoices = 0
        self.bulk_batches = 0
        self.bulk_invoices = 0
        self.bulk_requested = 0
        self.shortfalls = 0
        self.failures = 0
        self.total_amount = 0.0
        self.total_tax = 0.0

    def record_single(self, total_amount: float, tax_amount: float):
        """Record one invoice generated through the single form.

        Args:
            total_amount: Gross amount of the invoice
            tax_amount: CGST + SGST of the invoice
        """
        with self._lock:
            self.single_invoices += 1
            self.total_amount += total_amount
            self.total_tax += tax_amount

    def record_batch(self, requested: int, produced: int, total_amount: float, tax_amount: float):
        """Record a completed bulk run.

        Args:
            requested: Invoice count asked for on the form
            produced: Invoices actually generated
            total_amount: Sum of gross amounts in the batch
            tax_amount: Sum of CGST + SGST in the batch
        """
        with self._lock:
            self.bulk_batches += 1
            self.bulk_requested += max(0, requested)
            self.bulk_invoices += max(0, produced)
            if produced < requested:
                self.shortfalls += 1
            self.total_amount += total_amount
            self.total_tax += tax_amount

    def record_failure(self):
        """Record a generation attempt that raised an error."""
        with self._lock:
            self.failures += 1

    def snapshot(self) -> Dict[str, Any]:
        """Get current session statistics.

        Returns:
            Dictionary with counters and averages
        """
        with self._lock:
            invoices = self.single_invoices + self.bulk_invoices
            avg_amount = self.total_amount / invoices if invoices > 0 else 0.0
            fill_ratio = (
                self.bulk_invoices / self.bulk_requested
                if self.bulk_requested > 0 else 0.0
            )

            return {
                'invoices_generated': invoices,
                'single_invoices': self.single_invoices,
                'bulk_batches': self.bulk_batches,
                'bulk_invoices': self.bulk_invoices,
                'bulk_requested': self.bulk_requested,
                'bulk_fill_ratio': round(fill_ratio, 2),
                'shortfalls': self.shortfalls,
                'failures': self.failures,
                'amounts': {
                    'total_amount': round(self.total_amount, 2),
                    'total_tax': round(self.total_tax, 2),
                    'avg_amount': round(avg_amount, 2)
                }
            }

    def reset(self):
        """Reset all counters to zero (for testing or new sessions)."""
        with self._lock:
            self._reset_counters()


__all__ = ["GenerationTracker"]
