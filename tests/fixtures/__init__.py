"""Test fixtures for pytest.

This module re-exports commonly used test helpers for easier importing.
"""

from .messaging import FakeDelivery, RecordingSink, RetryLoop, dead_letter

__all__ = [
    "FakeDelivery",
    "RecordingSink",
    "RetryLoop",
    "dead_letter",
]
