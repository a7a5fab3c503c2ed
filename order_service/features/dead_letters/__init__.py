"""Dead-letter audit feature package."""

from .models import DeadLetterRecord
from .recorder import DeadLetterRecorder
from .repository import DeadLetterRepository, get_dead_letter_repository

__all__ = [
    "DeadLetterRecord",
    "DeadLetterRecorder",
    "DeadLetterRepository",
    "get_dead_letter_repository",
]
