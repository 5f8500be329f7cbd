"""
Reporting sinks that receive verdicts from the workers.
"""

from abc import ABC, abstractmethod
from typing import Dict, TextIO, Optional
import sys
import threading

from .verdict import Outcome, Verdict


class Reporter(ABC):
    """Interface for verdict sinks. Implementations must be thread-safe."""

    @abstractmethod
    def report(self, verdict: Verdict) -> None:
        """Receive one verdict. Called concurrently from worker threads."""


class ConsoleReporter(Reporter):
    """
    Writes one colorized line per verdict to a text stream.
    Writes are serialized so lines from different workers never interleave.
    """

    GREEN = '\033[32m'
    RED = '\033[31m'
    YELLOW = '\033[33m'
    RESET = '\033[0m'

    GLYPHS = {
        Outcome.VALID: (GREEN, '✓'),
        Outcome.INVALID: (RED, '⨯'),
        Outcome.ERROR: (YELLOW, '!'),
    }

    def __init__(self, stream: Optional[TextIO] = None, use_color: Optional[bool] = None):
        """
        Initialize console reporter.

        Args:
            stream: Output stream (default: sys.stdout)
            use_color: Emit ANSI colors (default: only when stream is a terminal)
        """
        self.stream = stream or sys.stdout
        if use_color is None:
            use_color = hasattr(self.stream, 'isatty') and self.stream.isatty()
        self.use_color = use_color
        self._lock = threading.Lock()
        self._counts: Dict[Outcome, int] = {outcome: 0 for outcome in Outcome}

    def report(self, verdict: Verdict) -> None:
        line = self.format_line(verdict)
        with self._lock:
            self._counts[verdict.outcome] += 1
            self.stream.write(line + '\n')
            self.stream.flush()

    def format_line(self, verdict: Verdict) -> str:
        color, glyph = self.GLYPHS[verdict.outcome]
        if verdict.outcome is Outcome.ERROR:
            message = f"{verdict.address} could not be verified: {verdict.detail}"
        else:
            message = f"{verdict.address} is {verdict.outcome.value}"

        if self.use_color:
            return f"{color}{glyph:>4}{self.RESET} {message}"
        return f"{glyph:>4} {message}"

    def get_counts(self) -> Dict[str, int]:
        """Outcome tallies keyed by outcome name."""
        with self._lock:
            return {outcome.value: count for outcome, count in self._counts.items()}
