"""
Exception hierarchy for the address verifier.
"""


class VerifierError(Exception):
    """Base class for all verifier errors."""


class ConfigurationError(VerifierError):
    """Invalid pool size, queue capacity or settings value. Fatal before any work starts."""


class RequestConstructionError(VerifierError):
    """The outgoing verification request could not be built."""


class TransportError(VerifierError):
    """The remote endpoint could not be reached (connection, timeout, proxy)."""


class QueueClosedError(VerifierError):
    """Enqueue after close, or close called twice."""
