"""
Gmail address verification package with modular components.
"""

from .dispatcher import Dispatcher, verify_addresses
from .exceptions import (
    VerifierError,
    ConfigurationError,
    RequestConstructionError,
    TransportError,
    QueueClosedError
)
from .probe_client import GmailProbeClient
from .proxy_manager import ProxyManager
from .reporting import Reporter, ConsoleReporter
from .task_queue import TaskQueue, CLOSED
from .verdict import Outcome, Verdict
from .worker import VerificationWorker

__version__ = '0.1'

__all__ = [
    'Dispatcher',
    'verify_addresses',
    'VerifierError',
    'ConfigurationError',
    'RequestConstructionError',
    'TransportError',
    'QueueClosedError',
    'GmailProbeClient',
    'ProxyManager',
    'Reporter',
    'ConsoleReporter',
    'TaskQueue',
    'CLOSED',
    'Outcome',
    'Verdict',
    'VerificationWorker'
]
