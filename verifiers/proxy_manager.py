"""
Proxy Manager for spreading verification probes across a proxy list.
Loads proxies from file and hands them out round-robin with a per-proxy
minimum reuse interval, formatted for the requests library.
"""

import logging
import time
from typing import Optional, Dict, List, Any
from threading import Lock

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class ProxyManager:
    """
    Manages a list of proxies loaded from a file.
    Supports rotation, authentication, and rate limiting per proxy.
    """

    SUPPORTED_SCHEMES = ('socks5h', 'socks5', 'http', 'https')

    def __init__(self, proxy_file: str, rate_limit_seconds: float = 1.0, scheme: str = 'socks5h'):
        """
        Initialize proxy manager.

        Args:
            proxy_file: Path to file containing proxy list
            rate_limit_seconds: Minimum seconds between requests per proxy (default: 1.0)
            scheme: Proxy URL scheme passed to requests (default: socks5h, DNS resolved by proxy)

        Raises:
            ConfigurationError: If scheme is unsupported or rate_limit_seconds is not a non-negative number
        """
        if scheme not in self.SUPPORTED_SCHEMES:
            raise ConfigurationError(f"Unsupported proxy scheme: {scheme!r}")
        if (isinstance(rate_limit_seconds, bool) or not isinstance(rate_limit_seconds, (int, float))
                or rate_limit_seconds < 0):
            raise ConfigurationError(f"Proxy rate limit must be a non-negative number, got {rate_limit_seconds!r}")

        self.proxy_file = proxy_file
        self.scheme = scheme
        self.proxies: List[Dict[str, Any]] = []
        self.current_index = 0
        self.rate_limit_seconds = rate_limit_seconds
        self.lock = Lock()

        self._load_proxies()

    def _load_proxies(self):
        """Load proxies from file."""
        try:
            with open(self.proxy_file, 'r', encoding='utf-8') as f:
                lines = f.readlines()
        except FileNotFoundError:
            logger.warning(f"Proxy file not found: {self.proxy_file}")
            return
        except OSError as e:
            logger.error(f"Error loading proxies from {self.proxy_file}: {e}")
            return

        for line_num, line in enumerate(lines, 1):
            line = line.strip()

            # Skip empty lines and comments
            if not line or line.startswith('#'):
                continue

            proxy_dict = self._parse_proxy(line)
            if proxy_dict:
                self.proxies.append(proxy_dict)
            else:
                logger.warning(f"Invalid proxy format at line {line_num}: {line}")

        if self.proxies:
            logger.info(f"Loaded {len(self.proxies)} proxies from {self.proxy_file}")
        else:
            logger.warning(f"No valid proxies found in {self.proxy_file}")

    def _parse_proxy(self, proxy_str: str) -> Optional[Dict[str, Any]]:
        """
        Parse proxy string.

        Supported formats:
        - host:port
        - host:port:user:password

        Args:
            proxy_str: Proxy string

        Returns:
            Proxy dictionary with host, port, username, password, and last_used timestamp
        """
        parts = proxy_str.split(':')

        if len(parts) == 2:
            host, port = parts
            username = None
            password = None
        elif len(parts) == 4:
            host, port, username, password = parts
        else:
            return None

        if not host:
            return None

        try:
            port = int(port)
        except ValueError:
            return None

        if not 0 < port < 65536:
            return None

        return {
            'host': host,
            'port': port,
            'username': username,
            'password': password,
            'last_used': 0.0
        }

    def _to_requests_proxies(self, proxy: Dict[str, Any]) -> Dict[str, str]:
        """Format a proxy entry as the `proxies` mapping accepted by requests."""
        if proxy.get('username') and proxy.get('password'):
            url = f"{self.scheme}://{proxy['username']}:{proxy['password']}@{proxy['host']}:{proxy['port']}"
        else:
            url = f"{self.scheme}://{proxy['host']}:{proxy['port']}"
        return {'http': url, 'https': url}

    def get_next_proxy(self) -> Optional[Dict[str, str]]:
        """
        Get next proxy in rotation (round-robin) with rate limiting.
        Waits if every proxy was used too recently.

        Returns:
            requests-style proxies mapping, or None if no proxies are loaded
        """
        if not self.proxies:
            return None

        while True:
            wait_time = 0

            with self.lock:
                for _ in range(len(self.proxies)):
                    proxy = self.proxies[self.current_index]
                    self.current_index = (self.current_index + 1) % len(self.proxies)

                    current_time = time.time()
                    if current_time - proxy['last_used'] >= self.rate_limit_seconds:
                        proxy['last_used'] = current_time
                        return self._to_requests_proxies(proxy)

                # All proxies are rate-limited, find the one available soonest
                oldest_proxy = min(self.proxies, key=lambda p: p['last_used'])
                wait_time = self.rate_limit_seconds - (time.time() - oldest_proxy['last_used'])

            # Sleep outside the lock so other workers can proceed
            if wait_time > 0:
                logger.debug(f"All proxies rate limited, waiting {wait_time:.2f}s")
                time.sleep(wait_time)

    def get_proxy_count(self) -> int:
        """Get number of loaded proxies."""
        return len(self.proxies)

    def is_enabled(self) -> bool:
        """
        Check if proxy manager has valid proxies.

        Returns:
            True if proxies are available, False otherwise
        """
        return len(self.proxies) > 0
