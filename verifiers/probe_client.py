"""
HTTP probe client for the Gmail gxlu endpoint.

Gmail sets a tracking cookie on the gxlu endpoint only when the queried
address resolves to a real mailbox, so the presence of a Set-Cookie response
header is used as the existence signal.
"""

import requests
from http.cookiejar import DefaultCookiePolicy
from typing import Dict, Optional, TYPE_CHECKING
import logging

from .exceptions import RequestConstructionError, TransportError
from .verdict import Outcome, Verdict

if TYPE_CHECKING:
    from .proxy_manager import ProxyManager

logger = logging.getLogger(__name__)


class GmailProbeClient:
    """
    Issues one GET per address and classifies the response.
    NEVER raises from verify() - request failures become ERROR verdicts.
    """

    API_BASE_URL = "https://mail.google.com/mail/gxlu"
    DEFAULT_TIMEOUT = 15

    # Browser-like headers so the request is not rejected as scripted traffic
    DEFAULT_HEADERS = {
        'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8',
        'User-Agent': 'Mozilla/5.0 (Windows NT 6.1; Win64; x64) AppleWebKit/537.36 '
                      '(KHTML, like Gecko) Chrome/56.0.2924.87 Safari/537.36',
        'Accept-Encoding': 'gzip, deflate, sdch, br',
        'Accept-Language': 'en-US,en;q=0.8',
    }

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
        headers: Optional[Dict[str, str]] = None,
        proxy_manager: Optional['ProxyManager'] = None
    ):
        """
        Initialize probe client.

        Args:
            base_url: Endpoint to query (default: Gmail gxlu endpoint)
            timeout: Per-request timeout in seconds
            headers: Request headers (default: browser-like header set)
            proxy_manager: Optional ProxyManager instance for proxy rotation
        """
        self.base_url = base_url or self.API_BASE_URL
        self.timeout = timeout
        self.headers = dict(headers) if headers else dict(self.DEFAULT_HEADERS)
        self.proxy_manager = proxy_manager
        self.session = requests.Session()
        # Refuse every cookie so nothing carries over from one probe to the next
        self.session.cookies.set_policy(DefaultCookiePolicy(allowed_domains=[]))

    def verify(self, address: str) -> Verdict:
        """
        Verify a single address.

        Args:
            address: Email address, passed through to the remote service as-is

        Returns:
            Verdict with outcome VALID, INVALID or ERROR
        """
        try:
            has_cookie = self._probe(address)
        except RequestConstructionError as e:
            logger.error(f"Error creating verification request for {address}: {e}")
            return Verdict(address, Outcome.ERROR, str(e))
        except TransportError as e:
            logger.error(f"Error verifying email address {address}: {e}")
            return Verdict(address, Outcome.ERROR, str(e))

        if has_cookie:
            # Gmail has disclosed that the address exists
            return Verdict(address, Outcome.VALID)
        return Verdict(address, Outcome.INVALID)

    def _probe(self, address: str) -> bool:
        """
        Send the verification request.

        Returns:
            True if the response set one or more cookies

        Raises:
            RequestConstructionError: If the request could not be prepared
            TransportError: If the request could not be completed
        """
        prepared = self._build_request(address)

        proxies = None
        if self.proxy_manager and self.proxy_manager.is_enabled():
            proxies = self.proxy_manager.get_next_proxy()

        logger.debug(f"Issuing query for {address}")

        try:
            response = self.session.send(
                prepared,
                timeout=self.timeout,
                proxies=proxies,
                stream=True
            )
        except requests.exceptions.Timeout as e:
            raise TransportError(f"Timeout after {self.timeout}s: {e}") from e
        except requests.exceptions.ProxyError as e:
            raise TransportError(f"Proxy error: {e}") from e
        except requests.exceptions.ConnectionError as e:
            raise TransportError(f"Connection error: {e}") from e
        except requests.exceptions.RequestException as e:
            raise TransportError(f"Request error: {e}") from e

        # Only headers are inspected; the body is never read
        with response:
            logger.debug(f"Response for {address}: HTTP {response.status_code}")
            return bool(response.headers.get('Set-Cookie'))

    def _build_request(self, address: str) -> requests.PreparedRequest:
        """Prepare the GET request for one address."""
        request = requests.Request(
            'GET',
            self.base_url,
            params={'email': address},
            headers=self.headers
        )
        try:
            return self.session.prepare_request(request)
        except (requests.exceptions.RequestException, ValueError) as e:
            raise RequestConstructionError(str(e)) from e

    def close(self):
        """Release the underlying HTTP session."""
        self.session.close()
