"""Base HTTP client for the platform APIs."""

import logging
from typing import Any, Dict, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..exceptions import ClientError

logger = logging.getLogger(__name__)


class ApiClient:
    """
    Thin JSON client over a requests session.

    Handles:
    - Token authentication via a service specific header
    - Transport level retries on throttling and server errors
    - Conversion of HTTP errors to ClientError
    """

    def __init__(
        self,
        base_url: str,
        token: str,
        auth_header: str = "X-StorageApi-Token",
        run_id: Optional[str] = None,
        max_retries: int = 3,
        backoff_factor: float = 2.0,
        timeout: float = 120.0,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize the client.

        Args:
            base_url: Base URL of the API
            token: Token sent in the authentication header
            auth_header: Header name for authentication
            run_id: Run ID propagated to the platform for tracing
            max_retries: Transport retries on 429/5xx responses
            backoff_factor: Backoff factor between transport retries
            timeout: Request timeout in seconds
            session: Custom requests session
        """
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.auth_header = auth_header
        self.run_id = run_id
        self.timeout = timeout
        self._max_retries = max_retries
        self._backoff_factor = backoff_factor
        self._session = session or self._create_session()

    def _create_session(self) -> requests.Session:
        """Create a requests session with authentication and retry logic."""
        session = requests.Session()

        retries = Retry(
            total=self._max_retries,
            backoff_factor=self._backoff_factor,
            status_forcelist=[429, 500, 502, 503, 504],
        )
        adapter = HTTPAdapter(max_retries=retries)
        session.mount("https://", adapter)
        session.mount("http://", adapter)

        session.headers[self.auth_header] = self.token
        if self.run_id:
            session.headers["X-KBC-RunId"] = self.run_id

        return session

    def _url(self, path: str) -> str:
        if path.startswith("http://") or path.startswith("https://"):
            return path
        if not path:
            return self.base_url
        return f"{self.base_url}/{path.lstrip('/')}"

    def request(self, method: str, path: str, **kwargs) -> Any:
        """
        Send a request and decode the JSON response.

        Raises:
            ClientError: On connection failures and non-2xx responses
        """
        url = self._url(path)
        logger.debug(f"{method} {url}")

        try:
            response = self._session.request(method, url, timeout=self.timeout, **kwargs)
            response.raise_for_status()
        except requests.exceptions.HTTPError as e:
            raise ClientError(
                self._error_message(e.response),
                status_code=e.response.status_code,
                response=e.response,
            ) from e
        except requests.exceptions.RequestException as e:
            raise ClientError(f"Request to {url} failed: {e}") from e

        if not response.text:
            return {}
        return response.json()

    def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return self.request("GET", path, params=params)

    def post(self, path: str, json: Optional[Any] = None, data: Optional[Any] = None) -> Any:
        return self.request("POST", path, json=json, data=data)

    def put(self, path: str, json: Optional[Any] = None, data: Optional[Any] = None) -> Any:
        return self.request("PUT", path, json=json, data=data)

    @staticmethod
    def _error_message(response: requests.Response) -> str:
        """Extract a readable error message from an error response."""
        try:
            error_data = response.json()
        except ValueError:
            return response.text or f"HTTP {response.status_code}"

        if isinstance(error_data, dict):
            return str(error_data.get("message") or error_data.get("error") or error_data)
        return str(error_data)
