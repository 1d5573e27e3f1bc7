"""
HTTP access to the per-platform posting routes.
"""
from typing import Dict, List, Optional, Tuple

import requests

from ..logging_config import posting_logger
from .errors import PlatformPostError


class PlatformTransport:
    """POSTs to `{base_url}{path}` and turns error answers into PlatformPostError"""

    def __init__(self, base_url: str, timeout: int = 120, session: requests.Session = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    @staticmethod
    def _parse(response: requests.Response, failure_message: str) -> Dict:
        try:
            data = response.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {"data": data}

        if not response.ok:
            raise PlatformPostError(data.get("error") or failure_message, response.status_code)
        return data

    def post_json(self, path: str, payload: Dict, failure_message: str, timeout: int = None) -> Dict:
        posting_logger.debug("Platform request", path=path)
        try:
            response = self.session.post(self._url(path), json=payload, timeout=timeout or self.timeout)
        except requests.RequestException as e:
            raise PlatformPostError(f"{failure_message}: {e}") from e
        return self._parse(response, failure_message)

    def post_multipart(
        self,
        path: str,
        fields: Dict,
        files: List[Tuple[str, Tuple[str, bytes, str]]],
        failure_message: str,
        timeout: Optional[int] = None,
    ) -> Dict:
        posting_logger.debug("Platform multipart request", path=path, files=len(files))
        try:
            response = self.session.post(
                self._url(path),
                data=fields,
                files=files,
                timeout=timeout or self.timeout,
            )
        except requests.RequestException as e:
            raise PlatformPostError(f"{failure_message}: {e}") from e
        return self._parse(response, failure_message)
