"""HTTP fetcher: ensure a local copy of a remote JSON document exists.

Existence of the destination file is the only "already fetched" marker, which
is what makes interrupted runs resumable. Bodies are streamed to a uniquely named
`.part` sibling and renamed into place, so a destination is either complete or absent.
"""

from __future__ import annotations

import logging
import os
import tempfile
import time
from pathlib import Path
from typing import Dict, Optional

import httpx

from .config import DEFAULT_USER_AGENT, Settings
from .errors import EmptyResponseError, FetchError

logger = logging.getLogger(__name__)


def build_headers(user_agent: str = DEFAULT_USER_AGENT) -> Dict[str, str]:
    """The fixed header set sent with every request."""
    return {
        "Accept": "application/json, text/plain, */*",
        "Accept-Encoding": "gzip, deflate",
        "Cache-Control": "no-cache",
        "Connection": "keep-alive",
        "User-Agent": user_agent,
    }


class Fetcher:
    """Download remote documents into local files, at most once each.

    The underlying `httpx.Client` is shared by all pool workers (it is
    thread-safe). Pass one in to control transport or timeouts; otherwise the
    fetcher creates and owns its own.
    """

    def __init__(
        self,
        base_url: str,
        client: Optional[httpx.Client] = None,
        delay_s: float = 0.5,
        timeout_s: float = 30.0,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._delay_s = delay_s
        self._headers = build_headers(user_agent)
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout_s)

    @classmethod
    def from_settings(cls, settings: Settings, client: Optional[httpx.Client] = None) -> "Fetcher":
        return cls(
            settings.base_url,
            client=client,
            delay_s=settings.request_delay,
            timeout_s=settings.request_timeout,
            user_agent=settings.user_agent,
        )

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "Fetcher":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def ensure(self, destination: Path, remote_path: str) -> bool:
        """Make sure `destination` holds the document at `remote_path`.

        Returns:
            True if the document was downloaded, False if it was already present.

        Raises:
            FetchError: Non-2xx status (message carries the status text).
            EmptyResponseError: Zero content length or zero bytes received.
            httpx.HTTPError: Network-level failure.
        """
        destination = Path(destination)
        if destination.exists():
            logger.debug("Already present: %s", destination)
            return False

        logger.info("Downloading: %s", remote_path)
        # one temp file per call; concurrent jobs may share a destination
        fd, tmp_name = tempfile.mkstemp(dir=destination.parent, prefix=destination.name + ".", suffix=".part")
        os.close(fd)
        partial = Path(tmp_name)
        try:
            written = self._stream_to(partial, remote_path)
            if written == 0:
                raise EmptyResponseError(f"Empty response: {remote_path}")
            os.replace(partial, destination)
        finally:
            partial.unlink(missing_ok=True)

        time.sleep(self._delay_s)
        return True

    def _stream_to(self, partial: Path, remote_path: str) -> int:
        """GET `remote_path` and write the (decompressed) body to `partial`."""
        url = self._base_url + remote_path
        with self._client.stream("GET", url, headers=self._headers) as resp:
            if not resp.is_success:
                raise FetchError(f"Error downloading {remote_path}: {resp.status_code} {resp.reason_phrase}")
            if resp.headers.get("Content-Length") == "0":
                raise EmptyResponseError(f"Empty response: {remote_path}")

            # iter_bytes() undoes gzip/deflate content-encoding
            written = 0
            with open(partial, "wb") as fh:
                for chunk in resp.iter_bytes():
                    fh.write(chunk)
                    written += len(chunk)
        return written
