# dweetr/clients/dweet_client.py

import logging
import time
from typing import Iterator, Optional

import requests

logger = logging.getLogger(__name__)

# =========================
# CONFIGURATION
# =========================

SERVER_URL = "http://127.0.0.1:8000"
REQUEST_TIMEOUT = 10          # seconds, for publish/get
LISTEN_TIMEOUT = 45           # must outlive the server's listen deadline
RETRY_DELAY = 2.0             # pause after a failed listen before retrying


class DweetClientError(Exception):
    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(f"{status_code}: {message}")


# =========================
# DWEET CLIENT
# =========================

class DweetClient:
    def __init__(self, base_url: str = SERVER_URL, session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()

    def _get(self, path: str, params: Optional[dict] = None, timeout: float = REQUEST_TIMEOUT) -> dict:
        resp = self.session.get(f"{self.base_url}{path}", params=params, timeout=timeout)
        if resp.status_code >= 400:
            try:
                message = resp.json().get("message", resp.text)
            except ValueError:
                message = resp.text
            raise DweetClientError(resp.status_code, message)
        return resp.json()

    @staticmethod
    def _auth(auth: Optional[str]) -> dict:
        return {"auth": auth} if auth else {}

    def publish(self, thing: str, private: bool = False, **payload) -> dict:
        """Publish a dweet. Private dweets come back with their token."""
        params = dict(payload)
        if private:
            params["private"] = "1"
        return self._get(f"/dweet/for/{thing}", params=params)

    def get_latest(self, thing: str, auth: Optional[str] = None) -> Optional[dict]:
        return self._get(f"/get/latest/dweet/for/{thing}", params=self._auth(auth))["this"]

    def get_all(self, thing: str, auth: Optional[str] = None) -> list:
        return self._get(f"/get/dweets/for/{thing}", params=self._auth(auth))["this"]

    def history(self, thing: str, auth: Optional[str] = None) -> list:
        return self._get(f"/get/history/for/{thing}", params=self._auth(auth))["this"]

    def listen(self, thing: str, since: int = 0, auth: Optional[str] = None) -> Optional[dict]:
        """One long poll: the next dweet after ``since``, or None on timeout."""
        params = {"since": since, **self._auth(auth)}
        resp = self._get(f"/listen/for/dweets/from/{thing}", params=params, timeout=LISTEN_TIMEOUT)
        return resp["this"]

    def follow(self, thing: str, auth: Optional[str] = None, since: Optional[int] = None) -> Iterator[dict]:
        """
        Yield every new dweet for ``thing`` exactly once, in order.

        Without ``since`` the cursor starts at the latest visible dweet, so
        only dweets published from now on are yielded.
        """
        if since is None:
            latest = self.get_latest(thing, auth=auth)
            since = latest["id"] if latest else 0

        while True:
            try:
                dweet = self.listen(thing, since=since, auth=auth)
            except (requests.RequestException, DweetClientError) as e:
                logger.warning(f"Listen on {thing!r} failed: {e}; retrying")
                time.sleep(RETRY_DELAY)
                continue
            if dweet is None:
                continue
            since = dweet["id"]
            yield dweet


# =========================
# DEMO USAGE
# =========================

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    client = DweetClient()
    print(client.publish("my-thing-name", temperature="21", unit="c"))
    private = client.publish("my-thing-name", private=True, temp="23")
    print(client.get_latest("my-thing-name", auth=private["token"]))
    for d in client.follow("my-thing-name"):
        print(d)
