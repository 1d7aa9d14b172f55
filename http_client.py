# http_client.py - small urllib wrapper shared by the token, connector and sensor calls
import json
import urllib.error
import urllib.request
from typing import NamedTuple, Optional


class HttpResponse(NamedTuple):
    status: int
    body: bytes

    def json(self):
        return json.loads(self.body.decode("utf-8"))


def request(url: str, method: str = "GET", data: Optional[bytes] = None,
            headers: Optional[dict] = None, timeout: float = 10) -> HttpResponse:
    """Perform an HTTP request and return (status, body).

    Error statuses are returned as responses, not raised. Connection
    failures and timeouts still raise urllib.error.URLError / OSError.
    """
    req = urllib.request.Request(url, data=data, headers=headers or {}, method=method)
    try:
        with urllib.request.urlopen(req, timeout=timeout) as resp:
            return HttpResponse(resp.status, resp.read())
    except urllib.error.HTTPError as e:
        try:
            body = e.read()
        finally:
            e.close()
        return HttpResponse(e.code, body)
