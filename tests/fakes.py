import requests


class FakeResponse:
    def __init__(self, status_code=200, body=None, *, invalid_json=False, reason="OK"):
        self.status_code = status_code
        self._body = body
        self._invalid_json = invalid_json
        self.reason = reason
        self.content = b"" if body is None and not invalid_json else b"{}"
        self.text = "<html>" if invalid_json else ""

    @property
    def ok(self):
        return 200 <= self.status_code < 400

    def json(self):
        if self._invalid_json:
            raise ValueError("invalid json")
        return self._body


class FakeSession:
    """Substitui requests.Session: devolve respostas prontas e registra as chamadas."""

    def __init__(self, *responses, error: Exception | None = None):
        self.responses = list(responses)
        self.error = error
        self.calls = []

    def _next(self):
        if self.error is not None:
            raise self.error
        if len(self.responses) > 1:
            return self.responses.pop(0)
        return self.responses[0]

    def get(self, url, headers=None, timeout=None):
        self.calls.append({"method": "GET", "url": url, "headers": headers, "timeout": timeout})
        return self._next()

    def request(self, method, url, json=None, headers=None, timeout=None):
        self.calls.append({"method": method, "url": url, "json": json, "headers": headers, "timeout": timeout})
        return self._next()


def bcb_response(valor="5.0000"):
    return FakeResponse(200, [{"data": "18/12/2025", "valor": valor}])


def connection_error():
    return requests.ConnectionError("rede indisponível")
