from __future__ import annotations

import logging
import time
from collections import deque
from dataclasses import dataclass
from threading import Lock

from flask import current_app, jsonify, request

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateLimitResult:
    allowed: bool
    remaining: int
    retry_after: int | None = None


class RateLimiter:
    """Janela deslizante em memória, guardada por aplicação."""

    def __init__(self, clock=time.time) -> None:
        self._lock = Lock()
        self._hits: dict[str, deque[float]] = {}
        self._clock = clock

    def hit(self, key: str, *, limit: int, window_seconds: int) -> RateLimitResult:
        if limit <= 0 or window_seconds <= 0:
            return RateLimitResult(True, remaining=limit)

        now = self._clock()
        with self._lock:
            hits = self._hits.setdefault(key, deque())
            while hits and hits[0] <= now - window_seconds:
                hits.popleft()

            if len(hits) >= limit:
                retry = int(hits[0] + window_seconds - now)
                return RateLimitResult(False, remaining=0, retry_after=max(retry, 1))

            hits.append(now)
            return RateLimitResult(True, remaining=limit - len(hits))

    def reset(self, key: str | None = None) -> None:
        with self._lock:
            if key is None:
                self._hits.clear()
            else:
                self._hits.pop(key, None)


def get_limiter() -> RateLimiter:
    limiter = current_app.extensions.get("rate_limiter")
    if limiter is None:
        limiter = RateLimiter()
        current_app.extensions["rate_limiter"] = limiter
    return limiter


def client_ip() -> str:
    forwarded = request.headers.get("X-Forwarded-For", "")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.remote_addr or "unknown"


def throttle(action: str, *, limit: int, window: int, identifier: str | None = None):
    """Conta uma tentativa de `action` para o IP atual.

    Devolve None quando liberado, ou a resposta 429 (com Retry-After) a ser
    retornada pela rota.
    """
    key = f"{action}:{client_ip()}"
    if identifier:
        key = f"{key}:{identifier}"

    result = get_limiter().hit(key, limit=limit, window_seconds=window)
    if result.allowed:
        return None

    logger.warning("Limite de tentativas atingido: %s", key)
    resp = jsonify(
        {
            "error": "rate_limited",
            "message": f"Muitas tentativas. Tente novamente em {result.retry_after}s.",
        }
    )
    resp.status_code = 429
    resp.headers["Retry-After"] = str(result.retry_after)
    return resp
