"""Cliente HTTP do painel Gênesis.

A URL base da API é definida em tempo de execução e persistida (junto com o
token) em ``~/.genesis/client.json``, permitindo apontar o mesmo cliente para
diferentes implantações do backend.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import requests

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:8000/api"
DEFAULT_STATE_PATH = Path.home() / ".genesis" / "client.json"


class ApiClientError(RuntimeError):
    def __init__(self, message: str, status: int | None = None, payload: Any = None):
        super().__init__(message)
        self.status = status
        self.payload = payload


class AuthenticationRequired(ApiClientError):
    pass


def normalize_base_url(url: str) -> str:
    url = (url or "").strip()
    if not url:
        raise ApiClientError("URL da API não informada.")
    if not url.startswith(("http://", "https://")):
        raise ApiClientError(f"URL da API inválida: {url}")
    return url.rstrip("/")


class GenesisApiClient:
    def __init__(
        self,
        base_url: str | None = None,
        *,
        state_path: Path | str | None = None,
        timeout: float = 15,
        session: requests.Session | None = None,
    ) -> None:
        self.state_path = Path(state_path) if state_path else DEFAULT_STATE_PATH
        self.timeout = timeout
        self.session = session or requests.Session()
        self._state = self._load_state()
        if base_url:
            self.set_base_url(base_url)
        elif not self._state.get("base_url"):
            self._state["base_url"] = os.getenv("GENESIS_API_URL") or DEFAULT_BASE_URL

    # ---- estado persistido ----

    def _load_state(self) -> Dict[str, Any]:
        try:
            raw = self.state_path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        try:
            data = json.loads(raw)
        except ValueError:
            logger.warning("Estado do cliente corrompido em %s; ignorando.", self.state_path)
            return {}
        return data if isinstance(data, dict) else {}

    def _save_state(self) -> None:
        self.state_path.parent.mkdir(parents=True, exist_ok=True)
        self.state_path.write_text(json.dumps(self._state, indent=2), encoding="utf-8")

    @property
    def base_url(self) -> str:
        return self._state.get("base_url") or DEFAULT_BASE_URL

    def set_base_url(self, url: str) -> None:
        self._state["base_url"] = normalize_base_url(url)
        self._save_state()

    @property
    def token(self) -> Optional[str]:
        return self._state.get("access_token")

    @property
    def stored_user(self) -> Optional[Dict[str, Any]]:
        return self._state.get("user")

    def clear_auth(self) -> None:
        self._state.pop("access_token", None)
        self._state.pop("user", None)
        self._save_state()

    # ---- HTTP ----

    def _request(self, method: str, endpoint: str, data: Any = None) -> Any:
        url = f"{self.base_url}/{endpoint.lstrip('/')}"
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        try:
            resp = self.session.request(method, url, json=data, headers=headers, timeout=self.timeout)
        except requests.RequestException as exc:
            raise ApiClientError(f"Falha de comunicação com a API: {exc}") from exc

        if resp.status_code == 401:
            self.clear_auth()
            raise AuthenticationRequired("Sessão expirada. Faça login novamente.", status=401)

        try:
            body = resp.json() if resp.content else None
        except ValueError:
            body = None
            if resp.ok:
                raise ApiClientError(f"Resposta inválida da API (HTTP {resp.status_code}).", status=resp.status_code)

        if not resp.ok:
            err = None
            if isinstance(body, dict):
                err = body.get("message") or body.get("error")
            raise ApiClientError(
                f"Erro da API (HTTP {resp.status_code}): {err or resp.reason}",
                status=resp.status_code,
                payload=body,
            )
        return body

    def get(self, endpoint: str) -> Any:
        return self._request("GET", endpoint)

    def post(self, endpoint: str, data: Any = None) -> Any:
        return self._request("POST", endpoint, data)

    # ---- auth ----

    def login(self, email: str, password: str) -> Dict[str, Any]:
        body = self.post("/login", {"email": email, "password": password})
        self._state["access_token"] = body["access_token"]
        self._state["user"] = body.get("user")
        self._save_state()
        return body

    def logout(self) -> None:
        try:
            if self.token:
                self.post("/logout")
        finally:
            self.clear_auth()

    def me(self) -> Dict[str, Any]:
        body = self.get("/me")
        self._state["user"] = body
        self._save_state()
        return body

    # ---- recursos ----

    def get_settings(self) -> Dict[str, Any]:
        return self.get("/settings")

    def update_settings(self, changes: Dict[str, Any]) -> Dict[str, Any]:
        return self.post("/settings", changes)

    def get_asaas_config(self) -> Dict[str, Any]:
        return self.get("/asaas")

    def update_asaas_config(self, changes: Dict[str, Any]) -> Dict[str, Any]:
        return self.post("/asaas", changes)

    def check_asaas_connection(self) -> Dict[str, Any]:
        return self.post("/asaas/test-connection")

    def get_exchange_rate(self, spread: float | None = None) -> Dict[str, Any]:
        if spread is None:
            return self.get("/exchange-rate")
        return self.get(f"/exchange-rate?spread={spread}")

    def get_plans(self) -> list:
        return self.get("/plans")

    def update_plan(self, plan_id: str, **fields) -> Dict[str, Any]:
        return self.post(f"/plans/{plan_id}", fields)

    def checkout_preview(self, plan_id: str, method: str) -> Dict[str, Any]:
        return self.post("/checkout/preview", {"planId": plan_id, "method": method})

    def get_users(self) -> list:
        return self.get("/users")

    def update_user(self, user_id: int, data: Dict[str, Any]) -> Dict[str, Any]:
        return self.post(f"/users/{user_id}", data)

    def add_user_credits(self, user_id: int, credits: int) -> Dict[str, Any]:
        return self.post(f"/users/{user_id}/credits", {"credits": credits})

    def toggle_user_status(self, user_id: int) -> Dict[str, Any]:
        return self.post(f"/users/{user_id}/status")

    def update_user_activation(self, user_id: int, data: Dict[str, Any]) -> Dict[str, Any]:
        return self.post(f"/users/{user_id}/activation", data)

    def sync_lastlink(self) -> Dict[str, Any]:
        return self.post("/lastlink/sync")
