"""Credenciais da conta Asaas usadas pelo checkout.

Só configuração: nenhuma chamada real ao gateway sai daqui. O teste de
conexão apenas confere se o necessário está preenchido.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, fields, replace
from enum import Enum
from typing import Protocol
from urllib.parse import urlparse

from services.document_validation import normalize_document, validate_cpf_cnpj

logger = logging.getLogger(__name__)


class AsaasConfigError(ValueError):
    pass


class AsaasEnvironment(str, Enum):
    SANDBOX = "sandbox"
    PRODUCTION = "production"

    @classmethod
    def parse(cls, value) -> "AsaasEnvironment":
        if isinstance(value, cls):
            return value
        text = str(value or "").strip().lower()
        for env in cls:
            if env.value == text:
                return env
        raise AsaasConfigError(f"Ambiente inválido: {value!r} (use sandbox ou production).")


@dataclass(frozen=True)
class AsaasConfig:
    api_key: str = ""
    webhook_url: str = ""
    environment: AsaasEnvironment = AsaasEnvironment.SANDBOX
    cpf_cnpj: str = ""
    account_name: str = "Gênesis"

    @property
    def has_api_key(self) -> bool:
        return bool(self.api_key)

    def to_dict(self) -> dict:
        data = asdict(self)
        data["environment"] = self.environment.value
        return data

    @classmethod
    def from_app_config(cls, config) -> "AsaasConfig":
        return cls(
            api_key=str(config.get("ASAAS_API_KEY") or ""),
            webhook_url=str(config.get("ASAAS_WEBHOOK_URL") or ""),
            environment=AsaasEnvironment.parse(config.get("ASAAS_ENVIRONMENT") or "sandbox"),
            cpf_cnpj=normalize_document(config.get("ASAAS_CPF_CNPJ")),
            account_name=str(config.get("ASAAS_ACCOUNT_NAME") or "Gênesis"),
        )


ASAAS_FIELDS = tuple(f.name for f in fields(AsaasConfig))
MAX_TEXT_LENGTH = 255


@dataclass(frozen=True)
class ConnectionCheck:
    success: bool
    message: str
    environment: AsaasEnvironment
    webhook_secret_configured: bool


class AsaasSettingsStore(Protocol):
    def load(self) -> AsaasConfig: ...

    def save(self, config: AsaasConfig) -> AsaasConfig: ...


class InMemoryAsaasSettingsStore:
    def __init__(self, initial: AsaasConfig | None = None) -> None:
        self._config = initial or AsaasConfig()

    def load(self) -> AsaasConfig:
        return self._config

    def save(self, config: AsaasConfig) -> AsaasConfig:
        self._config = config
        return config


def _clean_text(key: str, raw) -> str:
    text = "" if raw is None else str(raw).strip()
    if len(text) > MAX_TEXT_LENGTH:
        raise AsaasConfigError(f"{key} deve ter no máximo {MAX_TEXT_LENGTH} caracteres.")
    return text


def validate_asaas_changes(changes: dict) -> dict:
    """Valida uma atualização parcial. Campo inválido: nada é aplicado."""
    cleaned: dict = {}
    for key, raw in (changes or {}).items():
        if key not in ASAAS_FIELDS:
            raise AsaasConfigError(f"Campo desconhecido: {key}")

        if key == "environment":
            cleaned[key] = AsaasEnvironment.parse(raw)
            continue

        text = _clean_text(key, raw)
        if key == "webhook_url" and text:
            parsed = urlparse(text)
            if parsed.scheme not in {"http", "https"} or not parsed.netloc:
                raise AsaasConfigError("webhook_url deve ser uma URL http(s).")
        elif key == "cpf_cnpj" and text:
            if not validate_cpf_cnpj(text):
                raise AsaasConfigError("CPF/CNPJ inválido.")
            text = normalize_document(text)
        elif key == "account_name" and not text:
            raise AsaasConfigError("Informe o nome da conta.")
        cleaned[key] = text
    return cleaned


def get_asaas_config(store: AsaasSettingsStore) -> AsaasConfig:
    return store.load()


def update_asaas_config(store: AsaasSettingsStore, changes: dict) -> AsaasConfig:
    current = store.load()
    changes = dict(changes or {})
    # O painel reenvia a chave mascarada quando ela não foi alterada
    if current.api_key and changes.get("api_key") == mask_api_key(current.api_key):
        changes.pop("api_key")
    updated = replace(current, **validate_asaas_changes(changes))
    saved = store.save(updated)
    if changes:
        logger.info("Configuração do Asaas atualizada: %s", ", ".join(sorted(changes)))
    return saved


def check_connection(config: AsaasConfig, webhook_secret: str = "") -> ConnectionCheck:
    if not config.has_api_key:
        return ConnectionCheck(False, "API Key não configurada", config.environment, bool(webhook_secret))
    return ConnectionCheck(
        True,
        "Conexão com Asaas estabelecida com sucesso",
        config.environment,
        bool(webhook_secret),
    )


def mask_api_key(api_key: str) -> str:
    if not api_key:
        return ""
    if len(api_key) <= 4:
        return "*" * len(api_key)
    return "*" * 8 + api_key[-4:]
