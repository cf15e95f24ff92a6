from __future__ import annotations

import logging
from typing import Protocol

from services.fees import CheckoutConfig, apply_config_changes

logger = logging.getLogger(__name__)


class SettingsStore(Protocol):
    def load(self) -> CheckoutConfig: ...

    def save(self, config: CheckoutConfig) -> CheckoutConfig: ...


class InMemorySettingsStore:
    def __init__(self, initial: CheckoutConfig | None = None) -> None:
        self._config = initial or CheckoutConfig()

    def load(self) -> CheckoutConfig:
        return self._config

    def save(self, config: CheckoutConfig) -> CheckoutConfig:
        self._config = config
        return config


def get_checkout_config(store: SettingsStore) -> CheckoutConfig:
    return store.load()


def update_checkout_config(store: SettingsStore, changes: dict) -> CheckoutConfig:
    """Atualização parcial (last-write-wins). Valida tudo antes de gravar."""
    updated = apply_config_changes(store.load(), changes)
    saved = store.save(updated)
    if changes:
        logger.info("Configuração de checkout atualizada: %s", ", ".join(sorted(changes)))
    return saved


def get_checkout_spread(store: SettingsStore):
    return store.load().checkout_spread


def set_checkout_spread(store: SettingsStore, spread) -> CheckoutConfig:
    return update_checkout_config(store, {"checkout_spread": spread})
