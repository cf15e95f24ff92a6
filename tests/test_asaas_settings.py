import pytest

from services.asaas_settings import (
    AsaasConfig,
    AsaasConfigError,
    AsaasEnvironment,
    InMemoryAsaasSettingsStore,
    check_connection,
    mask_api_key,
    update_asaas_config,
    validate_asaas_changes,
)
from services.document_validation import validate_cnpj, validate_cpf, validate_cpf_cnpj


def test_documents():
    assert validate_cpf("529.982.247-25")
    assert not validate_cpf("529.982.247-26")
    assert not validate_cpf("111.111.111-11")
    assert validate_cnpj("11.222.333/0001-81")
    assert not validate_cnpj("11.222.333/0001-80")
    assert validate_cpf_cnpj("52998224725")
    assert not validate_cpf_cnpj("123")


def test_defaults_match_a_fresh_account():
    config = AsaasConfig()
    assert config.environment is AsaasEnvironment.SANDBOX
    assert config.account_name == "Gênesis"
    assert not config.has_api_key


def test_validate_normalizes_fields():
    cleaned = validate_asaas_changes(
        {
            "environment": " Production ",
            "cpf_cnpj": "11.222.333/0001-81",
            "webhook_url": "https://painel.example.test/webhook/asaas",
            "api_key": " $aact_123 ",
        }
    )
    assert cleaned == {
        "environment": AsaasEnvironment.PRODUCTION,
        "cpf_cnpj": "11222333000181",
        "webhook_url": "https://painel.example.test/webhook/asaas",
        "api_key": "$aact_123",
    }


@pytest.mark.parametrize(
    "changes",
    [
        {"environment": "homolog"},
        {"cpf_cnpj": "123.456.789-00"},
        {"webhook_url": "ftp://x.test/hook"},
        {"webhook_url": "painel.example.test"},
        {"account_name": "  "},
        {"api_key": "x" * 300},
        {"secret": "x"},
    ],
)
def test_validate_rejects(changes):
    with pytest.raises(AsaasConfigError):
        validate_asaas_changes(changes)


def test_update_is_all_or_nothing():
    store = InMemoryAsaasSettingsStore()
    with pytest.raises(AsaasConfigError):
        update_asaas_config(store, {"api_key": "nova", "environment": "homolog"})
    assert store.load() == AsaasConfig()


def test_masked_key_echo_keeps_stored_key():
    store = InMemoryAsaasSettingsStore(AsaasConfig(api_key="$aact_abcdef1234"))
    masked = mask_api_key("$aact_abcdef1234")
    assert masked == "********1234"

    update_asaas_config(store, {"api_key": masked, "account_name": "Gênesis Labs"})
    assert store.load().api_key == "$aact_abcdef1234"
    assert store.load().account_name == "Gênesis Labs"

    update_asaas_config(store, {"api_key": ""})
    assert store.load().api_key == ""


def test_connection_check_requires_api_key():
    check = check_connection(AsaasConfig())
    assert check.success is False
    assert check.message == "API Key não configurada"

    check = check_connection(AsaasConfig(api_key="$aact_1", environment=AsaasEnvironment.PRODUCTION), "segredo")
    assert check.success is True
    assert check.environment is AsaasEnvironment.PRODUCTION
    assert check.webhook_secret_configured is True
