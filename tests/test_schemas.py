"""
Unit tests for the write payload adapter and sort key parsing.
"""
import pytest

from casa_programada.simulacoes.schemas import SimulationPayload, SortField


def test_payload_primary_names(make_payload):
    data = SimulationPayload.model_validate(make_payload())

    assert data.property_value == 600000.0
    assert data.down_payment == 120000.0
    assert data.financed_amount == 480000.0
    assert data.term == 360
    assert data.client.email == "maria@example.com"
    assert data.total_savings == 1740180.0 - 768060.0


def test_valor_credito_takes_precedence(make_payload):
    data = SimulationPayload.model_validate(make_payload(valorCredito=700000.0))

    assert data.property_value == 700000.0


def test_zero_valor_credito_falls_back_to_valor_imovel(make_payload):
    data = SimulationPayload.model_validate(make_payload(valorCredito=0))

    assert data.property_value == 600000.0


def test_entrada_takes_precedence(make_payload):
    data = SimulationPayload.model_validate(make_payload(entrada=200000.0))

    assert data.down_payment == 200000.0


def test_term_falls_back_to_financing_installments(make_payload):
    payload = make_payload(financiamento={"valorParcela": 4000.0, "totalPago": 1680000.0, "parcelas": 420})
    del payload["prazo"]

    data = SimulationPayload.model_validate(payload)

    assert data.term == 420
    assert data.financing.installments == 420


def test_missing_term_is_rejected(make_payload):
    payload = make_payload(financiamento={"valorParcela": 4000.0, "totalPago": 1680000.0})
    del payload["prazo"]

    with pytest.raises(Exception):
        SimulationPayload.model_validate(payload)


def test_email_is_kept_verbatim(make_payload):
    data = SimulationPayload.model_validate(make_payload(cliente={"email": " o'neil@example.com"}))

    assert data.client.email == " o'neil@example.com"


def test_optional_client_fields_blank_become_none(make_payload):
    data = SimulationPayload.model_validate(make_payload(cliente={"profissao": "", "renda": None}))

    assert data.client.profession is None
    assert data.client.income is None


def test_sort_field_parse():
    assert SortField.parse("valor") is SortField.VALUE
    assert SortField.parse("data") is SortField.DATE
    assert SortField.parse("nome") is SortField.NAME
    assert SortField.parse("telefone") is SortField.NAME
    assert SortField.parse(None) is SortField.NAME
