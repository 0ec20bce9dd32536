"""
Pytest fixtures shared by the persistence tests.
Each test runs against a fresh in-memory SQLite database.
"""
import copy
from typing import Any, Callable, Dict, Generator

import pytest
from sqlalchemy.pool import StaticPool

from casa_programada.core.database import Database
from casa_programada.clientes.models import Client
from casa_programada.simulacoes.models import Simulation

BASE_PAYLOAD: Dict[str, Any] = {
    "cliente": {
        "nome": "Maria Souza",
        "email": "maria@example.com",
        "telefone": "11987654321",
        "profissao": "Engenheira",
        "renda": 12000.0,
    },
    "valorImovel": 600000.0,
    "valorEntrada": 120000.0,
    "valorFinanciado": 480000.0,
    "prazo": 360,
    "financiamento": {"valorParcela": 4500.5, "totalPago": 1740180.0, "parcelas": 360},
    "consorcio": {"valorParcela": 3200.25, "totalPago": 768060.0},
    "caminhoArquivoPDF": None,
}


@pytest.fixture(scope="function")
def database() -> Generator[Database, None, None]:
    """Initialized database handle backed by a private in-memory SQLite store."""
    db = Database("sqlite://", poolclass=StaticPool)
    assert db.initialize() is True
    yield db
    db.dispose()


@pytest.fixture
def make_payload() -> Callable[..., Dict[str, Any]]:
    """Builds a write payload; keyword overrides replace top-level keys, cliente keys merge."""
    def _make(cliente: Dict[str, Any] = None, **overrides: Any) -> Dict[str, Any]:
        payload = copy.deepcopy(BASE_PAYLOAD)
        if cliente:
            payload["cliente"].update(cliente)
        payload.update(overrides)
        return payload

    return _make


@pytest.fixture
def insert_simulation(database: Database) -> Callable[..., int]:
    """Inserts a raw simulation row (bypassing the writer) and returns its id."""
    def _insert(email: str = "raw@example.com", income: float = None, **columns: Any) -> int:
        values = {
            "property_value": 0.0,
            "down_payment": 0.0,
            "financed_amount": 0.0,
            "term": 420,
            "financing_installment": 0.0,
            "consortium_installment": 0.0,
            "financing_total": 0.0,
            "consortium_total": 0.0,
            "total_savings": 0.0,
        }
        values.update(columns)

        with database.get_session() as db:
            client = db.query(Client).filter(Client.email == email).first()
            if client is None:
                client = Client(name="Raw Client", email=email, phone="1133334444", income=income)
                db.add(client)
                db.flush()

            simulation = Simulation(client_id=client.id, **values)
            db.add(simulation)
            db.commit()
            return simulation.id

    return _insert


@pytest.fixture
def row_count(database: Database) -> Callable[[Any], int]:
    """Counts the rows currently stored for a model."""
    def _count(model: Any) -> int:
        with database.get_session() as db:
            return db.query(model).count()

    return _count
