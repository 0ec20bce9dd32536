"""
Tests for simulation deletion.
Validates PDF cleanup, client cascade and rollback on failure.
"""
from unittest.mock import patch

from casa_programada.clientes.models import Client
from casa_programada.simulacoes.models import Simulation
from casa_programada.simulacoes.service import delete_simulation, save_simulation


def test_delete_missing_simulation(database):
    result = delete_simulation(database, 42)

    assert result == {"success": False, "error": "Simulation not found"}


def test_deleting_only_simulation_removes_client(database, make_payload, row_count):
    saved = save_simulation(database, make_payload())

    result = delete_simulation(database, saved["simulacaoId"])

    assert result == {"success": True, "message": "Simulation deleted successfully"}
    assert row_count(Simulation) == 0
    assert row_count(Client) == 0


def test_deleting_one_of_several_keeps_client(database, make_payload, row_count):
    first = save_simulation(database, make_payload())
    second = save_simulation(database, make_payload())

    result = delete_simulation(database, first["simulacaoId"])

    assert result["success"] is True
    assert row_count(Simulation) == 1
    assert row_count(Client) == 1

    with database.get_session() as db:
        remaining = db.query(Simulation).one()
        assert remaining.id == second["simulacaoId"]


def test_delete_removes_pdf_file(database, make_payload, tmp_path):
    pdf_dir = tmp_path / "pdfs"
    pdf_dir.mkdir()
    pdf_file = pdf_dir / "simulacao.pdf"
    pdf_file.write_bytes(b"%PDF-1.4")

    saved = save_simulation(database, make_payload(caminhoArquivoPDF="pdfs/simulacao.pdf"))
    result = delete_simulation(database, saved["simulacaoId"], base_dir=str(tmp_path))

    assert result["success"] is True
    assert not pdf_file.exists()


def test_delete_with_missing_pdf_file_succeeds(database, make_payload, tmp_path, row_count):
    saved = save_simulation(database, make_payload(caminhoArquivoPDF="pdfs/ja_removido.pdf"))

    result = delete_simulation(database, saved["simulacaoId"], base_dir=str(tmp_path))

    assert result["success"] is True
    assert row_count(Simulation) == 0


def test_pdf_removal_error_rolls_back(database, make_payload, tmp_path, row_count):
    """A failing file removal aborts the whole deletion."""
    (tmp_path / "travado.pdf").write_bytes(b"%PDF-1.4")
    saved = save_simulation(database, make_payload(caminhoArquivoPDF="travado.pdf"))

    with patch("casa_programada.simulacoes.service.os.remove", side_effect=PermissionError("file locked")):
        result = delete_simulation(database, saved["simulacaoId"], base_dir=str(tmp_path))

    assert result == {"success": False, "error": "file locked"}
    assert row_count(Simulation) == 1
    assert row_count(Client) == 1


def test_deleting_client_cascades_to_simulations(database, make_payload, row_count):
    """The foreign key removes simulations together with their client."""
    saved = save_simulation(database, make_payload())
    save_simulation(database, make_payload())

    with database.get_session() as db:
        db.query(Client).filter(Client.id == saved["clienteId"]).delete(synchronize_session=False)
        db.commit()

    assert row_count(Simulation) == 0
