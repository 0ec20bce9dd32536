"""
Persistence operations for simulations.
Every public function returns a {"success": ...} dictionary and never raises.
"""
import os
from typing import Any, Dict, Mapping, Optional, Union

from pydantic import ValidationError
from sqlalchemy import func, or_
from sqlalchemy.orm import contains_eager

from casa_programada.clientes.models import Client
from casa_programada.core.config import settings
from casa_programada.core.database import Database
from casa_programada.core.logger import audit_log, logger
from casa_programada.core.utils import build_pagination, contains_pattern, mask_email, normalize_page
from casa_programada.simulacoes.calculator import rebuild_simulation
from casa_programada.simulacoes.models import Simulation
from casa_programada.simulacoes.schemas import SimulationListItem, SimulationPayload, SortField

SIMULATION_NOT_FOUND = "Simulation not found"

SORT_ORDERS = {
    SortField.VALUE: (Simulation.property_value.desc(), Simulation.id.desc()),
    SortField.DATE: (Simulation.created_at.desc(), Simulation.id.desc()),
    SortField.NAME: (Client.name.asc(), Simulation.id.asc()),
}


def save_simulation(
    database: Database,
    payload: Union[SimulationPayload, Mapping[str, Any]]
) -> Dict[str, Any]:
    """
    Upserts the client by email and records a new simulation for it.
    Both writes share one transaction.
    """
    try:
        data = payload if isinstance(payload, SimulationPayload) else SimulationPayload.model_validate(payload)
    except ValidationError as e:
        logger.error(f"Invalid simulation payload: {str(e)}")
        return {"success": False, "error": str(e)}

    with database.get_session() as db:
        try:
            client = db.query(Client).filter(Client.email == data.client.email).first()

            if client:
                client.name = data.client.name
                client.phone = data.client.phone
                client.profession = data.client.profession
                client.income = data.client.income
                db.flush()
                logger.info(f"Client updated: id={client.id}")
            else:
                client = Client(
                    name=data.client.name,
                    email=data.client.email,
                    phone=data.client.phone,
                    profession=data.client.profession,
                    income=data.client.income
                )
                db.add(client)
                db.flush()
                logger.info(f"Client created: id={client.id}")

            simulation = Simulation(
                client_id=client.id,
                property_value=data.property_value,
                down_payment=data.down_payment,
                financed_amount=data.financed_amount,
                term=data.term,
                financing_installment=data.financing.monthly_payment,
                consortium_installment=data.consortium.monthly_payment,
                financing_total=data.financing.total_paid,
                consortium_total=data.consortium.total_paid,
                total_savings=data.total_savings,
                pdf_path=data.pdf_path
            )
            db.add(simulation)
            db.flush()

            client_id, simulation_id = client.id, simulation.id
            db.commit()
        except Exception as e:
            db.rollback()
            logger.error(f"Error saving simulation: {str(e)}", exc_info=True)
            return {"success": False, "error": str(e)}

    audit_log(
        action="simulation_saved",
        user=mask_email(data.client.email),
        resource=f"simulation_id={simulation_id}",
        details={"client_id": client_id, "property_value": data.property_value, "term": data.term}
    )

    logger.info(f"Simulation persisted: id={simulation_id}")

    return {
        "success": True,
        "simulacaoId": simulation_id,
        "clienteId": client_id
    }


def get_simulation_by_id(database: Database, simulation_id: int) -> Dict[str, Any]:
    """Loads a simulation with its client and fills in any missing derived values."""
    with database.get_session() as db:
        try:
            row = db.query(Simulation, Client).join(
                Client, Simulation.client_id == Client.id
            ).filter(
                Simulation.id == simulation_id
            ).first()

            if row is None:
                return {"success": False, "error": SIMULATION_NOT_FOUND}

            simulation, client = row
            view = rebuild_simulation(simulation, client)
        except Exception as e:
            logger.error(f"Error fetching simulation {simulation_id}: {str(e)}", exc_info=True)
            return {"success": False, "error": str(e)}

    result = view.model_dump(by_alias=True)
    logger.debug(f"Simulation processed: id={simulation_id} client_id={result['cliente']['id']}")

    return {"success": True, "simulacao": result}


def list_simulations(
    database: Database,
    page: int = 1,
    page_size: int = 10,
    sort_field: Optional[str] = SortField.NAME.value,
    filter_text: Optional[str] = ""
) -> Dict[str, Any]:
    """
    Pages through simulations joined with their clients.

    filter_text matches client name, email or phone (case-insensitive).
    sort_field: 'valor' (property value desc), 'data' (newest first), otherwise client name.
    """
    page, page_size = normalize_page(page, page_size)
    order_by = SORT_ORDERS[SortField.parse(sort_field)]

    with database.get_session() as db:
        try:
            query = db.query(Simulation).join(Client, Simulation.client_id == Client.id)

            if filter_text:
                pattern = contains_pattern(filter_text)
                query = query.filter(or_(
                    Client.name.ilike(pattern, escape="\\"),
                    Client.email.ilike(pattern, escape="\\"),
                    Client.phone.ilike(pattern, escape="\\")
                ))

            total = query.with_entities(func.count(Simulation.id)).scalar() or 0

            simulations = query.options(contains_eager(Simulation.client)).order_by(
                *order_by
            ).limit(page_size).offset((page - 1) * page_size).all()

            items = [
                SimulationListItem.model_validate(simulation).model_dump(by_alias=True)
                for simulation in simulations
            ]
        except Exception as e:
            logger.error(f"Error listing simulations: {str(e)}", exc_info=True)
            return {"success": False, "error": str(e)}

    return {
        "success": True,
        "simulacoes": items,
        "total": total,
        "pagination": build_pagination(total, page, page_size)
    }


def delete_simulation(
    database: Database,
    simulation_id: int,
    base_dir: Optional[str] = None
) -> Dict[str, Any]:
    """
    Deletes a simulation and its PDF file.
    The client is removed as well when this was its last simulation.
    """
    base_dir = base_dir if base_dir is not None else settings.PDF_BASE_DIR

    with database.get_session() as db:
        try:
            simulation = db.query(Simulation).filter(Simulation.id == simulation_id).first()

            if simulation is None:
                return {"success": False, "error": SIMULATION_NOT_FOUND}

            client_id = simulation.client_id

            if simulation.pdf_path:
                full_path = os.path.join(base_dir, simulation.pdf_path.lstrip("/\\"))
                if os.path.exists(full_path):
                    os.remove(full_path)
                    logger.info(f"PDF file removed: {full_path}")

            db.query(Simulation).filter(Simulation.id == simulation_id).delete(synchronize_session=False)

            remaining = db.query(func.count(Simulation.id)).filter(
                Simulation.client_id == client_id
            ).scalar()

            client_deleted = remaining == 0
            if client_deleted:
                db.query(Client).filter(Client.id == client_id).delete(synchronize_session=False)
                logger.info(f"Client {client_id} deleted (no simulations left)")

            db.commit()
        except Exception as e:
            db.rollback()
            logger.error(f"Error deleting simulation {simulation_id}: {str(e)}", exc_info=True)
            return {"success": False, "error": str(e)}

    audit_log(
        action="simulation_deleted",
        user="system",
        resource=f"simulation_id={simulation_id}",
        details={"client_id": client_id, "client_deleted": client_deleted}
    )

    return {"success": True, "message": "Simulation deleted successfully"}
