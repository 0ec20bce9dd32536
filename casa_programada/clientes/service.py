"""
Read operations for clients.
Clients are written and removed through the simulation service.
"""
from typing import Any, Dict, Optional

from sqlalchemy import func, or_

from casa_programada.clientes.models import Client
from casa_programada.clientes.schemas import ClientListItem
from casa_programada.core.database import Database
from casa_programada.core.logger import logger
from casa_programada.core.utils import build_pagination, contains_pattern, normalize_page
# Registers the Simulation mapper referenced by Client.simulations
from casa_programada.simulacoes import models as simulation_models  # noqa: F401


def list_clients(
    database: Database,
    page: int = 1,
    page_size: int = 10,
    filter_text: Optional[str] = ""
) -> Dict[str, Any]:
    """Pages through clients ordered by name, optionally filtered by name, email or phone."""
    page, page_size = normalize_page(page, page_size)

    with database.get_session() as db:
        try:
            query = db.query(Client)

            if filter_text:
                pattern = contains_pattern(filter_text)
                query = query.filter(or_(
                    Client.name.ilike(pattern, escape="\\"),
                    Client.email.ilike(pattern, escape="\\"),
                    Client.phone.ilike(pattern, escape="\\")
                ))

            total = query.with_entities(func.count(Client.id)).scalar() or 0

            clients = query.order_by(Client.name.asc(), Client.id.asc()).limit(
                page_size
            ).offset((page - 1) * page_size).all()

            items = [ClientListItem.model_validate(client).model_dump(by_alias=True) for client in clients]
        except Exception as e:
            logger.error(f"Error listing clients: {str(e)}", exc_info=True)
            return {"success": False, "error": str(e)}

    return {
        "success": True,
        "clientes": items,
        "pagination": build_pagination(total, page, page_size)
    }
