"""
Data model for clients.
Email is the natural key used to decide between insert and update.
"""
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import DateTime, Integer, Numeric, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from casa_programada.core.database import Base


class Client(Base):
    """Entity representing a client who requested one or more simulations."""

    __tablename__ = "clientes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column("nome", String(255), nullable=False)
    email: Mapped[str] = mapped_column("email", String(255), unique=True, nullable=False)
    phone: Mapped[str] = mapped_column("telefone", String(20), nullable=False)
    profession: Mapped[Optional[str]] = mapped_column("profissao", String(100), nullable=True)
    income: Mapped[Optional[float]] = mapped_column("renda", Numeric(10, 2, asdecimal=False), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        "data_cadastro",
        DateTime,
        default=lambda: datetime.now(timezone.utc),
        server_default=func.now()
    )

    simulations: Mapped[List["Simulation"]] = relationship(  # noqa: F821
        "Simulation",
        back_populates="client",
        passive_deletes=True
    )

    def __repr__(self):
        return f"<Client(id={self.id}, email={self.email})>"
