"""
Data model for financing vs. consortium simulations.
Monetary columns are DECIMAL in the store and floats in Python.
"""
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Integer, Numeric, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from casa_programada.core.database import Base


class Simulation(Base):
    """Entity representing one persisted financing vs. consortium comparison."""

    __tablename__ = "simulacoes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    client_id: Mapped[int] = mapped_column(
        "cliente_id",
        Integer,
        ForeignKey("clientes.id", ondelete="CASCADE"),
        nullable=False
    )
    property_value: Mapped[float] = mapped_column("valor_imovel", Numeric(12, 2, asdecimal=False), nullable=False)
    down_payment: Mapped[float] = mapped_column("valor_entrada", Numeric(12, 2, asdecimal=False), nullable=False)
    financed_amount: Mapped[float] = mapped_column("valor_financiado", Numeric(12, 2, asdecimal=False), nullable=False)
    term: Mapped[int] = mapped_column("prazo", Integer, nullable=False)  # months
    financing_installment: Mapped[float] = mapped_column(
        "valor_parcela_financiamento", Numeric(10, 2, asdecimal=False), nullable=False
    )
    consortium_installment: Mapped[float] = mapped_column(
        "valor_parcela_consorcio", Numeric(10, 2, asdecimal=False), nullable=False
    )
    financing_total: Mapped[float] = mapped_column("total_financiamento", Numeric(12, 2, asdecimal=False), nullable=False)
    consortium_total: Mapped[float] = mapped_column("total_consorcio", Numeric(12, 2, asdecimal=False), nullable=False)
    total_savings: Mapped[float] = mapped_column("economia_total", Numeric(12, 2, asdecimal=False), nullable=False)
    pdf_path: Mapped[Optional[str]] = mapped_column("caminho_arquivo_pdf", String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        "data_criacao",
        DateTime,
        default=lambda: datetime.now(timezone.utc),
        server_default=func.now()
    )

    client: Mapped["Client"] = relationship("Client", back_populates="simulations")  # noqa: F821

    def __repr__(self):
        return f"<Simulation(id={self.id}, client_id={self.client_id}, property_value={self.property_value})>"
