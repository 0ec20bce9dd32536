"""
Pydantic schemas for the simulation write payload and the read views.
Field aliases carry the camelCase names used by the front-end.
"""
import enum
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator, model_validator

from casa_programada.core.utils import format_iso_timestamp


class SortField(str, enum.Enum):
    """Permitted ordering keys for the simulation listing."""
    NAME = "nome"
    VALUE = "valor"
    DATE = "data"

    @classmethod
    def parse(cls, value: Any) -> "SortField":
        """Unknown or missing keys fall back to ordering by client name."""
        try:
            return cls(value)
        except ValueError:
            return cls.NAME


class ClientPayload(BaseModel):
    """Client section of the write payload."""
    name: str = Field(..., alias="nome", max_length=255, description="Client name")
    email: str = Field(..., alias="email", max_length=255, description="Client email (unique)")
    phone: str = Field(..., alias="telefone", max_length=20, description="Client phone")
    profession: Optional[str] = Field(None, alias="profissao", max_length=100, description="Profession")
    income: Optional[float] = Field(None, alias="renda", description="Monthly income (R$)")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("profession", "income", mode="before")
    @classmethod
    def empty_as_null(cls, v: Any) -> Any:
        # Blank strings and zero income are stored as NULL
        return v or None


class PlanResult(BaseModel):
    """Monthly payment and total paid computed for one plan."""
    monthly_payment: float = Field(..., alias="valorParcela", description="Monthly installment (R$)")
    total_paid: float = Field(..., alias="totalPago", description="Total paid over the term (R$)")
    installments: Optional[int] = Field(None, alias="parcelas", description="Number of installments")

    model_config = ConfigDict(populate_by_name=True)


class SimulationPayload(BaseModel):
    """
    Normalized write request.

    Accepts either valorCredito or valorImovel for the property value and
    either entrada or valorEntrada for the down payment; the term falls back to
    financiamento.parcelas when prazo is missing.
    """
    client: ClientPayload = Field(..., alias="cliente")
    property_value: float = Field(..., alias="valorImovel", description="Property value (R$)")
    down_payment: float = Field(..., alias="valorEntrada", description="Down payment (R$)")
    financed_amount: float = Field(..., alias="valorFinanciado", description="Financed amount (R$)")
    term: int = Field(..., alias="prazo", ge=1, description="Financing term in months")
    financing: PlanResult = Field(..., alias="financiamento")
    consortium: PlanResult = Field(..., alias="consorcio")
    pdf_path: Optional[str] = Field(None, alias="caminhoArquivoPDF", max_length=255)

    model_config = ConfigDict(populate_by_name=True)

    @model_validator(mode="before")
    @classmethod
    def resolve_alternate_names(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data

        data = dict(data)

        property_value = data.pop("valorCredito", None) or data.get("valorImovel")
        if property_value is not None:
            data["valorImovel"] = property_value

        down_payment = data.pop("entrada", None) or data.get("valorEntrada")
        if down_payment is not None:
            data["valorEntrada"] = down_payment

        if not data.get("prazo") and "term" not in data:
            financing = data.get("financiamento") or {}
            if isinstance(financing, dict) and financing.get("parcelas"):
                data["prazo"] = financing["parcelas"]

        return data

    @property
    def total_savings(self) -> float:
        return self.financing.total_paid - self.consortium.total_paid


class FinancingView(BaseModel):
    credit: float = Field(..., alias="credito")
    down_payment: float = Field(..., alias="entrada")
    financed_amount: float = Field(..., alias="valorFinanciado")
    annual_rate: float = Field(..., alias="taxaAnual")
    term: int = Field(..., alias="prazo")
    monthly_payment: float = Field(..., alias="valorParcela")
    total: float = Field(..., alias="total")

    model_config = ConfigDict(populate_by_name=True)


class ConsortiumView(BaseModel):
    card_value: float = Field(..., alias="valorCarta")
    admin_rate: float = Field(..., alias="taxaAdm")
    installments: int = Field(..., alias="parcelas")
    monthly_payment: float = Field(..., alias="valorParcela")
    reduced_installment: float = Field(..., alias="parcelaReduzida")
    bid: float = Field(..., alias="lance")
    total_paid: float = Field(..., alias="totalPago")

    model_config = ConfigDict(populate_by_name=True)


class ClientView(BaseModel):
    id: int
    name: str = Field(..., alias="nome")
    email: str
    phone: str = Field(..., alias="telefone")
    profession: Optional[str] = Field(None, alias="profissao")
    income: Optional[float] = Field(None, alias="renda")

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)


class SimulationView(BaseModel):
    """Denormalized simulation with every derived field populated."""
    id: int
    property_value: float = Field(..., alias="valorImovel")
    down_payment: float = Field(..., alias="valorEntrada")
    financed_amount: float = Field(..., alias="valorFinanciado")
    term: int = Field(..., alias="prazo")
    financing_installment: float = Field(..., alias="valorParcelaFinanciamento")
    consortium_installment: float = Field(..., alias="valorParcelaConsorcio")
    financing_total: float = Field(..., alias="totalFinanciamento")
    consortium_total: float = Field(..., alias="totalConsorcio")
    total_savings: float = Field(..., alias="economiaTotal")
    savings_percentage: float = Field(..., alias="porcentagemEconomia")
    pdf_path: Optional[str] = Field(None, alias="caminhoArquivoPDF")
    created_at: Optional[str] = Field(None, alias="dataCriacao")
    financing: FinancingView = Field(..., alias="financiamento")
    consortium: ConsortiumView = Field(..., alias="consorcio")
    client: ClientView = Field(..., alias="cliente")

    model_config = ConfigDict(populate_by_name=True)


class ClientSummary(BaseModel):
    id: int
    name: str = Field(..., alias="nome")
    email: str
    phone: str = Field(..., alias="telefone")
    income: Optional[float] = Field(None, alias="renda")

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)


class SimulationListItem(BaseModel):
    """Listing row: stored values as-is, no derivation."""
    id: int
    property_value: Optional[float] = Field(None, alias="valorImovel")
    down_payment: Optional[float] = Field(None, alias="valorEntrada")
    term: Optional[int] = Field(None, alias="prazo")
    financing_installment: Optional[float] = Field(None, alias="valorParcelaFinanciamento")
    consortium_installment: Optional[float] = Field(None, alias="valorParcelaConsorcio")
    financing_total: Optional[float] = Field(None, alias="totalFinanciamento")
    consortium_total: Optional[float] = Field(None, alias="totalConsorcio")
    total_savings: Optional[float] = Field(None, alias="economiaTotal")
    pdf_path: Optional[str] = Field(None, alias="caminhoArquivoPDF")
    created_at: Optional[datetime] = Field(None, alias="dataCriacao")
    client: ClientSummary = Field(..., alias="cliente")

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    @field_serializer("created_at")
    def serialize_created_at(self, value: Optional[datetime]) -> Optional[str]:
        return format_iso_timestamp(value)
