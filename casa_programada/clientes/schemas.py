"""
Pydantic schemas for client listing output.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer

from casa_programada.core.utils import format_iso_timestamp


class ClientListItem(BaseModel):
    """Client row as stored."""
    id: int
    name: str = Field(..., alias="nome")
    email: str
    phone: str = Field(..., alias="telefone")
    profession: Optional[str] = Field(None, alias="profissao")
    income: Optional[float] = Field(None, alias="renda")
    created_at: Optional[datetime] = Field(None, alias="dataCadastro")

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    @field_serializer("created_at")
    def serialize_created_at(self, value: Optional[datetime]) -> Optional[str]:
        return format_iso_timestamp(value)
