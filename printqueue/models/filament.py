from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from sqlmodel import Field as SQLField
from sqlmodel import SQLModel


class FilamentBase(SQLModel):
    name: str
    color: Optional[str] = None
    total_weight: float = 0
    # Ledger-Zähler: wird nur über consume/refund bewegt, nie negativ
    used_weight: float = 0
    cost_per_gram: float = 0
    purchase_price: Optional[float] = None
    spool_weight: Optional[float] = None  # nur für die Kapazitätsanzeige
    spool_count: int = 1
    status: str = "Disponível"
    created_at: datetime = SQLField(default_factory=datetime.utcnow)
    updated_at: datetime = SQLField(default_factory=datetime.utcnow)


class Filament(FilamentBase, table=True):
    id: Optional[int] = SQLField(default=None, primary_key=True)


# Pydantic-Schemas (API nutzt die portugiesischen Feldnamen des Admin-Panels)

class FilamentCreateSchema(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    name: str = Field(alias="nome")
    color: str | None = Field(None, alias="cor")
    total_weight: float = Field(1000, ge=0, alias="pesoTotal")
    cost_per_gram: float = Field(0, ge=0, alias="custoPorGrama")
    purchase_price: float | None = Field(None, ge=0, alias="precoPago")
    spool_weight: float | None = Field(None, gt=0, alias="pesoCarretel")
    spool_count: int = Field(1, ge=1, alias="quantidadeCarreteis")
    status: str | None = None

    @field_validator("name")
    def name_not_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Nome não pode ser vazio")
        return v.strip()


class FilamentUpdateSchema(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    name: str | None = Field(None, alias="nome")
    color: str | None = Field(None, alias="cor")
    total_weight: float | None = Field(None, ge=0, alias="pesoTotal")
    used_weight: float | None = Field(None, ge=0, alias="pesoUsado")
    cost_per_gram: float | None = Field(None, ge=0, alias="custoPorGrama")
    purchase_price: float | None = Field(None, ge=0, alias="precoPago")
    spool_weight: float | None = Field(None, gt=0, alias="pesoCarretel")
    spool_count: int | None = Field(None, ge=1, alias="quantidadeCarreteis")
    status: str | None = None


class FilamentReadSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: int
    name: str = Field(serialization_alias="nome")
    color: str | None = Field(None, serialization_alias="cor")
    total_weight: float = Field(serialization_alias="pesoTotal")
    used_weight: float = Field(serialization_alias="pesoUsado")
    cost_per_gram: float = Field(serialization_alias="custoPorGrama")
    purchase_price: float | None = Field(None, serialization_alias="precoPago")
    spool_weight: float | None = Field(None, serialization_alias="pesoCarretel")
    spool_count: int = Field(1, serialization_alias="quantidadeCarreteis")
    status: str | None = None
    remaining_weight: float | None = Field(None, serialization_alias="pesoRestante")
    remaining_percent: float | None = Field(None, serialization_alias="percentualRestante")
    created_at: datetime | None = Field(None, serialization_alias="createdAt")
    updated_at: datetime | None = Field(None, serialization_alias="updatedAt")
