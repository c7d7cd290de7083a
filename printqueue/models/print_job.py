from datetime import datetime
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from sqlmodel import Field as SQLField
from sqlmodel import SQLModel

from printqueue.normalize import normalize_float, normalize_integer


class ProductionStatus(str, Enum):
    FILA = "FILA"
    IMPRIMINDO = "IMPRIMINDO"
    PAUSADO = "PAUSADO"
    CONCLUIDO = "CONCLUIDO"
    CANCELADO = "CANCELADO"


class CustomerStage(str, Enum):
    NOVO_PEDIDO = "NOVO_PEDIDO"
    MODELAGEM = "MODELAGEM"
    EM_ANALISE = "EM_ANALISE"
    COTACAO = "COTACAO"
    VERIFICANDO_QUANTIDADE = "VERIFICANDO_QUANTIDADE"
    AGUARDANDO_APROVACAO = "AGUARDANDO_APROVACAO"
    APROVADO_PARA_IMPRESSAO = "APROVADO_PARA_IMPRESSAO"
    EM_PRODUCAO = "EM_PRODUCAO"
    FINALIZADO = "FINALIZADO"
    ENTREGUE = "ENTREGUE"


class QueueFilter(str, Enum):
    TODOS = "TODOS"
    ATIVOS = "ATIVOS"
    FILA = "FILA"
    IMPRIMINDO = "IMPRIMINDO"
    PAUSADO = "PAUSADO"
    CONCLUIDO = "CONCLUIDO"
    CANCELADO = "CANCELADO"


# Reihenfolge der Statusklassen in der Fila-Ansicht; unbekannte Werte landen hinten
STATUS_SORT_ORDER = {
    ProductionStatus.IMPRIMINDO: 1,
    ProductionStatus.FILA: 2,
    ProductionStatus.PAUSADO: 3,
    ProductionStatus.CONCLUIDO: 4,
    ProductionStatus.CANCELADO: 5,
}
UNKNOWN_STATUS_SORT = 6

# ATIVOS = alles außer CONCLUIDO/CANCELADO; neue Status hier mit aufnehmen
ACTIVE_STATUSES = (ProductionStatus.FILA, ProductionStatus.IMPRIMINDO, ProductionStatus.PAUSADO)


def parse_production_status(value: Any, default: ProductionStatus = ProductionStatus.FILA) -> ProductionStatus:
    """Unbekannte Werte fallen auf `default` zurück statt zu scheitern."""
    try:
        return ProductionStatus(value)
    except ValueError:
        return default


def parse_customer_stage(value: Any, default: CustomerStage = CustomerStage.NOVO_PEDIDO) -> CustomerStage:
    try:
        return CustomerStage(value)
    except ValueError:
        return default


def parse_queue_filter(value: Any) -> QueueFilter:
    try:
        return QueueFilter(value)
    except ValueError:
        return QueueFilter.TODOS


class PrintJob(SQLModel, table=True):
    __tablename__ = "print_job"  # type: ignore[reportAssignmentType]
    # gelöschte IDs nicht wiederverwenden
    __table_args__ = {"sqlite_autoincrement": True}

    id: Optional[int] = SQLField(default=None, primary_key=True)
    # immer in Großbuchstaben gespeichert -> Eindeutigkeit ohne Groß/Klein
    identifier: Optional[str] = SQLField(default=None, unique=True, index=True)
    product_id: int = SQLField(foreign_key="product.id")
    filament_id: Optional[int] = SQLField(default=None, foreign_key="filament.id")

    customer_name: Optional[str] = None
    customer_contact: Optional[str] = None
    customer_stage: str = CustomerStage.NOVO_PEDIDO.value
    status: str = SQLField(default=ProductionStatus.FILA.value, index=True)

    total_quantity: int = 1
    printed_quantity: int = 0
    failed_quantity: int = 0
    priority: int = 1
    position: int = SQLField(default=0, index=True)
    estimated_minutes: Optional[int] = None
    notes: Optional[str] = None

    # beide write-once
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    created_at: datetime = SQLField(default_factory=datetime.utcnow)
    updated_at: datetime = SQLField(default_factory=datetime.utcnow)

    @property
    def processed_quantity(self) -> int:
        return (self.printed_quantity or 0) + (self.failed_quantity or 0)


class PrintJobMaterial(SQLModel, table=True):
    __tablename__ = "print_job_material"  # type: ignore[reportAssignmentType]

    id: Optional[int] = SQLField(default=None, primary_key=True)
    print_job_id: int = SQLField(foreign_key="print_job.id", ondelete="CASCADE", index=True)
    filament_id: int = SQLField(foreign_key="filament.id")
    weight_per_unit: float = 0


# Pydantic-Schemas

def _lenient_int(v):
    return normalize_integer(v, None)


def _lenient_text(v):
    if v is None:
        return None
    return str(v)


class MaterialLineSchema(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    filament_id: int | None = Field(None, alias="filamentoId")
    weight_per_unit: float = Field(0, alias="pesoGasto")

    @field_validator("filament_id", mode="before")
    def normalize_filament_id(cls, v):
        return _lenient_int(v)

    @field_validator("weight_per_unit", mode="before")
    def normalize_weight(cls, v):
        return max(0.0, normalize_float(v, 0.0))


class PrintJobCreateSchema(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    product_id: int | None = Field(None, alias="produtoId")
    filament_id: int | None = Field(None, alias="filamentoId")
    total_quantity: int | None = Field(None, alias="quantidadeTotal")
    priority: int | None = Field(None, alias="prioridade")
    estimated_minutes: int | None = Field(None, alias="tempoEstimadoMinutos")
    customer_name: str | None = Field(None, alias="clienteNome")
    customer_contact: str | None = Field(None, alias="clienteContato")
    customer_stage: str | None = Field(None, alias="etapaCliente")
    notes: str | None = Field(None, alias="observacoes")
    identifier: str | None = Field(None, alias="identificador")
    materials: List[MaterialLineSchema] | None = None

    @field_validator("product_id", "filament_id", "total_quantity", "priority", "estimated_minutes", mode="before")
    def normalize_ints(cls, v):
        return _lenient_int(v)

    @field_validator("customer_name", "customer_contact", "customer_stage", "notes", "identifier", mode="before")
    def normalize_texts(cls, v):
        return _lenient_text(v)

    @field_validator("materials", mode="before")
    def ignore_non_list_materials(cls, v):
        # kein Array -> wie "keine Materialien"
        return v if isinstance(v, list) else None


class PrintJobUpdateSchema(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    status: str | None = None
    customer_stage: str | None = Field(None, alias="etapaCliente")
    printed_quantity: int | None = Field(None, alias="quantidadeImpressa")
    failed_quantity: int | None = Field(None, alias="quantidadeFalha")
    notes: str | None = Field(None, alias="observacoes")
    customer_name: str | None = Field(None, alias="clienteNome")
    customer_contact: str | None = Field(None, alias="clienteContato")

    @field_validator("printed_quantity", "failed_quantity", mode="before")
    def normalize_counts(cls, v):
        return _lenient_int(v)

    @field_validator("status", "customer_stage", "notes", "customer_name", "customer_contact", mode="before")
    def normalize_texts(cls, v):
        return _lenient_text(v)


class PrintJobMaterialRead(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: int
    print_job_id: int = Field(serialization_alias="printJobId")
    filament_id: int = Field(serialization_alias="filamentoId")
    weight_per_unit: float = Field(serialization_alias="pesoGasto")
    filament_name: str | None = Field(None, serialization_alias="nome")
    filament_color: str | None = Field(None, serialization_alias="cor")


class PrintJobRead(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: int
    identifier: str | None = Field(None, serialization_alias="identificador")
    product_id: int = Field(serialization_alias="produtoId")
    filament_id: int | None = Field(None, serialization_alias="filamentoId")
    customer_name: str | None = Field(None, serialization_alias="clienteNome")
    customer_contact: str | None = Field(None, serialization_alias="clienteContato")
    customer_stage: str = Field(serialization_alias="etapaCliente")
    status: str
    total_quantity: int = Field(serialization_alias="quantidadeTotal")
    printed_quantity: int = Field(serialization_alias="quantidadeImpressa")
    failed_quantity: int = Field(0, serialization_alias="quantidadeFalha")
    priority: int = Field(serialization_alias="prioridade")
    position: int = Field(serialization_alias="posicao")
    estimated_minutes: int | None = Field(None, serialization_alias="tempoEstimadoMinutos")
    notes: str | None = Field(None, serialization_alias="observacoes")
    started_at: datetime | None = Field(None, serialization_alias="dataInicio")
    completed_at: datetime | None = Field(None, serialization_alias="dataConclusao")
    created_at: datetime | None = Field(None, serialization_alias="createdAt")
    updated_at: datetime | None = Field(None, serialization_alias="updatedAt")

    # Join-Felder für die Fila-Ansicht
    product_name: str | None = Field(None, serialization_alias="produtoNome")
    product_weight: float | None = Field(None, serialization_alias="produtoPeso")
    product_stl_link: str | None = Field(None, serialization_alias="produtoStlLink")
    filament_name: str | None = Field(None, serialization_alias="filamentoNome")
    filament_color: str | None = Field(None, serialization_alias="filamentoCor")
    filament_cost: float | None = Field(None, serialization_alias="filamentoCusto")
    materials: List[PrintJobMaterialRead] = Field(default_factory=list)


class QueueSummary(BaseModel):
    total_jobs: int = Field(0, serialization_alias="totalJobs")
    active_jobs: int = Field(0, serialization_alias="activeJobs")
    total_success: int = Field(0, serialization_alias="totalSuccess")
    total_fail: int = Field(0, serialization_alias="totalFail")
    completion_average: int = Field(0, serialization_alias="completionAverage")
