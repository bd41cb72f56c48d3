"""
API Request and Response Models.

Pydantic models for validating API requests and serializing responses.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Annotated, List, Optional
from uuid import UUID

from pydantic import BaseModel, BeforeValidator, Field

from domain.client import Client, ClientStatus, NPSRecord, average_nps, latest_nps
from domain.lead import Lead, LeadStatus, LeadTemperature
from domain.ledger import MonthTotal
from domain.objective import (
    Objective,
    ObjectiveStatus,
    ObjectiveUnit,
    ProgressEntry,
    format_value,
    progress_percent,
)

NAME_MAX = 100
COMPANY_MAX = 100
EMAIL_MAX = 255
PHONE_MAX = 20
NOTES_MAX = 1000
DESCRIPTION_MAX = 500
SEGMENT_MAX = 50
VALUE_MIN = 0
VALUE_MAX = 999_999_999
NPS_MIN = 0
NPS_MAX = 10


# ============================================================================
# Objective Models
# ============================================================================

class ObjectiveCreateRequest(BaseModel):
    """Request to create an objective."""
    title: str = Field(..., min_length=1, max_length=NAME_MAX)
    description: Optional[str] = Field(None, max_length=DESCRIPTION_MAX)
    category: Optional[str] = Field(None, max_length=SEGMENT_MAX)
    unit: ObjectiveUnit = ObjectiveUnit.COUNT
    target_value: Optional[Decimal] = Field(None, ge=VALUE_MIN, le=VALUE_MAX)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    is_commercial: bool = False
    value_type: Optional[str] = Field(
        None,
        max_length=SEGMENT_MAX,
        description="Auto-metric source: none, crm_pipeline, crm_won, clients_mrr, clients_count"
    )
    created_by: Optional[UUID] = None

    class Config:
        json_schema_extra = {
            "example": {
                "title": "Faturamento trimestral",
                "category": "Financeiro",
                "unit": "R$",
                "target_value": "100000",
                "start_date": "2025-01-01",
                "end_date": "2025-03-31",
                "is_commercial": True,
                "value_type": "crm_won"
            }
        }


class ObjectiveUpdateRequest(BaseModel):
    """Partial update; only the fields sent are changed."""
    title: Optional[str] = Field(None, min_length=1, max_length=NAME_MAX)
    description: Optional[str] = Field(None, max_length=DESCRIPTION_MAX)
    category: Optional[str] = Field(None, max_length=SEGMENT_MAX)
    unit: Optional[ObjectiveUnit] = None
    target_value: Optional[Decimal] = Field(None, ge=VALUE_MIN, le=VALUE_MAX)
    current_value: Optional[Decimal] = Field(None, ge=-VALUE_MAX, le=VALUE_MAX)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: Optional[ObjectiveStatus] = None
    is_commercial: Optional[bool] = None
    value_type: Optional[str] = Field(None, max_length=SEGMENT_MAX)


class ProgressEntryRequest(BaseModel):
    """
    Request to log progress on an objective.

    Either pass `logged_at`, or `month` (and optionally `year`) to backdate the
    entry to a month. `year` without `month` is rejected with a 400. Without
    either, the entry is stamped with the current time.
    """
    value: Decimal = Field(..., ge=-VALUE_MAX, le=VALUE_MAX)
    notes: Optional[str] = Field(None, max_length=NOTES_MAX)
    logged_at: Optional[datetime] = None
    month: Optional[int] = Field(None, ge=1, le=12)
    year: Optional[int] = Field(None, ge=2000, le=2100)
    created_by: Optional[UUID] = None

    class Config:
        json_schema_extra = {
            "example": {
                "value": "2",
                "notes": "Dois contratos fechados",
                "month": 3,
                "year": 2025
            }
        }


class ProgressEntryResponse(BaseModel):
    entry_id: UUID
    objective_id: UUID
    value: Decimal
    notes: Optional[str]
    logged_at: datetime
    created_by: Optional[UUID]

    @classmethod
    def from_domain(cls, entry: ProgressEntry) -> "ProgressEntryResponse":
        return cls(
            entry_id=entry.entry_id,
            objective_id=entry.objective_id,
            value=entry.value,
            notes=entry.notes,
            logged_at=entry.logged_at,
            created_by=entry.created_by,
        )


class ObjectiveResponse(BaseModel):
    objective_id: UUID
    space_id: UUID
    title: str
    description: Optional[str]
    category: Optional[str]
    unit: ObjectiveUnit
    target_value: Optional[Decimal]
    current_value: Decimal
    formatted_value: str
    progress_percent: int
    status: ObjectiveStatus
    start_date: Optional[date]
    end_date: Optional[date]
    is_commercial: bool
    value_type: Optional[str]
    is_auto_linked: bool
    created_by: Optional[UUID]
    created_at: Optional[datetime]
    updated_at: Optional[datetime]
    progress_entries: List[ProgressEntryResponse]

    @classmethod
    def from_domain(cls, objective: Objective) -> "ObjectiveResponse":
        return cls(
            objective_id=objective.objective_id,
            space_id=objective.space_id,
            title=objective.title,
            description=objective.description,
            category=objective.category,
            unit=objective.unit,
            target_value=objective.target_value,
            current_value=objective.current_value,
            formatted_value=format_value(objective.current_value, objective.unit.value),
            progress_percent=progress_percent(objective.current_value, objective.target_value),
            status=objective.status,
            start_date=objective.start_date,
            end_date=objective.end_date,
            is_commercial=objective.is_commercial,
            value_type=objective.value_type,
            is_auto_linked=objective.is_auto_linked,
            created_by=objective.created_by,
            created_at=objective.created_at,
            updated_at=objective.updated_at,
            progress_entries=[
                ProgressEntryResponse.from_domain(entry) for entry in objective.progress_entries
            ],
        )


class LedgerResponse(BaseModel):
    """Result of logging progress: the new entry and the recomputed objective."""
    entry: ProgressEntryResponse
    objective: ObjectiveResponse


class MonthTotalResponse(BaseModel):
    month: int
    entry_count: int
    total: Decimal

    @classmethod
    def from_domain(cls, bucket: MonthTotal) -> "MonthTotalResponse":
        return cls(month=bucket.month, entry_count=bucket.entry_count, total=bucket.total)


class MonthlyProgressResponse(BaseModel):
    objective_id: UUID
    year: int
    months: List[MonthTotalResponse]


class ObjectiveStatsResponse(BaseModel):
    total: int
    em_andamento: int
    concluido: int
    atrasado: int
    pausado: int


# ============================================================================
# Lead Models
# ============================================================================

def _parse_lead_status(value: object) -> object:
    if isinstance(value, str):
        return LeadStatus.parse(value)
    return value


def _parse_client_status(value: object) -> object:
    if isinstance(value, str):
        return ClientStatus.parse(value)
    return value


# Accept stored codes as well as English aliases ("won", "active", ...).
LeadStatusField = Annotated[LeadStatus, BeforeValidator(_parse_lead_status)]
ClientStatusField = Annotated[ClientStatus, BeforeValidator(_parse_client_status)]


class LeadCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=NAME_MAX)
    company: Optional[str] = Field(None, max_length=COMPANY_MAX)
    email: Optional[str] = Field(None, max_length=EMAIL_MAX)
    phone: Optional[str] = Field(None, max_length=PHONE_MAX)
    status: LeadStatusField = LeadStatus.NOVO
    source: Optional[str] = Field(None, max_length=SEGMENT_MAX)
    value: Optional[Decimal] = Field(None, ge=VALUE_MIN, le=VALUE_MAX)
    temperature: LeadTemperature = LeadTemperature.COLD
    notes: Optional[str] = Field(None, max_length=NOTES_MAX)
    created_by: Optional[UUID] = None

    class Config:
        json_schema_extra = {
            "example": {
                "name": "Maria Souza",
                "company": "Acme Ltda",
                "status": "proposta",
                "source": "Indicação",
                "value": "15000",
                "temperature": "hot"
            }
        }


class LeadUpdateRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=NAME_MAX)
    company: Optional[str] = Field(None, max_length=COMPANY_MAX)
    email: Optional[str] = Field(None, max_length=EMAIL_MAX)
    phone: Optional[str] = Field(None, max_length=PHONE_MAX)
    status: Optional[LeadStatusField] = None
    source: Optional[str] = Field(None, max_length=SEGMENT_MAX)
    value: Optional[Decimal] = Field(None, ge=VALUE_MIN, le=VALUE_MAX)
    temperature: Optional[LeadTemperature] = None
    notes: Optional[str] = Field(None, max_length=NOTES_MAX)


class LeadMoveRequest(BaseModel):
    """Move a lead to another pipeline column."""
    status: LeadStatusField


class LeadResponse(BaseModel):
    lead_id: UUID
    space_id: UUID
    name: str
    company: Optional[str]
    email: Optional[str]
    phone: Optional[str]
    status: LeadStatus
    source: Optional[str]
    value: Optional[Decimal]
    temperature: LeadTemperature
    notes: Optional[str]
    created_by: Optional[UUID]
    created_at: Optional[datetime]
    updated_at: Optional[datetime]

    @classmethod
    def from_domain(cls, lead: Lead) -> "LeadResponse":
        return cls(
            lead_id=lead.lead_id,
            space_id=lead.space_id,
            name=lead.name,
            company=lead.company,
            email=lead.email,
            phone=lead.phone,
            status=lead.status,
            source=lead.source,
            value=lead.value,
            temperature=lead.temperature,
            notes=lead.notes,
            created_by=lead.created_by,
            created_at=lead.created_at,
            updated_at=lead.updated_at,
        )


class PipelineColumnResponse(BaseModel):
    status: LeadStatus
    leads: List[LeadResponse]
    total_value: Decimal


class PipelineStatsResponse(BaseModel):
    active_count: int
    active_value: Decimal
    proposals_sent: int
    conversion_rate: int
    won_count: int
    won_value: Decimal


# ============================================================================
# Client Models
# ============================================================================

class ClientCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=NAME_MAX)
    company: Optional[str] = Field(None, max_length=COMPANY_MAX)
    email: Optional[str] = Field(None, max_length=EMAIL_MAX)
    phone: Optional[str] = Field(None, max_length=PHONE_MAX)
    segment: Optional[str] = Field(None, max_length=SEGMENT_MAX)
    status: ClientStatusField = ClientStatus.ATIVO
    monthly_value: Optional[Decimal] = Field(None, ge=VALUE_MIN, le=VALUE_MAX)
    contract_start: Optional[str] = Field(None, max_length=SEGMENT_MAX)
    package: Optional[str] = Field(None, max_length=SEGMENT_MAX)
    notes: Optional[str] = Field(None, max_length=NOTES_MAX)
    created_by: Optional[UUID] = None


class ClientUpdateRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=NAME_MAX)
    company: Optional[str] = Field(None, max_length=COMPANY_MAX)
    email: Optional[str] = Field(None, max_length=EMAIL_MAX)
    phone: Optional[str] = Field(None, max_length=PHONE_MAX)
    segment: Optional[str] = Field(None, max_length=SEGMENT_MAX)
    status: Optional[ClientStatusField] = None
    monthly_value: Optional[Decimal] = Field(None, ge=VALUE_MIN, le=VALUE_MAX)
    contract_start: Optional[str] = Field(None, max_length=SEGMENT_MAX)
    package: Optional[str] = Field(None, max_length=SEGMENT_MAX)
    notes: Optional[str] = Field(None, max_length=NOTES_MAX)


class NPSRecordRequest(BaseModel):
    """NPS answer for a month; month/year default to the current month."""
    score: int = Field(..., ge=NPS_MIN, le=NPS_MAX)
    feedback: Optional[str] = Field(None, max_length=NOTES_MAX)
    month: Optional[int] = Field(None, ge=1, le=12)
    year: Optional[int] = Field(None, ge=2000, le=2100)
    created_by: Optional[UUID] = None


class NPSRecordResponse(BaseModel):
    record_id: UUID
    client_id: UUID
    space_id: UUID
    score: Optional[int]
    feedback: Optional[str]
    recorded_at: datetime

    @classmethod
    def from_domain(cls, record: NPSRecord) -> "NPSRecordResponse":
        return cls(
            record_id=record.record_id,
            client_id=record.client_id,
            space_id=record.space_id,
            score=record.score,
            feedback=record.feedback,
            recorded_at=record.recorded_at,
        )


class ClientResponse(BaseModel):
    client_id: UUID
    space_id: UUID
    name: str
    company: Optional[str]
    email: Optional[str]
    phone: Optional[str]
    segment: Optional[str]
    status: ClientStatus
    monthly_value: Optional[Decimal]
    contract_start: Optional[str]
    package: Optional[str]
    notes: Optional[str]
    created_at: Optional[datetime]
    updated_at: Optional[datetime]
    latest_nps: Optional[int]
    average_nps: Decimal
    nps_history: List[NPSRecordResponse]

    @classmethod
    def from_domain(cls, client: Client) -> "ClientResponse":
        return cls(
            client_id=client.client_id,
            space_id=client.space_id,
            name=client.name,
            company=client.company,
            email=client.email,
            phone=client.phone,
            segment=client.segment,
            status=client.status,
            monthly_value=client.monthly_value,
            contract_start=client.contract_start,
            package=client.package,
            notes=client.notes,
            created_at=client.created_at,
            updated_at=client.updated_at,
            latest_nps=latest_nps(client.nps_history),
            average_nps=average_nps(client.nps_history),
            nps_history=[NPSRecordResponse.from_domain(r) for r in client.nps_history],
        )


class ClientStatsResponse(BaseModel):
    active_count: int
    inactive_count: int
    churn_count: int
    total_mrr: Decimal
    average_ticket: Decimal
    average_nps: Decimal


# ============================================================================
# Error Models
# ============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str
    detail: Optional[str] = None
    status_code: int

    class Config:
        json_schema_extra = {
            "example": {
                "error": "Not found",
                "detail": "Objective not found: 123e4567-e89b-12d3-a456-426614174000",
                "status_code": 404
            }
        }
