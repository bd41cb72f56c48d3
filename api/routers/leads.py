"""
Leads API Endpoints.

CRM pipeline: lead CRUD, Kanban moves and pipeline statistics.
"""

from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from api.dependencies import Services, get_services
from api.models import (
    LeadCreateRequest,
    LeadMoveRequest,
    LeadResponse,
    LeadUpdateRequest,
    PipelineColumnResponse,
    PipelineStatsResponse,
)
from domain.lead import LeadStatus
from domain.numbers import decimal_or_zero

router = APIRouter()


@router.get("/spaces/{space_id}/leads", response_model=List[LeadResponse], summary="List Leads")
def list_leads(
    space_id: UUID,
    status: Optional[str] = Query(None, description="Filter by pipeline status"),
    services: Services = Depends(get_services),
):
    try:
        status_filter = LeadStatus.parse(status) if status else None
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return [LeadResponse.from_domain(lead) for lead in services.pipeline.list_leads(space_id, status_filter)]


@router.post(
    "/spaces/{space_id}/leads",
    response_model=LeadResponse,
    status_code=201,
    summary="Create Lead",
)
def create_lead(space_id: UUID, request: LeadCreateRequest, services: Services = Depends(get_services)):
    lead = services.pipeline.create_lead(
        space_id,
        request.name,
        status=request.status,
        value=request.value,
        temperature=request.temperature,
        company=request.company,
        email=request.email,
        phone=request.phone,
        source=request.source,
        notes=request.notes,
        created_by=request.created_by,
    )
    return LeadResponse.from_domain(lead)


@router.get(
    "/spaces/{space_id}/pipeline/stats",
    response_model=PipelineStatsResponse,
    summary="Pipeline Statistics",
)
def pipeline_stats(space_id: UUID, services: Services = Depends(get_services)):
    stats = services.pipeline.pipeline_stats(space_id)
    return PipelineStatsResponse(
        active_count=stats.active_count,
        active_value=stats.active_value,
        proposals_sent=stats.proposals_sent,
        conversion_rate=stats.conversion_rate,
        won_count=stats.won_count,
        won_value=stats.won_value,
    )


@router.get(
    "/spaces/{space_id}/pipeline/board",
    response_model=List[PipelineColumnResponse],
    summary="Pipeline Board",
    description="Leads grouped by status, in pipeline column order."
)
def pipeline_board(space_id: UUID, services: Services = Depends(get_services)):
    return [
        PipelineColumnResponse(
            status=status,
            leads=[LeadResponse.from_domain(lead) for lead in leads],
            total_value=sum((decimal_or_zero(lead.value) for lead in leads), Decimal("0")),
        )
        for status, leads in services.pipeline.board(space_id).items()
    ]


@router.get("/leads/{lead_id}", response_model=LeadResponse, summary="Get Lead")
def get_lead(lead_id: UUID, services: Services = Depends(get_services)):
    return LeadResponse.from_domain(services.pipeline.get_lead(lead_id))


@router.patch("/leads/{lead_id}", response_model=LeadResponse, summary="Update Lead")
def update_lead(lead_id: UUID, request: LeadUpdateRequest, services: Services = Depends(get_services)):
    changes = request.model_dump(exclude_unset=True)
    return LeadResponse.from_domain(services.pipeline.update_lead(lead_id, changes))


@router.post("/leads/{lead_id}/move", response_model=LeadResponse, summary="Move Lead")
def move_lead(lead_id: UUID, request: LeadMoveRequest, services: Services = Depends(get_services)):
    return LeadResponse.from_domain(services.pipeline.move_lead(lead_id, request.status))


@router.delete("/leads/{lead_id}", status_code=204, summary="Delete Lead")
def delete_lead(lead_id: UUID, services: Services = Depends(get_services)):
    services.pipeline.delete_lead(lead_id)
    return Response(status_code=204)
