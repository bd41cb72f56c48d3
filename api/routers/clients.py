"""
Clients API Endpoints.

Client roster, monthly NPS records and roster statistics.
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Response

from api.dependencies import Services, get_services
from api.models import (
    ClientCreateRequest,
    ClientResponse,
    ClientStatsResponse,
    ClientUpdateRequest,
    NPSRecordRequest,
    NPSRecordResponse,
)

router = APIRouter()


@router.get("/spaces/{space_id}/clients", response_model=List[ClientResponse], summary="List Clients")
def list_clients(space_id: UUID, services: Services = Depends(get_services)):
    return [ClientResponse.from_domain(c) for c in services.clients.list_clients(space_id)]


@router.post(
    "/spaces/{space_id}/clients",
    response_model=ClientResponse,
    status_code=201,
    summary="Create Client",
)
def create_client(space_id: UUID, request: ClientCreateRequest, services: Services = Depends(get_services)):
    client = services.clients.create_client(
        space_id,
        request.name,
        status=request.status,
        monthly_value=request.monthly_value,
        company=request.company,
        email=request.email,
        phone=request.phone,
        segment=request.segment,
        contract_start=request.contract_start,
        package=request.package,
        notes=request.notes,
        created_by=request.created_by,
    )
    return ClientResponse.from_domain(client)


@router.get(
    "/spaces/{space_id}/clients/stats",
    response_model=ClientStatsResponse,
    summary="Client Roster Statistics",
)
def client_stats(space_id: UUID, services: Services = Depends(get_services)):
    stats = services.clients.client_stats(space_id)
    return ClientStatsResponse(
        active_count=stats.active_count,
        inactive_count=stats.inactive_count,
        churn_count=stats.churn_count,
        total_mrr=stats.total_mrr,
        average_ticket=stats.average_ticket,
        average_nps=stats.average_nps,
    )


@router.get("/clients/{client_id}", response_model=ClientResponse, summary="Get Client")
def get_client(client_id: UUID, services: Services = Depends(get_services)):
    return ClientResponse.from_domain(services.clients.get_client(client_id))


@router.patch("/clients/{client_id}", response_model=ClientResponse, summary="Update Client")
def update_client(client_id: UUID, request: ClientUpdateRequest, services: Services = Depends(get_services)):
    changes = request.model_dump(exclude_unset=True)
    return ClientResponse.from_domain(services.clients.update_client(client_id, changes))


@router.delete("/clients/{client_id}", status_code=204, summary="Delete Client")
def delete_client(client_id: UUID, services: Services = Depends(get_services)):
    services.clients.delete_client(client_id)
    return Response(status_code=204)


@router.post(
    "/clients/{client_id}/nps",
    response_model=NPSRecordResponse,
    status_code=201,
    summary="Record NPS",
    description="Record an NPS score (0-10) for a month; defaults to the current month."
)
def add_nps_record(client_id: UUID, request: NPSRecordRequest, services: Services = Depends(get_services)):
    record = services.clients.add_nps_record(
        client_id,
        request.score,
        feedback=request.feedback,
        month=request.month,
        year=request.year,
        created_by=request.created_by,
    )
    return NPSRecordResponse.from_domain(record)


@router.delete("/clients/{client_id}/nps/{record_id}", status_code=204, summary="Delete NPS Record")
def delete_nps_record(client_id: UUID, record_id: UUID, services: Services = Depends(get_services)):
    services.clients.delete_nps_record(client_id, record_id)
    return Response(status_code=204)
