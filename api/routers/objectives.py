"""
Objectives API Endpoints.

Strategic objectives, their progress ledger and the monthly progress grid.
"""

from datetime import datetime, timezone
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response

from api.dependencies import Services, get_services
from api.models import (
    LedgerResponse,
    MonthlyProgressResponse,
    MonthTotalResponse,
    ObjectiveCreateRequest,
    ObjectiveResponse,
    ObjectiveStatsResponse,
    ObjectiveUpdateRequest,
    ProgressEntryRequest,
    ProgressEntryResponse,
)
from domain.time import month_anchor, utc_now

router = APIRouter()


def _resolve_logged_at(request: ProgressEntryRequest) -> Optional[datetime]:
    """
    Explicit timestamp wins; otherwise month/year backdating; otherwise None (now).

    A year without a month is rejected.
    """

    if request.logged_at is not None:
        if request.logged_at.tzinfo is None:
            raise ValueError("logged_at must be timezone-aware")
        return request.logged_at.astimezone(timezone.utc)
    if request.year is not None and request.month is None:
        raise ValueError("year requires month")
    if request.month is not None:
        year = request.year if request.year is not None else utc_now().year
        return month_anchor(year, request.month)
    return None


@router.get(
    "/spaces/{space_id}/objectives",
    response_model=List[ObjectiveResponse],
    summary="List Objectives",
    description="List the objectives of a space. Auto-linked objectives are recomputed on every read."
)
def list_objectives(space_id: UUID, services: Services = Depends(get_services)):
    return [ObjectiveResponse.from_domain(o) for o in services.objectives.list_objectives(space_id)]


@router.post(
    "/spaces/{space_id}/objectives",
    response_model=ObjectiveResponse,
    status_code=201,
    summary="Create Objective",
)
def create_objective(
    space_id: UUID,
    request: ObjectiveCreateRequest,
    services: Services = Depends(get_services),
):
    """
    Create an objective.

    **Auto-linked objectives:**
    When `is_commercial` is true and `value_type` names a data source
    (`crm_pipeline`, `crm_won`, `clients_mrr`, `clients_count`), the current
    value is computed from the space's leads or clients instead of the
    progress ledger.
    """
    objective = services.objectives.create_objective(
        space_id,
        request.title,
        unit=request.unit,
        target_value=request.target_value,
        description=request.description,
        category=request.category,
        start_date=request.start_date,
        end_date=request.end_date,
        is_commercial=request.is_commercial,
        value_type=request.value_type,
        created_by=request.created_by,
    )
    return ObjectiveResponse.from_domain(objective)


@router.get(
    "/spaces/{space_id}/objectives/stats",
    response_model=ObjectiveStatsResponse,
    summary="Objective Statistics",
)
def objective_stats(space_id: UUID, services: Services = Depends(get_services)):
    stats = services.objectives.objective_stats(space_id)
    return ObjectiveStatsResponse(
        total=stats.total,
        em_andamento=stats.em_andamento,
        concluido=stats.concluido,
        atrasado=stats.atrasado,
        pausado=stats.pausado,
    )


@router.get("/objectives/{objective_id}", response_model=ObjectiveResponse, summary="Get Objective")
def get_objective(objective_id: UUID, services: Services = Depends(get_services)):
    return ObjectiveResponse.from_domain(services.objectives.get_objective(objective_id))


@router.patch(
    "/objectives/{objective_id}",
    response_model=ObjectiveResponse,
    summary="Update Objective",
    description="Partial update. Changing current_value, target_value, end_date, is_commercial or value_type re-classifies the status."
)
def update_objective(
    objective_id: UUID,
    request: ObjectiveUpdateRequest,
    services: Services = Depends(get_services),
):
    changes = request.model_dump(exclude_unset=True)
    return ObjectiveResponse.from_domain(services.objectives.update_objective(objective_id, changes))


@router.delete("/objectives/{objective_id}", status_code=204, summary="Delete Objective")
def delete_objective(objective_id: UUID, services: Services = Depends(get_services)):
    services.objectives.delete_objective(objective_id)
    return Response(status_code=204)


@router.post(
    "/objectives/{objective_id}/progress",
    response_model=LedgerResponse,
    status_code=201,
    summary="Log Progress",
)
def add_progress(
    objective_id: UUID,
    request: ProgressEntryRequest,
    services: Services = Depends(get_services),
):
    """
    Append a progress entry and return it with the recomputed objective.

    **Example request (backdated to March 2025):**
    ```json
    {"value": "2", "notes": "Dois contratos fechados", "month": 3, "year": 2025}
    ```
    """
    result = services.objectives.add_entry(
        objective_id,
        request.value,
        notes=request.notes,
        logged_at=_resolve_logged_at(request),
        created_by=request.created_by,
    )
    return LedgerResponse(
        entry=ProgressEntryResponse.from_domain(result.entry),
        objective=ObjectiveResponse.from_domain(result.objective),
    )


@router.delete(
    "/objectives/{objective_id}/progress/{entry_id}",
    response_model=ObjectiveResponse,
    summary="Remove Progress Entry",
    description="Delete a progress entry and return the recomputed objective."
)
def remove_progress(
    objective_id: UUID,
    entry_id: UUID,
    services: Services = Depends(get_services),
):
    return ObjectiveResponse.from_domain(services.objectives.remove_entry(objective_id, entry_id))


@router.get(
    "/objectives/{objective_id}/monthly",
    response_model=MonthlyProgressResponse,
    summary="Monthly Progress Grid",
)
def monthly_progress(
    objective_id: UUID,
    year: Optional[int] = Query(None, ge=2000, le=2100),
    services: Services = Depends(get_services),
):
    selected_year = year if year is not None else utc_now().year
    months = services.objectives.monthly_progress(objective_id, selected_year)
    return MonthlyProgressResponse(
        objective_id=objective_id,
        year=selected_year,
        months=[MonthTotalResponse.from_domain(m) for m in months],
    )
