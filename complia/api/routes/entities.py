"""Entity onboarding and applicability endpoints."""

from fastapi import APIRouter

from complia.api.dependencies import Assignments, Tenant
from complia.api.schemas.scheduling import (
    ApplicableComplianceOut,
    ApplicableCompliancesResponse,
    AssignCompliancesResponse,
)

router = APIRouter(prefix="/entities", tags=["entities"])


@router.post("/{entity_id}/compliances/assign", response_model=AssignCompliancesResponse)
async def assign_compliances(
    entity_id: int, tenant: Tenant, service: Assignments
) -> AssignCompliancesResponse:
    """Link the entity to every active compliance matching its type."""
    assigned = await service.assign_for(tenant.tenant_id, entity_id, tenant.user_id)
    return AssignCompliancesResponse(assigned=assigned)


@router.get(
    "/{entity_id}/applicable-compliances",
    response_model=ApplicableCompliancesResponse,
)
async def applicable_compliances(
    entity_id: int, tenant: Tenant, service: Assignments
) -> ApplicableCompliancesResponse:
    items = await service.applicable_for(tenant.tenant_id, entity_id)
    return ApplicableCompliancesResponse(
        entity_id=entity_id,
        compliances=[ApplicableComplianceOut.from_domain(item) for item in items],
    )
