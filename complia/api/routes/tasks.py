"""Task generation endpoint."""

from datetime import date

from fastapi import APIRouter, Response, status

from complia.api.dependencies import Generator, Tenant
from complia.api.schemas.scheduling import GenerateTasksRequest, GenerateTasksResponse

router = APIRouter(prefix="/tasks", tags=["tasks"])


@router.post(
    "/generate",
    response_model=GenerateTasksResponse,
    responses={status.HTTP_201_CREATED: {"model": GenerateTasksResponse}},
)
async def generate_tasks(
    body: GenerateTasksRequest,
    tenant: Tenant,
    generator: Generator,
    response: Response,
) -> GenerateTasksResponse:
    """Create the missing compliance tasks for an entity and year.

    Returns 201 when at least one task was created and 200 otherwise.
    """
    result = await generator.generate(
        tenant_id=tenant.tenant_id,
        entity_id=body.entity_id,
        year=body.year if body.year is not None else date.today().year,
        compliance_ids=body.compliance_ids,
        actor_id=tenant.user_id,
    )
    response.status_code = (
        status.HTTP_201_CREATED if result.tasks_created else status.HTTP_200_OK
    )
    return GenerateTasksResponse(
        tasks_created=result.tasks_created, message=result.message
    )
