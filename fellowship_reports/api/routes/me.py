"""Current user endpoint."""

from fastapi import APIRouter, Depends

from fellowship_reports.core.auth import RequestUserContext, get_current_user_context

router = APIRouter(prefix="/me", tags=["me"])


@router.get("")
def get_me(context: RequestUserContext = Depends(get_current_user_context)) -> dict[str, object]:
    """Return current authenticated user and organizational assignment."""

    return {
        "id": str(context.user_id),
        "email": context.email,
        "name": context.name,
        "role": context.role.value,
        "fellowship_id": str(context.fellowship_id) if context.fellowship_id is not None else None,
        "zone_id": str(context.zone_id) if context.zone_id is not None else None,
    }
