from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import Response

from legaldesk.accounts.api import router as users_router
from legaldesk.accounts.schemas import PrincipalRead
from legaldesk.api.deps import get_current_principal
from legaldesk.cases.api import router as cases_router
from legaldesk.catalog.api import practice_areas_router, services_router
from legaldesk.clients.api import router as clients_router
from legaldesk.complaints.api import router as complaints_router
from legaldesk.consultations.api import router as consultations_router
from legaldesk.core.config import get_settings
from legaldesk.invoices.api import router as invoices_router
from legaldesk.metrics import generate_metrics_payload, metrics_content_type
from legaldesk.platform.security import Principal
from legaldesk.registrations.api import router as registrations_router
from legaldesk.subscriptions.api import router as subscriptions_router

router = APIRouter()
router.include_router(cases_router)
router.include_router(clients_router)
router.include_router(users_router)
router.include_router(complaints_router)
router.include_router(subscriptions_router)
router.include_router(consultations_router)
router.include_router(practice_areas_router)
router.include_router(services_router)
router.include_router(registrations_router)
router.include_router(invoices_router)


@router.get("/health", tags=["system"])
def health() -> dict[str, str]:
    settings = get_settings()
    return {
        "status": "ok",
        "service": settings.app_name,
        "environment": settings.app_env,
    }


@router.get("/me", tags=["auth"], response_model=PrincipalRead)
def me(principal: Principal = Depends(get_current_principal)) -> PrincipalRead:
    return PrincipalRead(
        user_id=principal.user_id,
        role=principal.role,
        linked_owner_id=principal.linked_owner_id,
        email=principal.email,
    )


@router.get("/metrics", tags=["system"])
def metrics(principal: Principal = Depends(get_current_principal)) -> Response:
    settings = get_settings()
    if not settings.metrics_enabled:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="not found")
    if principal.role != "admin":
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient role")
    return Response(content=generate_metrics_payload(), media_type=metrics_content_type())
