"""Invoice router - contractor settings, templates and invoice endpoints."""
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from timesheet_service.database import get_database
from timesheet_service.errors import MissingSettingsError, MissingTemplateError
from timesheet_service.models.invoice import (
    ContractorSettings,
    ContractorSettingsUpdate,
    InvoiceTemplate,
    InvoiceTemplateCreate,
    InvoiceTemplateUpdate,
    InvoiceView,
)
from timesheet_service.models.user import User
from timesheet_service.routers.auth import get_active_user
from timesheet_service.services.invoice_service import InvoiceService
from timesheet_service.utils.week import week_start_for

router = APIRouter(prefix="/invoice", tags=["invoice"])


@router.get("/settings", response_model=Optional[ContractorSettings])
async def get_settings(
    user: User = Depends(get_active_user),
    db=Depends(get_database),
):
    """Get contractor settings, or null if not set up yet."""
    service = InvoiceService(db)
    return await service.get_settings(user_id=user.id)


@router.put("/settings", response_model=ContractorSettings)
async def save_settings(
    settings_update: ContractorSettingsUpdate,
    user: User = Depends(get_active_user),
    db=Depends(get_database),
):
    """Create or replace contractor settings."""
    service = InvoiceService(db)
    return await service.upsert_settings(user_id=user.id, settings_update=settings_update)


@router.get("/templates", response_model=list[InvoiceTemplate])
async def list_templates(
    user: User = Depends(get_active_user),
    db=Depends(get_database),
):
    """List active templates, default first then by name."""
    service = InvoiceService(db)
    return await service.list_templates(user_id=user.id)


@router.post("/templates", response_model=InvoiceTemplate, status_code=status.HTTP_201_CREATED)
async def create_template(
    template: InvoiceTemplateCreate,
    user: User = Depends(get_active_user),
    db=Depends(get_database),
):
    """
    Create an invoice template.

    - Creating it as default replaces any previous default
    """
    service = InvoiceService(db)
    return await service.create_template(user_id=user.id, template_create=template)


@router.get("/templates/{template_id}", response_model=InvoiceTemplate)
async def get_template(
    template_id: str,
    user: User = Depends(get_active_user),
    db=Depends(get_database),
):
    """
    Get a template by ID.

    Raises:
        HTTPException: If template not found (404)
    """
    service = InvoiceService(db)

    try:
        return await service.get_template(user_id=user.id, template_id=template_id)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e),
        )


@router.patch("/templates/{template_id}", response_model=InvoiceTemplate)
async def update_template(
    template_id: str,
    template_update: InvoiceTemplateUpdate,
    user: User = Depends(get_active_user),
    db=Depends(get_database),
):
    """
    Update a template.

    Raises:
        HTTPException: If template not found (404)
    """
    service = InvoiceService(db)

    try:
        return await service.update_template(
            user_id=user.id,
            template_id=template_id,
            template_update=template_update,
        )
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e),
        )


@router.delete("/templates/{template_id}")
async def delete_template(
    template_id: str,
    user: User = Depends(get_active_user),
    db=Depends(get_database),
):
    """
    Permanently delete a template.

    Raises:
        HTTPException: If template not found (404)
    """
    service = InvoiceService(db)

    try:
        return await service.delete_template(user_id=user.id, template_id=template_id)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e),
        )


@router.get("/{day}", response_model=InvoiceView)
async def get_invoice(
    day: date,
    template_id: Optional[str] = Query(None, description="Template to invoice with"),
    user: User = Depends(get_active_user),
    db=Depends(get_database),
):
    """
    Compute the invoice for the week containing ``day``.

    - Uses the requested template, else the default, else the first one
    - Invoice number is regenerated on every request

    Raises:
        HTTPException: If settings or templates are missing (409) or the
            week has no working hours (400)
    """
    service = InvoiceService(db)

    try:
        return await service.build_invoice(
            user_id=user.id,
            week_start=week_start_for(day),
            template_id=template_id,
        )
    except (MissingSettingsError, MissingTemplateError) as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"{e}. Set up invoice settings and templates first.",
        )
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )
