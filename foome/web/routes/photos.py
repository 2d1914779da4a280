"""Employee admission photo routes."""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import APIRouter, Depends, File, UploadFile

from foome.access.context import ResourceTenancy, TenancyContext
from foome.access.policy import Action, enforce
from foome.config.settings import get_settings
from foome.exceptions import NotFoundError, ValidationError
from foome.services.employees import EmployeeService
from foome.services.photos import IMAGE_EXTENSIONS, PhotoService
from foome.web.dependencies import (
    get_employee_service,
    get_photo_service,
    load_employee,
    require_tenancy,
)
from foome.web.responses import dump, ok
from foome.web.routes.documents import read_upload

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/employees/{employee_id}/photo", tags=["photos"])


@router.get("")
async def get_photo(
    employee_id: str,
    tenancy: TenancyContext = Depends(require_tenancy),
    employees: EmployeeService = Depends(get_employee_service),
    photos: PhotoService = Depends(get_photo_service),
) -> dict[str, Any]:
    employee = await load_employee(employees, employee_id)
    enforce(tenancy, ResourceTenancy(employee.company_id, employee.id), Action.PHOTO_VIEW)
    photo = await photos.get(employee.id)
    if photo is None:
        raise NotFoundError("Photo not found")
    return ok(dump(photo))


@router.put("")
async def upload_photo(
    employee_id: str,
    file: UploadFile = File(),
    tenancy: TenancyContext = Depends(require_tenancy),
    employees: EmployeeService = Depends(get_employee_service),
    photos: PhotoService = Depends(get_photo_service),
) -> dict[str, Any]:
    employee = await load_employee(employees, employee_id)
    enforce(tenancy, ResourceTenancy(employee.company_id, employee.id), Action.PHOTO_UPLOAD)
    if file.content_type not in IMAGE_EXTENSIONS:
        raise ValidationError(
            "Unsupported image type",
            details={"allowed": sorted(IMAGE_EXTENSIONS), "received": file.content_type},
        )
    content = await read_upload(file, get_settings().max_upload_bytes)
    photo = await photos.replace(employee, content, file.content_type)
    return ok(dump(photo), message="Photo uploaded")


@router.delete("")
async def delete_photo(
    employee_id: str,
    tenancy: TenancyContext = Depends(require_tenancy),
    employees: EmployeeService = Depends(get_employee_service),
    photos: PhotoService = Depends(get_photo_service),
) -> dict[str, Any]:
    employee = await load_employee(employees, employee_id)
    enforce(tenancy, ResourceTenancy(employee.company_id, employee.id), Action.PHOTO_DELETE)
    photo = await photos.get(employee.id)
    if photo is None:
        raise NotFoundError("Photo not found")
    await photos.delete(photo)
    return ok(message="Photo deleted")
