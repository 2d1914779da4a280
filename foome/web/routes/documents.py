"""Employee document routes: upload, review, download."""

from __future__ import annotations

from datetime import date
from typing import Any
from urllib.parse import quote

import structlog
from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from fastapi.responses import Response

from foome.access.context import ResourceTenancy, TenancyContext
from foome.access.policy import Action, enforce
from foome.config.settings import get_settings
from foome.exceptions import NotFoundError, ValidationError
from foome.models.api import DocumentPatch, DocumentPut
from foome.models.database import Employee, EmployeeDocument
from foome.services.documents import DocumentService
from foome.services.employees import EmployeeService
from foome.types import DocumentStatus, DocumentType
from foome.web.dependencies import (
    get_document_service,
    get_employee_service,
    load_employee,
    require_tenancy,
)
from foome.web.responses import dump, ok

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/documents", tags=["documents"])


async def _load_document(
    documents: DocumentService, document_id: str
) -> tuple[EmployeeDocument, Employee]:
    found = await documents.get(document_id)
    if found is None:
        raise NotFoundError("Document not found")
    return found


async def read_upload(upload: UploadFile, max_bytes: int) -> bytes:
    """Read an upload fully, rejecting empty and oversized files."""
    content = await upload.read(max_bytes + 1)
    if not content:
        raise ValidationError("Uploaded file is empty")
    if len(content) > max_bytes:
        raise ValidationError("Uploaded file is too large", details={"max_bytes": max_bytes})
    return content


@router.get("")
async def list_documents(
    employee_id: str | None = Query(default=None, alias="employeeId"),
    status: DocumentStatus | None = Query(default=None),
    doc_type: DocumentType | None = Query(default=None, alias="type"),
    search: str | None = Query(default=None, max_length=100),
    tenancy: TenancyContext = Depends(require_tenancy),
    documents: DocumentService = Depends(get_document_service),
    employees: EmployeeService = Depends(get_employee_service),
) -> dict[str, Any]:
    """Admins see the whole company (or one employee); others only their own documents."""
    scope_employee_id = employee_id
    if scope_employee_id is None and not tenancy.is_admin:
        scope_employee_id = tenancy.employee_id
    if scope_employee_id is not None:
        employee = await load_employee(employees, scope_employee_id)
        enforce(tenancy, ResourceTenancy(employee.company_id, employee.id), Action.DOCUMENT_VIEW)

    rows = await documents.list_all(
        tenancy.company_id,
        employee_id=scope_employee_id,
        status=status.value if status else None,
        doc_type=doc_type.value if doc_type else None,
        search=search,
    )
    return ok(rows, message=f"{len(rows)} documents found")


@router.post("", status_code=201)
async def upload_document(
    name: str = Form(min_length=1, max_length=200),
    doc_type: DocumentType = Form(alias="type"),
    employee_id: str = Form(min_length=1),
    expiration_date: date | None = Form(default=None),
    file: UploadFile = File(),
    tenancy: TenancyContext = Depends(require_tenancy),
    documents: DocumentService = Depends(get_document_service),
    employees: EmployeeService = Depends(get_employee_service),
) -> dict[str, Any]:
    employee = await load_employee(employees, employee_id)
    enforce(tenancy, ResourceTenancy(employee.company_id, employee.id), Action.DOCUMENT_CREATE)
    content = await read_upload(file, get_settings().max_upload_bytes)
    document = await documents.create(
        employee,
        name=name,
        doc_type=doc_type.value,
        file_name=file.filename or "document",
        content=content,
        content_type=file.content_type,
        expiration_date=expiration_date,
        uploaded_by=tenancy.employee_id,
    )
    return ok(
        {**dump(document), "url": documents.public_url(document)},
        message="Document uploaded",
    )


@router.get("/{document_id}")
async def get_document(
    document_id: str,
    tenancy: TenancyContext = Depends(require_tenancy),
    documents: DocumentService = Depends(get_document_service),
) -> dict[str, Any]:
    document, employee = await _load_document(documents, document_id)
    enforce(tenancy, ResourceTenancy(employee.company_id, employee.id), Action.DOCUMENT_VIEW)
    return ok(
        {
            **dump(document),
            "url": documents.public_url(document),
            "employee": {"id": employee.id, "full_name": employee.full_name},
        }
    )


@router.patch("/{document_id}")
async def patch_document(
    document_id: str,
    body: DocumentPatch,
    tenancy: TenancyContext = Depends(require_tenancy),
    documents: DocumentService = Depends(get_document_service),
) -> dict[str, Any]:
    document, employee = await _load_document(documents, document_id)
    resource = ResourceTenancy(employee.company_id, employee.id)
    enforce(tenancy, resource, Action.DOCUMENT_EDIT)
    data = body.model_dump(exclude_unset=True)
    if "status" in data:
        enforce(tenancy, resource, Action.DOCUMENT_REVIEW)
    document = await documents.update(document, data)
    return ok(dump(document), message="Document updated")


@router.put("/{document_id}")
async def replace_document(
    document_id: str,
    body: DocumentPut,
    tenancy: TenancyContext = Depends(require_tenancy),
    documents: DocumentService = Depends(get_document_service),
) -> dict[str, Any]:
    document, employee = await _load_document(documents, document_id)
    enforce(tenancy, ResourceTenancy(employee.company_id, employee.id), Action.DOCUMENT_REPLACE)
    document = await documents.update(document, body.model_dump())
    return ok(dump(document), message="Document updated")


@router.delete("/{document_id}")
async def delete_document(
    document_id: str,
    tenancy: TenancyContext = Depends(require_tenancy),
    documents: DocumentService = Depends(get_document_service),
) -> dict[str, Any]:
    document, employee = await _load_document(documents, document_id)
    enforce(tenancy, ResourceTenancy(employee.company_id, employee.id), Action.DOCUMENT_DELETE)
    await documents.delete(document)
    return ok(message="Document deleted")


@router.get("/{document_id}/download")
async def download_document(
    document_id: str,
    tenancy: TenancyContext = Depends(require_tenancy),
    documents: DocumentService = Depends(get_document_service),
) -> Response:
    document, employee = await _load_document(documents, document_id)
    enforce(tenancy, ResourceTenancy(employee.company_id, employee.id), Action.DOCUMENT_VIEW)
    content = await documents.read_blob(document)
    if content is None:
        raise NotFoundError("Document file not found")
    logger.info("document_downloaded", document_id=document.id, employee_id=employee.id)
    return Response(
        content=content,
        media_type=document.file_type or "application/octet-stream",
        headers={
            "Content-Disposition": f"attachment; filename*=UTF-8''{quote(document.file_name)}"
        },
    )
