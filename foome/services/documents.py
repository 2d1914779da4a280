"""Employee documents: metadata rows plus blobs in the object store."""

from __future__ import annotations

import re
import uuid
from datetime import date
from typing import Any

import structlog
from sqlalchemy import or_
from sqlmodel import col, select
from sqlmodel.ext.asyncio.session import AsyncSession  # noqa: TC002 - runtime DI type

from foome.models.database import Employee, EmployeeDocument, _utc_now
from foome.storage.object_store import ObjectStore  # noqa: TC001 - runtime DI type

logger = structlog.get_logger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def safe_file_name(file_name: str) -> str:
    """Strip directories and characters that do not belong in an object key."""
    base = file_name.replace("\\", "/").rsplit("/", 1)[-1]
    cleaned = _UNSAFE_CHARS.sub("_", base).strip("._")
    return cleaned[:120] or "file"


def document_key(company_id: str, employee_id: str, file_name: str) -> str:
    return f"documents/{company_id}/{employee_id}/{uuid.uuid4()}-{safe_file_name(file_name)}"


class DocumentService:
    def __init__(self, db: AsyncSession, store: ObjectStore) -> None:
        self._db = db
        self._store = store

    async def get(self, document_id: str) -> tuple[EmployeeDocument, Employee] | None:
        """Fetch a document with its owning employee (for tenancy checks)."""
        stmt = (
            select(EmployeeDocument, Employee)
            .join(Employee, col(Employee.id) == col(EmployeeDocument.employee_id))
            .where(col(EmployeeDocument.id) == document_id)
        )
        row = (await self._db.execute(stmt)).first()
        if row is None:
            return None
        document, employee = row
        return document, employee

    async def list_all(
        self,
        company_id: str,
        employee_id: str | None = None,
        status: str | None = None,
        doc_type: str | None = None,
        search: str | None = None,
    ) -> list[dict[str, Any]]:
        stmt = (
            select(EmployeeDocument, Employee)
            .join(Employee, col(Employee.id) == col(EmployeeDocument.employee_id))
            .where(col(Employee.company_id) == company_id)
        )
        if employee_id:
            stmt = stmt.where(col(EmployeeDocument.employee_id) == employee_id)
        if status:
            stmt = stmt.where(col(EmployeeDocument.status) == status)
        if doc_type:
            stmt = stmt.where(col(EmployeeDocument.type) == doc_type)
        if search:
            pattern = f"%{search}%"
            stmt = stmt.where(
                or_(
                    col(EmployeeDocument.name).ilike(pattern),
                    col(EmployeeDocument.file_name).ilike(pattern),
                    col(Employee.full_name).ilike(pattern),
                )
            )
        stmt = stmt.order_by(col(EmployeeDocument.created_at).desc())
        rows = (await self._db.execute(stmt)).all()
        return [
            {
                **doc.model_dump(mode="json"),
                "employee": {"id": emp.id, "full_name": emp.full_name},
            }
            for doc, emp in rows
        ]

    async def create(
        self,
        employee: Employee,
        *,
        name: str,
        doc_type: str,
        file_name: str,
        content: bytes,
        content_type: str | None,
        expiration_date: date | None,
        uploaded_by: str,
    ) -> EmployeeDocument:
        """Store the blob, then the row. The blob is removed again if the row fails."""
        key = document_key(employee.company_id, employee.id, file_name)
        await self._store.put(key, content, content_type=content_type)

        document = EmployeeDocument(
            employee_id=employee.id,
            name=name,
            type=doc_type,
            file_path=key,
            file_name=safe_file_name(file_name),
            file_type=content_type,
            file_size=len(content),
            expiration_date=expiration_date,
            uploaded_by=uploaded_by,
        )
        self._db.add(document)
        try:
            await self._db.commit()
        except Exception:
            await self._db.rollback()
            await self._store.delete(key)
            raise
        await self._db.refresh(document)
        logger.info(
            "document_uploaded",
            document_id=document.id,
            employee_id=employee.id,
            size=len(content),
        )
        return document

    async def update(self, document: EmployeeDocument, data: dict[str, Any]) -> EmployeeDocument:
        for key, value in data.items():
            setattr(document, key, value)
        document.updated_at = _utc_now()
        self._db.add(document)
        await self._db.commit()
        await self._db.refresh(document)
        logger.info("document_updated", document_id=document.id, fields=sorted(data))
        return document

    async def delete(self, document: EmployeeDocument) -> None:
        doc_id, key = document.id, document.file_path
        await self._db.delete(document)
        await self._db.commit()
        await self._store.delete(key)
        logger.info("document_deleted", document_id=doc_id)

    async def read_blob(self, document: EmployeeDocument) -> bytes | None:
        return await self._store.get(document.file_path)

    def public_url(self, document: EmployeeDocument) -> str:
        return self._store.public_url(document.file_path)
