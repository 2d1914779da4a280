"""Employee admission photos."""

from __future__ import annotations

import uuid

import structlog
from sqlmodel import col, select
from sqlmodel.ext.asyncio.session import AsyncSession  # noqa: TC002 - runtime DI type

from foome.models.database import Employee, EmployeePhoto, _utc_now
from foome.storage.object_store import ObjectStore  # noqa: TC001 - runtime DI type

logger = structlog.get_logger(__name__)

IMAGE_EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
}


class PhotoService:
    def __init__(self, db: AsyncSession, store: ObjectStore) -> None:
        self._db = db
        self._store = store

    async def get(self, employee_id: str) -> EmployeePhoto | None:
        stmt = select(EmployeePhoto).where(col(EmployeePhoto.employee_id) == employee_id)
        return (await self._db.execute(stmt)).scalars().first()

    async def replace(self, employee: Employee, content: bytes, content_type: str) -> EmployeePhoto:
        """Upload a new photo for ``employee``, dropping the previous blob."""
        ext = IMAGE_EXTENSIONS[content_type]
        key = f"photos/{employee.company_id}/{employee.id}/{uuid.uuid4()}.{ext}"
        await self._store.put(key, content, content_type=content_type)
        url = self._store.public_url(key)

        photo = await self.get(employee.id)
        previous_key = photo.admission_photo if photo else None
        if photo is None:
            photo = EmployeePhoto(
                employee_id=employee.id,
                admission_photo=key,
                photo_url=url,
                content_type=content_type,
            )
        else:
            photo.admission_photo = key
            photo.photo_url = url
            photo.content_type = content_type
            photo.updated_at = _utc_now()
        self._db.add(photo)
        try:
            await self._db.commit()
        except Exception:
            await self._db.rollback()
            await self._store.delete(key)
            raise
        await self._db.refresh(photo)

        if previous_key:
            await self._store.delete(previous_key)
        logger.info("employee_photo_uploaded", employee_id=employee.id, size=len(content))
        return photo

    async def delete(self, photo: EmployeePhoto) -> None:
        employee_id, key = photo.employee_id, photo.admission_photo
        await self._db.delete(photo)
        await self._db.commit()
        await self._store.delete(key)
        logger.info("employee_photo_deleted", employee_id=employee_id)
