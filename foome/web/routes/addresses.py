"""Employee address routes."""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import APIRouter, Depends

from foome.access.context import ResourceTenancy, TenancyContext
from foome.access.policy import Action, enforce
from foome.exceptions import NotFoundError
from foome.models.api import AddressCreate, AddressUpdate
from foome.models.database import Employee, EmployeeAddress
from foome.services.addresses import AddressService
from foome.services.employees import EmployeeService
from foome.web.dependencies import (
    get_address_service,
    get_employee_service,
    load_employee,
    require_tenancy,
)
from foome.web.responses import dump, ok

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api", tags=["addresses"])


async def _load_address(
    addresses: AddressService, address_id: str
) -> tuple[EmployeeAddress, Employee]:
    found = await addresses.get(address_id)
    if found is None:
        raise NotFoundError("Address not found")
    return found


@router.get("/employees/{employee_id}/addresses")
async def list_addresses(
    employee_id: str,
    tenancy: TenancyContext = Depends(require_tenancy),
    employees: EmployeeService = Depends(get_employee_service),
    addresses: AddressService = Depends(get_address_service),
) -> dict[str, Any]:
    employee = await load_employee(employees, employee_id)
    enforce(tenancy, ResourceTenancy(employee.company_id, employee.id), Action.ADDRESS_VIEW)
    return ok([dump(a) for a in await addresses.list_for_employee(employee.id)])


@router.post("/employees/{employee_id}/addresses", status_code=201)
async def create_address(
    employee_id: str,
    body: AddressCreate,
    tenancy: TenancyContext = Depends(require_tenancy),
    employees: EmployeeService = Depends(get_employee_service),
    addresses: AddressService = Depends(get_address_service),
) -> dict[str, Any]:
    employee = await load_employee(employees, employee_id)
    enforce(tenancy, ResourceTenancy(employee.company_id, employee.id), Action.ADDRESS_CREATE)
    address = await addresses.create(employee, body.model_dump())
    return ok(dump(address), message="Address created")


@router.get("/addresses/{address_id}")
async def get_address(
    address_id: str,
    tenancy: TenancyContext = Depends(require_tenancy),
    addresses: AddressService = Depends(get_address_service),
) -> dict[str, Any]:
    address, employee = await _load_address(addresses, address_id)
    enforce(tenancy, ResourceTenancy(employee.company_id, employee.id), Action.ADDRESS_VIEW)
    return ok(dump(address))


@router.put("/addresses/{address_id}")
async def update_address(
    address_id: str,
    body: AddressUpdate,
    tenancy: TenancyContext = Depends(require_tenancy),
    addresses: AddressService = Depends(get_address_service),
) -> dict[str, Any]:
    address, employee = await _load_address(addresses, address_id)
    enforce(tenancy, ResourceTenancy(employee.company_id, employee.id), Action.ADDRESS_UPDATE)
    address = await addresses.update(address, body.model_dump(exclude_unset=True))
    return ok(dump(address), message="Address updated")


@router.delete("/addresses/{address_id}")
async def delete_address(
    address_id: str,
    tenancy: TenancyContext = Depends(require_tenancy),
    addresses: AddressService = Depends(get_address_service),
) -> dict[str, Any]:
    address, employee = await _load_address(addresses, address_id)
    enforce(tenancy, ResourceTenancy(employee.company_id, employee.id), Action.ADDRESS_DELETE)
    await addresses.delete(address)
    return ok(message="Address deleted")
