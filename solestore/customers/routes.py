from fastapi import APIRouter, Depends, Request, Query
from motor.motor_asyncio import AsyncIOMotorDatabase
from typing import Optional

from solestore.config import get_database, settings
from solestore.rbac import Action, Resource
from solestore.rbac.decorators import current_user, require_permission
from solestore.utils import pagination_meta, success_response
from .schemas import (
    AddressRequest,
    AddressTypeEnum,
    CreateCustomerRequest,
    UpdateAddressRequest,
    UpdateCustomerRequest,
)
from .service import CustomerService

customers_router = APIRouter()


@customers_router.post("/")
@require_permission(Resource.CUSTOMERS, Action.CREATE)
async def create_customer(
    request: Request,
    body: CreateCustomerRequest,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    svc = CustomerService(db)
    customer = await svc.create_customer(
        data=body.model_dump(), created_by=current_user(request).get("sub")
    )
    return success_response(data=customer, message="Customer created", code=201)


@customers_router.get("/")
@require_permission(Resource.CUSTOMERS, Action.READ)
async def list_customers(
    request: Request,
    q: Optional[str] = Query(None, description="Search by name, email or phone"),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    svc = CustomerService(db)
    customers, total = await svc.list_customers(query=q, page=page, limit=limit)
    return success_response(
        data={"customers": customers, "pagination": pagination_meta(page, limit, total)}
    )


@customers_router.get("/stats")
@require_permission(Resource.CUSTOMERS, Action.READ)
async def customer_stats(
    request: Request,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    svc = CustomerService(db)
    return success_response(data=await svc.get_stats())


@customers_router.get("/{customer_id}")
@require_permission(Resource.CUSTOMERS, Action.READ)
async def get_customer(
    request: Request,
    customer_id: str,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    svc = CustomerService(db)
    return success_response(data=await svc.get_customer(customer_id))


@customers_router.put("/{customer_id}")
@require_permission(Resource.CUSTOMERS, Action.UPDATE)
async def update_customer(
    request: Request,
    customer_id: str,
    body: UpdateCustomerRequest,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    svc = CustomerService(db)
    customer = await svc.update_customer(customer_id, body.model_dump(exclude_unset=True))
    return success_response(data=customer, message="Customer updated")


@customers_router.delete("/{customer_id}")
@require_permission(Resource.CUSTOMERS, Action.DELETE)
async def delete_customer(
    request: Request,
    customer_id: str,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    svc = CustomerService(db)
    result = await svc.delete_customer(customer_id)
    return success_response(data=result, message="Customer deleted")


# ── Addresses ────────────────────────────────────────────────────


@customers_router.get("/{customer_id}/addresses")
@require_permission(Resource.CUSTOMERS, Action.READ)
async def list_addresses(
    request: Request,
    customer_id: str,
    type: Optional[AddressTypeEnum] = Query(None),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    svc = CustomerService(db)
    addresses = await svc.list_addresses(customer_id, type.value if type else None)
    return success_response(data=addresses)


@customers_router.post("/{customer_id}/addresses")
@require_permission(Resource.CUSTOMERS, Action.CREATE)
async def create_address(
    request: Request,
    customer_id: str,
    body: AddressRequest,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    svc = CustomerService(db)
    address = await svc.create_address(customer_id, body.model_dump())
    return success_response(data=address, message="Address added", code=201)


@customers_router.put("/{customer_id}/addresses/{address_id}")
@require_permission(Resource.CUSTOMERS, Action.UPDATE)
async def update_address(
    request: Request,
    customer_id: str,
    address_id: str,
    body: UpdateAddressRequest,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    svc = CustomerService(db)
    address = await svc.update_address(
        customer_id, address_id, body.model_dump(exclude_unset=True)
    )
    return success_response(data=address, message="Address updated")


@customers_router.delete("/{customer_id}/addresses/{address_id}")
@require_permission(Resource.CUSTOMERS, Action.DELETE)
async def delete_address(
    request: Request,
    customer_id: str,
    address_id: str,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    svc = CustomerService(db)
    result = await svc.delete_address(customer_id, address_id)
    return success_response(data=result, message="Address deleted")
