import logging
from decimal import Decimal
from typing import List

from fastapi import status

from feetracker.backend.base import Backend, BackendError
from feetracker.core.exceptions import ServiceError, backend_failure

from .schemas import ClassCreate, ClassResponse, ClassUpdate

logger = logging.getLogger(__name__)

TABLE = "classes"

# Fees given to a newly added class until an admin edits them
DEFAULT_FEEDING_FEE = Decimal("6")
DEFAULT_TRANSPORT_FEE = Decimal("6")
DEFAULT_SCHOOL_FEE = Decimal("0")


async def list_classes(backend: Backend) -> List[ClassResponse]:
    try:
        rows = await backend.select(TABLE, order_by="class_name")
    except BackendError as e:
        raise backend_failure(e, "Error fetching classes")
    return [ClassResponse.model_validate(row) for row in rows]


async def create_class(backend: Backend, payload: ClassCreate) -> List[ClassResponse]:
    try:
        await backend.insert(
            TABLE,
            {
                "class_name": payload.class_name,
                "set_feeding_fees": DEFAULT_FEEDING_FEE,
                "set_transport_fees": DEFAULT_TRANSPORT_FEE,
                "set_school_fees": DEFAULT_SCHOOL_FEE,
            },
        )
    except BackendError as e:
        raise backend_failure(e, "Error adding class")
    logger.info("Added class %s", payload.class_name)
    return await list_classes(backend)


async def update_class(backend: Backend, class_id: int, payload: ClassUpdate) -> List[ClassResponse]:
    values = payload.model_dump(exclude_unset=True, exclude_none=True)
    if not values:
        raise ServiceError("Nothing to update", status.HTTP_400_BAD_REQUEST)
    try:
        rows = await backend.update(TABLE, {"id": class_id}, values)
    except BackendError as e:
        raise backend_failure(e, "Error updating")
    if not rows:
        raise ServiceError("Class not found", status.HTTP_404_NOT_FOUND)
    return await list_classes(backend)


async def delete_class(backend: Backend, class_id: int) -> List[ClassResponse]:
    try:
        deleted = await backend.delete(TABLE, {"id": class_id})
    except BackendError as e:
        raise backend_failure(e, "Error deleting class")
    if not deleted:
        raise ServiceError("Class not found", status.HTTP_404_NOT_FOUND)
    logger.info("Deleted class %s", class_id)
    return await list_classes(backend)
