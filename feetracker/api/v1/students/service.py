import logging
from typing import List, Optional

from fastapi import status

from feetracker.backend.base import Backend, BackendError
from feetracker.core.exceptions import ServiceError, backend_failure

from .schemas import StudentCreate, StudentResponse, StudentUpdate

logger = logging.getLogger(__name__)

TABLE = "students"


def _matches(student: StudentResponse, search: Optional[str], class_id: Optional[int]) -> bool:
    if class_id is not None and student.class_id != class_id:
        return False
    if search:
        needle = search.strip().lower()
        return needle in student.name.lower() or needle in student.parent_contact.lower()
    return True


async def list_students(
    backend: Backend,
    search: Optional[str] = None,
    class_id: Optional[int] = None,
) -> List[StudentResponse]:
    """All students, newest first, with class names merged in."""
    try:
        rows = await backend.select(TABLE, order_by="id", descending=True)
        classes = await backend.select("classes")
    except BackendError as e:
        raise backend_failure(e, "Error fetching students")

    class_names = {c["id"]: c["class_name"] for c in classes}
    students = [
        StudentResponse(**{**row, "class_name": class_names.get(row.get("class_id"))})
        for row in rows
    ]
    return [s for s in students if _matches(s, search, class_id)]


async def _require_class(backend: Backend, class_id: int) -> None:
    try:
        cls = await backend.select_one("classes", {"id": class_id})
    except BackendError as e:
        raise backend_failure(e, "Error saving student")
    if not cls:
        raise ServiceError("Class not found", status.HTTP_400_BAD_REQUEST)


async def create_student(backend: Backend, payload: StudentCreate) -> List[StudentResponse]:
    await _require_class(backend, payload.class_id)
    try:
        await backend.insert(TABLE, payload.model_dump())
    except BackendError as e:
        raise backend_failure(e, "Error saving student")
    logger.info("Added student %s", payload.student_code)
    return await list_students(backend)


async def update_student(backend: Backend, student_id: int, payload: StudentUpdate) -> List[StudentResponse]:
    values = payload.model_dump(exclude_unset=True, exclude_none=True)
    if not values:
        raise ServiceError("Nothing to update", status.HTTP_400_BAD_REQUEST)
    if "class_id" in values:
        await _require_class(backend, values["class_id"])
    try:
        rows = await backend.update(TABLE, {"id": student_id}, values)
    except BackendError as e:
        raise backend_failure(e, "Error saving student")
    if not rows:
        raise ServiceError("Student not found", status.HTTP_404_NOT_FOUND)
    return await list_students(backend)


async def delete_student(backend: Backend, student_id: int) -> List[StudentResponse]:
    try:
        deleted = await backend.delete(TABLE, {"id": student_id})
    except BackendError as e:
        raise backend_failure(e, "Error deleting student")
    if not deleted:
        raise ServiceError("Student not found", status.HTTP_404_NOT_FOUND)
    logger.info("Deleted student %s", student_id)
    return await list_students(backend)
