# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Device endpoints – registration, listing, detail, lock state, user links,
batch delete and spreadsheet export.

Response invariants
-------------------
* ``device_secret`` is returned once, by ``POST /device``.  Listing, detail
  and export responses are built from schemas that do not carry it.
* Lookups that miss return 404; they never create anything.
"""

import io

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import StreamingResponse
from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill, Alignment, Border, Side
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from database import get_db
from core.errors import InvalidArgument, TransactionFailure, UniqueConstraintViolation
from core.logger import logger
from core.pagination import Pagination
from models.enums import DeviceLock
from device.dao import DeviceDao
from device.schemas import (
    BatchDeleteRequest,
    DeviceCreate,
    DeviceDetail,
    DeviceQuery,
    DeviceRow,
    DeviceSecret,
    DeviceUpdate,
)

router = APIRouter(prefix="/device", tags=["device"])


def get_device_dao(db: Session = Depends(get_db)) -> DeviceDao:
    return DeviceDao(db)


# ---------------------------------------------------------------------------
# POST /device  – register a device
# ---------------------------------------------------------------------------


@router.post("", response_model=DeviceSecret, status_code=status.HTTP_201_CREATED)
def register_device(body: DeviceCreate, dao: DeviceDao = Depends(get_device_dao)):
    """
    Register a device, attach the requested grants (creating any grant name
    not yet in the catalog) and optionally link it to ``user_id``.

    All of it commits together: if a link fails nothing is stored, so the
    client can retry and still receive the one-time secret.
    """
    try:
        created = dao.save_device(body, commit=False)
        if body.grants:
            dao.save_grant(*body.grants, commit=False)
            grants = dao.find_grants_by_name(*body.grants)
            if len(grants) != len(set(body.grants)):
                logger.warning(
                    "register_device: resolved %d of %d grants for device %s",
                    len(grants), len(set(body.grants)), body.device_id,
                )
            dao.save_grant_on_device(created.id, *(g.id for g in grants), commit=False)
        if body.user_id is not None:
            dao.upsert_device(created.id, body.user_id, commit=False)
        dao.commit()
    except UniqueConstraintViolation:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Device already registered")
    except InvalidArgument as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    except SQLAlchemyError as exc:
        dao.rollback()
        logger.error("register_device: rolled back %s: %s", body.device_id, exc)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Device registration failed")

    return created


# ---------------------------------------------------------------------------
# GET /device  – paginated, filtered listing
# ---------------------------------------------------------------------------


@router.get("", response_model=Pagination[DeviceRow])
def list_devices(query: DeviceQuery = Depends(), dao: DeviceDao = Depends(get_device_dao)):
    """``name`` matches by substring, every other filter by equality."""
    try:
        return dao.page_list(query)
    except InvalidArgument as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


# ---------------------------------------------------------------------------
# GET /device/export  – download every device as Excel
# ---------------------------------------------------------------------------

_HEADER_FONT  = Font(name="Calibri", size=11, bold=True, color="FFFFFF")
_HEADER_FILL  = PatternFill(start_color="2F6FB5", end_color="2F6FB5", fill_type="solid")
_HEADER_ALIGN = Alignment(horizontal="center", vertical="center")
_THIN_BORDER  = Border(
    left=Side(style="thin", color="CCCCCC"),
    right=Side(style="thin", color="CCCCCC"),
    top=Side(style="thin", color="CCCCCC"),
    bottom=Side(style="thin", color="CCCCCC"),
)

_EXPORT_HEADERS = [
    "ID", "Device ID", "Name", "OS", "Type", "Engine",
    "Online", "Locked", "Access TTL (s)", "Refresh TTL (s)", "Created",
]
_EXPORT_COL_WIDTHS = [8, 36, 24, 14, 14, 14, 10, 10, 16, 16, 20]


@router.get("/export")
def export_devices(dao: DeviceDao = Depends(get_device_dao)):
    """Export all devices (no secrets) as an Excel file."""
    wb = Workbook()
    ws = wb.active
    ws.title = "Devices"

    ws.append(_EXPORT_HEADERS)
    for cell in ws[1]:
        cell.font = _HEADER_FONT
        cell.fill = _HEADER_FILL
        cell.alignment = _HEADER_ALIGN
        cell.border = _THIN_BORDER

    for row in dao.list_devices():
        ws.append([
            row.id,
            row.device_id,
            row.name,
            row.os or "",
            row.type or "",
            row.engine or "",
            row.is_online.value,
            row.is_locked.value,
            row.access_token_validate_seconds,
            row.refresh_token_validate_seconds,
            row.created_at.strftime("%Y-%m-%d %H:%M:%S") if row.created_at else "",
        ])
        for col_idx in range(1, len(_EXPORT_HEADERS) + 1):
            ws.cell(row=ws.max_row, column=col_idx).border = _THIN_BORDER

    for col_idx, width in enumerate(_EXPORT_COL_WIDTHS, start=1):
        ws.column_dimensions[chr(64 + col_idx)].width = width

    buf = io.BytesIO()
    wb.save(buf)
    buf.seek(0)
    wb.close()

    return StreamingResponse(
        buf,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": 'attachment; filename="devices.xlsx"'},
    )


# ---------------------------------------------------------------------------
# GET /device/{id}  – detail with grant names
# ---------------------------------------------------------------------------


@router.get("/{device_pk}", response_model=DeviceDetail)
def device_detail(device_pk: int, dao: DeviceDao = Depends(get_device_dao)):
    detail = dao.get_device_detail(device_pk)
    if detail is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Device not found")
    return detail


# ---------------------------------------------------------------------------
# PUT /device  – partial update of the mutable fields
# ---------------------------------------------------------------------------


@router.put("")
def update_device(body: DeviceUpdate, dao: DeviceDao = Depends(get_device_dao)):
    result = dao.update_device(body)
    if result is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Device not found")
    return result


# ---------------------------------------------------------------------------
# PUT /device/{id}/lock, /device/{id}/unlock
# ---------------------------------------------------------------------------


def _set_lock(device_pk: int, lock: DeviceLock, dao: DeviceDao) -> dict:
    if dao.update_device(DeviceUpdate(id=device_pk, is_locked=lock)) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Device not found")
    return {"detail": f"Device {lock.value.lower()}"}


@router.put("/{device_pk}/lock")
def lock_device(device_pk: int, dao: DeviceDao = Depends(get_device_dao)):
    """A locked device can no longer authenticate."""
    return _set_lock(device_pk, DeviceLock.LOCKED, dao)


@router.put("/{device_pk}/unlock")
def unlock_device(device_pk: int, dao: DeviceDao = Depends(get_device_dao)):
    return _set_lock(device_pk, DeviceLock.UNLOCKED, dao)


# ---------------------------------------------------------------------------
# POST /device/{id}/users/{user_id}  – link (or re-link) a user
# ---------------------------------------------------------------------------


@router.post("/{device_pk}/users/{user_id}")
def link_user(device_pk: int, user_id: int, dao: DeviceDao = Depends(get_device_dao)):
    try:
        dao.upsert_device(device_pk, user_id)
    except InvalidArgument as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    return {"detail": "Linked"}


# ---------------------------------------------------------------------------
# DELETE /device  – batch delete with join cleanup
# ---------------------------------------------------------------------------


@router.delete("")
def batch_delete(body: BatchDeleteRequest, dao: DeviceDao = Depends(get_device_dao)):
    try:
        return dao.batch_delete_device(body.ids)
    except TransactionFailure as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))
