# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Device registry – data access for devices, their grants and their users.

Referential rules enforced here
-------------------------------
* ``device_secret`` is derived from ``device_id`` exactly once, in
  :meth:`DeviceDao.save_device`, and is only ever returned by that call.
* Linking a user to a device is an upsert keyed by the
  ``(user_id, device_id)`` unique constraint, executed by the database in a
  single statement.  Concurrent callers converge on one row.
* Grant and grant-on-device inserts skip rows that already exist instead of
  failing, so overlapping calls are safe to repeat.
* :meth:`DeviceDao.batch_delete_device` removes the join rows and the device
  rows in one transaction.  Nothing is committed unless all three deletes
  succeed.

Lookups return ``None`` (or an empty list) for unknown ids – only writes
raise, and only the kinds defined in ``core.errors``.
"""

import logging
from datetime import datetime, timezone
from typing import Iterable, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from core.config import settings
from core.errors import InvalidArgument, TransactionFailure, UniqueConstraintViolation
from core.logger import get_logger
from core.pagination import Pagination, build_page_plan
from core.security import derive_device_secret
from database import dialect_insert, dialect_name, insert_ignore
from models.device import Device, UserOnDevice
from models.enums import DeviceLineStatus, DeviceLock
from models.grant import Grant, GrantOnDevice
from device.schemas import (
    DeviceCreate,
    DeviceDetail,
    DeviceQuery,
    DeviceRow,
    DeviceSecret,
    DeviceUpdate,
)

# Filter fields matched by substring; everything else is equality
_LIKE_FIELDS = ("name",)


class DeviceDao:
    def __init__(self, db: Session, log: Optional[logging.Logger] = None):
        self.db = db
        self.logger = log or get_logger(DeviceDao.__name__)

    def _with_grants(self):
        return self.db.query(Device).options(
            selectinload(Device.grants).selectinload(GrantOnDevice.grant)
        )

    # -- Devices -------------------------------------------------------------

    def find_device_by_id(self, device_id: str) -> Optional[Device]:
        """Look a device up by its external ``device_id``, grants included."""
        self.logger.info("[find_device_by_id] device_id=%s", device_id)
        device = self._with_grants().filter(Device.device_id == device_id).first()
        self.logger.debug("[find_device_by_id] found=%s", device is not None)
        return device

    def commit(self) -> None:
        """Commit writes made with ``commit=False``."""
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()

    def save_device(self, device: DeviceCreate, commit: bool = True) -> DeviceSecret:
        """
        Register a device.  New devices start ONLINE and UNLOCKED with the
        default token lifetimes.

        Returns only ``id`` and ``device_secret``; the secret is not exposed
        by any other read.  Raises ``UniqueConstraintViolation`` if
        ``device_id`` is already registered.

        With ``commit=False`` the row is only flushed; the caller commits (or
        rolls back) together with its follow-up writes.
        """
        self.logger.info("[save_device] device_id=%s name=%s", device.device_id, device.name)
        row = Device(
            device_id=device.device_id,
            name=device.name,
            os=device.os,
            type=device.type,
            engine=device.engine,
            is_online=DeviceLineStatus.ONLINE,
            is_locked=DeviceLock.UNLOCKED,
            device_secret=derive_device_secret(device.device_id),
            access_token_validate_seconds=settings.access_token_validate_seconds,
            refresh_token_validate_seconds=settings.refresh_token_validate_seconds,
        )
        self.db.add(row)
        try:
            self.db.flush()
            result = DeviceSecret(id=row.id, device_secret=row.device_secret)
            if commit:
                self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            self.logger.warning("[save_device] duplicate device_id=%s", device.device_id)
            raise UniqueConstraintViolation("Device", "device_id", device.device_id) from exc
        return result

    def update_device(self, device: DeviceUpdate) -> Optional[dict]:
        """
        Partial update keyed by primary id.  Fields left unset (or None) are
        not touched.  Returns ``{"id": ...}`` or ``None`` if no such device.
        """
        values = device.model_dump(exclude={"id"}, exclude_unset=True, exclude_none=True)
        self.logger.info("[update_device] id=%s fields=%s", device.id, sorted(values))

        if not values:
            exists = self.db.query(Device.id).filter(Device.id == device.id).first()
            return {"id": device.id} if exists else None

        updated = (
            self.db.query(Device)
            .filter(Device.id == device.id)
            .update(values, synchronize_session=False)
        )
        self.db.commit()
        if not updated:
            self.logger.info("[update_device] id=%s not found", device.id)
            return None
        return {"id": device.id}

    def get_device_by_id(self, id: int) -> Optional[Device]:
        """Fetch by primary id with the full Grant rows attached."""
        self.logger.info("[get_device_by_id] id=%s", id)
        return self._with_grants().filter(Device.id == id).first()

    def get_device_detail(self, id: int) -> Optional[DeviceDetail]:
        """
        Curated projection for display: no ``device_secret``, grants
        flattened to their names (empty list when the device has none).
        """
        self.logger.info("[get_device_detail] id=%s", id)
        device = self.get_device_by_id(id)
        if device is None:
            return None
        row = DeviceRow.model_validate(device)
        return DeviceDetail(
            **row.model_dump(),
            grants=[link.grant.name for link in device.grants],
        )

    def page_list(self, query: DeviceQuery) -> Pagination[DeviceRow]:
        """
        One page of devices under the query's filters.  ``total`` counts
        every matching row, not just the page.
        """
        plan = build_page_plan(Device, query, like_fields=_LIKE_FIELDS)
        rows = plan.select(self.db.query(Device)).all()
        total = plan.count(self.db)
        self.logger.info(
            "[page_list] page=%d size=%d rows=%d total=%d",
            query.page_number, query.page_size, len(rows), total,
        )
        return Pagination[DeviceRow](
            data=[DeviceRow.model_validate(r) for r in rows],
            total=total,
            page_size=query.page_size,
            page_number=query.page_number,
        )

    def list_devices(self) -> list[DeviceRow]:
        """Every device, oldest first – used by the spreadsheet export."""
        rows = self.db.query(Device).order_by(Device.id).all()
        return [DeviceRow.model_validate(r) for r in rows]

    def batch_delete_device(self, ids: Iterable[int]) -> dict:
        """
        Delete the given devices together with their user and grant links.
        Unknown ids are ignored.  Raises ``TransactionFailure`` (after a full
        rollback) if any of the three deletes fails.
        """
        ids = list(ids)
        self.logger.info("[batch_delete_device] ids=%s", ids)
        try:
            users = (
                self.db.query(UserOnDevice)
                .filter(UserOnDevice.device_id.in_(ids))
                .delete(synchronize_session=False)
            )
            grants = (
                self.db.query(GrantOnDevice)
                .filter(GrantOnDevice.device_id.in_(ids))
                .delete(synchronize_session=False)
            )
            devices = (
                self.db.query(Device)
                .filter(Device.id.in_(ids))
                .delete(synchronize_session=False)
            )
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            self.logger.error("[batch_delete_device] rolled back: %s", exc)
            raise TransactionFailure("Batch device delete failed and was rolled back") from exc

        self.logger.info(
            "[batch_delete_device] removed devices=%d user_links=%d grant_links=%d",
            devices, users, grants,
        )
        return {}

    # -- User links ----------------------------------------------------------

    def upsert_device(self, device_id: int, user_id: int, commit: bool = True) -> None:
        """
        Link *user_id* to *device_id*, or refresh ``updated_at`` if the link
        already exists.  Executed as a single INSERT … ON CONFLICT statement.

        An unknown device or user rolls the whole session back and raises
        ``InvalidArgument``.
        """
        self.logger.info("[upsert_device] device_id=%s user_id=%s", device_id, user_id)
        now = datetime.now(timezone.utc)
        stmt = dialect_insert(self.db, UserOnDevice).values(user_id=user_id, device_id=device_id)
        if dialect_name(self.db) in ("mysql", "mariadb"):
            stmt = stmt.on_duplicate_key_update(updated_at=now)
        else:
            stmt = stmt.on_conflict_do_update(
                index_elements=["user_id", "device_id"],
                set_={"updated_at": now},
            )
        try:
            self.db.execute(stmt)
            if commit:
                self.db.commit()
        except IntegrityError as exc:
            # Only the foreign keys can fail here; the unique key is absorbed
            self.db.rollback()
            raise InvalidArgument(f"Unknown device {device_id} or user {user_id}") from exc

    def insert_user_on_device(self, device_id: int, user_id: int) -> UserOnDevice:
        """
        Unconditionally create the link.  The caller must know it is new;
        an existing link raises ``UniqueConstraintViolation``.
        """
        self.logger.info("[insert_user_on_device] device_id=%s user_id=%s", device_id, user_id)
        link = UserOnDevice(user_id=user_id, device_id=device_id)
        self.db.add(link)
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise UniqueConstraintViolation(
                "UserOnDevice", "(user_id, device_id)", (user_id, device_id)
            ) from exc
        return link

    # -- Grants --------------------------------------------------------------

    def save_grant(self, *names: str, commit: bool = True) -> None:
        """Insert grant names, skipping any that already exist."""
        names = list(dict.fromkeys(names))
        if not names:
            return
        self.db.execute(insert_ignore(self.db, Grant, [{"name": n} for n in names]))
        if commit:
            self.db.commit()
        self.logger.info("[save_grant] saved grants=%s", names)

    def find_grants_by_name(self, *names: str) -> list:
        """
        Rows with an ``id`` attribute for every name that exists.  Unknown
        names are dropped; compare lengths if every name must resolve.
        """
        if not names:
            return []
        grants = self.db.query(Grant.id).filter(Grant.name.in_(names)).all()
        self.logger.debug("[find_grants_by_name] names=%s found=%d", names, len(grants))
        return grants

    def save_grant_on_device(self, device_id: int, *grant_ids: int, commit: bool = True) -> None:
        """Attach grants to a device, skipping pairs that already exist."""
        grant_ids = list(dict.fromkeys(grant_ids))
        if not grant_ids:
            return
        rows = [{"device_id": device_id, "grant_id": g} for g in grant_ids]
        try:
            self.db.execute(insert_ignore(self.db, GrantOnDevice, rows))
            if commit:
                self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise InvalidArgument(f"Unknown device {device_id} or grant in {grant_ids}") from exc
        self.logger.info("[save_grant_on_device] device_id=%s grant_ids=%s", device_id, grant_ids)
