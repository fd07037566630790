"""Tests for the machine config store."""
from datetime import datetime

import pytest
from sqlalchemy import func, select

from machinehub.errors import NotFoundError
from machinehub.models.machine_config import MachineConfig
from machinehub.schemas.machine import ConfigPatch
from machinehub.services import config_store


def _count(db_session) -> int:
    return db_session.execute(select(func.count()).select_from(MachineConfig)).scalar_one()


def test_fetch_unknown_without_registration_returns_none(db_session):
    assert config_store.fetch_or_register(db_session, "ghost", False) is None
    assert _count(db_session) == 0


def test_fetch_unknown_with_registration_creates_default(db_session):
    config = config_store.fetch_or_register(db_session, "dev-1", True)
    assert config.id == "dev-1"
    assert config.paused is False
    assert config.backup is False
    assert config.resolution == 2
    assert config.px_format == "PXFORMAT_JPEG"
    assert config.hours == ["12:00"]
    assert config.last_modified == config.last_pinged
    assert _count(db_session) == 1


def test_registering_twice_keeps_one_record(db_session):
    config_store.fetch_or_register(db_session, "dev-1", True)
    config_store.fetch_or_register(db_session, "dev-1", True)
    assert _count(db_session) == 1


def test_insert_if_absent_ignores_existing_row(db_session):
    now = datetime(2024, 1, 1)
    assert config_store._insert_if_absent(db_session, config_store.default_config("dev-1", now)) is True
    assert config_store._insert_if_absent(db_session, config_store.default_config("dev-1", now)) is False
    assert _count(db_session) == 1


def test_insert_if_absent_generic_dialect_falls_back_on_integrity_error(db_session, monkeypatch):
    monkeypatch.setattr(config_store, "_dialect_name", lambda db: "mysql")
    now = datetime(2024, 1, 1)
    assert config_store._insert_if_absent(db_session, config_store.default_config("dev-1", now)) is True
    assert config_store._insert_if_absent(db_session, config_store.default_config("dev-1", now)) is False
    assert _count(db_session) == 1
    assert config_store.fetch_or_register(db_session, "dev-1", True).id == "dev-1"


def test_fetch_touches_only_last_pinged(db_session, registered_machine):
    before = config_store.fetch_for_admin(db_session, registered_machine)
    first_pinged, first_modified = before.last_pinged, before.last_modified

    again = config_store.fetch_or_register(db_session, registered_machine, False)
    assert again.last_pinged >= first_pinged
    assert again.last_modified == first_modified
    assert again.resolution == 2
    assert again.hours == ["12:00"]


def test_fetch_for_admin_has_no_side_effects(db_session, registered_machine):
    pinged = config_store.fetch_for_admin(db_session, registered_machine).last_pinged
    db_session.expire_all()
    assert config_store.fetch_for_admin(db_session, registered_machine).last_pinged == pinged
    assert config_store.fetch_for_admin(db_session, "ghost") is None
    assert _count(db_session) == 1


def test_apply_update_changes_patch_fields_and_last_modified(db_session, registered_machine):
    before = config_store.fetch_for_admin(db_session, registered_machine)
    pinged, modified = before.last_pinged, before.last_modified

    patch = ConfigPatch(paused=True, px_format="PXFORMAT_RGB565", resolution=63, hours=["08:00", "20:00"])
    config_store.apply_update(db_session, registered_machine, patch)
    db_session.expire_all()

    after = config_store.fetch_for_admin(db_session, registered_machine)
    assert after.paused is True
    assert after.px_format == "PXFORMAT_RGB565"
    assert after.resolution == 63
    assert after.hours == ["08:00", "20:00"]
    assert after.backup is False
    assert after.last_pinged == pinged
    assert after.last_modified >= modified


def test_apply_update_unknown_raises_and_creates_nothing(db_session):
    patch = ConfigPatch(paused=True, px_format="PXFORMAT_JPEG", resolution=5, hours=[])
    with pytest.raises(NotFoundError):
        config_store.apply_update(db_session, "ghost", patch)
    assert _count(db_session) == 0


def test_list_summaries_projects_freshness_fields(db_session):
    config_store.fetch_or_register(db_session, "b-machine", True)
    config_store.fetch_or_register(db_session, "a-machine", True)

    rows = config_store.list_summaries(db_session)
    assert [row.id for row in rows] == ["a-machine", "b-machine"]
    assert set(rows[0]._fields) == {"id", "last_modified", "last_pinged"}
