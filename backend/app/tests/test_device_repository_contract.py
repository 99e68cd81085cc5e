"""
Contract tests run against every DeviceRepository implementation.
"""

from datetime import datetime, timedelta, timezone

import pytest

from app.domains.common.utils.datetime_utils import utc_now
from app.domains.device.exceptions import (
    DeviceNotFoundError,
    DuplicateDeviceError,
    InvalidCheckinError,
    InvalidCheckoutError,
    InvalidCriteriaError,
)
from app.domains.device.models.criteria import DeviceCriteria, DeviceFilter, DeviceSort
from app.domains.device.models.device_model import DeviceKind

from conftest import make_computer, make_frequent_computer, make_medical_device

T0 = datetime(2025, 3, 1, 8, 0, tzinfo=timezone.utc)


def by_id(device_id: str) -> DeviceCriteria:
    return DeviceCriteria(filter_by=DeviceFilter(field="id", value=device_id))


# --- Check-in ---
async def test_checkin_computer_is_listed_with_checkin_time(repository):
    """checkin_computer followed by get_computers includes the record"""
    before = utc_now()
    stale = datetime(2000, 1, 1, tzinfo=timezone.utc)

    checked_in = await repository.checkin_computer(make_computer("comp-1", checkin_at=stale))

    assert checked_in.checkin_at >= before
    computers = await repository.get_computers(DeviceCriteria())
    found = [c for c in computers if c.id == "comp-1"]
    assert len(found) == 1
    assert found[0].checkin_at is not None
    assert found[0].checkin_at >= before
    assert found[0].checkout_at is None


async def test_checkin_medical_device_persists_serial(repository):
    await repository.checkin_medical_device(make_medical_device("med-1", serial="SN-42"))

    devices = await repository.get_medical_devices(by_id("med-1"))

    assert len(devices) == 1
    assert devices[0].serial == "SN-42"
    assert devices[0].checkin_at is not None


async def test_checkin_computer_twice_with_same_id_is_duplicate(repository):
    await repository.checkin_computer(make_computer("comp-1"))

    with pytest.raises(DuplicateDeviceError):
        await repository.checkin_computer(make_computer("comp-1"))


async def test_same_id_in_different_categories_is_allowed(repository):
    await repository.checkin_computer(make_computer("shared-1"))
    await repository.checkin_medical_device(make_medical_device("shared-1"))

    assert len(await repository.get_computers(by_id("shared-1"))) == 1
    assert len(await repository.get_medical_devices(by_id("shared-1"))) == 1


# --- Frequent computers ---
async def test_register_frequent_computer_round_trips_urls(repository):
    await repository.register_frequent_computer(make_frequent_computer("freq-1"))

    results = await repository.get_frequent_computers(by_id("freq-1"))

    assert len(results) == 1
    assert str(results[0].checkin_url) == "http://x/checkin"
    assert str(results[0].checkout_url) == "http://x/checkout"
    assert results[0].device.owner.name == "Alice"


async def test_register_frequent_computer_twice_is_duplicate(repository):
    await repository.register_frequent_computer(make_frequent_computer("freq-1"))

    with pytest.raises(DuplicateDeviceError):
        await repository.register_frequent_computer(make_frequent_computer("freq-1"))


async def test_checkin_unregistered_frequent_computer_fails(repository):
    with pytest.raises(DeviceNotFoundError):
        await repository.checkin_frequent_computer("missing", T0)


async def test_checkin_registered_frequent_computer_sets_time(repository):
    await repository.register_frequent_computer(make_frequent_computer("freq-1"))

    checked_in = await repository.checkin_frequent_computer("freq-1", T0)

    assert checked_in.device.checkin_at == T0
    assert checked_in.device.is_entered
    stored = (await repository.get_frequent_computers(by_id("freq-1")))[0]
    assert stored.device.checkin_at == T0


async def test_is_frequent_computer_registered(repository):
    await repository.register_frequent_computer(make_frequent_computer("freq-1"))

    assert await repository.is_frequent_computer_registered("freq-1")
    assert not await repository.is_frequent_computer_registered("freq-2")


async def test_frequent_computer_can_reenter_after_checkout(repository):
    await repository.register_frequent_computer(make_frequent_computer("freq-1"))
    await repository.checkin_frequent_computer("freq-1", T0)
    await repository.checkout_device("freq-1", T0 + timedelta(hours=1))

    left = (await repository.get_frequent_computers(by_id("freq-1")))[0]
    assert left.device.checkout_at == T0 + timedelta(hours=1)
    assert not left.device.is_entered

    await repository.checkin_frequent_computer("freq-1", T0 + timedelta(days=1))
    back = (await repository.get_frequent_computers(by_id("freq-1")))[0]
    assert back.device.is_entered


async def test_checkin_of_entered_frequent_computer_is_rejected(repository):
    await repository.register_frequent_computer(make_frequent_computer("freq-1"))
    await repository.checkin_frequent_computer("freq-1", T0)

    with pytest.raises(InvalidCheckinError):
        await repository.checkin_frequent_computer("freq-1", T0 + timedelta(hours=2))

    stored = (await repository.get_frequent_computers(by_id("freq-1")))[0]
    assert stored.device.checkin_at == T0


async def test_checkin_before_last_checkout_is_rejected(repository):
    await repository.register_frequent_computer(make_frequent_computer("freq-1"))
    await repository.checkin_frequent_computer("freq-1", T0)
    await repository.checkout_device("freq-1", T0 + timedelta(hours=5))

    for at in (T0 + timedelta(hours=1), T0 + timedelta(hours=5)):
        with pytest.raises(InvalidCheckinError):
            await repository.checkin_frequent_computer("freq-1", at)

    # The rejected attempts leave the device able to check in and out again
    back = await repository.checkin_frequent_computer("freq-1", T0 + timedelta(hours=6))
    assert back.device.is_entered
    await repository.checkout_device("freq-1", T0 + timedelta(hours=7))


# --- Checkout ---
@pytest.mark.parametrize("kind", ["computer", "medical-device"])
async def test_checkout_device_clears_entered_state(repository, kind):
    if kind == "computer":
        await repository.checkin_computer(make_computer("dev-1"))
    else:
        await repository.checkin_medical_device(make_medical_device("dev-1"))
    assert await repository.is_device_entered("dev-1")

    await repository.checkout_device("dev-1", utc_now() + timedelta(seconds=1))

    assert not await repository.is_device_entered("dev-1")


async def test_checkout_sets_checkout_time(repository):
    await repository.checkin_computer(make_computer("comp-6"))
    at = utc_now() + timedelta(minutes=5)

    await repository.checkout_device("comp-6", at)

    found = (await repository.get_computers(by_id("comp-6")))[0]
    assert found.checkout_at == at
    assert found.checkout_at >= found.checkin_at


async def test_checkout_unknown_device_is_not_found(repository):
    with pytest.raises(DeviceNotFoundError):
        await repository.checkout_device("missing", T0)


async def test_checkout_twice_is_rejected(repository):
    await repository.checkin_computer(make_computer("comp-1"))
    at = utc_now() + timedelta(seconds=1)
    await repository.checkout_device("comp-1", at)

    with pytest.raises(InvalidCheckoutError):
        await repository.checkout_device("comp-1", at + timedelta(seconds=1))


async def test_checkout_before_checkin_is_rejected(repository):
    await repository.checkin_computer(make_computer("comp-1"))

    with pytest.raises(InvalidCheckoutError):
        await repository.checkout_device("comp-1", datetime(2000, 1, 1, tzinfo=timezone.utc))

    assert await repository.is_device_entered("comp-1")


async def test_checkout_registered_but_absent_frequent_computer_is_rejected(repository):
    await repository.register_frequent_computer(make_frequent_computer("freq-1"))

    with pytest.raises(InvalidCheckoutError):
        await repository.checkout_device("freq-1", T0)


# --- Presence ---
async def test_is_device_entered_ignores_frequent_computers(repository):
    await repository.register_frequent_computer(make_frequent_computer("freq-1"))
    await repository.checkin_frequent_computer("freq-1", T0)

    assert not await repository.is_device_entered("freq-1")
    assert not await repository.is_device_entered("unknown")


async def test_get_entered_devices_tags_each_category(repository):
    await repository.checkin_computer(make_computer("comp-1"))
    await repository.checkin_medical_device(make_medical_device("med-1"))

    entered = await repository.get_entered_devices(DeviceCriteria())

    assert len(entered) == 2
    assert {(e.id, e.type) for e in entered} == {
        ("comp-1", DeviceKind.COMPUTER),
        ("med-1", DeviceKind.MEDICAL_DEVICE),
    }
    medical = next(e for e in entered if e.type == DeviceKind.MEDICAL_DEVICE)
    assert medical.serial == "7312-1712-0719"


async def test_get_entered_devices_skips_checked_out_and_frequent(repository):
    await repository.checkin_computer(make_computer("comp-1"))
    await repository.checkin_computer(make_computer("comp-2"))
    await repository.checkout_device("comp-2", utc_now() + timedelta(seconds=1))
    await repository.register_frequent_computer(make_frequent_computer("freq-1"))
    await repository.checkin_frequent_computer("freq-1", T0)

    entered = await repository.get_entered_devices(DeviceCriteria())

    assert [e.id for e in entered] == ["comp-1"]


async def test_get_entered_devices_applies_criteria_to_both_categories(repository):
    await repository.checkin_computer(make_computer("comp-1", brand="Acme"))
    await repository.checkin_computer(make_computer("comp-2", brand="Other"))
    await repository.checkin_medical_device(make_medical_device("med-1", brand="Acme"))

    entered = await repository.get_entered_devices(
        DeviceCriteria(filter_by=DeviceFilter(field="brand", value="Acme"))
    )

    assert sorted(e.id for e in entered) == ["comp-1", "med-1"]


async def test_get_entered_devices_rejects_category_specific_filter(repository):
    with pytest.raises(InvalidCriteriaError):
        await repository.get_entered_devices(
            DeviceCriteria(filter_by=DeviceFilter(field="serial", value="SN-1"))
        )


# --- Query normalization ---
async def test_pagination_window(repository):
    for i in range(15):
        await repository.checkin_computer(make_computer(f"comp-{i:02d}"))

    page = await repository.get_computers(DeviceCriteria(limit=10, offset=10))
    first_page = await repository.get_computers(DeviceCriteria(offset=0))
    capped = await repository.get_computers(DeviceCriteria(limit=3))
    everything = await repository.get_computers(DeviceCriteria())

    assert len(page) == 5
    assert len(first_page) == 10
    assert len(capped) == 3
    assert len(everything) == 15


async def test_sort_by_field_descending(repository):
    for device_id, brand in [("c-1", "Beta"), ("c-2", "Alpha"), ("c-3", "Gamma")]:
        await repository.checkin_computer(make_computer(device_id, brand=brand))

    computers = await repository.get_computers(
        DeviceCriteria(sort_by=DeviceSort(field="brand", is_ascending=False))
    )

    assert [c.brand for c in computers] == ["Gamma", "Beta", "Alpha"]


async def test_sort_places_nulls_last_when_ascending(repository):
    for device_id in ("f-1", "f-2", "f-3"):
        await repository.register_frequent_computer(make_frequent_computer(device_id))
    await repository.checkin_frequent_computer("f-3", T0)
    await repository.checkin_frequent_computer("f-1", T0 + timedelta(hours=1))

    ascending = await repository.get_frequent_computers(
        DeviceCriteria(sort_by=DeviceSort(field="checkin_at", is_ascending=True))
    )
    descending = await repository.get_frequent_computers(
        DeviceCriteria(sort_by=DeviceSort(field="checkin_at", is_ascending=False))
    )

    assert [f.id for f in ascending] == ["f-3", "f-1", "f-2"]
    assert [f.id for f in descending] == ["f-2", "f-1", "f-3"]


async def test_filter_value_is_coerced_to_column_type(repository):
    await repository.register_frequent_computer(make_frequent_computer("freq-1"))
    await repository.register_frequent_computer(make_frequent_computer("freq-2"))
    await repository.checkin_frequent_computer("freq-1", T0)

    results = await repository.get_frequent_computers(
        DeviceCriteria(filter_by=DeviceFilter(field="checkin_at", value=T0.isoformat()))
    )

    assert [f.id for f in results] == ["freq-1"]


async def test_unknown_filter_field_is_rejected(repository):
    with pytest.raises(InvalidCriteriaError):
        await repository.get_computers(
            DeviceCriteria(filter_by=DeviceFilter(field="color", value="red"))
        )


async def test_unknown_sort_field_is_rejected(repository):
    with pytest.raises(InvalidCriteriaError):
        await repository.get_medical_devices(
            DeviceCriteria(sort_by=DeviceSort(field="checkin_url"))
        )
