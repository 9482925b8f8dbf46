import asyncio

import pytest

from kosmarket.errors import (
    AuthRequiredError,
    SaveError,
    ToggleInProgressError,
)
from kosmarket.marketplace import SaveState, SaveStateMutator


@pytest.mark.asyncio
async def test_toggle_without_user_requires_auth(store, scenario_listings):
    mutator = SaveStateMutator(store)

    with pytest.raises(AuthRequiredError):
        await mutator.toggle_save(scenario_listings, "p-r1", "r1", None)

    assert store.tables["saved_properties"] == []
    assert store.calls == []
    assert not scenario_listings[0].is_saved


@pytest.mark.asyncio
async def test_toggle_inserts_then_deletes(store, scenario_listings, user):
    mutator = SaveStateMutator(store)

    await mutator.toggle_save(scenario_listings, "p-r1", "r1", user)
    assert scenario_listings[0].is_saved
    assert not scenario_listings[1].is_saved
    assert len(store.saved_marks(user.id, "p-r1")) == 1

    await mutator.toggle_save(scenario_listings, "p-r1", "r1", user)
    assert not scenario_listings[0].is_saved
    assert store.saved_marks(user.id, "p-r1") == []
    assert mutator.state.saving_rooms == set()


@pytest.mark.asyncio
async def test_store_failure_leaves_local_state_unchanged(store, scenario_listings, user):
    store.fail_on.add(("insert", "saved_properties"))
    mutator = SaveStateMutator(store)

    with pytest.raises(SaveError) as excinfo:
        await mutator.toggle_save(scenario_listings, "p-r1", "r1", user)

    assert excinfo.value.room_id == "r1"
    assert not scenario_listings[0].is_saved
    assert not mutator.state.is_saving("r1")

    # Se puede reintentar a mano una vez que el store responde
    store.fail_on.clear()
    await mutator.toggle_save(scenario_listings, "p-r1", "r1", user)
    assert scenario_listings[0].is_saved


@pytest.mark.asyncio
async def test_delete_failure_keeps_listing_saved(store, make_listing, user):
    listing = make_listing("r1", property_id="p1", is_saved=True)
    store.tables["saved_properties"].append({"user_id": user.id, "property_id": "p1"})
    store.fail_on.add(("delete", "saved_properties"))

    with pytest.raises(SaveError):
        await SaveStateMutator(store).toggle_save([listing], "p1", "r1", user)

    assert listing.is_saved
    assert len(store.saved_marks(user.id, "p1")) == 1


@pytest.mark.asyncio
async def test_concurrent_toggle_on_same_room_is_rejected(store, scenario_listings, user):
    store.write_gate = asyncio.Event()
    mutator = SaveStateMutator(store)

    first = asyncio.create_task(
        mutator.toggle_save(scenario_listings, "p-r1", "r1", user)
    )
    await asyncio.sleep(0)
    assert mutator.state.is_saving("r1")

    with pytest.raises(ToggleInProgressError):
        await mutator.toggle_save(scenario_listings, "p-r1", "r1", user)

    store.write_gate.set()
    await first

    assert scenario_listings[0].is_saved
    assert len(store.saved_marks(user.id, "p-r1")) == 1
    assert not mutator.state.is_saving("r1")


@pytest.mark.asyncio
async def test_different_properties_toggle_concurrently(store, scenario_listings, user):
    store.write_gate = asyncio.Event()
    mutator = SaveStateMutator(store)

    tasks = [
        asyncio.create_task(mutator.toggle_save(scenario_listings, "p-r1", "r1", user)),
        asyncio.create_task(mutator.toggle_save(scenario_listings, "p-r2", "r2", user)),
    ]
    await asyncio.sleep(0)
    assert mutator.state.saving_rooms == {"r1", "r2"}

    store.write_gate.set()
    await asyncio.gather(*tasks)

    assert [l.is_saved for l in scenario_listings] == [True, True]
    assert len(store.tables["saved_properties"]) == 2


@pytest.mark.asyncio
async def test_sibling_room_of_in_flight_property_is_rejected(store, make_listing, user):
    listings = [
        make_listing("r1", property_id="p1"),
        make_listing("r2", property_id="p1"),
    ]
    store.write_gate = asyncio.Event()
    mutator = SaveStateMutator(store)

    first = asyncio.create_task(mutator.toggle_save(listings, "p1", "r1", user))
    await asyncio.sleep(0)

    with pytest.raises(ToggleInProgressError):
        await mutator.toggle_save(listings, "p1", "r2", user)

    store.write_gate.set()
    await first
    assert len(store.saved_marks(user.id, "p1")) == 1


@pytest.mark.asyncio
async def test_without_propagation_only_the_toggled_room_flips(store, make_listing, user):
    listings = [
        make_listing("r1", property_id="p1"),
        make_listing("r2", property_id="p1"),
    ]

    await SaveStateMutator(store).toggle_save(
        listings, "p1", "r1", user, propagate_to_property=False
    )

    assert [l.is_saved for l in listings] == [True, False]


@pytest.mark.asyncio
async def test_toggle_syncs_sibling_rooms_by_default(store, make_listing, user):
    listings = [
        make_listing("r1", property_id="p1"),
        make_listing("r2", property_id="p1"),
        make_listing("r3", property_id="p2"),
    ]

    await SaveStateMutator(store).toggle_save(listings, "p1", "r1", user)

    assert [l.is_saved for l in listings] == [True, True, False]


@pytest.mark.asyncio
async def test_unknown_room_reads_store_and_is_a_local_no_op(store, scenario_listings, user):
    store.tables["saved_properties"].append({"user_id": user.id, "property_id": "p-x"})

    result = await SaveStateMutator(store).toggle_save(scenario_listings, "p-x", "rx", user)

    assert store.saved_marks(user.id, "p-x") == []
    assert [l.is_saved for l in result] == [False, False]


@pytest.mark.asyncio
async def test_state_is_per_mutator(store, scenario_listings, user):
    shared = SaveState()
    shared.claim("r1", "p-r1")

    with pytest.raises(ToggleInProgressError):
        await SaveStateMutator(store, shared).toggle_save(scenario_listings, "p-r1", "r1", user)

    # Otra sesión tiene su propio estado
    await SaveStateMutator(store).toggle_save(scenario_listings, "p-r1", "r1", user)
    assert scenario_listings[0].is_saved


@pytest.mark.asyncio
async def test_sequential_toggles_on_sibling_rooms_keep_one_mark(store, make_listing, user):
    listings = [
        make_listing("r1", property_id="p1"),
        make_listing("r2", property_id="p1"),
    ]
    mutator = SaveStateMutator(store)

    await mutator.toggle_save(listings, "p1", "r1", user, propagate_to_property=False)
    await mutator.toggle_save(listings, "p1", "r2", user, propagate_to_property=False)

    # La propiedad ya estaba guardada por r1: el segundo toggle la quita
    assert len(store.saved_marks(user.id, "p1")) <= 1
    assert store.saved_marks(user.id, "p1") == []
    assert ("insert", "saved_properties") in store.calls
    assert ("delete", "saved_properties") in store.calls


@pytest.mark.asyncio
async def test_sibling_toggle_after_sync_removes_the_mark(store, make_listing, user):
    listings = [
        make_listing("r1", property_id="p1"),
        make_listing("r2", property_id="p1"),
    ]
    mutator = SaveStateMutator(store)

    await mutator.toggle_save(listings, "p1", "r1", user)
    assert len(store.saved_marks(user.id, "p1")) == 1

    await mutator.toggle_save(listings, "p1", "r2", user)

    assert store.saved_marks(user.id, "p1") == []
    assert [l.is_saved for l in listings] == [False, False]
