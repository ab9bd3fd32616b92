from pycampreservation.models import ItemMetadata
from pycampreservation.state import (
    BASE_ITEM_ID,
    AddItem,
    RemoveItem,
    RemoveItemsByType,
    ReservationStore,
    Reset,
    SetBasePrice,
    SetCurrentStep,
    UpdateItem,
    initial_state,
    reduce,
)
from pycampreservation.storage import DraftStore, JsonFileStore, MemoryStore


def test_initial_state_has_base_item() -> None:
    state = initial_state(2000)
    assert [item.id for item in state.items] == [BASE_ITEM_ID]
    assert state.total_price == 2000


def test_total_follows_items() -> None:
    state = initial_state(2000)
    state = reduce(state, AddItem(name="Wegetariańska", price=200, type="diet", custom_id="diet-1"))
    state = reduce(state, AddItem(name="Rower", price=50, type="addon", custom_id="addon-2"))
    state = reduce(
        state,
        AddItem(
            name="First Minute",
            price=-100,
            type="promotion",
            custom_id="promotion-3",
            metadata=ItemMetadata(original_price=100),
        ),
    )
    assert state.total_price == 2150
    state = reduce(state, RemoveItem("addon-2"))
    assert state.total_price == 2100


def test_add_item_with_existing_custom_id_is_ignored() -> None:
    state = reduce(initial_state(), AddItem(name="A", price=10, type="addon", custom_id="addon-1"))
    again = reduce(state, AddItem(name="A", price=10, type="addon", custom_id="addon-1"))
    assert again is state


def test_single_types_replace_existing_item() -> None:
    state = reduce(initial_state(), AddItem(name="Standard", price=0, type="diet"))
    state = reduce(state, AddItem(name="Bezglutenowa", price=150, type="diet"))
    diets = state.items_of_type("diet")
    assert len(diets) == 1
    assert diets[0].name == "Bezglutenowa"


def test_base_item_cannot_be_removed() -> None:
    state = initial_state()
    assert reduce(state, RemoveItem(BASE_ITEM_ID)) is state
    assert reduce(state, RemoveItemsByType("base")) is state


def test_set_base_price_and_update_item() -> None:
    state = reduce(initial_state(), AddItem(name="A", price=10, type="addon", custom_id="addon-1"))
    state = reduce(state, SetBasePrice(1800))
    state = reduce(state, UpdateItem("addon-1", {"price": 30, "id": "ignored"}))
    assert state.total_price == 1830
    assert [item.id for item in state.items] == [BASE_ITEM_ID, "addon-1"]


def test_store_notifies_listeners_only_on_change() -> None:
    store = ReservationStore()
    seen = []
    unsubscribe = store.subscribe(seen.append)
    store.dispatch(SetCurrentStep(2))
    store.dispatch(SetCurrentStep(2))
    unsubscribe()
    store.dispatch(SetCurrentStep(3))
    assert [state.current_step for state in seen] == [2]


def test_store_persists_and_hydrates() -> None:
    drafts = DraftStore(MemoryStore())
    store = ReservationStore(drafts=drafts)
    store.dispatch(AddItem(name="Ochrona", price=120, type="protection", custom_id="protection-5"))
    store.dispatch(SetCurrentStep(3))

    restored = ReservationStore(drafts=drafts)

    assert restored.state.current_step == 3
    assert restored.state.total_price == store.state.total_price
    assert [item.id for item in restored.state.items] == [BASE_ITEM_ID, "protection-5"]


def test_reset_restores_initial_state() -> None:
    store = ReservationStore()
    store.dispatch(AddItem(name="A", price=10, type="addon", custom_id="addon-1"))
    store.dispatch(Reset(2200))
    assert store.state == initial_state(2200)


def test_generated_ids_continue_after_reload(tmp_path) -> None:
    path = tmp_path / "drafts.json"
    store = ReservationStore(drafts=DraftStore(JsonFileStore(path)))
    store.dispatch(AddItem(name="Kajak", price=40, type="addon"))
    store.dispatch(AddItem(name="Rower", price=50, type="addon"))

    reloaded = ReservationStore(drafts=DraftStore(JsonFileStore(path)))
    reloaded.dispatch(AddItem(name="Quad", price=90, type="addon"))

    ids = [item.id for item in reloaded.state.items]
    assert ids == [BASE_ITEM_ID, "addon-1", "addon-2", "addon-3"]

    reloaded.dispatch(RemoveItem("addon-3"))
    assert [item.name for item in reloaded.state.items_of_type("addon")] == ["Kajak", "Rower"]


def test_generated_ids_depend_only_on_state() -> None:
    action = AddItem(name="Kajak", price=40, type="addon")
    assert reduce(initial_state(), action) == reduce(initial_state(), action)
