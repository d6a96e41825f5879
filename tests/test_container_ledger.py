from datetime import datetime, timezone

import pytest

from aquatrack.errors import InvalidReturnError, NotFoundError, ValidationError
from aquatrack.models.domain import OrderEntry, ProductType
from aquatrack.persistence.memory import InMemoryStore
from aquatrack.services.ledger import ContainerLedger, OrderLedger, PriceList

NOW = datetime(2025, 6, 15, 9, 0, tzinfo=timezone.utc)


def _customer(store: InMemoryStore, cid: str, *, containers_held: int = 0, is_regular: bool = False, name: str | None = None) -> None:
    store.insert(
        "customers",
        {
            "id": cid,
            "name": name or f"Customer {cid}",
            "phone": "9822222222",
            "address": "Hill View",
            "is_regular": is_regular,
            "containers_held": containers_held,
        },
    )


@pytest.fixture
def store() -> InMemoryStore:
    store = InMemoryStore()
    _customer(store, "C")
    return store


@pytest.fixture
def containers(store: InMemoryStore) -> ContainerLedger:
    return ContainerLedger(store)


@pytest.fixture
def orders(store: InMemoryStore) -> OrderLedger:
    return OrderLedger(store, prices=PriceList(bottle=20.0, jug=60.0), container_tracking="auto", timezone_name="UTC", clock=lambda: NOW)


def test_return_all_then_one_more_fails(store, containers, orders):
    orders.log_order("C", [OrderEntry(ProductType.BOTTLE, 3), OrderEntry(ProductType.JUG, 2)])

    assert containers.update_container_count("C", -5).containers_held == 0
    with pytest.raises(InvalidReturnError):
        containers.update_container_count("C", -1)
    assert store.get("customers", "C")["containers_held"] == 0


def test_count_never_goes_negative_over_a_sequence(store, containers):
    held = 0
    for delta in (4, -1, -3, -2, 6, -7, -6, 1, -1):
        try:
            held = containers.update_container_count("C", delta).containers_held
        except InvalidReturnError:
            pass
        current = store.get("customers", "C")["containers_held"]
        assert current >= 0
        assert current == held
    assert held == 0


def test_failed_return_leaves_count_unchanged(store, containers):
    containers.update_container_count("C", 2)

    with pytest.raises(InvalidReturnError):
        containers.update_container_count("C", -3)

    assert store.get("customers", "C")["containers_held"] == 2


@pytest.mark.parametrize("delta", [0, 1.5, True])
def test_invalid_delta(containers, delta):
    with pytest.raises(ValidationError):
        containers.update_container_count("C", delta)


def test_unknown_customer(containers):
    with pytest.raises(NotFoundError):
        containers.update_container_count("ghost", 1)
    with pytest.raises(NotFoundError):
        containers.return_containers("ghost", 1)


def test_regular_customers_are_not_blocked(store, containers):
    _customer(store, "R", is_regular=True)

    assert containers.update_container_count("R", 2).containers_held == 2


def test_generic_return(containers):
    containers.update_container_count("C", 4)

    assert containers.return_containers("C", 3).containers_held == 1


def test_return_must_be_positive_and_within_holdings(containers):
    containers.update_container_count("C", 2)

    with pytest.raises(ValidationError):
        containers.return_containers("C", 0)
    with pytest.raises(ValidationError):
        containers.return_containers("C", -1)
    with pytest.raises(InvalidReturnError):
        containers.return_containers("C", 3)


def test_breakdown_is_bounded_by_last_batch(containers, orders):
    orders.log_order("C", [OrderEntry(ProductType.BOTTLE, 1)])
    orders.log_order("C", [OrderEntry(ProductType.BOTTLE, 2), OrderEntry(ProductType.JUG, 1)])

    batch = containers.last_delivery_batch("C")
    assert batch.units_for(ProductType.BOTTLE) == 2
    assert batch.units_for(ProductType.JUG) == 1

    with pytest.raises(ValidationError):
        containers.return_containers("C", bottles=3)
    with pytest.raises(ValidationError):
        containers.return_containers("C", jugs=2)

    assert containers.return_containers("C", bottles=2, jugs=1).containers_held == 1


def test_breakdown_and_count_are_exclusive(containers):
    containers.update_container_count("C", 3)

    with pytest.raises(ValidationError):
        containers.return_containers("C", 1, bottles=1)


def test_last_batch_without_orders_is_empty(containers):
    batch = containers.last_delivery_batch("C")

    assert batch.units == {}
    assert batch.created_at is None


def test_pending_returns_sorted_by_holdings(store, containers):
    _customer(store, "A", containers_held=2, name="Asha")
    _customer(store, "B", containers_held=7, name="Bela")
    _customer(store, "Z", containers_held=0, name="Zoya")

    pending = containers.pending_returns()

    assert [customer.id for customer in pending] == ["B", "A"]
