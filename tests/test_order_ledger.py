from datetime import datetime, timedelta, timezone

import pytest

from aquatrack.errors import AuthorizationError, NotFoundError, ScheduleError, ValidationError
from aquatrack.models.domain import Order, OrderEntry, OrderType, ProductType, Role
from aquatrack.persistence.memory import InMemoryStore
from aquatrack.services.ledger import OrderLedger, PriceList, can_create_bulk_order, can_edit

NOW = datetime(2025, 6, 15, 9, 0, tzinfo=timezone.utc)
PRICES = PriceList(bottle=20.0, jug=60.0)


def _customer(store: InMemoryStore, cid: str, *, is_regular: bool, containers_held: int = 0) -> None:
    store.insert(
        "customers",
        {
            "id": cid,
            "name": f"Customer {cid}",
            "phone": "9800000000",
            "address": "12 Lake Road",
            "is_regular": is_regular,
            "containers_held": containers_held,
        },
    )


def _held(store: InMemoryStore, cid: str) -> int:
    return store.get("customers", cid)["containers_held"]


@pytest.fixture
def store() -> InMemoryStore:
    store = InMemoryStore()
    _customer(store, "C", is_regular=False)
    _customer(store, "D", is_regular=True)
    return store


@pytest.fixture
def ledger(store: InMemoryStore) -> OrderLedger:
    return OrderLedger(store, prices=PRICES, container_tracking="auto", timezone_name="UTC", clock=lambda: NOW)


def test_one_time_customer_order_creates_rows_and_tracks_containers(store, ledger):
    orders = ledger.log_order(
        "C",
        [{"product_type": "bottle", "units": 3}, {"product_type": "jug", "units": 2}],
        is_paid=False,
    )

    assert len(orders) == 2
    by_product = {order.product_type: order for order in orders}
    assert by_product[ProductType.BOTTLE].units == 3
    assert by_product[ProductType.BOTTLE].price == 20.0
    assert by_product[ProductType.JUG].units == 2
    assert by_product[ProductType.JUG].price == 60.0
    assert all(order.order_type is OrderType.REGULAR for order in orders)
    assert all(not order.is_paid for order in orders)
    assert orders[0].delivered_at == orders[1].delivered_at == NOW
    assert orders[0].created_at == orders[1].created_at
    assert _held(store, "C") == 5


def test_regular_customer_order_does_not_touch_containers(store, ledger):
    ledger.log_order("D", [OrderEntry(ProductType.JUG, 4)], is_paid=True)

    assert _held(store, "D") == 0
    assert len(store.select("orders", {"customer_id": "D", "is_paid": True})) == 1


def test_zero_unit_entries_are_skipped(store, ledger):
    orders = ledger.log_order("C", [OrderEntry(ProductType.BOTTLE, 0), OrderEntry(ProductType.JUG, 1)])

    assert [order.product_type for order in orders] == [ProductType.JUG]
    assert _held(store, "C") == 1


@pytest.mark.parametrize(
    "entries",
    [
        [],
        [{"product_type": "bottle", "units": 0}],
        [{"product_type": "bottle", "units": -2}],
        [{"product_type": "bottle", "units": 1}, {"product_type": "bottle", "units": 2}],
        [{"product_type": "crate", "units": 1}],
        [{"product_type": "jug", "units": 1.5}],
        [{"units": 1}],
    ],
)
def test_invalid_entries_are_rejected_without_writes(store, ledger, entries):
    with pytest.raises(ValidationError):
        ledger.log_order("C", entries)

    assert store.select("orders") == []
    assert _held(store, "C") == 0


def test_unknown_customer_fails_and_writes_nothing(store, ledger):
    with pytest.raises(NotFoundError):
        ledger.log_order("missing", [OrderEntry(ProductType.BOTTLE, 1)])

    assert store.select("orders") == []


def test_future_delivery_becomes_event_order(store, ledger):
    when = NOW + timedelta(days=2)
    orders = ledger.log_order("C", [OrderEntry(ProductType.JUG, 10)], delivered_at=when, scheduled=True)

    assert orders[0].order_type is OrderType.EVENT
    assert orders[0].delivered_at == when
    assert _held(store, "C") == 10


def test_naive_delivery_time_is_treated_as_utc(ledger):
    orders = ledger.log_order("C", [OrderEntry(ProductType.JUG, 1)], delivered_at=datetime(2025, 6, 20, 18, 0))

    assert orders[0].delivered_at == datetime(2025, 6, 20, 18, 0, tzinfo=timezone.utc)
    assert orders[0].order_type is OrderType.EVENT


def test_scheduled_order_requires_future_timestamp(store, ledger):
    with pytest.raises(ScheduleError):
        ledger.log_order("C", [OrderEntry(ProductType.JUG, 1)], scheduled=True)
    with pytest.raises(ScheduleError):
        ledger.log_order("C", [OrderEntry(ProductType.JUG, 1)], scheduled=True, delivered_at=NOW - timedelta(hours=1))
    with pytest.raises(ScheduleError):
        ledger.log_order("C", [OrderEntry(ProductType.JUG, 1)], delivered_at="tomorrow")

    assert store.select("orders") == []


def test_bulk_orders_require_admin(store, ledger):
    with pytest.raises(AuthorizationError):
        ledger.log_order("C", [OrderEntry(ProductType.BOTTLE, 50)], bulk=True, role=Role.STAFF)
    assert store.select("orders") == []

    orders = ledger.log_order("C", [OrderEntry(ProductType.BOTTLE, 50)], bulk=True, role=Role.ADMIN)
    assert orders[0].order_type is OrderType.BULK


def test_caller_can_opt_out_of_container_tracking(store, ledger):
    ledger.log_order("C", [OrderEntry(ProductType.BOTTLE, 4)], uses_company_container=False)

    assert _held(store, "C") == 0


def test_explicit_policy_tracks_only_flagged_orders(store):
    ledger = OrderLedger(store, prices=PRICES, container_tracking="explicit", timezone_name="UTC", clock=lambda: NOW)

    ledger.log_order("C", [OrderEntry(ProductType.BOTTLE, 4)])
    assert _held(store, "C") == 0

    ledger.log_order("C", [OrderEntry(ProductType.BOTTLE, 2)], uses_company_container=True)
    assert _held(store, "C") == 2


def test_price_is_snapshotted_at_creation(store):
    cheap = OrderLedger(store, prices=PriceList(bottle=10.0, jug=30.0), timezone_name="UTC", clock=lambda: NOW)
    first = cheap.log_order("D", [OrderEntry(ProductType.BOTTLE, 1)])[0]

    dearer = OrderLedger(store, prices=PriceList(bottle=25.0, jug=30.0), timezone_name="UTC", clock=lambda: NOW)
    dearer.log_order("D", [OrderEntry(ProductType.BOTTLE, 1)])

    assert dearer.get_order(first.id).price == 10.0


def test_toggle_payment_twice_restores_original_state(ledger):
    order = ledger.log_order("D", [OrderEntry(ProductType.BOTTLE, 2)], is_paid=False)[0]

    once = ledger.toggle_payment(order.id, Role.STAFF)
    twice = ledger.toggle_payment(order.id, Role.STAFF)

    assert once.is_paid is True
    assert twice.is_paid is False


def test_toggle_payment_unknown_order(ledger):
    with pytest.raises(NotFoundError):
        ledger.toggle_payment("nope", Role.ADMIN)


def test_bulk_order_toggle_requires_privileged_role(ledger):
    order = ledger.log_order("C", [OrderEntry(ProductType.JUG, 20)], bulk=True, role=Role.ADMIN)[0]

    with pytest.raises(AuthorizationError):
        ledger.toggle_payment(order.id, Role.STAFF)
    assert ledger.get_order(order.id).is_paid is False

    assert ledger.toggle_payment(order.id, Role.ADMIN).is_paid is True


def _order(order_type: OrderType) -> Order:
    return Order(
        id="O1",
        customer_id="C",
        units=1,
        product_type=ProductType.BOTTLE,
        order_type=order_type,
        price=20.0,
        is_paid=False,
        delivered_at=NOW,
        created_at=NOW,
    )


def test_can_edit_predicate():
    assert can_edit(_order(OrderType.REGULAR), Role.STAFF)
    assert can_edit(_order(OrderType.EVENT), Role.STAFF)
    assert not can_edit(_order(OrderType.BULK), Role.STAFF)
    assert can_edit(_order(OrderType.BULK), Role.ADMIN)
    assert can_create_bulk_order(Role.ADMIN)
    assert not can_create_bulk_order(Role.STAFF)
    assert not can_create_bulk_order(Role.PENDING)
