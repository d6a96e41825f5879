from types import SimpleNamespace

import pytest

from supabase import AuthApiError, AuthRetryableError

from aquatrack.errors import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    StoreError,
    ValidationError,
)
from aquatrack.models.domain import Role
from aquatrack.persistence.memory import InMemoryStore
from aquatrack.services.accounts import StaticRoleProvider, SupabaseRoleProvider, UserDirectory
from aquatrack.services.customers import CustomerDirectory
from aquatrack.services.ledger import OrderLedger


def _profile(store: InMemoryStore, user_id: str, name: str, created_at: str) -> None:
    store.insert("profiles", {"user_id": user_id, "name": name, "phone": None, "created_at": created_at})


@pytest.fixture
def store() -> InMemoryStore:
    store = InMemoryStore()
    _profile(store, "u-admin", "Asha", "2025-01-01T08:00:00+00:00")
    _profile(store, "u-staff", "Kiran", "2025-02-01T08:00:00+00:00")
    _profile(store, "u-new", "Dev", "2025-03-01T08:00:00+00:00")
    store.insert("user_roles", [{"user_id": "u-admin", "role": "admin"}, {"user_id": "u-staff", "role": "staff"}])
    return store


def test_create_customer_requires_admin_and_fields(store):
    directory = CustomerDirectory(store)

    with pytest.raises(AuthorizationError):
        directory.create_customer(name="Ravi", phone="98", address="Main Road", role=Role.STAFF)
    with pytest.raises(AuthenticationError):
        directory.create_customer(name="Ravi", phone="98", address="Main Road", role=Role.NONE)
    with pytest.raises(ValidationError):
        directory.create_customer(name="  ", phone="98", address="Main Road", role=Role.ADMIN)

    customer = directory.create_customer(name=" Ravi ", phone="98", address="Main Road", is_regular=False, role=Role.ADMIN)

    assert customer.name == "Ravi"
    assert customer.containers_held == 0
    assert customer.is_regular is False
    assert directory.get_customer(customer.id).id == customer.id


def test_search_customers(store):
    directory = CustomerDirectory(store)
    directory.create_customer(name="Ravi Kumar", phone="9876500001", address="Lake Road", role=Role.ADMIN)
    directory.create_customer(name="meena", phone="9876500002", address="Temple Street", is_regular=False, role=Role.ADMIN)
    directory.create_customer(name="Arjun", phone="9000000003", address="lake view", role=Role.ADMIN)

    assert [c.name for c in directory.search_customers("")] == ["Arjun", "meena", "Ravi Kumar"]
    assert [c.name for c in directory.search_customers("LAKE")] == ["Arjun", "Ravi Kumar"]
    assert [c.name for c in directory.search_customers("98765")] == ["meena", "Ravi Kumar"]
    assert [c.name for c in directory.search_customers("", is_regular=False)] == ["meena"]


def test_update_and_delete_customer(store):
    directory = CustomerDirectory(store)
    customer = directory.create_customer(name="Ravi", phone="98", address="Main Road", role=Role.ADMIN)

    updated = directory.update_customer(customer.id, {"address": "New Road", "default_units": 2}, role=Role.ADMIN)
    assert updated.address == "New Road"
    assert updated.default_units == 2

    with pytest.raises(ValidationError):
        directory.update_customer(customer.id, {"containers_held": 10}, role=Role.ADMIN)
    with pytest.raises(AuthorizationError):
        directory.update_customer(customer.id, {"name": "X"}, role=Role.STAFF)
    with pytest.raises(NotFoundError):
        directory.update_customer("ghost", {"name": "X"}, role=Role.ADMIN)

    directory.delete_customer(customer.id, role=Role.ADMIN)
    with pytest.raises(NotFoundError):
        directory.get_customer(customer.id)
    with pytest.raises(NotFoundError):
        directory.delete_customer(customer.id, role=Role.ADMIN)


def test_list_and_pending_users(store):
    users = UserDirectory(store)

    accounts = users.list_users(role=Role.ADMIN)
    assert [a.user_id for a in accounts] == ["u-new", "u-staff", "u-admin"]
    assert [a.user_id for a in users.list_pending_users(role=Role.ADMIN)] == ["u-new"]

    with pytest.raises(AuthorizationError):
        users.list_users(role=Role.STAFF)


def test_approve_update_and_delete_user(store):
    users = UserDirectory(store)

    approved = users.approve_user("u-new", "staff", role=Role.ADMIN)
    assert approved.role is Role.STAFF
    assert users.role_of("u-new") is Role.STAFF
    with pytest.raises(ValidationError):
        users.approve_user("u-new", "admin", role=Role.ADMIN)

    assert users.update_user_role("u-new", Role.ADMIN, role=Role.ADMIN).role is Role.ADMIN
    with pytest.raises(ValidationError):
        users.update_user_role("u-new", "pending", role=Role.ADMIN)

    users.delete_user("u-new", role=Role.ADMIN)
    assert users.role_of("u-new") is Role.PENDING
    with pytest.raises(NotFoundError):
        users.delete_user("u-new", role=Role.ADMIN)


def test_update_role_of_pending_user_fails(store):
    users = UserDirectory(store)

    with pytest.raises(ValidationError):
        users.update_user_role("u-new", "staff", role=Role.ADMIN)
    with pytest.raises(NotFoundError):
        users.approve_user("ghost", "staff", role=Role.ADMIN)


class InvalidToken(AuthApiError):
    def __init__(self, status: int = 401) -> None:
        Exception.__init__(self, "invalid JWT")
        self.message = "invalid JWT"
        self.status = status


class AuthUnreachable(AuthRetryableError):
    def __init__(self) -> None:
        Exception.__init__(self, "connection refused")
        self.message = "connection refused"
        self.status = 0


class FakeAuth:
    def __init__(self, users: dict, error: Exception | None = None) -> None:
        self.users = users
        self.error = error

    def get_user(self, token):
        if self.error is not None:
            raise self.error
        if token not in self.users:
            raise InvalidToken()
        return SimpleNamespace(user=SimpleNamespace(id=self.users[token]))


def test_supabase_role_provider(store):
    client = SimpleNamespace(auth=FakeAuth({"t-admin": "u-admin", "t-staff": "u-staff", "t-new": "u-new"}))
    provider = SupabaseRoleProvider(client, UserDirectory(store))

    assert provider.role_for_token(None) is Role.NONE
    assert provider.role_for_token("garbage") is Role.NONE
    assert provider.role_for_token("t-admin") is Role.ADMIN
    assert provider.role_for_token("t-staff") is Role.STAFF
    assert provider.role_for_token("t-new") is Role.PENDING


def test_static_role_provider():
    assert StaticRoleProvider(Role.STAFF).role_for_token(None) is Role.STAFF


@pytest.mark.parametrize("error", [AuthUnreachable(), InvalidToken(status=503)])
def test_supabase_role_provider_surfaces_auth_outages(store, error):
    client = SimpleNamespace(auth=FakeAuth({"t-admin": "u-admin"}, error=error))
    provider = SupabaseRoleProvider(client, UserDirectory(store))

    with pytest.raises(StoreError):
        provider.role_for_token("t-admin")


def test_update_customer_rejects_null_for_required_columns(store):
    directory = CustomerDirectory(store)
    customer = directory.create_customer(name="Ravi", phone="98", address="Main Road", role=Role.ADMIN)

    with pytest.raises(ValidationError):
        directory.update_customer(customer.id, {"is_regular": None}, role=Role.ADMIN)
    for field_name in ("name", "phone", "address"):
        with pytest.raises(ValidationError):
            directory.update_customer(customer.id, {field_name: None}, role=Role.ADMIN)

    unchanged = directory.get_customer(customer.id)
    assert unchanged.is_regular is True
    assert unchanged.name == "Ravi"


def test_delete_customer_with_orders_is_refused(store):
    directory = CustomerDirectory(store)
    customer = directory.create_customer(name="Ravi", phone="98", address="Main Road", role=Role.ADMIN)
    OrderLedger(store, timezone_name="UTC").log_order(customer.id, [{"product_type": "jug", "units": 2}])

    with pytest.raises(ConflictError):
        directory.delete_customer(customer.id, role=Role.ADMIN)

    assert directory.get_customer(customer.id).id == customer.id
    assert len(store.select("orders", {"customer_id": customer.id})) == 1
