import pytest

from app.clients.api_client import ApiClientError, ClinicApiClient
from app.clients.query_cache import QueryCache
from app.clients.role_permissions import (
    MSG_SYNC_ERROR,
    MSG_SYNC_SUCCESS,
    MSG_UPDATE_ERROR,
    PERMISSIONS_KEY,
    ROLES_KEY,
    RolePermissionReconciler,
    compute_bulk_toggle,
    compute_single_toggle,
    optimistic_update_role,
)
from app.clients.views import ConfirmedPermission, PendingPermission

from fakes import FakeApi, FakeResponse, FakeSession, role


@pytest.mark.parametrize("current,group,expected", [
    ([1, 2, 3], [2, 3], [1]),
    ([1], [2, 3], [1, 2, 3]),
    ([1, 2], [2, 3], [1, 2, 3]),
    ([], [], []),
])
def test_bulk_toggle_is_all_or_nothing(current, group, expected):
    assert sorted(compute_bulk_toggle(current, group)) == expected


def test_single_toggle_adds_and_removes():
    assert compute_single_toggle([1, 2], 2) == [1]
    assert compute_single_toggle([1, 2], 3) == [1, 2, 3]


def test_optimistic_update_marks_new_ids_pending():
    roles = [role(1, [10, 11]), role(2, [10])]
    out = optimistic_update_role(roles, 1, [11, 12])

    assert out[1] is roles[1]
    entries = out[0].permissions
    assert isinstance(entries[0], ConfirmedPermission) and entries[0].permission_id == 11
    assert entries[1] == PendingPermission(12)
    assert entries[1].is_pending
    # the input list is untouched (it is the rollback snapshot)
    assert roles[0].permission_ids == [10, 11]


def test_optimistic_update_without_cached_roles():
    assert optimistic_update_role(None, 1, [1]) is None


@pytest.fixture
def setup():
    api = FakeApi(roles=[role(1, [1, 2, 3]), role(2, [1])])
    cache = QueryCache()
    api.cache = cache
    cache.fetch_query(ROLES_KEY, api.fetch_roles)
    toasts = []
    reconciler = RolePermissionReconciler(api, cache, notify=lambda kind, msg: toasts.append((kind, msg)))
    return api, cache, reconciler, toasts


def test_toggle_bulk_submits_full_set_and_writes_optimistically(setup):
    api, cache, reconciler, toasts = setup
    target = cache.get_query_data(ROLES_KEY)[0]

    assert reconciler.toggle_bulk(target, [2, 3]) is True

    assert api.update_calls == [(1, [1])]
    assert api.seen_during_update[0].permission_ids == [1]
    assert toasts == []
    assert reconciler.updating_role_id is None


def test_settle_refetches_roles(setup):
    api, cache, reconciler, _ = setup
    before = api.role_fetches
    reconciler.toggle_single_permission(cache.get_query_data(ROLES_KEY)[1], 5)

    assert api.role_fetches == before + 1
    refreshed = cache.get_query_data(ROLES_KEY)[1]
    assert refreshed.permission_ids == [1, 5]
    assert not any(e.is_pending for e in refreshed.permissions)


def test_failed_update_rolls_back_and_notifies(setup):
    api, cache, reconciler, toasts = setup
    api.fail_updates = True
    snapshot = cache.get_query_data(ROLES_KEY)

    ok = reconciler.toggle_single_permission(snapshot[0], 9)

    assert ok is False
    assert api.update_calls == [(1, [1, 2, 3, 9])]
    # optimistic write was visible while the request was in flight
    assert api.seen_during_update[0].permission_ids == [1, 2, 3, 9]
    assert cache.get_query_data(ROLES_KEY)[0].permission_ids == [1, 2, 3]
    assert toasts == [("error", MSG_UPDATE_ERROR)]
    assert len(api.update_calls) == 1


def test_rollback_survives_failed_refetch(setup):
    api, cache, reconciler, toasts = setup
    api.fail_updates = True

    def broken_fetch():
        raise ApiClientError(None, "offline")

    cache.fetch_query(ROLES_KEY, broken_fetch)
    reconciler.toggle_bulk(cache.get_query_data(ROLES_KEY)[1], [2, 3])

    assert cache.get_query_data(ROLES_KEY)[1].permission_ids == [1]
    assert toasts == [("error", MSG_UPDATE_ERROR)]


def test_sync_success_invalidates_permissions(setup):
    api, cache, reconciler, toasts = setup
    cache.fetch_query(PERMISSIONS_KEY, api.fetch_permissions)
    before = api.permission_fetches

    assert reconciler.sync_permissions(force=True) is True
    assert api.sync_calls == [True]
    assert toasts == [("success", MSG_SYNC_SUCCESS)]
    assert api.permission_fetches == before + 1


def test_sync_failure_notifies(setup):
    api, _cache, reconciler, toasts = setup
    api.fail_sync = True
    assert reconciler.sync_permissions() is False
    assert toasts == [("error", MSG_SYNC_ERROR)]


@pytest.mark.parametrize("response", [
    FakeResponse(200, text="<html>gateway page</html>"),
    FakeResponse(204),
])
def test_unusable_update_response_rolls_back(response):
    api = ClinicApiClient(base_url="http://clinic.test", token="tok",
                          session=FakeSession([response]))
    cache = QueryCache()
    cache.fetch_query(ROLES_KEY, lambda: [role(1, [1, 2])])
    toasts = []
    reconciler = RolePermissionReconciler(api, cache, notify=lambda kind, msg: toasts.append((kind, msg)))

    ok = reconciler.toggle_single_permission(cache.get_query_data(ROLES_KEY)[0], 3)

    assert ok is False
    cached = cache.get_query_data(ROLES_KEY)[0]
    assert cached.permission_ids == [1, 2]
    assert not any(e.is_pending for e in cached.permissions)
    assert toasts == [("error", MSG_UPDATE_ERROR)]
