"""
Tests for the in-memory threshold matrix and band validation.
"""

import pytest

from src.core.errors import ApprovalValidationError, NotFoundError
from src.models.approval import ThresholdBand
from src.services.storage import InMemoryThresholdMatrixStore


def band(level=1, lo=0, hi=5000, role="procurement", project_id="1", active=True):
    return ThresholdBand(
        project_id=project_id, approval_level=level, threshold_min=lo,
        threshold_max=hi, approver_role=role, is_active=active,
    )


def test_lookup_filters_inactive_and_sorts_by_level():
    store = InMemoryThresholdMatrixStore([
        band(3, 25000, 100000, "admin"),
        band(1, 0, 5000),
        band(2, 5000, 25000, "approver", active=False),
    ])

    assert [b.approval_level for b in store.lookup("1")] == [1, 3]


def test_lookup_unconfigured_project_is_empty():
    assert InMemoryThresholdMatrixStore().lookup("1") == []


def test_list_bands_includes_inactive_and_scopes_by_project():
    store = InMemoryThresholdMatrixStore([
        band(1), band(2, 5000, 25000, active=False), band(1, project_id="2"),
    ])

    assert len(store.list_bands()) == 3
    assert [b.approval_level for b in store.list_bands("1")] == [1, 2]


def test_upsert_assigns_id_and_replaces_same_key():
    store = InMemoryThresholdMatrixStore()
    first = store.upsert(band(1, 0, 5000))
    second = store.upsert(band(1, 0, 8000, "procurement_manager"))

    assert first.id.startswith("am-")
    assert second.id == first.id
    assert second.created_at == first.created_at
    assert [(b.threshold_max, b.approver_role) for b in store.list_bands("1")] == [(8000, "procurement_manager")]


def test_overlapping_bands_are_accepted():
    store = InMemoryThresholdMatrixStore([band(1, 0, 10000), band(2, 5000, 25000)])
    assert len(store.lookup("1")) == 2


@pytest.mark.parametrize("bad", [
    band(1, 5000, 5000),
    band(1, 6000, 5000),
    band(1, role=""),
    band(1, project_id=""),
])
def test_upsert_rejects_malformed_bands(bad):
    with pytest.raises(ApprovalValidationError):
        InMemoryThresholdMatrixStore().upsert(bad)


def test_deactivate_soft_disables():
    store = InMemoryThresholdMatrixStore([band(1)])

    disabled = store.deactivate("1", 1)

    assert disabled.is_active is False
    assert store.lookup("1") == []
    assert len(store.list_bands("1")) == 1


def test_deactivate_missing_band():
    with pytest.raises(NotFoundError):
        InMemoryThresholdMatrixStore().deactivate("1", 1)
