"""Tests for the license gate and its admission checks."""
import math

import pytest

from FloatDesk.core.key_value_store import MemoryKeyValueStore
from FloatDesk.core.license_gate import DEMO_LICENSE_KEY, FREE, PREMIUM, Admission, LicenseGate, normalize_tier


def test_defaults_to_free_without_store():
    """Test a gate with no store answers for the free tier."""
    gate = LicenseGate()
    assert gate.current_tier() == FREE
    assert gate.can_add_window(2) is True
    assert gate.can_add_window(3) is False
    assert gate.can_add_pane(0) is True
    assert gate.can_add_pane(1) is False


def test_denied_admission_is_structured():
    """Test a denial carries the resource, counts and tier and is falsy."""
    admission = LicenseGate().check_window(3)

    assert isinstance(admission, Admission)
    assert not admission
    assert admission.resource == "window"
    assert admission.current == 3
    assert admission.limit == 3
    assert admission.tier == FREE


def test_refresh_reads_premium_tier(premium_store):
    """Test refresh resolves the stored tier and lifts the ceilings."""
    gate = LicenseGate(premium_store)
    tiers = []
    gate.refresh(tiers.append)

    assert tiers == [PREMIUM]
    assert gate.check_window(10_000).allowed
    assert gate.check_pane(10_000).allowed
    assert gate.limits_for().max_windows == math.inf


@pytest.mark.parametrize("stored", [None, "", "gold", 42])
def test_unknown_tier_values_resolve_to_free(stored):
    store = MemoryKeyValueStore({'license': stored} if stored is not None else {})
    gate = LicenseGate(store)
    gate.refresh()
    assert gate.current_tier() == FREE


def test_normalize_tier():
    assert normalize_tier("premium") == PREMIUM
    assert normalize_tier("enterprise") == FREE


def test_external_change_updates_cache(store, qtbot):
    """Test a tier written by another party is picked up and announced."""
    gate = LicenseGate(store)
    gate.refresh()

    with qtbot.waitSignal(gate.tier_changed, timeout=1000) as blocker:
        store.set({'license': 'premium'})

    assert blocker.args == [PREMIUM]
    assert gate.current_tier() == PREMIUM


def test_unrelated_change_is_ignored(store, spy):
    gate = LicenseGate(store)
    changes = spy(gate.tier_changed)

    store.set({'blurMode': 'blur'})
    store.set({'license': 'free'})

    assert changes.count == 0
    assert gate.current_tier() == FREE


def test_verify_demo_key_upgrades(store):
    """Test the demo key upgrades to premium and persists the tier."""
    gate = LicenseGate(store)
    results = []
    gate.verify_license_key(f"  {DEMO_LICENSE_KEY} ", results.append)

    assert results == [{'success': True, 'tier': PREMIUM}]
    assert gate.current_tier() == PREMIUM
    assert store.peek('license') == PREMIUM


def test_verify_invalid_key(store):
    gate = LicenseGate(store)
    results = []
    gate.verify_license_key("NOT-A-KEY", results.append)

    assert results == [{'success': False, 'error': 'Invalid license key'}]
    assert gate.current_tier() == FREE
    assert store.peek('license') is None


def test_downgrade_to_free(premium_store, spy):
    gate = LicenseGate(premium_store)
    gate.refresh()
    changes = spy(gate.tier_changed)

    gate.downgrade_to_free()

    assert gate.current_tier() == FREE
    assert premium_store.peek('license') == FREE
    assert changes.calls == [(FREE,)]


def test_feature_flags():
    """Test feature flags follow the tier and unknown names are disabled."""
    gate = LicenseGate()
    assert gate.is_feature_enabled('ai_enabled') is False
    gate.upgrade_to_premium()
    assert gate.is_feature_enabled('ai_enabled') is True
    assert gate.is_feature_enabled('sync_enabled') is True
    assert gate.is_feature_enabled('max_windows') is False


def test_refresh_with_unavailable_store_keeps_tier():
    """Test a dead store leaves the cached tier in place."""
    store = MemoryKeyValueStore({'license': 'premium'})
    store.set_available(False)
    gate = LicenseGate(store)
    tiers = []

    gate.refresh(tiers.append)

    assert tiers == [FREE]


def test_upgrade_with_unavailable_store_still_applies():
    store = MemoryKeyValueStore()
    store.set_available(False)
    gate = LicenseGate(store)

    gate.upgrade_to_premium()

    assert gate.current_tier() == PREMIUM
