"""
Subscription tiers and the capacity checks they impose.

The active tier lives in the external store. It is cached here, replaced
whenever the store reports a change, and announced through `tier_changed` so
upgrade prompts and other views can react without polling.
"""

import logging
import math
from dataclasses import dataclass
from typing import Callable, Optional

from PySide6.QtCore import QObject, Signal

from ..config import DEFAULT_CONFIG, OverlayConfig
from .errors import StoreUnavailableError
from .key_value_store import KeyValueStore

logger = logging.getLogger(__name__)

FREE = "free"
PREMIUM = "premium"

DEMO_LICENSE_KEY = "FLOATDESK-PREMIUM-DEMO"


@dataclass(frozen=True)
class TierLimits:
    max_windows: float
    max_panes: float
    sync_enabled: bool = False
    ai_enabled: bool = False
    advanced_customization: bool = False


TIERS = {
    FREE: TierLimits(max_windows=3, max_panes=1),
    PREMIUM: TierLimits(
        max_windows=math.inf,
        max_panes=math.inf,
        sync_enabled=True,
        ai_enabled=True,
        advanced_customization=True,
    ),
}

FEATURES = ("sync_enabled", "ai_enabled", "advanced_customization")


@dataclass(frozen=True)
class Admission:
    """Outcome of an admission check. Falsy when the creation must not happen."""
    allowed: bool
    resource: str
    current: int
    limit: float
    tier: str

    def __bool__(self):
        return self.allowed


def normalize_tier(value) -> str:
    if value in TIERS:
        return value
    if value:
        logger.warning("Unknown license tier '%s', treating as free", value)
    return FREE


class LicenseGate(QObject):
    """
    Resolves the active tier and answers capacity questions.

    Checks are advisory: callers evaluate them immediately before the mutation
    they guard, on the same event-loop turn.
    """
    tier_changed = Signal(str)

    def __init__(self, store: Optional[KeyValueStore] = None, config: OverlayConfig = DEFAULT_CONFIG, parent=None):
        super().__init__(parent)
        self.store = store
        self.config = config
        self._tier = FREE

        if self.store is not None:
            self.store.changed.connect(self._on_store_changed)

    def current_tier(self) -> str:
        return self._tier

    def limits_for(self, tier: Optional[str] = None) -> TierLimits:
        return TIERS.get(tier or self._tier, TIERS[FREE])

    def check_window(self, current_count: int) -> Admission:
        limit = self.limits_for().max_windows
        return Admission(current_count < limit, "window", current_count, limit, self._tier)

    def check_pane(self, current_count: int) -> Admission:
        limit = self.limits_for().max_panes
        return Admission(current_count < limit, "pane", current_count, limit, self._tier)

    def can_add_window(self, current_count: int) -> bool:
        return self.check_window(current_count).allowed

    def can_add_pane(self, current_count: int) -> bool:
        return self.check_pane(current_count).allowed

    def is_feature_enabled(self, name: str) -> bool:
        if name not in FEATURES:
            return False
        return getattr(self.limits_for(), name) is True

    # --- Tier cache maintenance ---

    def refresh(self, callback: Optional[Callable[[str], None]] = None):
        """Reloads the tier from the store. The callback receives the resolved tier."""
        if self.store is None:
            if callback:
                callback(self._tier)
            return

        def on_result(result: dict):
            self._apply_tier(result.get(self.config.license_key))
            if callback:
                callback(self._tier)

        try:
            self.store.get([self.config.license_key], on_result)
        except StoreUnavailableError as e:
            logger.warning("Could not read license tier, keeping '%s': %s", self._tier, e)
            if callback:
                callback(self._tier)

    def _on_store_changed(self, changes: dict):
        if self.config.license_key in changes:
            self._apply_tier(changes[self.config.license_key])

    def _apply_tier(self, value):
        tier = normalize_tier(value)
        if tier == self._tier:
            return
        # Downgrades do not evict anything; the new limits only gate future creations.
        logger.info("License tier changed: %s -> %s", self._tier, tier)
        self._tier = tier
        self.tier_changed.emit(tier)

    def _write_tier(self, tier: str, callback: Optional[Callable[[dict], None]] = None):
        self._apply_tier(tier)
        if self.store is not None:
            try:
                self.store.set({self.config.license_key: tier})
            except StoreUnavailableError as e:
                logger.warning("Could not persist license tier: %s", e)
        if callback:
            callback({'success': True, 'tier': tier})

    def upgrade_to_premium(self, callback: Optional[Callable[[dict], None]] = None):
        self._write_tier(PREMIUM, callback)

    def downgrade_to_free(self, callback: Optional[Callable[[dict], None]] = None):
        self._write_tier(FREE, callback)

    def verify_license_key(self, key: str, callback: Optional[Callable[[dict], None]] = None):
        """Only the demo key is accepted until a payment backend exists."""
        if (key or "").strip() == DEMO_LICENSE_KEY:
            self.upgrade_to_premium(callback)
            return
        logger.info("Rejected license key")
        if callback:
            callback({'success': False, 'error': 'Invalid license key'})
