"""
ZeroGate — Common Primitives

Shared enums, base classes, and utilities used across all systems.
"""

from __future__ import annotations

import enum
from datetime import datetime, timezone

from pydantic import BaseModel, Field
from ulid import ULID


def new_id() -> str:
    """Generate a new ULID string. Time-sortable, globally unique."""
    return str(ULID())


def utc_now() -> datetime:
    """Current UTC time, timezone-aware."""
    return datetime.now(timezone.utc)


# ─── Enums ────────────────────────────────────────────────────────


class Criticality(enum.StrEnum):
    """Static severity weight of a verification point."""

    CRITICAL = "CRITICAL"
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


class ValidationLayer(enum.StrEnum):
    """The seven validation layers, declared in pipeline order."""

    CODE_QUALITY = "CODE_QUALITY"
    FUNCTIONALITY = "FUNCTIONALITY"
    PERFORMANCE = "PERFORMANCE"
    SECURITY = "SECURITY"
    ACCESSIBILITY = "ACCESSIBILITY"
    CROSS_BROWSER = "CROSS_BROWSER"
    USER_EXPERIENCE = "USER_EXPERIENCE"

    @property
    def display_name(self) -> str:
        return _LAYER_DISPLAY_NAMES[self]


_LAYER_DISPLAY_NAMES: dict[ValidationLayer, str] = {
    ValidationLayer.CODE_QUALITY: "Layer 1: Code Quality Verification",
    ValidationLayer.FUNCTIONALITY: "Layer 2: Functionality Validation",
    ValidationLayer.PERFORMANCE: "Layer 3: Performance Certification",
    ValidationLayer.SECURITY: "Layer 4: Security Hardening",
    ValidationLayer.ACCESSIBILITY: "Layer 5: Accessibility Compliance",
    ValidationLayer.CROSS_BROWSER: "Layer 6: Cross-Browser Compatibility",
    ValidationLayer.USER_EXPERIENCE: "Layer 7: User Experience Validation",
}

# Fixed execution order of the validation pipeline
LAYER_ORDER: tuple[ValidationLayer, ...] = tuple(ValidationLayer)


class ImplementationStatus(enum.StrEnum):
    IMPLEMENTED = "IMPLEMENTED"
    PLANNED = "PLANNED"
    IN_PROGRESS = "IN_PROGRESS"


class TestCategory(enum.StrEnum):
    """Functional area a verification point belongs to."""

    __test__ = False

    CONSOLE_LOGGING = "CONSOLE_LOGGING"
    FUNCTIONAL = "FUNCTIONAL"
    API_BACKEND = "API_BACKEND"
    VISUAL_UI = "VISUAL_UI"
    CROSS_BROWSER = "CROSS_BROWSER"
    PERFORMANCE = "PERFORMANCE"
    ACCESSIBILITY = "ACCESSIBILITY"
    SECURITY = "SECURITY"
    SEO_META = "SEO_META"
    ERROR_HANDLING = "ERROR_HANDLING"


class RiskLevel(enum.StrEnum):
    NONE = "NONE"
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


# ─── Base Models ──────────────────────────────────────────────────


class ZeroGateBaseModel(BaseModel):
    """Base model for all ZeroGate primitives. Uses ULID IDs and UTC timestamps."""

    model_config = {"populate_by_name": True, "from_attributes": True}


class Timestamped(ZeroGateBaseModel):
    """Mixin for models with creation timestamps."""

    timestamp: datetime = Field(default_factory=utc_now)
