"""Variant planning: how many dialect variants a request needs.

ES requests always produce the dual-variant packaging. A legacy-profile ES
request builds the legacy variant first and then a forced-modern variant; a
modern-profile ES request builds only the modern one and leaves the legacy
slot empty. Desktop requests build one variant packaged as raw text.
"""

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum, auto

from loguru import logger

from shadercross.compiler.models import CapabilityTier, ShaderLevelBytecode


class VariantSlot(Enum):
    """Where a variant goes in the packaged artifact."""

    SINGLE = auto()
    LEGACY = auto()
    MODERN = auto()


class PlannerState(Enum):
    """Progress of a planner run."""

    START = auto()
    CONVERT_PRIMARY = auto()
    CONVERT_SECONDARY = auto()
    PACKAGED = auto()
    FAILED = auto()


@dataclass(frozen=True)
class VariantPass:
    """One run of the conversion and emission path."""

    slot: VariantSlot
    tier: CapabilityTier


@dataclass(frozen=True)
class VariantPlan:
    """Ordered passes for a request, and whether they are packed together."""

    passes: tuple[VariantPass, ...]
    dual: bool


@dataclass(frozen=True)
class PlannedVariants:
    """Texts produced by a completed plan."""

    plan: VariantPlan
    texts: dict[VariantSlot, str]

    def level_bytecode(self) -> ShaderLevelBytecode:
        return ShaderLevelBytecode(
            legacy=self.texts.get(VariantSlot.LEGACY),
            modern=self.texts.get(VariantSlot.MODERN),
        )

    @property
    def single_text(self) -> str:
        return self.texts[VariantSlot.SINGLE]


def plan_variants(tier: CapabilityTier) -> VariantPlan:
    """Decide the passes needed for a requested tier."""
    if not tier.is_constrained:
        return VariantPlan(passes=(VariantPass(VariantSlot.SINGLE, tier),), dual=False)
    if tier.supports_modern_features:
        return VariantPlan(passes=(VariantPass(VariantSlot.MODERN, tier),), dual=True)
    return VariantPlan(
        passes=(
            VariantPass(VariantSlot.LEGACY, tier),
            VariantPass(VariantSlot.MODERN, CapabilityTier.es3()),
        ),
        dual=True,
    )


class VariantPlanner:
    """Drives the per-variant build function through a plan.

    Args:
        tier: Tier derived from the request
    """

    def __init__(self, tier: CapabilityTier):
        self.plan = plan_variants(tier)
        self.state = PlannerState.START

    def run(self, build: Callable[[CapabilityTier], str | None]) -> PlannedVariants | None:
        """Build every planned variant, stopping at the first failed pass.

        Args:
            build: Produces the program text for a tier, or None on a fatal
                diagnostic

        Returns:
            The produced texts, or None if any pass failed
        """
        texts: dict[VariantSlot, str] = {}
        for index, variant_pass in enumerate(self.plan.passes):
            self.state = (
                PlannerState.CONVERT_PRIMARY if index == 0 else PlannerState.CONVERT_SECONDARY
            )
            logger.debug(
                f"{self.state.name}: building {variant_pass.slot.name} variant "
                f"for {variant_pass.tier.name}"
            )
            text = build(variant_pass.tier)
            if text is None:
                self.state = PlannerState.FAILED
                return None
            texts[variant_pass.slot] = text

        self.state = PlannerState.PACKAGED
        return PlannedVariants(plan=self.plan, texts=texts)
