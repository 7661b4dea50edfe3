# idleeconomy: upgrade economy core for incremental games

from idleeconomy.config import EconomyConfig
from idleeconomy.errors import (
    EconomyError,
    ValidationError,
    InvalidAmount,
    UnknownUpgrade,
    PlayerNotFound,
    Locked,
    MaxLevelReached,
    InsufficientFunds,
    StoreError,
    StoreUnavailable,
    ReconciliationFailure,
)
from idleeconomy.effect import (
    CurveKind,
    EffectCurve,
    LinearCurve,
    AdditiveCurve,
    CompoundingCurve,
    Curve,
)
from idleeconomy.cost_scaling import CostScaling, UNAFFORDABLE
from idleeconomy.upgrade import (
    Category,
    UnlockRequirements,
    UpgradeDefinition,
    UpgradeListing,
    infer_curve,
)
from idleeconomy.calculator import cost, cumulative_effect, total_cost
from idleeconomy.requirement import Requirement, Req, UnlockContext, is_unlocked
from idleeconomy.catalog import (
    UpgradeCatalog,
    CatalogSource,
    StaticCatalogSource,
    JsonDirectoryCatalogSource,
    CatalogCache,
    parse_definition,
)
from idleeconomy.state import DerivedStats, PlayerEconomicState
from idleeconomy.pipeline import StatPipeline
from idleeconomy.store import PlayerStore, InMemoryPlayerStore, PlayerLocks
from idleeconomy.purchase import PurchaseEngine, PurchaseResult
from idleeconomy.regen import RegenerationScheduler, RegenTick
from idleeconomy.offline import OfflineAccrual, OfflineClaim
from idleeconomy.runtime import EconomyRuntime
from idleeconomy.logger import init_logging

__all__ = [
    # Config
    "EconomyConfig",
    "init_logging",
    # Errors
    "EconomyError",
    "ValidationError",
    "InvalidAmount",
    "UnknownUpgrade",
    "PlayerNotFound",
    "Locked",
    "MaxLevelReached",
    "InsufficientFunds",
    "StoreError",
    "StoreUnavailable",
    "ReconciliationFailure",
    # Curves
    "CurveKind",
    "EffectCurve",
    "LinearCurve",
    "AdditiveCurve",
    "CompoundingCurve",
    "Curve",
    # Cost
    "CostScaling",
    "UNAFFORDABLE",
    # Data model
    "Category",
    "UnlockRequirements",
    "UpgradeDefinition",
    "UpgradeListing",
    "infer_curve",
    "DerivedStats",
    "PlayerEconomicState",
    # Calculator
    "cost",
    "cumulative_effect",
    "total_cost",
    # Unlocks
    "Requirement",
    "Req",
    "UnlockContext",
    "is_unlocked",
    # Catalog
    "UpgradeCatalog",
    "CatalogSource",
    "StaticCatalogSource",
    "JsonDirectoryCatalogSource",
    "CatalogCache",
    "parse_definition",
    # Engines
    "StatPipeline",
    "PlayerStore",
    "InMemoryPlayerStore",
    "PlayerLocks",
    "PurchaseEngine",
    "PurchaseResult",
    "RegenerationScheduler",
    "RegenTick",
    "OfflineAccrual",
    "OfflineClaim",
    # Runtime
    "EconomyRuntime",
]
