"""
Deal template, tranche and trigger classes for the ABS Deal Modeler
"""
import math
from dataclasses import dataclass
from typing import Optional, Tuple
from enum import Enum

from .config import OC_SENTINEL


class DealConfigError(ValueError):
    """Raised when a deal template or scenario cannot be simulated"""


class Rating(Enum):
    AAA = "AAA"
    AA = "AA"
    A = "A"
    BBB = "BBB"
    BB = "BB"
    B = "B"
    NR = "NR"  # Residual / equity


class CouponType(Enum):
    FIXED = "Fixed"
    FLOATING = "Floating"


class TriggerType(Enum):
    OC = "OC"  # Overcollateralization
    IC = "IC"  # Interest coverage (parsed, not evaluated)
    CNL = "CNL"  # Cumulative net loss
    DSCR = "DSCR"  # Parsed, not evaluated
    ARD = "ARD"  # Anticipated repayment date, threshold is a month number
    INFO = "INFO"  # Informational timing marker only (e.g. CLO non-call)


# =============================================================================
# STRUCTURE COMPONENTS
# =============================================================================

@dataclass(frozen=True)
class TrancheSpec:
    """A single class of notes in the capital structure"""
    name: str
    balance: float  # $mm
    coupon_type: CouponType
    spread: float  # bps over the base rate
    rating: Rating
    subordination: float = 0.0  # Static credit enhancement, %

    @property
    def is_equity(self) -> bool:
        return self.rating == Rating.NR

    @property
    def is_rated(self) -> bool:
        return not self.is_equity

    def coupon_rate(self, base_rate: float) -> float:
        """Annual coupon in % given the base floating rate in %"""
        return base_rate + self.spread / 100


@dataclass(frozen=True)
class TriggerSpec:
    """A structural trigger test"""
    name: str
    type: TriggerType
    threshold: float  # % for OC/IC/CNL/DSCR, month number for ARD/INFO
    consequence: str = ""

    def is_breached(self, value: float) -> bool:
        """
        Shared threshold check.

        OC/IC/DSCR fail below the threshold, CNL fails above it, ARD is
        reached once the period passes the threshold month. INFO never fails.
        """
        if self.type in (TriggerType.OC, TriggerType.IC, TriggerType.DSCR):
            return value < self.threshold
        if self.type in (TriggerType.CNL, TriggerType.ARD):
            return value > self.threshold
        return False


# =============================================================================
# DEAL TEMPLATE
# =============================================================================

@dataclass(frozen=True)
class DealTemplate:
    """Static definition of a collateral pool, tranche stack and trigger set"""
    id: str
    name: str
    collateral_balance: float  # $mm
    wac: float  # Weighted average coupon, %
    wam: float  # Weighted average maturity, months
    tranches: Tuple[TrancheSpec, ...] = ()
    triggers: Tuple[TriggerSpec, ...] = ()
    description: str = ""
    collateral_type: str = ""
    typical_wal: str = ""
    key_risks: Tuple[str, ...] = ()
    typical_spreads: Tuple[Tuple[str, str], ...] = ()

    def validate(self) -> bool:
        """Validate the template before simulation"""
        pool = (
            ("WAM", self.wam),
            ("WAC", self.wac),
            ("collateral balance", self.collateral_balance),
        )
        for label, value in pool:
            if not math.isfinite(value):
                raise DealConfigError(f"{self.name}: {label} must be finite, got {value}")
        if self.wam <= 0:
            raise DealConfigError(
                f"{self.name}: WAM must be positive, got {self.wam}"
            )
        if not self.tranches:
            raise DealConfigError(f"{self.name}: tranche list is empty")
        if self.collateral_balance <= 0:
            raise DealConfigError(
                f"{self.name}: collateral balance must be positive, got {self.collateral_balance}"
            )
        for t in self.tranches:
            if not (math.isfinite(t.balance) and math.isfinite(t.spread)):
                raise DealConfigError(
                    f"{self.name}: {t.name} balance and spread must be finite, got {t.balance} and {t.spread}"
                )
            if t.balance < 0:
                raise DealConfigError(f"{self.name}: {t.name} has negative balance {t.balance}")
        return True

    def get_trigger(self, trigger_type: TriggerType) -> Optional[TriggerSpec]:
        """First trigger of the given type, if any"""
        for trigger in self.triggers:
            if trigger.type == trigger_type:
                return trigger
        return None

    @property
    def equity_index(self) -> Optional[int]:
        for idx, t in enumerate(self.tranches):
            if t.is_equity:
                return idx
        return None

    @property
    def rated_balance(self) -> float:
        return sum(t.balance for t in self.tranches if t.is_rated)

    @property
    def total_note_balance(self) -> float:
        return sum(t.balance for t in self.tranches)

    @property
    def initial_oc_percent(self) -> float:
        rated = self.rated_balance
        return self.collateral_balance / rated * 100 if rated > 0 else OC_SENTINEL

    def to_dict(self) -> dict:
        """Serialize template to dictionary for JSON export"""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "collateral_type": self.collateral_type,
            "collateral_balance": self.collateral_balance,
            "wac": self.wac,
            "wam": self.wam,
            "typical_wal": self.typical_wal,
            "tranches": [
                {
                    "name": t.name,
                    "balance": t.balance,
                    "coupon_type": t.coupon_type.value,
                    "spread": t.spread,
                    "rating": t.rating.value,
                    "subordination": t.subordination,
                }
                for t in self.tranches
            ],
            "triggers": [
                {
                    "name": t.name,
                    "type": t.type.value,
                    "threshold": t.threshold,
                    "consequence": t.consequence,
                }
                for t in self.triggers
            ],
            "key_risks": list(self.key_risks),
            "typical_spreads": [
                {"rating": rating, "spread": spread}
                for rating, spread in self.typical_spreads
            ],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "DealTemplate":
        """Create DealTemplate from dictionary"""
        try:
            tranches = tuple(
                TrancheSpec(
                    name=t["name"],
                    balance=float(t["balance"]),
                    coupon_type=CouponType(t.get("coupon_type", "Floating")),
                    spread=float(t.get("spread", 0)),
                    rating=Rating(t["rating"]),
                    subordination=float(t.get("subordination", 0)),
                )
                for t in data.get("tranches", [])
            )
            triggers = tuple(
                TriggerSpec(
                    name=t["name"],
                    type=TriggerType(t["type"]),
                    threshold=float(t["threshold"]),
                    consequence=t.get("consequence", ""),
                )
                for t in data.get("triggers", [])
            )
        except (KeyError, ValueError) as e:
            raise DealConfigError(f"Invalid template definition: {e}") from e

        return cls(
            id=data.get("id", "custom"),
            name=data.get("name", "Custom Deal"),
            description=data.get("description", ""),
            collateral_type=data.get("collateral_type", ""),
            collateral_balance=float(data.get("collateral_balance", 0)),
            wac=float(data.get("wac", 0)),
            wam=float(data.get("wam", 0)),
            typical_wal=data.get("typical_wal", ""),
            tranches=tranches,
            triggers=triggers,
            key_risks=tuple(data.get("key_risks", [])),
            typical_spreads=tuple(
                (s["rating"], s["spread"]) for s in data.get("typical_spreads", [])
            ),
        )

