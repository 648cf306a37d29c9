from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class ProviderName(str, Enum):
    DEEL = "deel"
    REMOTE = "remote"
    OYSTER = "oyster"


class ContractStatus(str, Enum):
    PENDING = "pending"
    READY = "ready"


class QuoteStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ServiceType(str, Enum):
    FULL_TIME_EMPLOYEE = "full-time-employee"
    CONTRACTOR = "contractor"
    EXECUTIVE = "executive"


class ReviewAction(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Cost breakdowns and contracts
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CostBreakdown:
    """Annual cost of employing one person, every figure rounded to cents."""
    salary: float
    employer_tax: float
    benefits_cost: float
    fixed_fees: float
    termination_amortization: float
    tce: float

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


@dataclass
class ContractInput:
    country: str
    salary: float
    currency: str
    role: str
    start_date: str                      # ISO format: YYYY-MM-DD
    benefits: List[str] = field(default_factory=list)


@dataclass
class StoredContract:
    id: str
    provider: ProviderName
    input: ContractInput
    status: ContractStatus = ContractStatus.PENDING
    costs: Optional[CostBreakdown] = None
    created_at: datetime = field(default_factory=_utcnow)


@dataclass(frozen=True)
class ContractHandle:
    """Returned instead of costs when a quote is generated asynchronously."""
    contract_id: str
    provider: ProviderName
    status: ContractStatus = ContractStatus.PENDING


# ---------------------------------------------------------------------------
# Comparison records
# ---------------------------------------------------------------------------

@dataclass
class ValidationResult:
    is_valid: bool
    warnings: List[str]
    errors: List[str]
    risk_score: int
    margin_percent: float
    acid_test_passed: bool
    requires_manual_review: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "is_valid": self.is_valid,
            "margin_percent": self.margin_percent,
            "risk_score": self.risk_score,
            "acid_test_passed": self.acid_test_passed,
            "warnings": list(self.warnings),
            "errors": list(self.errors),
        }


@dataclass(frozen=True)
class QuoteQuery:
    country: str
    salary: float
    currency: str
    role: str
    service_type: Optional[ServiceType] = None


@dataclass(frozen=True)
class ProviderQuote:
    provider: ProviderName
    costs: CostBreakdown


@dataclass
class QuoteRecord:
    id: str
    query: QuoteQuery
    providers: List[ProviderQuote]
    chosen_provider: ProviderName
    requires_manual_review: bool
    status: QuoteStatus
    validation: ValidationResult
    created_at: datetime = field(default_factory=_utcnow)
    review_history: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def chosen_costs(self) -> Optional[CostBreakdown]:
        for quote in self.providers:
            if quote.provider == self.chosen_provider:
                return quote.costs
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "created_at": self.created_at.isoformat(),
            "query": {
                "country": self.query.country,
                "salary": self.query.salary,
                "currency": self.query.currency,
                "role": self.query.role,
                "service_type": self.query.service_type.value if self.query.service_type else None,
            },
            "providers": [
                {"provider": q.provider.value, "costs": q.costs.to_dict()} for q in self.providers
            ],
            "chosen_provider": self.chosen_provider.value,
            "requires_manual_review": self.requires_manual_review,
            "status": self.status.value,
            "validation": self.validation.to_dict(),
            "review_history": list(self.review_history),
        }
