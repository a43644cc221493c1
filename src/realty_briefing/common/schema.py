"""Dataclasses for generation options and the schedule records prompts are built from."""
from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class GenerationOptions:
    """Sampling parameters for one generation call."""
    temperature: float = 0.7
    top_k: int | None = 32
    top_p: float | None = 0.9
    max_output_tokens: int = 1200

    def __post_init__(self) -> None:
        if not 0.0 <= self.temperature <= 2.0:
            raise ValueError(f"temperature must be in [0, 2], got {self.temperature}")
        if self.top_p is not None and not 0.0 <= self.top_p <= 1.0:
            raise ValueError(f"top_p must be in [0, 1], got {self.top_p}")
        if self.top_k is not None and self.top_k <= 0:
            raise ValueError(f"top_k must be positive, got {self.top_k}")
        if self.max_output_tokens <= 0:
            raise ValueError(f"max_output_tokens must be positive, got {self.max_output_tokens}")


@dataclass(frozen=True)
class CustomerRef:
    id: str
    name: str
    phone: str | None = None
    email: str | None = None


@dataclass(frozen=True)
class PropertyRef:
    id: str
    title: str
    address: str | None = None


@dataclass(frozen=True)
class ContractRef:
    id: str
    contract_number: str
    type: str | None = None
    status: str | None = None


@dataclass(frozen=True)
class PublisherRef:
    id: str
    name: str
    email: str | None = None
    level: int | None = None
    business_number: str | None = None


@dataclass(frozen=True)
class ScheduleSummary:
    """Read-only projection of a schedule and its linked records."""
    id: str
    title: str
    date: datetime
    type: str | None = None
    time: str | None = None
    location: str | None = None
    description: str | None = None
    priority: str | None = None
    status: str | None = None
    publisher: PublisherRef | None = None
    related_customers: tuple[CustomerRef, ...] = field(default_factory=tuple)
    related_properties: tuple[PropertyRef, ...] = field(default_factory=tuple)
    related_contracts: tuple[ContractRef, ...] = field(default_factory=tuple)
    by_company_number: str | None = None
    created_at: datetime | None = None


MANAGER_LEVEL = 5


@dataclass(frozen=True)
class UserContext:
    """The authenticated user, as placed on the request by the auth middleware."""
    id: str
    name: str
    level: int = 1
    business_number: str | None = None

    @property
    def sees_company(self) -> bool:
        """Managers see every schedule of their company, others only their own."""
        return self.level >= MANAGER_LEVEL

    def can_access(self, summary: ScheduleSummary) -> bool:
        if self.sees_company:
            return summary.by_company_number == self.business_number
        return summary.publisher is not None and summary.publisher.id == self.id
