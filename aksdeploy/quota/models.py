"""Data models for vCPU quota information."""
from dataclasses import dataclass, field
from typing import Dict


@dataclass
class QuotaInfo:
    """Information about a specific quota."""
    unit: str
    current_usage: float
    limit: float
    required: float

    @property
    def available(self) -> float:
        """Calculate available quota."""
        return self.limit - self.current_usage

    @property
    def is_sufficient(self) -> bool:
        """Check if available quota is sufficient."""
        return self.available >= self.required


@dataclass
class FamilyQuota:
    """vCPU quotas that bound a cluster of one VM size in one region."""
    vm_size: str
    family: str
    region: str
    vcpus_per_node: int
    quotas: Dict[str, QuotaInfo] = field(default_factory=dict)

    def is_sufficient(self) -> bool:
        """Check if all quotas are sufficient."""
        return all(q.is_sufficient for q in self.quotas.values())
