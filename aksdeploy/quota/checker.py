"""vCPU quota preflight for AKS node pools."""
import logging
from typing import Optional, Tuple

from azure.identity import DefaultAzureCredential

from ..errors import QuotaError
from .models import FamilyQuota, QuotaInfo

logger = logging.getLogger(__name__)

# Usage name of the regional vCPU total
REGIONAL_CORES = "cores"


class ComputeQuotaChecker:
    """Checks that a region has vCPU quota for ``node_count`` VMs of a size."""

    def __init__(self, subscription_id: str, location: str, credential=None):
        """Initialize the checker.

        Args:
            subscription_id: Azure subscription ID.
            location: Azure region name.
            credential: Azure credential; DefaultAzureCredential if omitted.
        """
        from azure.mgmt.compute import ComputeManagementClient

        self.subscription_id = subscription_id
        self.location = location
        self.credential = credential or DefaultAzureCredential()
        self.client = ComputeManagementClient(self.credential, self.subscription_id)

    def resolve_vm_size(self, vm_size: str) -> Tuple[str, int]:
        """Look up the quota family and vCPU count of a VM size.

        Returns:
            Tuple[str, int]: Family usage name and vCPUs per VM.

        Raises:
            QuotaError: If the size is not offered in the location.
        """
        skus = self.client.resource_skus.list(filter=f"location eq '{self.location}'")
        for sku in skus:
            if sku.resource_type != "virtualMachines" or (sku.name or "").lower() != vm_size.lower():
                continue
            vcpus = _capability(sku, "vCPUs")
            if not sku.family or vcpus is None:
                raise QuotaError(f"VM size {vm_size} in {self.location} has no family or vCPU information")
            return sku.family, int(vcpus)
        raise QuotaError(f"VM size {vm_size} is not available in {self.location}")

    def check(self, vm_size: str, node_count: int) -> FamilyQuota:
        """Compare required vCPUs against the family and regional limits.

        Args:
            vm_size: Node VM size, e.g. Standard_DC2as_v5.
            node_count: Number of nodes.

        Returns:
            FamilyQuota: Quota details per unit.
        """
        family, vcpus = self.resolve_vm_size(vm_size)
        required = vcpus * node_count
        logger.debug("%s is family %s with %d vCPUs; %d required", vm_size, family, vcpus, required)

        result = FamilyQuota(vm_size, family, self.location, vcpus)
        wanted = {family.lower(): family, REGIONAL_CORES: REGIONAL_CORES}
        for usage in self.client.usage.list(self.location):
            key = usage.name.value.lower()
            if key in wanted:
                unit = wanted[key]
                result.quotas[unit] = QuotaInfo(
                    unit=unit,
                    current_usage=usage.current_value,
                    limit=usage.limit,
                    required=required,
                )

        missing = [unit for unit in wanted.values() if unit not in result.quotas]
        if missing:
            raise QuotaError(f"No usage data for {', '.join(missing)} in {self.location}")
        return result


def _capability(sku, name: str) -> Optional[str]:
    for capability in sku.capabilities or []:
        if capability.name == name:
            return capability.value
    return None
