"""Pydantic models for deployment configuration."""
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, PositiveFloat, PositiveInt


class ImageService(BaseModel):
    """A service built into its own container image."""
    model_config = ConfigDict(extra="forbid")

    name: str
    context: str


class ManifestPaths(BaseModel):
    """Kubernetes manifest locations, relative to ``directory``."""
    model_config = ConfigDict(extra="forbid")

    directory: str = "k8s"
    config: str = "configmap.yaml"
    secret: str = "secret-aks.yaml"
    secret_template: str = "secret-aks.yaml.template"
    deployment: str = "deployment-aks.yaml"
    rendered_deployment: str = "deployment-aks-temp.yaml"
    service: str = "service-aks.yaml"
    placeholder: str = "ACR_NAME"

    def path(self, name: str) -> Path:
        """Resolve one of the manifest fields to a path."""
        return Path(self.directory) / getattr(self, name)


def _default_services() -> List[ImageService]:
    return [
        ImageService(name="backend", context="./backend"),
        ImageService(name="frontend", context="./frontend"),
    ]


class DeployConfig(BaseModel):
    """Settings for one AKS deployment run."""
    model_config = ConfigDict(extra="forbid")

    location: str = "eastus"
    node_count: PositiveInt = 1
    vm_size: str = "Standard_DC2as_v5"
    network_plugin: str = "kubenet"
    network_policy: Optional[str] = None
    registry_sku: str = "Basic"
    image_namespace: str = "nodejs-fullstack"
    image_tag: str = "latest"
    services: List[ImageService] = Field(default_factory=_default_services)
    providers: List[str] = Field(
        default_factory=lambda: ["Microsoft.ContainerService", "Microsoft.Network"]
    )
    manifests: ManifestPaths = Field(default_factory=ManifestPaths)
    deployments: List[str] = Field(
        default_factory=lambda: ["task-manager-backend", "task-manager-frontend"]
    )
    frontend_service: str = "task-manager-frontend"
    rollout_timeout: PositiveInt = 300
    ip_initial_delay: float = Field(default=10, ge=0)
    ip_poll_interval: PositiveFloat = 10
    ip_timeout: Optional[PositiveFloat] = None


class DeployTarget(BaseModel):
    """The three names every deployment needs."""
    resource_group: str
    cluster_name: str
    registry_name: str

    @property
    def login_server(self) -> str:
        return f"{self.registry_name}.azurecr.io"

    def image_tag(self, config: DeployConfig, service: str) -> str:
        """Full registry reference for a service image."""
        return f"{self.login_server}/{config.image_namespace}/{service}:{config.image_tag}"
