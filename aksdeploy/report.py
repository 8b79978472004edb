"""Operator-facing text rendered with jinja2."""
from jinja2 import BaseLoader, Environment

from .config.schema import DeployConfig, DeployTarget

# Embedded report templates
TEMPLATES = {
    "banner": """🚀 Deploying to Azure Kubernetes Service (AKS)...
Resource Group: {{ target.resource_group }}
Cluster Name: {{ target.cluster_name }}
ACR Name: {{ target.registry_name }}
Location: {{ config.location }}
Node Count: {{ config.node_count }}
VM Size: {{ config.vm_size }}
""",

    "missing_secret": """Please create it from {{ template_path }}

Steps:
1. cp {{ template_path }} {{ secret_path }}
2. Edit {{ secret_path }} with your MongoDB URI and JWT secret
3. Re-run this command
""",

    "summary": """🎉 SUCCESS! Your application is deployed!

📱 Access your application at:
   Frontend: http://{{ external_ip }}

🛠️  Useful commands:
   View logs: kubectl logs -l app={{ config.deployments[0] }}
   Scale app: kubectl scale deployment/{{ config.deployments[0] }} --replicas=2
   Delete app: kubectl delete -f {{ deployment_manifest }} -f {{ service_manifest }}
   Delete cluster: az aks delete --resource-group {{ target.resource_group }} --name {{ target.cluster_name }} --yes
""",
}

_env = Environment(loader=BaseLoader(), keep_trailing_newline=True)


def render(name: str, **context) -> str:
    """Render one of the embedded templates."""
    return _env.from_string(TEMPLATES[name]).render(**context)


def banner(target: DeployTarget, config: DeployConfig) -> str:
    return render("banner", target=target, config=config)


def missing_secret(config: DeployConfig) -> str:
    return render(
        "missing_secret",
        template_path=config.manifests.path("secret_template"),
        secret_path=config.manifests.path("secret"),
    )


def summary(target: DeployTarget, config: DeployConfig, external_ip: str) -> str:
    # The rendered manifest is removed at the end of the run; point at the base one
    return render(
        "summary",
        target=target,
        config=config,
        external_ip=external_ip,
        deployment_manifest=config.manifests.path("deployment"),
        service_manifest=config.manifests.path("service"),
    )
