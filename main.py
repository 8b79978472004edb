"""AKS Deployer CLI entrypoint."""
from typing import Optional

import typer
import yaml
from azure.core.exceptions import AzureError
from pydantic import ValidationError
from rich.table import Table

from aksdeploy.config.parser import ConfigParser
from aksdeploy.console import configure_logging, console
from aksdeploy.errors import (
    CommandError,
    DeployError,
    FatalProvisioningFailure,
    PreconditionMissing,
    UsageError,
)
from aksdeploy.manifests.render import render_manifest
from aksdeploy.pipeline.orchestrator import EXAMPLE, USAGE, AksDeployer, validate_target
from aksdeploy.quota.checker import ComputeQuotaChecker
from aksdeploy.runner import CommandRunner
from aksdeploy.tools.azure import AzureCli

app = typer.Typer(help="AKS Deployer - Build, push and roll out the fullstack app to Azure Kubernetes Service")

CONFIG_HELP = "Path to the deployment YAML file (default: ./aks.yaml if present)"


@app.command("deploy")
def deploy(
    resource_group: str = typer.Argument("", help="Azure resource group name"),
    cluster_name: str = typer.Argument("", help="AKS cluster name"),
    acr_name: str = typer.Argument("", help="Azure Container Registry name"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help=CONFIG_HELP),
    ip_timeout: Optional[float] = typer.Option(None, "--ip-timeout", min=1, help="Give up waiting for the external IP after this many seconds"),
    check_quota: bool = typer.Option(False, "--check-quota", help="Check vCPU quota before creating the cluster"),
    debug: bool = typer.Option(False, "--debug", help="Print verbose debug information including all external commands")
):
    """Provision Azure resources and deploy the application to AKS."""
    configure_logging(debug)

    try:
        target = validate_target(resource_group, cluster_name, acr_name)
    except UsageError as e:
        console.print(f"[bold red]Error: {e}[/]")
        console.print(USAGE)
        console.print()
        console.print(EXAMPLE)
        raise typer.Exit(code=1)

    try:
        settings = ConfigParser.load(config)
        if ip_timeout is not None:
            settings = settings.model_copy(update={"ip_timeout": ip_timeout})

        deployer = AksDeployer(target, settings, check_quota=check_quota)
        deployer.deploy()

    except PreconditionMissing as e:
        console.print(f"[bold yellow]⚠️  WARNING: {e}[/]")
        if e.remediation:
            console.print(e.remediation)
        raise typer.Exit(code=e.exit_code)
    except FatalProvisioningFailure as e:
        console.print(f"[bold red]❌ Step '{e.step}' failed[/]")
        if e.detail:
            console.print(e.detail, markup=False)
        raise typer.Exit(code=e.exit_code)
    except DeployError as e:
        console.print(f"[bold red]❌ {e}[/]")
        raise typer.Exit(code=e.exit_code)
    except (FileNotFoundError, ValidationError, yaml.YAMLError) as e:
        console.print(f"[bold red]Error loading config: {e}[/]")
        raise typer.Exit(code=1)
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted. Resources created so far are left in place.[/]")
        raise typer.Exit(code=130)


@app.command("quota-check")
def quota_check(
    config: Optional[str] = typer.Option(None, "--config", "-c", help=CONFIG_HELP),
    location: Optional[str] = typer.Option(None, "--location", "-l", help="Azure region to check (default: config location)"),
    debug: bool = typer.Option(False, "--debug", help="Print verbose debug information including all Azure CLI commands")
):
    """Check vCPU quota for the configured node pool."""
    configure_logging(debug)

    try:
        settings = ConfigParser.load(config)
        region = location or settings.location
        console.print(f"[bold blue]Checking vCPU quota for {settings.node_count} x {settings.vm_size} in {region}...[/]")

        azure = AzureCli(CommandRunner(), settings)
        checker = ComputeQuotaChecker(azure.subscription_id(), region)
        quota = checker.check(settings.vm_size, settings.node_count)
    except CommandError as e:
        console.print(f"[bold red]Error: {e}[/]")
        console.print(e.output, markup=False)
        raise typer.Exit(code=1)
    except (DeployError, AzureError, FileNotFoundError, ValidationError, yaml.YAMLError) as e:
        console.print(f"[bold red]Error: {e}[/]")
        raise typer.Exit(code=1)

    table = Table(title=f"{quota.vm_size} ({quota.family}, {quota.vcpus_per_node} vCPUs) in {quota.region}")
    table.add_column("Quota", style="cyan")
    table.add_column("Required", justify="right")
    table.add_column("Available", justify="right")
    table.add_column("Limit", justify="right")
    table.add_column("Status")
    for unit, info in quota.quotas.items():
        status = "[green]✓ SUFFICIENT[/]" if info.is_sufficient else "[red]❌ INSUFFICIENT[/]"
        table.add_row(unit, f"{info.required:g}", f"{info.available:g}", f"{info.limit:g}", status)
    console.print(table)

    if not quota.is_sufficient():
        console.print("\n[yellow]To request a quota increase, visit:[/]")
        console.print("[link]https://portal.azure.com/#blade/Microsoft_Azure_Capacity/QuotaMenuBlade/myQuotas[/link]")
        raise typer.Exit(code=2)


@app.command("render")
def render(
    acr_name: str = typer.Argument(..., help="Azure Container Registry name"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help=CONFIG_HELP),
    output: Optional[str] = typer.Option(None, "--output", "-o", help="Path for the rendered manifest (default: rendered_deployment from config)")
):
    """Render the deployment manifest with the registry name, without deploying."""
    try:
        settings = ConfigParser.load(config)
        manifests = settings.manifests
        path = render_manifest(
            manifests.path("deployment"),
            output or manifests.path("rendered_deployment"),
            manifests.placeholder,
            acr_name,
        )
    except (FileNotFoundError, ValidationError, yaml.YAMLError) as e:
        console.print(f"[bold red]Error: {e}[/]")
        raise typer.Exit(code=1)

    console.print(f"[green]Rendered manifest written to {path}[/]")


if __name__ == "__main__":
    app()
