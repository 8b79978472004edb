"""Tests for the Azure CLI wrapper and error classification."""
import pytest

from aksdeploy.config.schema import DeployConfig, DeployTarget
from aksdeploy.errors import AuthenticationRequired, CommandError
from aksdeploy.runner import CommandResult
from aksdeploy.tools.azure import AzureCli


@pytest.fixture
def target():
    return DeployTarget(resource_group="rg", cluster_name="aks", registry_name="myacr")


def error(stderr, returncode=1):
    return CommandError(CommandResult(["az"], returncode, "", stderr))


def test_error_code_parsing():
    e = error("ERROR: (ResourceGroupNotFound) Resource group 'rg' could not be found.\nCode: ResourceGroupNotFound")
    assert e.error_code == "ResourceGroupNotFound"
    assert not e.already_exists

    assert error("(AlreadyExists) exists").error_code == "AlreadyExists"
    assert error("plain failure").error_code is None


@pytest.mark.parametrize("stderr", [
    "ERROR: (AlreadyExists) Cluster exists.\nCode: AlreadyExists",
    "Code: ResourceExists",
    "ERROR: The registry DNS name myacr.azurecr.io is already in use.",
    "Invalid resource group location 'westus'. The Resource group already exists in location 'eastus'.",
])
def test_already_exists_detection(stderr):
    assert error(stderr).already_exists


def test_create_cluster_single_well_formed_call(fake_runner, runner, target):
    AzureCli(runner, DeployConfig()).create_cluster(target)

    [cmd] = fake_runner.matching("az aks create")
    assert cmd[cmd.index("--node-count") + 1] == "1"
    assert cmd[cmd.index("--node-vm-size") + 1] == "Standard_DC2as_v5"
    assert cmd[cmd.index("--network-plugin") + 1] == "kubenet"
    assert cmd[cmd.index("--attach-acr") + 1] == "myacr"
    assert "--enable-managed-identity" in cmd
    assert "--yes" in cmd
    assert "--network-policy" not in cmd


def test_create_cluster_with_network_policy(fake_runner, runner, target):
    AzureCli(runner, DeployConfig(network_plugin="azure", network_policy="calico")).create_cluster(target)
    [cmd] = fake_runner.matching("az aks create")
    assert cmd[cmd.index("--network-policy") + 1] == "calico"
    assert cmd.count("--network-policy") == 1


def test_exists_probe(fake_runner, runner, target):
    azure = AzureCli(runner, DeployConfig())
    assert azure.registry_exists(target)

    fake_runner.on("az aks show", (3, "", "ERROR: (ResourceNotFound) The Resource 'aks' was not found.\nCode: ResourceNotFound"))
    assert not azure.cluster_exists(target)


def test_exists_probe_propagates_other_errors(fake_runner, runner, target):
    fake_runner.on("az acr show", (1, "", "ERROR: (AuthorizationFailed) denied\nCode: AuthorizationFailed"))
    with pytest.raises(CommandError):
        AzureCli(runner, DeployConfig()).registry_exists(target)


def test_check_login(fake_runner, runner):
    azure = AzureCli(runner, DeployConfig())
    azure.check_login()

    fake_runner.on("az account show", (1, "", "Please run 'az login' to setup account."))
    with pytest.raises(AuthenticationRequired):
        azure.check_login()


def test_subscription_id(fake_runner, runner):
    fake_runner.on("az account show --query id", (0, "00000000-1111\n"))
    assert AzureCli(runner, DeployConfig()).subscription_id() == "00000000-1111"
