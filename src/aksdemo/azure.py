"""Azure CLI helpers: login, subscription selection and AKS provisioning."""

from __future__ import annotations

from collections.abc import Callable

from aksdemo.config.settings import Settings
from aksdemo.errors import SetupError
from aksdemo.observability.console import Console
from aksdemo.observability.logging import LogContext, get_logger
from aksdemo.shell import CommandResult, CommandRunner


log = get_logger(__name__)

Prompt = Callable[[str], str]

AKS_EXTENSION = "aks-preview"
DRY_RUN_SUBNET_ID = "<subnet-id>"


class AzureCli:
    """Wrapper around the `az` commands used by the setup steps."""

    def __init__(self, runner: CommandRunner) -> None:
        self.runner = runner

    def _az(self, *args: str, step: str, capture: bool = True) -> CommandResult:
        return self.runner.run(["az", *args], capture=capture, check=True, step=step)

    # Account

    def is_logged_in(self) -> bool:
        return self.runner.probe(["az", "account", "show"]).ok

    def account_show_name(self) -> str:
        return self.runner.probe(["az", "account", "show", "--query", "name", "-o", "tsv"]).stdout

    def login(self) -> None:
        # Interactive: device code or browser prompts must reach the terminal.
        self._az("login", step="azure_login", capture=False)

    def list_subscriptions_table(self) -> str:
        return self.runner.probe(["az", "account", "list", "--output", "table"]).stdout

    def set_subscription(self, subscription_id: str) -> None:
        self._az("account", "set", "--subscription", subscription_id, step="azure_subscriptions")

    # Extensions and tools

    def add_extension(self, name: str) -> None:
        self._az("extension", "add", "--name", name, "--yes", step="azure_extensions")

    def update_extension(self, name: str) -> None:
        self._az("extension", "update", "--name", name, step="azure_extensions")

    def install_kubectl(self) -> None:
        self._az("aks", "install-cli", step="azure_tools", capture=False)

    # AKS

    def cluster_exists(self, resource_group: str, name: str) -> bool:
        return self.runner.probe(
            ["az", "aks", "show", "--resource-group", resource_group, "--name", name]
        ).ok

    def delete_cluster(self, resource_group: str, name: str) -> None:
        self._az(
            "aks", "delete", "--resource-group", resource_group, "--name", name, "--yes",
            step="delete_cluster",
            capture=False,
        )

    def create_group(self, name: str, location: str) -> None:
        self._az("group", "create", "--name", name, "--location", location, step="create_cluster")

    def create_vnet(self, settings: Settings) -> None:
        network = settings.network
        self._az(
            "network", "vnet", "create",
            "--resource-group", settings.resource_group,
            "--name", network.vnet_name,
            "--address-prefix", network.vnet_address_prefix,
            "--subnet-name", network.subnet_name,
            "--subnet-prefix", network.subnet_address_prefix,
            step="create_cluster",
        )

    def subnet_id(self, settings: Settings) -> str:
        return self._az(
            "network", "vnet", "subnet", "show",
            "--resource-group", settings.resource_group,
            "--vnet-name", settings.network.vnet_name,
            "--name", settings.network.subnet_name,
            "--query", "id",
            "-o", "tsv",
            step="create_cluster",
        ).stdout

    def create_cluster(self, settings: Settings, subnet_id: str) -> None:
        self.runner.run(
            aks_create_args(settings, subnet_id),
            capture=False,
            check=True,
            step="create_cluster",
        )

    def get_credentials(self, resource_group: str, name: str) -> None:
        self._az(
            "aks", "get-credentials", "--resource-group", resource_group, "--name", name,
            step="create_cluster",
        )


def aks_create_args(settings: Settings, subnet_id: str) -> list[str]:
    """Build the `az aks create` command line.

    Azure CNI in overlay mode on the walkthrough subnet, managed identity,
    Azure RBAC, the monitoring add-on and the cluster autoscaler.
    """
    return [
        "az", "aks", "create",
        "--resource-group", settings.resource_group,
        "--name", settings.cluster_name,
        "--node-count", str(settings.node_count),
        "--node-vm-size", settings.vm_size,
        "--network-plugin", "azure",
        "--network-plugin-mode", "overlay",
        "--vnet-subnet-id", subnet_id,
        "--enable-managed-identity",
        "--generate-ssh-keys",
        "--enable-addons", "monitoring",
        "--enable-azure-rbac",
        "--enable-cluster-autoscaler",
        "--min-count", str(settings.autoscaler.min_count),
        "--max-count", str(settings.autoscaler.max_count),
    ]


def setup_azure(runner: CommandRunner, console: Console, prompt: Prompt = input) -> None:
    """Log in, pick a subscription and install the AKS CLI extension."""
    console.status("Setting up Azure environment...")
    az = AzureCli(runner)

    if az.is_logged_in():
        console.success("Already logged into Azure")
        console.status(f"Current subscription: {az.account_show_name()}")
    else:
        console.status("Logging into Azure...")
        az.login()

    console.status("Available subscriptions:")
    console.echo(az.list_subscriptions_table())

    subscription_id = prompt("Enter subscription ID (or press Enter to use current): ").strip()
    if subscription_id:
        az.set_subscription(subscription_id)
        console.success(f"Switched to subscription: {subscription_id}")

    console.status("Installing AKS CLI extensions...")
    az.add_extension(AKS_EXTENSION)
    az.update_extension(AKS_EXTENSION)

    if not runner.exists("kubectl"):
        console.status("Installing kubectl...")
        az.install_kubectl()


def create_aks_cluster(
    runner: CommandRunner,
    console: Console,
    settings: Settings,
    prompt: Prompt = input,
) -> bool:
    """Create the resource group, network and AKS cluster.

    Returns:
        True if a cluster was created, False if an existing one was reused.
    """
    console.status("Creating AKS cluster...")
    az = AzureCli(runner)
    rg, name = settings.resource_group, settings.cluster_name

    with LogContext(step="create_cluster", resource_group=rg, cluster=name):
        if az.cluster_exists(rg, name):
            console.warning(f"AKS cluster already exists: {name}")
            answer = prompt("Do you want to use existing cluster? (y/n): ").strip()
            if answer[:1] in ("y", "Y"):
                console.status("Using existing cluster")
                log.info("cluster_reused")
                return False
            console.status("Deleting existing cluster...")
            az.delete_cluster(rg, name)

        console.status(f"Creating resource group: {rg}")
        az.create_group(rg, settings.location)

        console.status("Creating virtual network...")
        az.create_vnet(settings)

        subnet_id = az.subnet_id(settings)
        if not subnet_id:
            if not runner.dry_run:
                raise SetupError(
                    code="subnet_not_found",
                    step="create_cluster",
                    message=f"Could not resolve subnet id for {settings.network.subnet_name}",
                    details={"vnet": settings.network.vnet_name, "resource_group": rg},
                )
            subnet_id = DRY_RUN_SUBNET_ID

        console.status(f"Creating AKS cluster: {name}")
        az.create_cluster(settings, subnet_id)

        console.status("Getting cluster credentials...")
        az.get_credentials(rg, name)

        log.info("cluster_created", subnet_id=subnet_id)

    console.success("AKS cluster created successfully")
    return True


__all__ = ["AzureCli", "aks_create_args", "create_aks_cluster", "setup_azure"]
