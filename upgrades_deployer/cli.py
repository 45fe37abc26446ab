"""
``deploy-proxy`` command.

Every option falls back to an environment variable (or ``.env``), so the
command runs without arguments once the environment is set up. Failures are
not caught: they end the process with a traceback and a non-zero status.
"""

import click
from loguru import logger

from .artifacts.loader import ArtifactRegistry
from .config import DeploymentConfig
from .contracts.implementation import PROXY_KINDS
from .deployer import ProxyDeployer


@click.command()
@click.option(
    "--contract",
    "-c",
    "contract_name",
    envvar="CONTRACT_NAME",
    help="Contract to deploy, bare or fully qualified (contracts/Box.sol:Box).",
)
@click.option("--rpc-url", envvar="RPC_URL", help="JSON-RPC endpoint of the target network.")
@click.option(
    "--artifacts-dir",
    envvar="ARTIFACTS_DIR",
    type=click.Path(file_okay=False),
    help="Hardhat artifacts directory.",
)
@click.option(
    "--private-key",
    envvar="DEPLOYER_PRIVATE_KEY",
    help="Deployer key; the node's first account is used when omitted.",
)
@click.option(
    "--kind",
    "-k",
    envvar="PROXY_KIND",
    type=click.Choice(PROXY_KINDS),
    help="Proxy kind; auto picks uups for proxiableUUID-aware contracts.",
)
@click.option("--initializer", envvar="PROXY_INITIALIZER", help="Initializer function name.")
@click.option(
    "--no-initializer",
    is_flag=True,
    default=False,
    help="Deploy the proxy without calling an initializer.",
)
@click.option("--confirmations", envvar="CONFIRMATIONS", type=click.IntRange(min=1))
@click.option(
    "--timeout",
    envvar="CONFIRMATION_TIMEOUT",
    type=float,
    help="Seconds to wait for each deployment to be confirmed.",
)
@click.option("--list", "list_contracts", is_flag=True, help="List available artifacts and exit.")
def main(
    contract_name,
    rpc_url,
    artifacts_dir,
    private_key,
    kind,
    initializer,
    no_initializer,
    confirmations,
    timeout,
    list_contracts,
):
    """Deploy a compiled contract behind an upgradeable proxy."""
    config = DeploymentConfig.from_env(
        contract_name=contract_name,
        rpc_url=rpc_url,
        artifacts_dir=artifacts_dir,
        private_key=private_key,
        kind=kind,
        initializer=initializer,
        call_initializer=False if no_initializer else None,
        confirmations=confirmations,
        timeout=timeout,
    )

    if list_contracts:
        for name in ArtifactRegistry(config.artifacts_dir).list_available_contracts():
            click.echo(name)
        return

    logger.info(f"Deploying {config.contract_name} through {config.rpc_url}")
    deployer = ProxyDeployer.from_config(config)
    deployer.deploy()


if __name__ == "__main__":
    main()
