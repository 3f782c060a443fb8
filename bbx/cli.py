#!/usr/bin/env python3
"""
bbx/cli.py - Command line interface for bbx-contracts

Usage:
    bbx deploy [--network NAME] [--tags TAG ...] [--reset]
    bbx verify --network NAME --contract NAME [--address ADDR]
    bbx deployments [--network NAME]
    bbx participants [--count N]
"""

import argparse
import logging
import sys

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger(__name__)


def cmd_deploy(args):
    """Run tagged deploy scripts against a network."""
    from bbx.environment import create_environment

    env = create_environment(args.network)
    logger.info(f"Deploying to {env.network.name} as {env.deployer.address}")

    if args.reset:
        env.fixture(args.tags)
    else:
        env.run(args.tags)

    for name, deployment in env.deployments.all().items():
        logger.info(f"   {name}: {deployment.address}")
    return 0


def cmd_verify(args):
    """Verify a recorded (or explicitly addressed) deployment on the explorer."""
    from bbx.environment import create_environment
    from bbx.verify import verify_contract

    env = create_environment(args.network)
    deployment = env.deployments.get_or_none(args.contract)

    address = args.address or (deployment.address if deployment else None)
    if address is None:
        logger.error(f"No deployment recorded for {args.contract} on {env.network.name}; pass --address")
        return 1

    constructor_args = args.args if args.args else (deployment.args if deployment else [])
    url = verify_contract(env, args.contract, address, constructor_args)
    logger.info(f"Verified: {url}")
    return 0


def cmd_deployments(args):
    """List deployments recorded for a network."""
    from bbx.environment import create_environment

    try:
        from rich.console import Console
        from rich.table import Table
    except ImportError:
        logger.error("Missing dependency: rich. Install: pip install -e '.[status]'")
        return 1

    env = create_environment(args.network)
    records = env.deployments.all()
    if not records:
        logger.info(f"No deployments recorded for {env.network.name}")
        return 0

    table = Table(title=f"Deployments ({env.network.name})", show_header=True, header_style="bold cyan")
    table.add_column("Contract", style="bold")
    table.add_column("Address")
    table.add_column("Block", justify="right")
    table.add_column("Gas", justify="right")

    for name, deployment in sorted(records.items()):
        block = "" if deployment.block_number is None else str(deployment.block_number)
        gas_used = "" if deployment.gas_used is None else f"{deployment.gas_used:,}"
        table.add_row(name, deployment.address, block, gas_used)

    Console().print(table)
    return 0


def cmd_participants(args):
    """Print a batch of random beatboxers."""
    from bbx.participants import generate_random_beatboxers

    participants = generate_random_beatboxers(args.count)
    for address, name in participants.pairs():
        print(f"{address}  {name}")
    return 0


def main():
    parser = argparse.ArgumentParser(
        prog="bbx",
        description="Deploy and verify the beatbox competition contracts",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    deploy_parser = subparsers.add_parser("deploy", help="Run deploy scripts")
    deploy_parser.add_argument("--network", default=None, help="Target network (default: hardhat)")
    deploy_parser.add_argument("--tags", nargs="*", default=None, help="Only run scripts with these tags")
    deploy_parser.add_argument("--reset", action="store_true", help="Discard recorded deployments first")
    deploy_parser.set_defaults(func=cmd_deploy)

    verify_parser = subparsers.add_parser("verify", help="Verify a contract on the block explorer")
    verify_parser.add_argument("--network", required=True, help="Network the contract lives on")
    verify_parser.add_argument("--contract", required=True, help="Contract (artifact) name")
    verify_parser.add_argument("--address", default=None, help="Override the recorded address")
    verify_parser.add_argument("args", nargs="*", help="Constructor arguments (default: recorded args)")
    verify_parser.set_defaults(func=cmd_verify)

    list_parser = subparsers.add_parser("deployments", help="List recorded deployments")
    list_parser.add_argument("--network", default=None, help="Network (default: hardhat)")
    list_parser.set_defaults(func=cmd_deployments)

    participants_parser = subparsers.add_parser("participants", help="Generate random beatboxers")
    participants_parser.add_argument("--count", type=int, default=16, help="How many (default: 16)")
    participants_parser.set_defaults(func=cmd_participants)

    args = parser.parse_args()

    try:
        return args.func(args)
    except KeyboardInterrupt:
        logger.info("\nCancelled.")
        return 130
    except Exception as e:
        logger.error(f"{args.command} failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
