#!/usr/bin/env python3
"""
Deploy everything tagged "all" and print the CompetitionFactory address.

Usage:
    python scripts/deploy.py                    # in-process hardhat network
    python scripts/deploy.py --network mumbai   # needs MUMBAI_RPC_URL, MNEMONIC, CHAINLINK_*
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


def main():
    parser = argparse.ArgumentParser(description="Deploy the competition contracts")
    parser.add_argument("--network", default=None, help="Target network (default: hardhat)")
    args = parser.parse_args()

    from bbx.environment import create_environment

    try:
        env = create_environment(args.network)
        if env.network.is_local:
            env.fixture(["all"])
        else:
            env.run(["all"])
        factory = env.deployments.get("CompetitionFactory")
    except Exception as e:
        logger.error(e)
        return 1

    print(f"Successfully deployed CompetitionFactory {factory.address}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
