"""Deploy VRFCoordinatorV2Mock on local networks."""

from web3 import Web3

from bbx.registry import register

BASE_FEE = Web3.to_wei("0.1", "ether")  # LINK premium per request
GAS_PRICE_LINK = 10**9  # LINK per gas


def deploy_vrf_mock(env) -> None:
    vrf_coordinator_mock = env.deployments.deploy(
        "VRFCoordinatorV2Mock",
        from_=env.deployer,
        args=[BASE_FEE, GAS_PRICE_LINK],
        log=True,
    )
    env.log(
        "You have deployed the VRFCoordinatorV2Mock contract to:",
        vrf_coordinator_mock.address,
    )


register(
    "vrf_mock",
    deploy_vrf_mock,
    tags=["mocks"],
    skip=lambda env: not env.network.is_local,
)
