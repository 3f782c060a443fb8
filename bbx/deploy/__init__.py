"""
bbx/deploy/ - Deploy scripts, run in the order listed here.

Each module calls bbx.registry.register() at import time.
"""

SCRIPT_MODULES = [
    "vrf_mock",
    "competition_factory",
]
