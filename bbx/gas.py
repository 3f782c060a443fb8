"""
bbx/gas.py - Gas usage reporting

Collects gasUsed per (contract, method) from every transaction sent through
bbx.chain while REPORT_GAS is set, and formats a summary table for the end of
a test session.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


@dataclass
class GasStats:
    calls: list[int] = field(default_factory=list)

    @property
    def min(self) -> int:
        return min(self.calls)

    @property
    def max(self) -> int:
        return max(self.calls)

    @property
    def avg(self) -> int:
        return sum(self.calls) // len(self.calls)


class GasReporter:
    """Accumulates gas usage. Disabled reporters ignore every record() call."""

    def __init__(self, enabled: bool = False, currency: str = "USD"):
        self.enabled = enabled
        self.currency = currency
        self._stats: dict[tuple[str, str], GasStats] = defaultdict(GasStats)

    def record(self, contract: str, method: str, gas_used: int) -> None:
        if not self.enabled:
            return
        self._stats[(contract, method)].calls.append(gas_used)
        logger.debug(f"gas: {contract}.{method} used {gas_used}")

    def stats(self) -> dict[tuple[str, str], GasStats]:
        return dict(self._stats)

    def clear(self) -> None:
        self._stats.clear()

    def format_report(self) -> list[str]:
        """Render the collected stats as table lines (empty when nothing ran)."""
        if not self._stats:
            return []

        header = f"{'Contract':<24} {'Method':<24} {'Min':>10} {'Max':>10} {'Avg':>10} {'# calls':>8}"
        lines = [header, "-" * len(header)]
        for (contract, method), stats in sorted(self._stats.items()):
            lines.append(
                f"{contract:<24} {method:<24} {stats.min:>10} {stats.max:>10} "
                f"{stats.avg:>10} {len(stats.calls):>8}"
            )
        # No price source is wired in, so the configured currency is informational
        lines.append(f"(gas units; currency {self.currency} not priced)")
        return lines


_reporter: GasReporter | None = None


def get_reporter() -> GasReporter:
    """Process-wide reporter shared by every environment in a session."""
    global _reporter
    if _reporter is None:
        _reporter = GasReporter()
    return _reporter


def configure(enabled: bool, currency: str = "USD") -> GasReporter:
    reporter = get_reporter()
    reporter.enabled = enabled
    reporter.currency = currency
    return reporter
