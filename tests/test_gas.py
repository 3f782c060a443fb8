"""Tests for bbx.gas - gas usage reporting."""

from bbx.gas import GasReporter, configure, get_reporter


class TestGasReporter:
    def test_disabled_ignores_records(self):
        reporter = GasReporter(enabled=False)
        reporter.record("CompetitionFactory", "createCompetition", 120_000)
        assert reporter.stats() == {}
        assert reporter.format_report() == []

    def test_stats_per_method(self):
        reporter = GasReporter(enabled=True)
        reporter.record("BbxCompetition", "startBattle", 100)
        reporter.record("BbxCompetition", "startBattle", 300)
        reporter.record("CompetitionFactory", "deployment", 5_000)

        stats = reporter.stats()
        battle = stats[("BbxCompetition", "startBattle")]
        assert battle.min == 100
        assert battle.max == 300
        assert battle.avg == 200
        assert len(battle.calls) == 2
        assert stats[("CompetitionFactory", "deployment")].calls == [5_000]

    def test_report_lists_every_method(self):
        reporter = GasReporter(enabled=True, currency="USD")
        reporter.record("BbxCompetition", "addBeatboxer", 50_000)
        reporter.record("CompetitionFactory", "createCompetition", 900_000)

        lines = reporter.format_report()
        text = "\n".join(lines)
        assert lines[0].startswith("Contract")
        assert "addBeatboxer" in text
        assert "createCompetition" in text
        assert "900000" in text
        assert "USD" in text

    def test_clear(self):
        reporter = GasReporter(enabled=True)
        reporter.record("A", "b", 1)
        reporter.clear()
        assert reporter.stats() == {}


def test_configure_updates_shared_reporter():
    reporter = get_reporter()
    was_enabled, currency = reporter.enabled, reporter.currency
    try:
        assert configure(True, "EUR") is reporter
        assert reporter.enabled is True
        assert reporter.currency == "EUR"
    finally:
        configure(was_enabled, currency)
