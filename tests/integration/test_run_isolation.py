"""End-to-end: failures in one subscription never affect another."""

from signal_notifier.app import SignalNotifierApp
from signal_notifier.config.defaults import get_default_config
from signal_notifier.models.notifications import NotificationOutcome
from signal_notifier.models.signals import Vote

from conftest import RUN_TIME, RecordingTransport, StaticIndicators, StaticMarketData


def test_mixed_failures_across_stages(store):
    transport = RecordingTransport(fail_for={"bounce@example.com"}, retryable=False)
    app = SignalNotifierApp(
        config=get_default_config(),
        store=store,
        market_data=StaticMarketData(unknown={"GONE"}),
        indicators=StaticIndicators({
            "AAPL": [Vote.BUY, Vote.BUY, Vote.NEUTRAL],
            "MSFT": [Vote.SELL, Vote.SELL, Vote.NEUTRAL],
            "ODD": [Vote.BUY, Vote.BUY],
        }),
        transport=transport
    )
    ok = store.add("ok@example.com", "AAPL")
    gone = store.add("ok@example.com", "GONE")
    odd = store.add("ok@example.com", "ODD")
    bounce = store.add("bounce@example.com", "MSFT")

    summary = app.runner.run_once(RUN_TIME)

    by_id = {r.subscription_id: r for r in summary.records}
    assert by_id[ok.id].outcome == NotificationOutcome.SENT
    assert (by_id[gone.id].outcome, by_id[gone.id].stage) == (NotificationOutcome.FAILED, "fetch")
    assert (by_id[odd.id].outcome, by_id[odd.id].stage) == (NotificationOutcome.FAILED, "score")
    assert (by_id[bounce.id].outcome, by_id[bounce.id].stage) == (NotificationOutcome.FAILED, "notify")
    assert (summary.processed, summary.sent, summary.failed) == (4, 1, 3)
    assert [m.to for m in transport.sent] == ["ok@example.com"]
