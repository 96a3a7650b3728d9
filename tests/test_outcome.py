from flowstream.outcome import OutcomeKind, TickOutcome, classify_failure, decide
from flowstream.transfer import split_amount


def test_blockhash_errors_are_stale():
    exc = RuntimeError("Transaction simulation failed: Blockhash not found")
    outcome = classify_failure(3, exc)

    assert outcome.kind is OutcomeKind.STALE
    assert outcome.tick == 3
    assert "Blockhash" in outcome.error


def test_other_errors_are_failures():
    outcome = classify_failure(1, ConnectionError("connection reset"))
    assert outcome.kind is OutcomeKind.FAILED


def test_error_without_message_uses_type_name():
    assert classify_failure(1, TimeoutError()).error == "TimeoutError"


def test_only_sent_ticks_are_recorded():
    sent = decide(TickOutcome.sent(1, "sig", split_amount(1, False)))
    stale = decide(TickOutcome.stale(1))
    failed = decide(TickOutcome.failed(1, "boom"))

    assert (sent.record, sent.invalidate_blockhash) == (True, False)
    assert (stale.record, stale.invalidate_blockhash) == (False, True)
    assert (failed.record, failed.invalidate_blockhash) == (False, False)
