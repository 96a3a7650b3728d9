from flowstream.logbuffer import LOG_SIZE, LogBuffer, LogEntry


def test_keeps_last_entries_in_append_order():
    buf = LogBuffer()
    for i in range(LOG_SIZE + 50):
        buf.append(f"line {i}")

    entries = buf.entries()
    assert len(entries) == LOG_SIZE
    assert entries[0].text == "line 50"
    assert entries[-1].text == f"line {LOG_SIZE + 49}"
    assert [e.text for e in entries] == [f"line {i}" for i in range(50, LOG_SIZE + 50)]


def test_clear_empties_buffer():
    buf = LogBuffer(capacity=3)
    buf.append("a")
    buf.append("b")
    buf.clear()

    assert len(buf) == 0
    assert buf.entries() == []
    assert buf.capacity == 3


def test_public_form_omits_missing_tx_id():
    assert LogEntry(text="▶ Stream started").as_public() == {"text": "▶ Stream started"}
    assert LogEntry(text="sent", tx_id="abc").as_public() == {"text": "sent", "txId": "abc"}
