import threading

import pytest

from rhiotree.publisher import Message, MessageKind, Publisher


@pytest.fixture
def sent():
    return []


@pytest.fixture
def publisher(sent):
    return Publisher(sent.append)


def test_nothing_sent_before_send_to_client(publisher, sent):
    publisher.publish_int("a", 3, 10)
    assert sent == []
    publisher.send_to_client()
    assert sent == [Message(MessageKind.INT, 3, "a", 10)]


def test_int_value_delivered(publisher, sent):
    publisher.publish_int("a/b", 3, 10)
    publisher.send_to_client()
    assert sent == [Message(MessageKind.INT, 3, "a/b", 10)]


def test_kinds_delivered_in_fixed_order(publisher, sent):
    publisher.publish_error("oops")
    publisher.publish_frame("f", b"\x89PNG", 5)
    publisher.publish_stream("s", "line\n", 4)
    publisher.publish_str("t", "hello", 3)
    publisher.publish_float("x", 1.5, 2)
    publisher.publish_int("i", 7, 1)
    publisher.publish_bool("b", True, 0)
    publisher.send_to_client()
    error = sent[-1]
    assert sent == [
        Message(MessageKind.BOOL, True, "b", 0),
        Message(MessageKind.INT, 7, "i", 1),
        Message(MessageKind.FLOAT, 1.5, "x", 2),
        Message(MessageKind.STR, "hello", "t", 3),
        Message(MessageKind.STREAM, "line\n", "s", 4),
        Message(MessageKind.FRAME, b"\x89PNG", "f", 5),
        Message(MessageKind.ERROR, "oops", error.name, error.timestamp),
    ]


def test_first_value_per_name_wins(publisher, sent):
    publisher.publish_int("a", 1, 1)
    publisher.publish_int("a", 2, 2)
    publisher.send_to_client()
    assert sent == [Message(MessageKind.INT, 1, "a", 1)]


def test_dedup_shared_across_kinds(publisher, sent):
    publisher.publish_int("a", 1, 1)
    publisher.publish_bool("a", False, 2)
    publisher.send_to_client()
    assert sent == [Message(MessageKind.BOOL, False, "a", 2)]


def test_only_latest_frame_kept(publisher, sent):
    publisher.publish_frame("cam", b"one", 1)
    publisher.publish_frame("cam", b"two", 2)
    publisher.send_to_client()
    assert sent == [Message(MessageKind.FRAME, b"two", "cam", 2)]


def test_all_errors_sent_in_order(publisher, sent):
    for text in ("e1", "e2", "e3"):
        publisher.publish_error(text)
    publisher.send_to_client()
    expected = [
        Message(MessageKind.ERROR, text, m.name, m.timestamp)
        for text, m in zip(("e1", "e2", "e3"), sent)
    ]
    assert len(sent) == 3
    assert sent == expected


def test_buffers_emptied_after_delivery(publisher, sent):
    publisher.publish_float("x", 0.5, 1)
    publisher.send_to_client()
    publisher.send_to_client()
    assert sent == [Message(MessageKind.FLOAT, 0.5, "x", 1)]


def test_dedup_resets_between_batches(publisher, sent):
    publisher.publish_str("s", "a", 1)
    publisher.send_to_client()
    publisher.publish_str("s", "b", 2)
    publisher.send_to_client()
    assert sent == [
        Message(MessageKind.STR, "a", "s", 1),
        Message(MessageKind.STR, "b", "s", 2),
    ]


def test_values_are_coerced(publisher, sent):
    publisher.publish_bool("b", 1, 0)
    publisher.publish_float("f", 2, 0)
    publisher.send_to_client()
    assert sent == [
        Message(MessageKind.BOOL, True, "b", 0),
        Message(MessageKind.FLOAT, 2.0, "f", 0),
    ]
    assert [type(m.value) for m in sent] == [bool, float]


def test_concurrent_publishing(publisher, sent):
    def produce(prefix):
        for i in range(200):
            publisher.publish_int(f"{prefix}{i}", i, i)

    threads = [threading.Thread(target=produce, args=(p,)) for p in "xyz"]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    publisher.send_to_client()
    expected = [
        Message(MessageKind.INT, i, f"{p}{i}", i) for p in "xyz" for i in range(200)
    ]
    assert len(sent) == 600
    assert sorted(sent, key=lambda m: m.name) == sorted(expected, key=lambda m: m.name)