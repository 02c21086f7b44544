from kaizen.reflector import (
    EmulatorLogs,
    Halt,
    PendingLookups,
    PendingTransactions,
    Reflector,
    WalletBalance,
    WalletRefresh,
)
from kaizen.utils import generate_random_pubkey


def test_reflected_event_reaches_channel():
    reflector = Reflector()
    _, channel = reflector.register_event_channel()
    reflector.reflect(PendingLookups(3))
    assert channel.get_nowait() == PendingLookups(3)
    assert channel.empty()


def test_every_channel_receives_event():
    reflector = Reflector()
    _, first = reflector.register_event_channel()
    _, second = reflector.register_event_channel()
    key = generate_random_pubkey()
    event = WalletRefresh("SOL", key)
    reflector.reflect(event)
    assert first.get_nowait() == event
    assert second.get_nowait() == event


def test_unregistered_channel_gets_nothing():
    reflector = Reflector()
    first_id, first = reflector.register_event_channel()
    _, second = reflector.register_event_channel()
    reflector.unregister_event_channel(first_id)
    reflector.reflect(Halt())
    assert first.empty()
    assert second.get_nowait() == Halt()


def test_channel_ids_are_unique():
    reflector = Reflector()
    ids = {reflector.register_event_channel()[0] for _ in range(5)}
    assert len(ids) == 5
    assert len(reflector.channels) == 5


def test_events_preserve_order():
    reflector = Reflector()
    _, channel = reflector.register_event_channel()
    key = generate_random_pubkey()
    events = [PendingTransactions(1), WalletBalance("SOL", key, 42), EmulatorLogs(["a", "b"])]
    for event in events:
        reflector.reflect(event)
    assert [channel.get_nowait() for _ in events] == events


def test_emulator_logs_accepts_any_iterable():
    assert EmulatorLogs(["x", "y"]) == EmulatorLogs(iter(("x", "y")))
    assert EmulatorLogs(["x"]).logs == ("x",)


def test_event_equality_depends_on_fields():
    key = generate_random_pubkey()
    assert WalletBalance("SOL", key, 1) != WalletBalance("SOL", key, 2)
    assert PendingLookups(0) == PendingLookups(0)