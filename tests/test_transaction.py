import pytest

from kaizen.transaction import (
    Transaction,
    TransactionAlreadyCompleted,
    TransactionChain,
    TransactionList,
    TransactionMeta,
    TransactionState,
    TransactionStatus,
)
from kaizen.utils import Pubkey


def key(n: int) -> Pubkey:
    return Pubkey(bytes([n]) * 32)


class RecordingExecutor:
    def __init__(self):
        self.instructions = []

    async def execute(self, instruction):
        self.instructions.append(instruction)


def test_status_strings():
    assert str(TransactionStatus.PENDING) == "Pending"
    assert str(TransactionStatus.SUCCESS) == "Success"
    assert str(TransactionStatus.TIMEOUT) == "Timeout"
    assert str(TransactionStatus.error("boom")) == "Error: boom"


def test_status_equality_and_error_flag():
    assert TransactionStatus.error("x") == TransactionStatus.error("x")
    assert TransactionStatus.error("x").is_error
    assert not TransactionStatus.PENDING.is_error
    assert TransactionStatus.TIMEOUT.state is TransactionState.TIMEOUT


def test_new_transaction_is_pending_with_unique_id():
    a = Transaction("a")
    b = Transaction("b")
    assert a.status == TransactionStatus.PENDING
    assert a.id != b.id
    assert a.instruction is None


def test_accounts_are_a_set():
    tx = Transaction("t", "ix", TransactionMeta([key(1), key(2), key(1)]))
    assert tx.accounts() == {key(1), key(2)}


def test_target_account_is_first():
    tx = Transaction("t", "ix", TransactionMeta([key(3), key(4)]))
    assert tx.target_account() == key(3)


def test_target_account_missing_raises():
    with pytest.raises(ValueError):
        Transaction("t").target_account()


def test_already_completed_error_message():
    assert str(TransactionAlreadyCompleted()) == "Transaction already completed"


@pytest.mark.asyncio
async def test_execute_runs_instruction():
    executor = RecordingExecutor()
    await Transaction("t", "ix-1").execute(executor)
    await Transaction("none").execute(executor)
    assert executor.instructions == ["ix-1"]


@pytest.mark.asyncio
async def test_wait_success_and_failure():
    ok = Transaction("ok")
    ok.resolve()
    assert await ok.wait() is None

    bad = Transaction("bad")
    bad.resolve(RuntimeError("failed"))
    with pytest.raises(RuntimeError, match="failed"):
        await bad.wait()


def test_list_target_account_empty_raises():
    with pytest.raises(ValueError, match="No transactions"):
        TransactionList().target_account()


def test_list_push_and_target():
    txs = TransactionList()
    txs.push(Transaction("first", "a", TransactionMeta([key(5)])))
    txs.push(Transaction("second", "b", TransactionMeta([key(6)])))
    assert len(txs) == 2
    assert txs.target_account() == key(5)
    assert [tx.name for tx in txs] == ["first", "second"]


@pytest.mark.asyncio
async def test_list_execute_in_order():
    executor = RecordingExecutor()
    txs = TransactionList([Transaction("a", "a"), Transaction("b"), Transaction("c", "c")])
    await txs.execute(executor)
    assert executor.instructions == ["a", "c"]


def test_chain_extend_collects_accounts():
    chain = TransactionChain()
    t1 = Transaction("1", "x", TransactionMeta([key(1)]))
    t2 = Transaction("2", "y", TransactionMeta([key(2), key(1)]))
    chain.extend_with([t1, t2])
    assert chain.accounts() == {key(1), key(2)}
    assert chain.pending == [t1, t2]
    assert not chain.is_done()


def test_chain_accounts_is_a_copy():
    chain = TransactionChain()
    chain.extend_with([Transaction("1", "x", TransactionMeta([key(1)]))])
    chain.accounts().add(key(9))
    assert chain.accounts() == {key(1)}


def test_chain_dequeue_fifo_until_done():
    chain = TransactionChain()
    t1, t2 = Transaction("1"), Transaction("2")
    chain.extend_with([t1])
    chain.enqueue(t2)
    assert chain.dequeue_for_processing() is t1
    assert chain.dequeue_for_processing() is t2
    assert chain.dequeue_for_processing() is None
    assert chain.is_done()


def test_chain_enqueue_does_not_add_accounts():
    chain = TransactionChain()
    chain.enqueue(Transaction("1", "x", TransactionMeta([key(1)])))
    assert chain.accounts() == set()


def test_chain_requeue_puts_first_and_complete_records():
    chain = TransactionChain()
    t1, t2 = Transaction("1"), Transaction("2")
    chain.extend_with([t1, t2])
    failed = chain.dequeue_for_processing()
    chain.requeue_with_error(failed, RuntimeError("x"))
    assert chain.pending == [t1, t2]
    done = chain.dequeue_for_processing()
    chain.set_as_complete(done)
    assert chain.complete == [t1]
    assert chain.pending == [t2]


def test_chain_ids_unique():
    ids = {TransactionChain().id for _ in range(100)}
    assert len(ids) == 100