# kaizen

kaizen is an asyncio framework for the client side of ledger applications. It
looks up accounts through a transport and caches the results. It runs
transactions through a queue that groups them into chains and notifies
observers as each chain makes progress.

The package depends only on the standard library.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Modules

- `kaizen.utils` holds the key type and a few helpers.
  - `Pubkey` is a 32-byte address. It prints as base58, and `Pubkey.from_string` parses base58 back into a key.
  - `shorten_pubkey` returns a short form of a key, such as `"4f3a....9XkQ"`.
  - `generate_random_pubkey` returns a random key.
  - `fill_buffer` sets every byte of a buffer to one value.
  - `lamports_to_sol`, `sol_to_lamports` and `u64sol_to_lamports` convert between lamports and SOL. `sol_to_lamports` truncates and saturates to the u64 range. `u64sol_to_lamports` raises on negative input and on overflow.
- `kaizen.config` holds `TransportMode` and `TransportConfig`.
  - `TransportMode` has the members `INPROC`, `EMULATOR` and `VALIDATOR`.
  - `TransportConfig` defaults to a 60 s timeout, a 5 s initial confirmation timeout and 2 retries. `TransportConfig.default_with_root` gives those defaults with a chosen root key.
- `kaizen.reflector` broadcasts events.
  - `Reflector` sends every event it reflects to each registered channel. A channel is a `queue.Queue`.
  - The events are `PendingLookups`, `PendingTransactions`, `WalletRefresh`, `WalletBalance`, `EmulatorLogs` and `Halt`.
- `kaizen.lookup` holds `LookupHandler`, which merges requests for the same key that are in flight at the same time.
  - The first caller for a key gets a request of kind `RequestKind.NEW` and must finish it with `complete` or `fail`.
  - Later callers get `PENDING` requests. When awaited, these return the same value or raise the same error.
- `kaizen.wallet` holds `Wallet` and `Adapter`.
  - `Wallet.from_keypair_file` reads a JSON keypair of 64 bytes. By default it reads `~/.config/solana/id.json`.
  - `Wallet.pubkey` is the last 32 bytes of the keypair.
  - A local wallet is always connected, and `get_adapter_list` returns `None`.
- `kaizen.transaction` holds the transaction types.
  - `Transaction` has an optional instruction, a `TransactionMeta` that lists the accounts it touches, a `TransactionStatus` and an optional callback. `wait` blocks until the transaction is processed.
  - `TransactionList` and `TransactionChain` group transactions.
  - `TransactionAlreadyCompleted` is the error raised when a finished transaction is resubmitted.
- `kaizen.observer` holds the `Observer` abstract class and `BasicObserver`, which logs every notification at debug level.
- `kaizen.queue` holds `TransactionQueue`.
  - A transaction whose accounts overlap those of an existing chain joins that chain. Any other transaction starts a new chain.
  - Each chain runs in order as an asyncio task, and the chain is dropped once every transaction in it has succeeded.
  - When a transaction fails, it goes back to the front of its chain and the chain is left in place. Resubmitting the transaction restarts the chain, and `discard_chain` removes it.
  - `wait_idle` waits for all running chains to finish.
- `kaizen.user` holds `User`.
  - A `User` stores the authority key, the identity key, the transport mode and an `IdentityState`: `UNKNOWN`, `MISSING` or `PRESENT`.
  - `set_present` and `set_missing` record the outcome of an identity lookup.
- `kaizen.transport` holds `Transport`, `EmulatorInterface`, `AccountReference`, `TransportError`, `set_global` and `global_transport`.
  - `Transport` caches accounts and merges concurrent remote lookups.
  - `Transport` runs instructions on an emulator, or sends them to a validator RPC client and polls until each is confirmed. In validator mode the instruction is resent after each timeout.
  - `Transport` posts transactions to its `TransactionQueue`.
  - `Transport` reflects three kinds of event:
    - `PendingLookups` while lookups are in progress.
    - `EmulatorLogs`, `WalletRefresh` and `WalletBalance` after running an instruction on an emulator.
- `kaizen.loaders` offers module-level shortcuts that use the global transport:
  - `load_reference` and `load_references`;
  - `reload_reference` and `reload_references`;
  - `purge_reference` and `purge_references`;
  - the `*_with_transport` variants, which take a transport explicitly.

## Example

```python
import asyncio

from kaizen.config import TransportMode
from kaizen.loaders import load_reference
from kaizen.reflector import PendingLookups, Reflector
from kaizen.transaction import Transaction, TransactionMeta
from kaizen.transport import AccountReference, EmulatorInterface, Transport, set_global
from kaizen.utils import generate_random_pubkey, shorten_pubkey

reflector = Reflector()
channel_id, channel = reflector.register_event_channel()
reflector.reflect(PendingLookups(3))
print(channel.get_nowait())        # PendingLookups(count=3)


class MemoryEmulator(EmulatorInterface):
    def __init__(self, authority):
        self.authority = authority
        self.accounts = {authority: AccountReference(authority, lamports=1_000_000_000)}

    async def lookup(self, pubkey):
        return self.accounts.get(pubkey)

    async def execute(self, authority, instruction):
        return [f"executed {instruction}"]


async def main():
    authority = generate_random_pubkey()
    transport = Transport(TransportMode.INPROC, emulator=MemoryEmulator(authority))
    set_global(transport)

    reference = await load_reference(authority)
    print(shorten_pubkey(reference.pubkey), reference.lamports)

    tx = Transaction("create", instruction="create", meta=TransactionMeta([authority]))
    await transport.post(tx)
    await tx.wait()
    await transport.queue.wait_idle()
    print(tx.status)               # Success


asyncio.run(main())
```

## What the package does not do

The package has no emulator, simulator or validator RPC client of its own. In
emulator modes you pass `Transport` an `EmulatorInterface` implementation. In
`VALIDATOR` mode you pass an RPC client object that provides these async
methods:

- `get_balance`
- `get_account`
- `send_transaction`
- `confirm_transaction`

The package has some further gaps:

- It does not build or sign transactions itself.
- It does not fetch a user's identity from the chain. You record the outcome on a `User` with `set_present` or `set_missing`.
- It does not decode account data into typed containers.
- It has no command-line tool.