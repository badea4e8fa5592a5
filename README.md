# mysticeti

Building blocks for a DAG-based Byzantine consensus node. Each module can be
used on its own.

## Install

```
pip install .
pip install ".[test]"   # with test dependencies
```

## Modules

- `mysticeti.range_map.RangeMap` is an ordered map that stores a run of keys
  sharing one value as a single half-open range.
  `mutate_range(start, end, f)` calls `f(sub_start, sub_end, value)` once for
  each sub-range of `[start, end)`, in key order. Where nothing is stored,
  `value` is `None`. `f` returns the new value, and returning `None` removes
  the sub-range. An empty range raises `ValueError`. Other members are
  `is_empty()`, `len()` and iteration over `(start, end, value)`.
- `mysticeti.byterepr.FixedBytes` is an immutable `bytes` subclass whose
  length is fixed by the subclass's `SIZE`. The constructor and `from_bytes`
  raise `ValueError` for any other length. With no argument the value is all
  zeros.
- `mysticeti.data.Data` wraps a value together with its serialized bytes.
  The bytes are produced once, and `bytes(data)` or `data.serialized_bytes`
  returns them. `Data.from_bytes` decodes and keeps the given bytes. It raises
  `ValueError` on bad input. The default codec is compact, sorted-key JSON;
  a subclass can set its own `codec`. `in_memory_stats()` returns how many
  `Data` objects are alive and the total size of their serialized bytes.
- `mysticeti.crypto` provides the following:
  - `BlockDigest` (32 bytes), `SignatureBytes` (64 bytes) and `PublicKey`
    (32 bytes).
  - `Signer`, an ed25519 key built from a 32-byte seed, with `sign` and
    `public_key`.
  - `PublicKey.verify(message, signature)`, which raises `SignatureError`
    when the signature does not match.
  - `block_hasher()`, which returns a 32-byte BLAKE2b hasher.
  - `crypto_hash(value, hasher)`, which feeds the hasher as follows:
    - integers as 8 big-endian bytes;
    - `U128` values as 16 big-endian bytes;
    - bytes unchanged;
    - any other object through its own `crypto_hash(hasher)`.
  - `Signer.new_for_test(n)`, which returns the same `n` signers on every
    call.
  - `dummy_signer()` and `dummy_public_key()`, which use an all-zero seed.
- `mysticeti.runtime` provides three time helpers:
  - `timestamp_utc()` returns the time since the Unix epoch as a `timedelta`.
  - `TimeInstant.now()` and `.elapsed()` work on the monotonic clock.
  - `TimeInterval(period)` has an async `tick()`. The first tick completes at
    once, and missed ticks are skipped.
- `mysticeti.metrics` provides the following:
  - `Counter`, with `inc` and `value`.
  - `CounterVec`, a family of counters with `with_label_values(*labels)`.
  - `UtilizationTimer`, a context manager that adds the microseconds it was
    held to a counter. You get one from `Counter.utilization_timer()` or
    `CounterVec.utilization_timer(label)`.
- `mysticeti.lock.MonitoredRwLock(value, wlock_util, wlock_wait)` is a
  readers-writer lock that favours writers.
  - `with lock.read() as value:` gives shared access to the value.
  - `with lock.write() as guard:` gives exclusive access through
    `guard.value`, which can be read and replaced.
  - Time spent waiting for the write lock is added to `wlock_wait`, and time
    spent holding it to `wlock_util`.
- `mysticeti.simulator.Simulator(states, rng)` runs events against a list of
  states in order of simulated time. Events due at the same time run in the
  order they were scheduled.
  - `schedule_event(after, state, event)` queues an event.
  - `run_one()` runs the earliest event and returns `True` once no events
    remain.
  - Inside a handler, the module-level `schedule_event`, `current_rng` and
    `current_time` refer to the running simulator.
  - `close()`, or leaving a `with` block, drops the states.
- `mysticeti.wire` is the peer wire format:
  - `encode_frame(payload)` produces a 4-byte big-endian length followed by
    the payload.
  - `read_frame(reader)` is async. It returns the payload, or a `Ping` for
    zero-length frames.
  - `encode_ping` and `decode_ping` handle the i64 little-endian ping body.
  - `handshake(reader, writer, active)` is async and raises `HandshakeError`
    on a wrong reply.
  - `bind_addr(address)` multiplies the port by 10, and
    `remote_to_local_port(address)` divides it by 10.

## Examples

```python
from mysticeti.range_map import RangeMap

m = RangeMap()
m.mutate_range(5, 10, lambda start, end, value: 18)
m.mutate_range(3, 8, lambda start, end, value: 22)
print(m)  # {3..5:22,5..8:22,8..10:18,}
```

```python
from mysticeti.simulator import Simulator

class Acc:
    def __init__(self):
        self.total = 0

    def handle_event(self, event):
        self.total += event

sim = Simulator([Acc(), Acc()])
sim.schedule_event(1.0, 1, 4)
sim.run_one()
print(sim.states[1].total, sim.time)  # 4 0:00:01
```

## What this package does not do

This package holds the components of a consensus node, not the node itself.
It has no command to run. It does not do the following:

- propose, store or commit blocks;
- listen on sockets or manage peer connections;
- write a log to disk;
- serve metrics over HTTP;
- run coroutines on simulated time.

`mysticeti.wire` defines the bytes exchanged between peers, but opening and
driving the connections is left to the caller.