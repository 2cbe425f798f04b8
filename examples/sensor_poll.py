#!/usr/bin/env python3
"""Poll a slow, blocking sensor and keep only fresh readings.

The sensor read runs on a worker thread (``run_in_executor``) and checks its
cancel scope between samples, so readings that a newer one overtook stop
early instead of holding a thread.
"""

from __future__ import annotations

import asyncio
import logging
import random
import time

from cadence import CancelScope, recent_only_completion


def read_sensor(scope: CancelScope) -> float:
    samples = []
    for _ in range(random.randint(2, 12)):
        scope.raise_if_cancelled()
        time.sleep(0.05)
        samples.append(20 + random.gauss(0, 0.5))
    return sum(samples) / len(samples)


async def main() -> None:
    def operation(scope: CancelScope):
        return asyncio.get_running_loop().run_in_executor(None, read_sensor, scope)

    stream = recent_only_completion(operation, 0.2, name="thermometer", trace=True)
    async with stream.subscribe(lambda reading: print(f"{reading:.2f} C")) as subscription:
        await asyncio.sleep(3)

    trace = subscription.trace
    if trace is not None:
        print(f"started {len(trace.find(action='invocation_start'))}, "
              f"delivered {len(trace.find(action='emit'))}, "
              f"retracted {len(trace.find(action='retract'))}")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(main())
