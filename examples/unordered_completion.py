#!/usr/bin/env python3
"""Console demo: watch overlapping invocations come back.

Each invocation sleeps for a random time up to --max-delay and returns its
index. Start, completion and delivery are printed as they happen, so the
effect of the chosen completion policy is visible:

- unordered: "Returned" follows "Completed" immediately
- ordered: "Returned" lines always count up
- recent_only: slow invocations overtaken by a faster, newer one never return

Press Enter to unsubscribe, then Enter again to exit (or use --duration).
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import random
import sys

from cadence import CancelScope, Policy, periodic


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--policy", choices=[p.value for p in Policy], default=Policy.UNORDERED.value)
    parser.add_argument("--period", type=float, default=0.5, help="seconds between invocations")
    parser.add_argument("--max-delay", type=float, default=2.0, help="longest invocation, in seconds")
    parser.add_argument("--duration", type=float, default=None, help="run for this long instead of waiting for Enter")
    parser.add_argument("--verbose", action="store_true", help="log library debug output")
    return parser.parse_args()


async def wait_for_enter() -> None:
    await asyncio.to_thread(sys.stdin.readline)


async def main(args: argparse.Namespace) -> None:
    count = 0

    async def operation(scope: CancelScope) -> int:
        nonlocal count
        count += 1
        index = count
        print(f"Started {index}")
        try:
            await asyncio.sleep(random.uniform(0, args.max_delay))
        except asyncio.CancelledError:
            print(f"Cancelled {index}")
            raise
        print(f"Completed {index}")
        return index

    stream = periodic(operation, args.period, args.policy)
    subscription = stream.subscribe(
        lambda index: print(f"Returned {index}"),
        lambda error: print(f"Failed: {error!r}"),
    )

    if args.duration is not None:
        await asyncio.sleep(args.duration)
    else:
        await wait_for_enter()
    subscription.dispose()
    await subscription.wait_closed()
    print("Unsubscribed")

    if args.duration is None:
        await wait_for_enter()


if __name__ == "__main__":
    arguments = parse_args()
    logging.basicConfig(level=logging.DEBUG if arguments.verbose else logging.WARNING)
    asyncio.run(main(arguments))
