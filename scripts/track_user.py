#!/usr/bin/env python3
"""Follow one remote user's location from the command line.

Checks that the user is sharing, then polls the service and prints
every event until interrupted or ``--duration`` elapses.

Usage
-----
Set environment variables and run::

    export LOCTRACK_BASE_URL="https://track.example.com"
    export LOCTRACK_API_TOKEN="..."
    python scripts/track_user.py USER_ID

Options::

    --interval SECONDS   Poll interval (default: LOCTRACK_POLL_INTERVAL or 3)
    --duration SECONDS   Stop after this long (default: run until Ctrl+C)
    --verify             Verify the identifier exists before tracking
    --verbose, -v        Enable debug logging
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

# Allow running from the repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from pyloctrack import (  # noqa: E402
    RemoteLocationUpdated,
    RemoteUserInactive,
    TrackerClient,
    TrackerConfig,
    TrackerError,
    TrackingError,
)
from pyloctrack.tracking import TrackingEvent  # noqa: E402


def _print_event(event: TrackingEvent, done: asyncio.Event) -> None:
    if isinstance(event, RemoteLocationUpdated):
        marker = "found" if event.is_first_update else "moved"
        lat, lon = event.location.coordinates
        print(f"{event.observed_at:%H:%M:%S} {marker:5} {event.identifier}: {lat:.6f}, {lon:.6f}")
    elif isinstance(event, RemoteUserInactive):
        print(f"User {event.identifier} is not active!")
        done.set()
    elif isinstance(event, TrackingError):
        print(f"Tracking error: {event.description}", file=sys.stderr)


async def main() -> int:
    parser = argparse.ArgumentParser(description="Track a remote user's location.")
    parser.add_argument("user_id", help="Identifier of the user to track")
    parser.add_argument("--interval", type=float, help="Poll interval in seconds")
    parser.add_argument("--duration", type=float, help="Stop after this many seconds")
    parser.add_argument("--verify", action="store_true", help="Verify the identifier before tracking")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING)

    overrides = {"poll_interval": args.interval} if args.interval else {}
    config = TrackerConfig.from_env(**overrides)
    done = asyncio.Event()

    async with TrackerClient(config) as client:
        if args.verify:
            try:
                identity = await client.verify_identity(args.user_id)
            except TrackerError as exc:
                print(f"Login failed: {exc}", file=sys.stderr)
                return 1
            print(f"Verified {identity.identifier} ({identity.username or 'no username'})")

        session = client.tracking_session(lambda event: _print_event(event, done))
        session.start_tracking(args.user_id)
        try:
            await asyncio.wait_for(done.wait(), timeout=args.duration)
        except TimeoutError:
            pass
        finally:
            session.stop_tracking()

    return 0


if __name__ == "__main__":
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        sys.exit(130)
