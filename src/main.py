"""Demo entrypoint wiring together registry components.

This module contains a small end-to-end walkthrough that:

- Loads configuration from environment and configures logging.
- Starts the registry engine behind a client.
- Launches an L1, upgrades it to sovereign, shows a non-owner being
  rejected, updates its metadata and reads it back.

It is a manual harness, not a long-running service.
"""

from __future__ import annotations

import asyncio
import logging

from config import Config, load_config
from observability import DuckDBObservabilitySink, ObservabilityRecorder
from registry import (
    L1Store,
    NotOwner,
    RegistryClient,
    RegistryCommandBus,
    RegistryEngine,
    RegistryEventBus,
)

logger = logging.getLogger(__name__)

OWNER = "0x1111111111111111111111111111111111111111"
STRANGER = "0x2222222222222222222222222222222222222222"


async def _log_events(event_bus: RegistryEventBus) -> None:
    """Continuously log events observed on the given event bus."""
    q = event_bus.subscribe()
    while True:
        event = await q.get()
        logger.info("[event] %s: %s", event.type, event.model_dump(exclude={"type", "ts"}))


def _make_recorder(cfg: Config) -> ObservabilityRecorder | None:
    if not cfg.observability.enabled:
        return None
    sink = DuckDBObservabilitySink(path=cfg.observability.db_path)
    return ObservabilityRecorder(sink=sink, max_queue_size=cfg.observability.queue_size)


async def run_demo() -> None:
    """Run the launch -> sovereign -> update walkthrough against a fresh registry."""
    cfg = load_config()
    logging.basicConfig(
        level=cfg.log_level_value,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    recorder = _make_recorder(cfg)
    command_bus = RegistryCommandBus(recorder=recorder)
    event_bus = RegistryEventBus(recorder=recorder)

    store = L1Store()
    engine = RegistryEngine(store=store, command_bus=command_bus, event_bus=event_bus)
    client = RegistryClient(store=store, command_bus=command_bus)

    log_task = asyncio.create_task(_log_events(event_bus), name="event-logger")
    engine_task = asyncio.create_task(engine.run(), name="registry-engine")
    try:
        l1_id = await client.launch_virtual_l1("ipfs://a", caller=OWNER)
        await client.go_sovereign(l1_id, caller=OWNER)

        try:
            await client.go_sovereign(l1_id, caller=STRANGER)
        except NotOwner as exc:
            logger.info("rejected as expected: %s", exc)

        await client.update_metadata(l1_id, "ipfs://b", caller=OWNER)

        record = await client.get_l1(l1_id)
        logger.info(
            "L1 %d: owner=%s metadata=%s sovereign=%s launched_at=%s (total=%d)",
            record.l1_id,
            record.owner,
            record.metadata_uri,
            record.sovereign,
            record.launched_at.isoformat(),
            client.total_l1s,
        )
        # Let the logger drain before shutting down.
        await asyncio.sleep(0)
    finally:
        for t in [log_task, engine_task]:
            t.cancel()
        await asyncio.gather(log_task, engine_task, return_exceptions=True)
        if recorder is not None:
            await recorder.aclose()


def main() -> None:
    """CLI entrypoint for running the demo with `python src/main.py`."""
    asyncio.run(run_demo())


if __name__ == "__main__":
    main()
