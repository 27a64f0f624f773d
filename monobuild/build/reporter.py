import asyncio
import logging

import click

from ..core.enums import BuildEventType
from ..core.models import BuildEvent


class BuildReporter:
    """Prints watch lifecycle events, tagged with the target name"""

    def __init__(self, events: asyncio.Queue):
        self.events = events
        self.logger = logging.getLogger(__name__)

    def report(self, event: BuildEvent) -> None:
        name = event.target.name
        if event.type is BuildEventType.STARTED:
            click.echo(f"Building {name}...")
        elif event.type is BuildEventType.COMPLETED:
            click.echo(f"Built {name}")
            if event.duration_ms is not None:
                self.logger.debug(f"{name} built in {event.duration_ms:.0f}ms")
        elif event.type is BuildEventType.FAILED:
            click.echo(f"Build failed for {name}:\n\n{event.error}", err=True)

    def flush(self) -> None:
        while not self.events.empty():
            self.report(self.events.get_nowait())

    async def run(self) -> None:
        while True:
            event = await self.events.get()
            self.report(event)
