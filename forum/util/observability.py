"""Logfire setup for the forum engine.

Domain services call ``logfire.span`` and ``logfire.info``/``warn``
themselves; this module wires the SDK once per process and hooks the
database engine into the trace.
"""

import logfire
from sqlalchemy.ext.asyncio import AsyncEngine

from forum.config import ObservabilitySettings, Settings

SERVICE_NAME = "forum-engine"
SERVICE_VERSION = "0.1.0"


def should_send(observability: ObservabilitySettings) -> bool:
    """Export to Logfire cloud when asked to, or when a token is present."""
    if observability.send_to_logfire is not None:
        return observability.send_to_logfire
    return bool(observability.logfire_token)


def configure_logfire(settings: Settings) -> None:
    """Configure the Logfire SDK from ``settings.observability``.

    Console output is always on and gets verbose in debug mode.
    """
    send = should_send(settings.observability)
    logfire.configure(
        service_name=SERVICE_NAME,
        service_version=SERVICE_VERSION,
        environment=settings.environment,
        send_to_logfire=send,
        token=settings.observability.logfire_token,
        console=logfire.ConsoleOptions(
            colors="auto",
            span_style="show-parents",
            include_timestamps=True,
            verbose=settings.debug,
        ),
    )
    logfire.info(
        "Logfire configured",
        environment=settings.environment,
        send_to_logfire=send,
    )


def instrument_sqlalchemy(engine: AsyncEngine) -> None:
    """Trace every statement the engine runs, lock acquisitions included."""
    logfire.instrument_sqlalchemy(engine=engine.sync_engine, enable_commenter=True)
