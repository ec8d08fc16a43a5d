"""Apply a local change now, confirm it remotely, undo it if the remote fails."""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from mcp_console.errors import ConsoleError

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class Outcome:
    """Result of an optimistic operation."""

    ok: bool
    value: Any = None
    error: ConsoleError | None = None

    def raise_for_error(self) -> None:
        if self.error is not None:
            raise self.error


async def optimistic(
    apply: Callable[[], None],
    invert: Callable[[], None],
    remote_call: Callable[[], Awaitable[Any]],
) -> Outcome:
    """Run ``apply``, await ``remote_call``, and run ``invert`` if it fails.

    Only ``ConsoleError`` failures are rolled back and reported in the
    returned ``Outcome``; anything else is a bug and propagates after the
    rollback.
    """
    apply()
    try:
        value = await remote_call()
    except ConsoleError as exc:
        invert()
        _LOGGER.warning(f"Remote update failed, local change rolled back: {exc}")
        return Outcome(ok=False, error=exc)
    except Exception:
        invert()
        raise
    return Outcome(ok=True, value=value)
