"""Disambiguation of command targets.

Commands name their target with an optional identifier plus an "apply to
all" flag. The identifier matches a session by exact task name or by a
suffix of its session id, so a short id copied from ``st status`` works.
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass

from shift.domain.shared import Err, Ok, Result

from .errors import CommandError, MultipleSessions, NoTasks
from .models import TaskSession


@dataclass(frozen=True)
class Selector:
    identifier: str | None = None
    all: bool = False


def matches(session: TaskSession, identifier: str) -> bool:
    return session.name == identifier or session.id.endswith(identifier)


def resolve(
    candidates: Sequence[TaskSession],
    selector: Selector,
    on_empty: Callable[[], CommandError] = NoTasks,
    on_multiple: Callable[[list[TaskSession]], CommandError] = MultipleSessions,
) -> Result[list[TaskSession], CommandError]:
    """Narrow ``candidates`` to the sessions a command should act on.

    With an identifier, exactly one candidate must match; ``all`` is not
    consulted. Without one, a single candidate is taken as the target and
    several candidates need ``all`` to proceed.

    Args:
        candidates: Eligible sessions, in the order errors should list them.
        selector: Identifier and "all" flag from the caller.
        on_empty: Builds the error for zero matches.
        on_multiple: Builds the error for an ambiguous match.

    Returns:
        Ok(list of targets) or Err from ``on_empty`` / ``on_multiple``.
    """
    if selector.identifier:
        found = [s for s in candidates if matches(s, selector.identifier)]
        if not found:
            return Err(on_empty())
        if len(found) > 1:
            return Err(on_multiple(found))
        return Ok(found)

    if not candidates:
        return Err(on_empty())
    if len(candidates) == 1 or selector.all:
        return Ok(list(candidates))
    return Err(on_multiple(list(candidates)))
