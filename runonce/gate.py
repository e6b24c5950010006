from __future__ import annotations

import logging
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Optional, Union

from runonce import config
from runonce.decision import apply_update, decide, read_snapshot
from runonce.interval import utc_now
from runonce.policy import composite_key, normalize_key
from runonce.store import KeyValueStore, MemoryStore

log = logging.getLogger(__name__)


class Gate:
    """
    Decides whether an action runs under a policy and records the outcome.

    A Gate owns one session store for its whole lifetime, so an application
    should build it once at startup and pass it around. Evaluation is not
    atomic across callers: concurrent evaluations of the same key must be
    serialized by the caller.
    """

    def __init__(
        self,
        profile: Optional[str] = None,
        durable: Optional[KeyValueStore] = None,
        session: Optional[KeyValueStore] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.profile = config.DEFAULT_PROFILE if profile is None else profile
        if not self.profile:
            raise ValueError("profile must be a non-empty string")
        self.durable = durable if durable is not None else config.build_durable_store()
        self.session = session if session is not None else MemoryStore()
        self.clock = clock or utc_now

    def evaluate(self, policy: Any, action: Callable[[], Any]) -> bool:
        """
        Run ``action`` if ``policy`` allows it and update the stores.
        Returns True if the action was invoked.

        If the action raises, the outcome is still recorded as a run (it was
        attempted) and the exception propagates. Failures while deciding,
        including a raising predicate, leave the stores untouched.
        """
        snapshot = read_snapshot(policy, self.profile, self.durable, self.session, self.clock())
        should_run = decide(policy, self.profile, snapshot)
        log.debug("gate.evaluate: profile=%s kind=%s run=%s", self.profile, policy.kind, should_run)
        if not should_run:
            apply_update(policy, self.profile, False, snapshot, self.durable, self.session)
            return False
        try:
            action()
        finally:
            apply_update(policy, self.profile, True, snapshot, self.durable, self.session)
        return True

    def reset(self, key: Union[str, Enum]) -> None:
        """Forget everything recorded for ``key`` in both stores."""
        ck = composite_key(self.profile, normalize_key(key))
        log.info("gate.reset: clearing %s", ck)
        self.durable.remove(ck)
        self.session.remove(ck)


_default_gate: Optional[Gate] = None
_default_session: Optional[MemoryStore] = None


def default_session() -> MemoryStore:
    """The process-wide session store; lives as long as the process."""
    global _default_session
    if _default_session is None:
        _default_session = MemoryStore()
    return _default_session


def default_gate() -> Gate:
    """The process-wide gate used by ``only`` when nothing is injected."""
    global _default_gate
    if _default_gate is None:
        _default_gate = Gate(session=default_session())
    return _default_gate


def only(
    policy: Any,
    action: Callable[[], Any],
    *,
    profile: Optional[str] = None,
    clock: Optional[Callable[[], datetime]] = None,
    durable: Optional[KeyValueStore] = None,
    session: Optional[KeyValueStore] = None,
) -> bool:
    """Evaluate ``policy`` for ``action``; every collaborator has a default."""
    if profile is None and clock is None and durable is None and session is None:
        return default_gate().evaluate(policy, action)
    # The configured durable store is only built when the caller left it out.
    if durable is None:
        durable = default_gate().durable
    if session is None:
        session = default_session()
    return Gate(profile=profile, durable=durable, session=session, clock=clock).evaluate(policy, action)
