"""Decision and state-update functions.

One gate cycle is ``read_snapshot`` -> ``decide`` -> (action) ->
``apply_update``. The snapshot captured before the decision is reused by the
update: counters are not re-read and the recorded instant is the one the
decision compared against.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict

from runonce.interval import has_elapsed
from runonce.policy import (
    AllOf,
    AnyOf,
    EveryNTimes,
    If,
    IfTimeElapsed,
    Once,
    OncePerSession,
    composite_key,
)
from runonce.store import KeyValueStore

log = logging.getLogger(__name__)


@dataclass
class Snapshot:
    now: datetime
    durable: Dict[str, Any] = field(default_factory=dict)
    session: Dict[str, Any] = field(default_factory=dict)


def read_snapshot(
    policy: Any,
    profile: str,
    durable: KeyValueStore,
    session: KeyValueStore,
    now: datetime,
    snapshot: Snapshot | None = None,
) -> Snapshot:
    """Read the values ``policy`` needs, and nothing else."""
    snap = snapshot if snapshot is not None else Snapshot(now=now)
    if isinstance(policy, (Once, EveryNTimes)):
        ck = composite_key(profile, policy.key)
        snap.durable[ck] = durable.get_int(ck)
    elif isinstance(policy, IfTimeElapsed):
        ck = composite_key(profile, policy.key)
        snap.durable[ck] = durable.get_timestamp(ck)
    elif isinstance(policy, OncePerSession):
        ck = composite_key(profile, policy.key)
        snap.session[ck] = session.get_int(ck)
    elif isinstance(policy, (AnyOf, AllOf)):
        for sub in policy.policies:
            read_snapshot(sub, profile, durable, session, now, snap)
    elif not isinstance(policy, If):
        raise TypeError(f"Unknown policy {policy!r}")
    return snap


def decide(policy: Any, profile: str, snapshot: Snapshot) -> bool:
    """Whether the guarded action should run. No side effects beyond the
    predicate of an ``If`` policy, which is called exactly once."""
    if isinstance(policy, Once):
        return snapshot.durable.get(composite_key(profile, policy.key)) is None
    if isinstance(policy, OncePerSession):
        return snapshot.session.get(composite_key(profile, policy.key)) is None
    if isinstance(policy, IfTimeElapsed):
        recorded = snapshot.durable.get(composite_key(profile, policy.key))
        if recorded is None:
            return True
        return has_elapsed(recorded, policy.interval, snapshot.now)
    if isinstance(policy, If):
        return bool(policy.predicate())
    if isinstance(policy, EveryNTimes):
        n = snapshot.durable.get(composite_key(profile, policy.key)) or 0
        return n == 0 or (n + 1) % policy.times == 0
    if isinstance(policy, AnyOf):
        # Every sub-policy is decided so each one sees this evaluation.
        return any([decide(sub, profile, snapshot) for sub in policy.policies])
    if isinstance(policy, AllOf):
        return all([decide(sub, profile, snapshot) for sub in policy.policies])
    raise TypeError(f"Unknown policy {policy!r}")


def apply_update(
    policy: Any,
    profile: str,
    ran: bool,
    snapshot: Snapshot,
    durable: KeyValueStore,
    session: KeyValueStore,
) -> None:
    """Bring the stores in line with the outcome of one gate cycle."""
    if isinstance(policy, If):
        return
    if isinstance(policy, (AnyOf, AllOf)):
        for sub in policy.policies:
            apply_update(sub, profile, ran, snapshot, durable, session)
        return
    if isinstance(policy, EveryNTimes):
        # Counts evaluations, not executions: written whether or not it ran.
        ck = composite_key(profile, policy.key)
        count = (snapshot.durable.get(ck) or 0) + 1
        log.debug("decision.update: %s count=%d ran=%s", ck, count, ran)
        durable.set_int(ck, count)
        return
    if not ran:
        if not isinstance(policy, (Once, OncePerSession, IfTimeElapsed)):
            raise TypeError(f"Unknown policy {policy!r}")
        return
    if isinstance(policy, Once):
        ck = composite_key(profile, policy.key)
        log.debug("decision.update: %s marked seen", ck)
        durable.set_int(ck, 1)
    elif isinstance(policy, OncePerSession):
        ck = composite_key(profile, policy.key)
        log.debug("decision.update: %s marked seen for session", ck)
        session.set_int(ck, 1)
    elif isinstance(policy, IfTimeElapsed):
        ck = composite_key(profile, policy.key)
        log.debug("decision.update: %s recorded at %s", ck, snapshot.now.isoformat())
        durable.set_timestamp(ck, snapshot.now)
    else:
        raise TypeError(f"Unknown policy {policy!r}")
