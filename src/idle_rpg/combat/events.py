from __future__ import annotations

import logging
from collections import defaultdict, deque
from dataclasses import asdict, dataclass
from enum import Enum
from threading import RLock
from typing import Any, Callable, DefaultDict, Deque, Dict, List, Optional, Protocol

logger = logging.getLogger(__name__)


class CombatEventType(str, Enum):
    ATTACK = "attack"
    CRITICAL = "critical"
    BLOCK = "block"
    DODGE = "dodge"
    DEFLECT = "deflect"
    DEATH = "death"


@dataclass(frozen=True)
class CombatEvent:
    """A log-worthy combat occurrence.

    Attributes:
        type: What happened.
        source: Label of the acting combatant (the one who died for DEATH).
        target: Label of the combatant on the receiving end, if any.
        value: Damage dealt, where applicable.
        effect: Short effect text such as " dodged attack".
    """

    type: CombatEventType
    source: str
    target: Optional[str] = None
    value: Optional[float] = None
    effect: Optional[str] = None

    @property
    def message(self) -> str:
        if self.type is CombatEventType.DEATH:
            return f"{self.source}{self.effect or ' died'}"
        if self.type in (CombatEventType.ATTACK, CombatEventType.CRITICAL):
            crit = " critically" if self.type is CombatEventType.CRITICAL else ""
            return f"{self.source}{crit} hits {self.target} for {self.value:.0f} damage"
        return f"{self.target}{self.effect}"

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["type"] = self.type.value
        return data


class EventSink(Protocol):
    """Receives combat events. Emission is fire-and-forget."""

    def emit(self, event: CombatEvent) -> None:  # pragma: no cover - Protocol
        ...


class CombatLog:
    """Bounded in-memory combat log keeping the most recent events."""

    def __init__(self, capacity: int = 50) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self.capacity = capacity
        self._events: Deque[CombatEvent] = deque(maxlen=capacity)

    def emit(self, event: CombatEvent) -> None:
        self._events.append(event)
        # Forward to standard logging for visibility if configured.
        if event.type is CombatEventType.DEATH:
            logger.info(event.message)
        else:
            logger.debug(event.message)

    def events(self) -> List[CombatEvent]:
        return list(self._events)

    def of_type(self, event_type: CombatEventType) -> List[CombatEvent]:
        return [e for e in self._events if e.type is event_type]

    def get_recent(self, n: int) -> List[CombatEvent]:
        if n <= 0:
            return []
        return list(self._events)[-n:]

    def clear(self) -> None:
        self._events.clear()

    def __len__(self) -> int:
        return len(self._events)


Subscriber = Callable[[CombatEvent], None]


class EventBus:
    """A lightweight thread-safe publish/subscribe bus keyed by event type.

    Subscribers registered under ``"*"`` receive every event. A failing
    subscriber is logged and skipped so that presentation code cannot break a
    fight in progress.
    """

    WILDCARD = "*"

    def __init__(self) -> None:
        self._subs: DefaultDict[str, List[Subscriber]] = defaultdict(list)
        self._lock = RLock()

    def subscribe(self, event_type: str, callback: Subscriber) -> None:
        if not callable(callback):
            raise TypeError("callback must be callable")
        with self._lock:
            self._subs[str(getattr(event_type, "value", event_type))].append(callback)
            logger.debug("Subscribed %s to '%s'", getattr(callback, "__name__", str(callback)), event_type)

    def unsubscribe(self, event_type: str, callback: Subscriber) -> None:
        key = str(getattr(event_type, "value", event_type))
        with self._lock:
            if key in self._subs and callback in self._subs[key]:
                self._subs[key].remove(callback)

    def publish(self, event: CombatEvent) -> None:
        with self._lock:
            subs = list(self._subs.get(event.type.value, [])) + list(self._subs.get(self.WILDCARD, []))
        for cb in subs:
            try:
                cb(event)
            except Exception:
                logger.exception("Unhandled exception in combat event subscriber for '%s'", event.type.value)


class EventBusSink:
    """EventSink that forwards every event to an EventBus."""

    def __init__(self, bus: EventBus) -> None:
        self.bus = bus

    def emit(self, event: CombatEvent) -> None:
        self.bus.publish(event)


class FanOutSink:
    """EventSink that forwards to several sinks in order."""

    def __init__(self, *sinks: EventSink) -> None:
        self.sinks = list(sinks)

    def emit(self, event: CombatEvent) -> None:
        for sink in self.sinks:
            sink.emit(event)


def attack_event(source: str, target: str, damage: float) -> CombatEvent:
    return CombatEvent(CombatEventType.ATTACK, source=source, target=target, value=damage)


def critical_event(source: str, target: str, damage: float) -> CombatEvent:
    return CombatEvent(CombatEventType.CRITICAL, source=source, target=target, value=damage)


def block_event(source: str, target: str, damage: float) -> CombatEvent:
    return CombatEvent(CombatEventType.BLOCK, source=source, target=target, value=damage, effect=" blocked attack")


def deflect_event(source: str, target: str, damage: float) -> CombatEvent:
    return CombatEvent(CombatEventType.DEFLECT, source=source, target=target, value=damage, effect=" deflected attack")


def dodge_event(source: str, target: str, damage: float) -> CombatEvent:
    return CombatEvent(CombatEventType.DODGE, source=source, target=target, value=damage, effect=" dodged attack")


def death_event(source: str) -> CombatEvent:
    return CombatEvent(CombatEventType.DEATH, source=source, effect=" died")
