"""Per-event-type status vocabularies and transition edges.

The tables are data: they live in the configuration store
(``event_status_definitions`` / ``event_status_transitions``), are seeded
once from a JSON document, and are loaded into an immutable
``StatusRegistry`` for each unit of work. Nothing here branches on a
particular event type or status.
"""

import json
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from sqlalchemy.orm import Session

from contract_events.core.config import settings
from contract_events.core.exceptions import ConfigurationError
from contract_events.models.contract_event import OVERDUE_FLAG, EventType
from contract_events.repositories.event_status_config_repository import (
    EventStatusConfigRepository,
)

logger = logging.getLogger(__name__)

DEFAULT_SEED_PATH = Path(__file__).with_name("default_event_statuses.json")


@dataclass(frozen=True)
class StatusDefinition:
    code: str
    label: str


@dataclass(frozen=True)
class EventTypeConfig:
    event_type: str
    statuses: tuple[StatusDefinition, ...]
    edges: frozenset[tuple[str, str]]

    @property
    def status_codes(self) -> tuple[str, ...]:
        return tuple(status.code for status in self.statuses)

    def allows(self, from_status: str, to_status: str) -> bool:
        return (from_status, to_status) in self.edges

    def next_statuses(self, from_status: str) -> list[str]:
        """Legal targets from ``from_status``, in vocabulary order."""
        return [code for code in self.status_codes if (from_status, code) in self.edges]


def build_event_type_config(
    event_type: str,
    statuses: Iterable[tuple[str, str]],
    edges: Iterable[tuple[str, str]],
) -> EventTypeConfig:
    """Validate and freeze one event type's vocabulary and edge set."""
    definitions = tuple(StatusDefinition(code=code, label=label) for code, label in statuses)
    codes = [definition.code for definition in definitions]
    if not codes:
        raise ConfigurationError(f"No statuses configured for {event_type}")
    if len(set(codes)) != len(codes):
        raise ConfigurationError(f"Duplicate status codes configured for {event_type}")
    if OVERDUE_FLAG in codes:
        raise ConfigurationError(
            f"'{OVERDUE_FLAG}' is a derived flag and cannot be a {event_type} status"
        )

    edge_set = frozenset((from_status, to_status) for from_status, to_status in edges)
    for from_status, to_status in edge_set:
        if from_status not in codes or to_status not in codes:
            raise ConfigurationError(
                f"Transition {from_status!r} -> {to_status!r} for {event_type} "
                "references an unknown status"
            )
        if from_status == to_status:
            raise ConfigurationError(
                f"Transition {from_status!r} -> {to_status!r} for {event_type} is a self-loop"
            )
    return EventTypeConfig(event_type=event_type, statuses=definitions, edges=edge_set)


class StatusRegistry:
    """Immutable lookup of every event type's status configuration."""

    def __init__(self, configs: Mapping[str, EventTypeConfig]):
        self._configs = dict(configs)

    def __contains__(self, event_type: object) -> bool:
        return event_type in self._configs

    @property
    def event_types(self) -> list[str]:
        return list(self._configs)

    def for_type(self, event_type: EventType | str) -> EventTypeConfig:
        key = event_type.value if isinstance(event_type, EventType) else event_type
        config = self._configs.get(key)
        if config is None:
            raise ConfigurationError(f"No status configuration for event type {key!r}")
        return config

    def allows(self, event_type: EventType | str, from_status: str, to_status: str) -> bool:
        return self.for_type(event_type).allows(from_status, to_status)

    def allowed_transitions(self, event_type: EventType | str, from_status: str) -> list[str]:
        return self.for_type(event_type).next_statuses(from_status)


def load_seed_document(path: str | Path | None = None) -> dict[str, Any]:
    """Read the JSON seed: ``{event_type: {"statuses": [...], "transitions": [...]}}``."""
    seed_path = Path(path or settings.EVENT_STATUS_SEED_PATH or DEFAULT_SEED_PATH)
    with seed_path.open(encoding="utf-8") as fh:
        document: dict[str, Any] = json.load(fh)
    return document


def registry_from_document(document: Mapping[str, Any]) -> StatusRegistry:
    configs = {}
    for event_type, body in document.items():
        configs[event_type] = build_event_type_config(
            event_type,
            [(s["code"], s["label"]) for s in body.get("statuses", [])],
            [(edge[0], edge[1]) for edge in body.get("transitions", [])],
        )
    return StatusRegistry(configs)


class StatusConfigService:
    """Loads and edits the status configuration store."""

    def __init__(self, db: Session, seed_path: str | Path | None = None):
        self.db = db
        self.repo = EventStatusConfigRepository(db)
        self.seed_path = seed_path

    def ensure_seeded(self) -> list[str]:
        """Seed every event type that has no vocabulary yet.

        Returns:
            The event types that were seeded.
        """
        missing = [t.value for t in EventType if not self.repo.has_statuses(t.value)]
        if not missing:
            return []

        # Validate the whole document before writing any of it
        seed = registry_from_document(load_seed_document(self.seed_path))
        seeded = []
        for event_type in missing:
            if event_type not in seed:
                continue
            config = seed.for_type(event_type)
            self.repo.seed(
                event_type,
                [(s.code, s.label) for s in config.statuses],
                sorted(config.edges),
            )
            seeded.append(event_type)
        if seeded:
            logger.info("Seeded status configuration for %s", ", ".join(seeded))
        return seeded

    def _config_for(self, event_type: str) -> EventTypeConfig:
        return build_event_type_config(
            event_type,
            [(str(s.code), str(s.label)) for s in self.repo.get_statuses(event_type)],
            [
                (str(t.from_status), str(t.to_status))
                for t in self.repo.get_transitions(event_type)
            ],
        )

    def load_registry(self) -> StatusRegistry:
        """Read the current configuration for every event type."""
        self.ensure_seeded()
        return StatusRegistry(
            {
                t.value: self._config_for(t.value)
                for t in EventType
                if self.repo.has_statuses(t.value)
            }
        )

    def add_transitions(self, event_type: EventType, edges: Iterable[tuple[str, str]]) -> EventTypeConfig:
        """Add edges to an event type after checking the result is valid."""
        self.ensure_seeded()
        current = self._config_for(event_type.value)
        new_edges = list(edges)
        build_event_type_config(
            event_type.value,
            [(s.code, s.label) for s in current.statuses],
            list(current.edges) + new_edges,
        )
        for from_status, to_status in new_edges:
            self.repo.add_transition(event_type.value, from_status, to_status)
        logger.info("Added %d transition(s) for %s", len(new_edges), event_type.value)
        return self._config_for(event_type.value)

    def remove_transitions(
        self,
        event_type: EventType,
        edges: Iterable[tuple[str, str]],
    ) -> EventTypeConfig:
        self.ensure_seeded()
        removed = sum(
            1
            for from_status, to_status in edges
            if self.repo.delete_transition(event_type.value, from_status, to_status)
        )
        logger.info("Removed %d transition(s) for %s", removed, event_type.value)
        return self._config_for(event_type.value)
