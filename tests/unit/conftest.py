"""Shared fixtures for unit tests: settings isolation and in-memory stores."""

import asyncio
import os
from collections.abc import Callable, Generator, Sequence

import pytest

from complia.core.config import Settings, get_settings
from complia.core.context import RequestContext
from complia.domain.scheduling.due_dates import DueDateCalculator
from complia.domain.scheduling.holidays import HolidayCalendar, StaticHolidaySource
from complia.domain.scheduling.types import (
    AuditEvent,
    Compliance,
    Entity,
    EntityComplianceSetting,
    NewTask,
)


class FakeCatalog:
    def __init__(self, compliances: Sequence[Compliance] = ()) -> None:
        self.compliances = {c.id: c for c in compliances}

    async def list_active(self) -> list[Compliance]:
        return [c for c in self.compliances.values() if c.is_active]

    async def get_active_by_ids(self, compliance_ids: Sequence[int]) -> list[Compliance]:
        return [
            self.compliances[cid]
            for cid in compliance_ids
            if cid in self.compliances and self.compliances[cid].is_active
        ]

    async def get(self, compliance_id: int) -> Compliance | None:
        return self.compliances.get(compliance_id)


class FakeEntityDirectory:
    def __init__(self, entities: Sequence[Entity] = ()) -> None:
        self.entities = list(entities)

    async def get_for_tenant(self, tenant_id: int, entity_id: int) -> Entity | None:
        for entity in self.entities:
            if entity.id == entity_id and entity.tenant_id == tenant_id:
                return entity
        return None


class FakeAssignmentStore:
    def __init__(self, settings: Sequence[EntityComplianceSetting] = ()) -> None:
        self.settings = list(settings)

    async def list_for_entity(self, entity_id: int) -> list[EntityComplianceSetting]:
        return [s for s in self.settings if s.entity_id == entity_id]

    async def insert_missing(self, entity_id: int, compliance_ids: Sequence[int]) -> int:
        existing = {s.compliance_id for s in self.settings if s.entity_id == entity_id}
        inserted = 0
        for compliance_id in compliance_ids:
            if compliance_id in existing:
                continue
            self.settings.append(EntityComplianceSetting(entity_id, compliance_id))
            existing.add(compliance_id)
            inserted += 1
        return inserted


class FakeTaskStore:
    """Task store that enforces the (tenant, entity, compliance, period) rule.

    ``find_for_period`` yields to the event loop so concurrent generation
    calls interleave between the check and the insert.
    """

    def __init__(self) -> None:
        self.tasks: dict[tuple[int, int, int, str], NewTask] = {}
        self.insert_calls = 0

    async def find_for_period(
        self, tenant_id: int, entity_id: int, compliance_id: int, period_key: str
    ) -> int | None:
        await asyncio.sleep(0)
        key = (tenant_id, entity_id, compliance_id, period_key)
        return 1 if key in self.tasks else None

    async def bulk_insert(self, tasks: Sequence[NewTask]) -> int:
        self.insert_calls += 1
        inserted = 0
        for task in tasks:
            key = (task.tenant_id, task.entity_id, task.compliance_id, task.period_key)
            if key in self.tasks:
                continue
            self.tasks[key] = task
            inserted += 1
        return inserted


class FakeAuditSink:
    def __init__(self) -> None:
        self.events: list[AuditEvent] = []

    async def record(self, event: AuditEvent) -> None:
        self.events.append(event)


@pytest.fixture(autouse=True)
def clean_lru_cache() -> Generator[None]:
    """Clear the settings cache before and after each test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def clean_context() -> Generator[None]:
    """Clear request context before and after each test."""
    RequestContext.clear()
    yield
    RequestContext.clear()


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    """Drop app-specific environment variables a developer may have set."""
    prefixes = (
        "APP_",
        "API_",
        "DEBUG",
        "DATABASE_CONFIG__",
        "SCHEDULING_CONFIG__",
    )
    for key in list(os.environ):
        if key.startswith(prefixes):
            monkeypatch.delenv(key, raising=False)
    return monkeypatch


@pytest.fixture
def mock_settings(monkeypatch: pytest.MonkeyPatch) -> Settings:
    """Real Settings built from test environment values."""
    monkeypatch.setenv("APP_NAME", "TestApp")
    monkeypatch.setenv("APP_VERSION", "1.0.0")
    monkeypatch.setenv("ENVIRONMENT", "development")
    monkeypatch.setenv("DEBUG", "false")
    return Settings()


@pytest.fixture
def calendar() -> HolidayCalendar:
    """Holiday calendar covering 2020-2030."""
    return HolidayCalendar(StaticHolidaySource(2020, 2030))


@pytest.fixture
def calculator(calendar: HolidayCalendar) -> DueDateCalculator:
    return DueDateCalculator(calendar)


@pytest.fixture
def make_compliance() -> Callable[..., Compliance]:
    """Build a compliance with sensible defaults."""

    def _make(
        compliance_id: int = 1,
        *,
        name: str = "GSTR-3B",
        category: str = "GST",
        periodicity: str = "MONTHLY",
        entity_types: Sequence[str] = ("PRIVATE_LIMITED",),
        due_date_rule: dict[str, object] | None = None,
        is_active: bool = True,
        description: str | None = None,
    ) -> Compliance:
        return Compliance(
            id=compliance_id,
            name=name,
            category=category,
            periodicity=periodicity,
            entity_types=frozenset(entity_types),
            due_date_rule=due_date_rule if due_date_rule is not None else {"dueDay": 20},
            is_active=is_active,
            description=description,
        )

    return _make


@pytest.fixture
def entity() -> Entity:
    return Entity(
        id=10,
        tenant_id=1,
        client_id=5,
        entity_type="PRIVATE_LIMITED",
        legal_name="Acme Pvt Ltd",
    )


@pytest.fixture
def task_store() -> FakeTaskStore:
    return FakeTaskStore()


@pytest.fixture
def audit_sink() -> FakeAuditSink:
    return FakeAuditSink()


@pytest.fixture
def fakes() -> dict[str, type]:
    """The in-memory store classes, for tests that need custom contents."""
    return {
        "catalog": FakeCatalog,
        "entities": FakeEntityDirectory,
        "assignments": FakeAssignmentStore,
        "tasks": FakeTaskStore,
        "audit": FakeAuditSink,
    }
