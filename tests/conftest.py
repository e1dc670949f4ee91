"""
Shared fixtures.

Test strategy:
1. Unit tests for the ledger, archiver and parser (pure logic)
2. Repository tests against the in-memory and file stores
3. Tracker flows with a fixed clock and an immediate executor
4. No real Google Sheets calls in tests (use mocks)
"""

from concurrent.futures import Executor, Future

import pytest

from timecard.archive import PeriodArchiver
from timecard.audit import ActivityLogger
from timecard.clock import FixedClock
from timecard.services.notify import EntryNotifier, NullEntrySink
from timecard.services.storage import InMemoryKeyValueStore, TrackerStateRepository
from timecard.tracker import TimeTracker


class ImmediateExecutor(Executor):
    """Runs submitted work on the calling thread."""

    def submit(self, fn, /, *args, **kwargs):
        future = Future()
        try:
            future.set_result(fn(*args, **kwargs))
        except Exception as e:
            future.set_exception(e)
        return future


class RecordingSink(NullEntrySink):
    def __init__(self):
        self.pushed = []

    def push(self, entry):
        self.pushed.append(entry)


@pytest.fixture
def clock():
    """15 March 2024, noon."""
    return FixedClock.on(2024, 3, 15)


@pytest.fixture
def store():
    return InMemoryKeyValueStore()


@pytest.fixture
def repository(store):
    return TrackerStateRepository(store, activity_logger=ActivityLogger())


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def immediate_executor():
    return ImmediateExecutor()


@pytest.fixture
def tracker(repository, clock, sink, immediate_executor):
    tracker = TimeTracker(
        repository=repository,
        archiver=PeriodArchiver(),
        clock=clock,
        notifier=EntryNotifier(sink, executor=immediate_executor),
    )
    tracker.load()
    return tracker
