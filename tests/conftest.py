"""Shared fixtures built from the fakes in fakes.py."""

from __future__ import annotations

import asyncio

import pytest
from fakes import BAR, FOO, FakeHost, FakePicker, RecordingSink

from plugdesk.plugins import LifecycleController, RegistryStore


@pytest.fixture
def host():
    return FakeHost([FOO, BAR], {"a": True})


@pytest.fixture
def picker():
    return FakePicker()


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def store(host):
    return RegistryStore(host)


@pytest.fixture
def controller(host, picker, store, sink):
    return LifecycleController(host, picker, store, sink, host_timeout=None)


@pytest.fixture
def loaded(store, host):
    """Store populated from the host, with the host's call log cleared."""
    asyncio.run(store.refresh())
    host.calls.clear()
    return store
