"""Pytest fixtures for the jump engine tests.

The fakes in ``tests.fakes`` implement the host contracts in plain Python so
session logic runs without a Qt event loop. Qt tests use the ``qapp``
fixture, which runs on the offscreen platform.
"""

from __future__ import annotations

import os

import pytest

from flashjump.core.session_registry import SessionRegistry
from flashjump.settings_schema import FlashConfig

from .fakes import RecordingRouter, RecordingSink, make_config


@pytest.fixture
def router() -> RecordingRouter:
    return RecordingRouter()


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def config() -> FlashConfig:
    return make_config(labels="asdfghjkl", allow_uppercase_labels=False)


@pytest.fixture
def registry(router: RecordingRouter, sink: RecordingSink, config: FlashConfig) -> SessionRegistry:
    return SessionRegistry(key_router=router, render_sink=sink, config=config)


@pytest.fixture(scope="session")
def qapp():
    """One QApplication for every Qt test, on the offscreen platform."""
    os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
    from PySide6.QtWidgets import QApplication

    app = QApplication.instance() or QApplication([])
    yield app
