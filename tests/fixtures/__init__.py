"""Test fixtures package."""

from .fake_adapter import FakeAdapter, FakeAdapterFactory, FakeConnection, fake_config

__all__ = [
    "FakeAdapter",
    "FakeAdapterFactory",
    "FakeConnection",
    "fake_config",
]
