"""Test fixtures: sample pages and a fake web for the outbound HTTP clients."""

from tests.fixtures.web import FakeWeb, wikipedia_url

__all__ = ["FakeWeb", "wikipedia_url"]
