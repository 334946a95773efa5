"""Unit tests for the end-to-end generation run."""

import asyncio
import threading

from rulegen import pipeline
from rulegen.core.config import Settings
from rulegen.core.factory import ComponentFactory


def make_factory(profiles_dir, templates_dir) -> ComponentFactory:
    return ComponentFactory(Settings(profiles_dir=profiles_dir, templates_dir=templates_dir))


class TestLoadInputs:
    """Test suite for load_inputs."""

    def test_only_keeps_given_order(self, profiles_dir, templates_dir):
        """Test that the profile filter follows the order it was given in."""
        profiles, fragments, _, _ = pipeline.load_inputs(
            make_factory(profiles_dir, templates_dir), only=["staging", "prod"]
        )

        assert [p.identifier for p in profiles] == ["staging", "prod"]
        assert len(fragments) == 2

    def test_only_ignores_repeats(self, profiles_dir, templates_dir):
        """Test that a profile named twice is loaded once."""
        profiles, _, _, _ = pipeline.load_inputs(
            make_factory(profiles_dir, templates_dir), only=["prod", "staging", "prod"]
        )

        assert [p.identifier for p in profiles] == ["prod", "staging"]


class TestRunGeneration:
    """Test suite for run_generation."""

    def test_loads_outside_event_loop_thread(self, profiles_dir, templates_dir, monkeypatch):
        """Test that file loading runs in a worker thread, not on the event loop."""
        load_threads: list[threading.Thread] = []
        original = pipeline.load_inputs

        def recording_load(*args, **kwargs):
            load_threads.append(threading.current_thread())
            return original(*args, **kwargs)

        monkeypatch.setattr(pipeline, "load_inputs", recording_load)

        async def run():
            loop_thread = threading.current_thread()
            result = await pipeline.run_generation(make_factory(profiles_dir, templates_dir))
            return loop_thread, result

        loop_thread, run_result = asyncio.run(run())

        assert len(load_threads) == 1
        assert load_threads[0] is not loop_thread
        assert len(run_result.rules) == 4
        assert run_result.report.ok
