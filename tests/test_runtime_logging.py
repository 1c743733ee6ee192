from __future__ import annotations

import asyncio
import json
import os
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from fpath.fs.entries import entries
from fpath.fs.filtering import filter_entries
from fpath.paths import default_log_path
from fpath.protocol.pull import collect, pipe
from fpath.runtime_logging import configure_runtime_logging, parse_level


class RuntimeLoggingTests(unittest.TestCase):
    def tearDown(self) -> None:
        configure_runtime_logging(level="off")

    def test_writes_jsonl_and_filters_by_level(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "runtime.jsonl"
            logger = configure_runtime_logging(level="info", log_file=path)
            logger.debug("debug.hidden", foo="bar")
            logger.info("info.visible", foo="bar")

            lines = path.read_text(encoding="utf-8").splitlines()
            self.assertGreaterEqual(len(lines), 2)  # includes logging.configured event
            payloads = [json.loads(line) for line in lines]
            self.assertTrue(any(item["event"] == "info.visible" for item in payloads))
            self.assertFalse(any(item["event"] == "debug.hidden" for item in payloads))

    def test_uses_environment_variables(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "from-env.jsonl"
            with patch.dict(
                os.environ,
                {"FPATH_LOG_LEVEL": "debug", "FPATH_LOG_FILE": str(path)},
                clear=False,
            ):
                logger = configure_runtime_logging()
                logger.debug("env.debug", alpha=1)

            payloads = [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]
            self.assertTrue(any(item["event"] == "env.debug" for item in payloads))

    def test_off_writes_nothing(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "off.jsonl"
            logger = configure_runtime_logging(level="off", log_file=path)
            logger.error("never.written")
            self.assertFalse(path.exists())

    def test_parse_level_aliases(self) -> None:
        self.assertEqual(parse_level("WARN"), "warning")
        self.assertEqual(parse_level("disabled"), "off")
        self.assertEqual(parse_level("loud", default="info"), "info")
        self.assertEqual(parse_level(None), "warning")

    def test_stream_events_are_logged(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "stream.jsonl"
            configure_runtime_logging(level="debug", log_file=path)

            async def run() -> list[str]:
                return await collect(pipe(entries(Path(tmp) / "missing"), filter_entries("isNothing")))

            with self.assertRaises(FileNotFoundError):
                asyncio.run(run())

            events = [json.loads(line)["event"] for line in path.read_text(encoding="utf-8").splitlines()]
            self.assertIn("filter.shorthand.unknown", events)
            self.assertIn("entries.listing.failed", events)


class LazySinkTests(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.state_home = Path(self._tmp.name) / "state"
        self.state_home.mkdir()
        self.listed = Path(self._tmp.name) / "listed"
        self.listed.mkdir()
        (self.listed / "a.txt").write_text("a", encoding="utf-8")

        env = patch.dict(os.environ, {"XDG_STATE_HOME": str(self.state_home)}, clear=False)
        env.start()
        self.addCleanup(env.stop)
        os.environ.pop("FPATH_LOG_LEVEL", None)
        os.environ.pop("FPATH_LOG_FILE", None)

        unconfigured = patch("fpath.runtime_logging._runtime_logger", None)
        unconfigured.start()
        self.addCleanup(unconfigured.stop)

    async def asyncTearDown(self) -> None:
        self._tmp.cleanup()

    async def test_constructing_a_pipeline_leaves_state_dir_untouched(self) -> None:
        stage = pipe(entries(self.listed), filter_entries("is-file"))
        self.assertEqual(os.listdir(self.state_home), [])

        self.assertEqual(await collect(stage), [str(self.listed / "a.txt")])
        self.assertEqual(os.listdir(self.state_home), [])

    async def test_sink_created_on_first_written_event(self) -> None:
        with self.assertRaises(FileNotFoundError):
            await collect(entries(self.listed / "missing"))

        sink = default_log_path()
        self.assertTrue(sink.is_relative_to(self.state_home))
        events = [json.loads(line)["event"] for line in sink.read_text(encoding="utf-8").splitlines()]
        self.assertEqual(events, ["entries.listing.failed"])


if __name__ == "__main__":
    unittest.main()
