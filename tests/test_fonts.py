"""
Unit tests for the font resource loader.

Async behavior is driven with asyncio.run inside plain test functions.
"""
import asyncio

import pytest

from ledger_reports.common.exceptions import ResourceLoadError
from ledger_reports.exporters.fonts import (
    FONT_FILES,
    FontLoader,
    LoaderState,
    directory_fetcher,
    get_font_loader,
)


class TestCoalescing:
    """Tests for the single in-flight fetch."""

    def test_concurrent_loads_share_one_fetch(self, font_bytes):
        """Five concurrent callers trigger exactly one fetch per font file."""
        calls = []

        async def slow_fetch(filename):
            calls.append(filename)
            await asyncio.sleep(0.01)
            return font_bytes

        loader = FontLoader(fetcher=slow_fetch)

        async def run():
            return await asyncio.gather(*(loader.load() for _ in range(5)))

        bundles = asyncio.run(run())

        assert sorted(calls) == sorted(FONT_FILES.values())
        assert all(b is bundles[0] for b in bundles)
        assert loader.state is LoaderState.LOADED

    def test_loaded_fonts_are_cached(self, font_loader, font_fetcher):
        """A second load after success does not fetch again."""
        async def run():
            first = await font_loader.load()
            second = await font_loader.load()
            return first, second

        first, second = asyncio.run(run())
        assert first is second
        assert len(font_fetcher.calls) == 2

    def test_state_is_loading_while_pending(self, font_bytes):
        release = None

        async def gated_fetch(filename):
            await release.wait()
            return font_bytes

        loader = FontLoader(fetcher=gated_fetch)

        async def run():
            nonlocal release
            release = asyncio.Event()
            task = asyncio.ensure_future(loader.load())
            await asyncio.sleep(0)
            state_during = loader.state
            release.set()
            await task
            return state_during

        assert asyncio.run(run()) is LoaderState.LOADING
        assert loader.state is LoaderState.LOADED

    def test_cancelled_caller_does_not_cancel_fetch(self, font_bytes):
        """Cancelling one waiter leaves the shared fetch running for the others."""
        async def slow_fetch(filename):
            await asyncio.sleep(0.01)
            return font_bytes

        loader = FontLoader(fetcher=slow_fetch)

        async def run():
            first = asyncio.ensure_future(loader.load())
            second = asyncio.ensure_future(loader.load())
            await asyncio.sleep(0)
            first.cancel()
            return await second

        bundle = asyncio.run(run())
        assert bundle.primary == font_bytes
        assert loader.state is LoaderState.LOADED


class TestFailures:
    """Tests for failed fetches."""

    def test_failure_reaches_every_waiter(self):
        async def failing_fetch(filename):
            await asyncio.sleep(0)
            raise OSError("network down")

        loader = FontLoader(fetcher=failing_fetch)

        async def run():
            return await asyncio.gather(loader.load(), loader.load(), return_exceptions=True)

        results = asyncio.run(run())
        assert all(isinstance(r, ResourceLoadError) for r in results)
        assert "network down" in str(results[0])
        assert loader.state is LoaderState.UNLOADED

    def test_failure_is_not_cached(self, font_bytes):
        """After a failure the next load fetches again and can succeed."""
        attempts = []

        async def flaky_fetch(filename):
            attempts.append(filename)
            if len(attempts) <= 2:
                raise OSError("temporary")
            return font_bytes

        loader = FontLoader(fetcher=flaky_fetch)

        with pytest.raises(ResourceLoadError):
            asyncio.run(loader.load())

        bundle = asyncio.run(loader.load())
        assert bundle.secondary == font_bytes
        assert len(attempts) == 4
        assert loader.state is LoaderState.LOADED

    def test_empty_response_is_an_error(self):
        async def empty_fetch(filename):
            return b""

        loader = FontLoader(fetcher=empty_fetch)
        with pytest.raises(ResourceLoadError) as exc_info:
            asyncio.run(loader.load())
        assert exc_info.value.reason == "empty response"

    def test_invalid_font_data_is_an_error(self):
        async def junk_fetch(filename):
            return b"this is definitely not a truetype font file"

        loader = FontLoader(fetcher=junk_fetch)
        with pytest.raises(ResourceLoadError):
            asyncio.run(loader.load())
        assert loader.state is LoaderState.UNLOADED

    def test_missing_file_in_directory(self, tmp_path):
        loader = FontLoader(fetcher=directory_fetcher(tmp_path))
        with pytest.raises(ResourceLoadError) as exc_info:
            asyncio.run(loader.load())
        assert exc_info.value.resource in FONT_FILES.values()


class TestDirectoryFetcher:
    """Tests for the default file-system fetcher."""

    def test_reads_bytes(self, tmp_path, font_bytes):
        for filename in FONT_FILES.values():
            (tmp_path / filename).write_bytes(font_bytes)

        loader = FontLoader(fetcher=directory_fetcher(tmp_path))
        bundle = asyncio.run(loader.load())
        assert bundle.primary == font_bytes
        assert bundle.primary_name == "NotoSansJP"
        assert bundle.secondary_name == "NotoSansSC"

    def test_global_loader_is_shared(self):
        assert get_font_loader() is get_font_loader()
