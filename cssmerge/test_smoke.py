"""
Minimal smoke test for the package structure.
Tests that the public surface imports and wires together.
"""


def test_imports():
    """Test that all basic imports work"""
    from cssmerge import (
        CssFetcher,
        FetchCache,
        Settings,
        assemble,
        expand_sources,
        load_manifests,
        run,
    )
    from cssmerge_cli.main import cli

    assert callable(run)
    assert callable(cli)
    assert all(obj is not None for obj in (CssFetcher, FetchCache, Settings, assemble, expand_sources, load_manifests))


def test_default_fetcher_uses_settings():
    """Test that the default fetcher picks up retry settings"""
    from cssmerge.fetcher import RequestsTransport
    from cssmerge.pipeline import build_fetcher
    from cssmerge.settings import Settings

    fetcher = build_fetcher(Settings(max_attempts=4, retry_delay=0.1, request_timeout=7))
    try:
        assert fetcher.max_attempts == 4
        assert fetcher.retry_delay == 0.1
        assert isinstance(fetcher.transport, RequestsTransport)
        assert fetcher.transport.timeout == 7
    finally:
        fetcher.transport.close()
