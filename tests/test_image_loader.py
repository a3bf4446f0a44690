from unittest.mock import MagicMock

import pytest
import requests

from certificate.core.image_loader import ImageLoader

URL = "https://cdn.example.com/stamp.png"


@pytest.fixture
def session():
    session = MagicMock()
    session.get.side_effect = requests.ConnectionError("offline")
    return session


@pytest.fixture
def loader(session):
    return ImageLoader(timeout=1, session=session)


class TestRemoteFailures:
    def test_failed_download_is_not_retried_on_read(self, loader, session):
        loader.prefetch([URL])
        assert loader.read_bytes(URL) is None
        assert loader.read_bytes(URL) is None
        assert session.get.call_count == 1

    def test_prefetch_retries_a_failed_source(self, loader, session):
        loader.prefetch([URL])
        session.get.side_effect = None
        session.get.return_value = MagicMock(content=b"png")

        loader.prefetch([URL])

        assert session.get.call_count == 2
        assert loader.read_bytes(URL) == b"png"


class TestCacheOnlyReads:
    def test_remote_source_is_not_fetched(self, loader, session):
        assert loader.read_bytes(URL, fetch=False) is None
        assert loader.load(URL, fetch=False) is None
        session.get.assert_not_called()

    def test_cached_remote_bytes_are_returned(self, loader, session):
        session.get.side_effect = None
        session.get.return_value = MagicMock(content=b"png")
        loader.prefetch([URL])

        assert loader.read_bytes(URL, fetch=False) == b"png"
        assert session.get.call_count == 1

    def test_local_file_is_still_read(self, loader, tmp_path):
        path = tmp_path / "bg.png"
        path.write_bytes(b"local")
        assert loader.read_bytes(str(path), fetch=False) == b"local"


class TestRetain:
    def test_stale_sources_are_dropped(self, loader, tmp_path):
        old = tmp_path / "old.png"
        new = tmp_path / "new.png"
        old.write_bytes(b"old")
        new.write_bytes(b"new")
        loader.read_bytes(str(old))
        loader.read_bytes(str(new))

        loader.retain([str(new), None])

        assert loader.cached_sources() == {str(new)}

    def test_forgetting_a_failed_source_allows_a_new_download(self, loader, session):
        loader.read_bytes(URL)
        loader.retain([])
        loader.read_bytes(URL)
        assert session.get.call_count == 2
