"""Tests for the download manager and the reference assembly download."""

import asyncio
import threading

import aiohttp
import pytest

from beatfetch.download import ArchiveExtractor, DownloadManager, relocation_rules_for
from beatfetch.exceptions import DownloadError, DownloadStatusError
from beatfetch.services import ReferenceAssembliesClient

from conftest import BSIPA_ZIP, REFERENCE_ZIP


URL = "https://beatmods.com/uploads/BSIPA-4.1.4/universal/BSIPA-4.1.4.zip"
REFERENCE_URL = (
    "https://api.github.com/repos/nicoco007/BeatSaberReferenceAssemblies"
    "/zipball/refs/tags/v1.13.2"
)


class _FailingSession:
    closed = False

    def get(self, url, **kwargs):
        raise aiohttp.ClientConnectionError("connection refused")


class _TimeoutSession:
    closed = False

    def get(self, url, **kwargs):
        raise asyncio.TimeoutError()


class _ThreadRecordingExtractor(ArchiveExtractor):
    def __init__(self):
        self.threads = []

    def extract(self, data, destination, strip_components=0):
        self.threads.append(threading.get_ident())
        return super().extract(data, destination, strip_components)


class TestDownloadManager:
    """Tests for DownloadManager."""

    def test_fetch_returns_body(self, session):
        session.add_bytes(URL, b"payload")
        manager = DownloadManager(session=session)

        assert asyncio.run(manager.fetch(URL)) == b"payload"
        assert manager.get_stats().bytes_downloaded == 7

    def test_fetch_non_success_status(self, session):
        session.add_bytes(URL, b"", status=401, reason="Unauthorized")
        manager = DownloadManager(session=session)

        with pytest.raises(DownloadStatusError) as exc:
            asyncio.run(manager.fetch(URL))
        assert exc.value.message == "Unexpected response status 401 Unauthorized"
        assert exc.value.status == 401

    def test_fetch_transport_error(self):
        manager = DownloadManager(session=_FailingSession())
        with pytest.raises(DownloadError):
            asyncio.run(manager.fetch(URL))

    def test_fetch_timeout(self):
        manager = DownloadManager(session=_TimeoutSession())
        with pytest.raises(DownloadError, match="TimeoutError"):
            asyncio.run(manager.fetch(URL))

    def test_install_writes_outside_event_loop_thread(self, session, tmp_path):
        session.add_bytes(URL, BSIPA_ZIP)
        extractor = _ThreadRecordingExtractor()
        manager = DownloadManager(session=session, extractor=extractor)

        asyncio.run(manager.install(URL, str(tmp_path)))

        assert extractor.threads
        assert threading.get_ident() not in extractor.threads
        assert (tmp_path / "IPA" / "Libs" / "0Harmony.dll").read_bytes() == b"harmony"

    def test_install_extracts_and_relocates(self, session, tmp_path):
        session.add_bytes(URL, BSIPA_ZIP)
        managed = tmp_path / "Beat Saber_Data" / "Managed"
        managed.mkdir(parents=True)
        (managed / "I18N.dll").write_bytes(b"shared")
        manager = DownloadManager(session=session)

        asyncio.run(
            manager.install(URL, str(tmp_path), relocation_rules_for("BSIPA", "Beat Saber"))
        )

        assert (tmp_path / "Libs" / "0Harmony.dll").read_bytes() == b"harmony"
        assert (managed / "IPA.Loader.dll").read_bytes() == b"loader"
        assert (managed / "I18N.dll").read_bytes() == b"shared"
        assert manager.get_stats().completed == 1
        assert manager.get_stats().files_written == 4

    def test_install_does_not_write_on_failed_download(self, session, tmp_path):
        session.add_bytes(URL, b"", status=500, reason="Internal Server Error")
        manager = DownloadManager(session=session)

        with pytest.raises(DownloadStatusError):
            asyncio.run(manager.install(URL, str(tmp_path)))
        assert list(tmp_path.iterdir()) == []


class TestReferenceAssembliesClient:
    """Tests for ReferenceAssembliesClient."""

    def test_downloads_with_github_headers(self, session, tmp_path):
        session.add_bytes(REFERENCE_URL, REFERENCE_ZIP)
        client = ReferenceAssembliesClient(DownloadManager(session=session), "github_pat_whatever")

        asyncio.run(client.download("1.13.2", str(tmp_path)))

        assert (tmp_path / "Beat Saber_Data" / "Managed" / "Main.dll").read_bytes() == b"main"
        assert not (tmp_path / "README.md").exists()
        url, headers = session.calls[0]
        assert url == REFERENCE_URL
        assert headers == {
            "Accept": "application/vnd.github+json",
            "Authorization": "Bearer github_pat_whatever",
            "User-Agent": "setup-beat-saber",
            "X-GitHub-Api-Version": "2022-11-28",
        }

    def test_non_success_status(self, session, tmp_path):
        session.add_bytes(REFERENCE_URL, b"", status=401, reason="Unauthorized")
        client = ReferenceAssembliesClient(DownloadManager(session=session), "bad")

        with pytest.raises(DownloadStatusError, match="Unexpected response status 401 Unauthorized"):
            asyncio.run(client.download("1.13.2", str(tmp_path)))
