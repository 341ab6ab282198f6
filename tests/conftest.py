"""Shared fixtures: an in-process stand-in for aiohttp and archive builders."""

import io
import json
import zipfile
from typing import Dict, List, Optional, Tuple
from urllib.parse import urlencode

import pytest
from loguru import logger


class FakeResponse:
    """Minimal async response stub."""

    def __init__(self, url: str, status: int = 200, body: bytes = b"", reason: str = "OK"):
        self.url = url
        self.status = status
        self.reason = reason
        self._body = body

    async def json(self, content_type: Optional[str] = "application/json"):
        return json.loads(self._body)

    async def read(self) -> bytes:
        return self._body

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False


class FakeSession:
    """Routes GET requests to canned responses and records every call."""

    def __init__(self):
        self.routes: Dict[str, Tuple[int, bytes, str]] = {}
        self.calls: List[Tuple[str, Optional[dict]]] = []
        self.closed = False

    def add_json(self, url: str, payload, status: int = 200, reason: str = "OK"):
        self.routes[url] = (status, json.dumps(payload).encode(), reason)

    def add_bytes(self, url: str, body: bytes, status: int = 200, reason: str = "OK"):
        self.routes[url] = (status, body, reason)

    def get(self, url: str, params: Optional[dict] = None, headers: Optional[dict] = None, **kwargs):
        full_url = f"{url}?{urlencode(params)}" if params else url
        self.calls.append((full_url, headers))
        if full_url not in self.routes:
            raise AssertionError(f"Unexpected web request to {full_url}")
        status, body, reason = self.routes[full_url]
        return FakeResponse(full_url, status, body, reason)

    @property
    def urls(self) -> List[str]:
        return [url for url, _ in self.calls]

    async def close(self):
        self.closed = True


def make_zip(entries: Dict[str, Optional[bytes]]) -> bytes:
    """Build a zip archive; a None value creates a directory record."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        for name, content in entries.items():
            if content is None:
                archive.writestr(zipfile.ZipInfo(name.rstrip("/") + "/"), b"")
            else:
                archive.writestr(name, content)
    return buffer.getvalue()


BSIPA_ZIP = make_zip(
    {
        "IPA/": None,
        "IPA/Libs/": None,
        "IPA/Libs/0Harmony.dll": b"harmony",
        "IPA/Data/": None,
        "IPA/Data/Managed/": None,
        "IPA/Data/Managed/IPA.Loader.dll": b"loader",
        "IPA/Data/Managed/I18N.dll": b"i18n-bsipa",
        "IPA.exe": b"exe",
    }
)

PLUGIN_ZIP = make_zip({"Plugins/": None, "Plugins/SongCore.dll": b"songcore"})

REFERENCE_ZIP = make_zip(
    {
        "nicoco007-BeatSaberReferenceAssemblies-abc123/": None,
        "nicoco007-BeatSaberReferenceAssemblies-abc123/1.13.2/": None,
        "nicoco007-BeatSaberReferenceAssemblies-abc123/1.13.2/Beat Saber_Data/Managed/Main.dll": b"main",
        "nicoco007-BeatSaberReferenceAssemblies-abc123/README.md": b"readme",
    }
)

VERSIONS_URL = "https://versions.beatmods.com/versions.json"
ALIASES_URL = "https://alias.beatmods.com/aliases.json"


def mods_url(game_version: str) -> str:
    return f"https://beatmods.com/api/v1/mod?sort=version&sortDirection=-1&gameVersion={game_version}"


def release(name: str, version: str, *types: str) -> dict:
    types = types or ("universal",)
    return {
        "name": name,
        "version": version,
        "downloads": [
            {"type": t, "url": f"/uploads/{name}-{version}/{t}/{name}-{version}.zip"}
            for t in types
        ],
    }


MODS_1_13_2 = [
    release("SongCore", "3.1.0"),
    release("BSIPA", "4.1.4"),
    release("BSIPA", "4.1.3"),
    release("BS Utils", "1.7.0"),
    release("DummyNoDownload", "4.1.1", "steam", "oculus"),
]

MODS_1_16_1 = [
    release("SongCore", "3.5.0"),
    release("BSIPA", "4.1.6"),
    release("BS Utils", "1.10.0"),
]


@pytest.fixture
def session():
    return FakeSession()


@pytest.fixture
def catalog(session):
    """A session serving the BeatMods catalog and every upload in it."""
    session.add_json(VERSIONS_URL, ["1.16.1", "1.13.2"])
    session.add_json(ALIASES_URL, {"1.13.2": ["1.13.3"], "1.16.1": ["1.16.2"]})
    session.add_json(mods_url("1.13.2"), MODS_1_13_2)
    session.add_json(mods_url("1.16.1"), MODS_1_16_1)
    for mod in MODS_1_13_2 + MODS_1_16_1:
        for download in mod["downloads"]:
            body = BSIPA_ZIP if mod["name"] == "BSIPA" else PLUGIN_ZIP
            session.add_bytes(f"https://beatmods.com{download['url']}", body)
    return session


@pytest.fixture
def log_records():
    records = []
    handler_id = logger.add(lambda message: records.append(message.record), level="DEBUG")
    yield records
    logger.remove(handler_id)


def messages(records, level: Optional[str] = None) -> List[str]:
    return [r["message"] for r in records if level is None or r["level"].name == level]
