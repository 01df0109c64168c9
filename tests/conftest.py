"""
Shared test fixtures for folder packaging tests.
"""

import io
import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import httpx
import pytest
from pydantic import BaseModel
from rich.console import Console

from pienkuu.core.action_runner import ActionRunner, DownloadAction, PrintAction
from pienkuu.core.archive_sink import ZipArchiveSink
from pienkuu.core.folder_composer import FolderComposer
from pienkuu.integration.http_fetcher import HttpFetcher
from pienkuu.models.composition_models import CompositionContext


class Workspace:
    """Builds project folders with pienkuu.json files under a temp root."""

    def __init__(self, root: Path):
        self.root = root

    def folder(
        self,
        name: str,
        config: Optional[Dict[str, Any]] = None,
        files: Optional[Dict[str, Union[str, bytes]]] = None,
    ) -> Path:
        folder_path = self.root / name
        folder_path.mkdir(parents=True, exist_ok=True)

        if config is not None:
            (folder_path / "pienkuu.json").write_text(json.dumps(config), encoding="utf-8")

        for relative, content in (files or {}).items():
            file_path = folder_path / relative
            file_path.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(content, str):
                content = content.encode("utf-8")
            file_path.write_bytes(content)

        return folder_path


class RecordingSink(ZipArchiveSink):
    """Archive sink that also records every write in order."""

    def __init__(self, events: List[Tuple[str, str]]):
        super().__init__()
        self.events = events

    def put(self, path: str, contents: bytes) -> None:
        self.events.append(("put", path))
        super().put(path, contents)


class RecordOptions(BaseModel):
    label: str


class RecordAction:
    """Action appending its label to a shared event log."""

    name = "record"
    options_model = RecordOptions

    def __init__(self, events: List[Tuple[str, str]]):
        self.events = events

    async def run(self, options: BaseModel, context: CompositionContext) -> None:
        self.events.append(("action", options.label))  # type: ignore[attr-defined]


class PutOptions(BaseModel):
    path: str
    text: str


class PutAction:
    """Action writing arbitrary text to an arbitrary archive path."""

    name = "put"
    options_model = PutOptions

    async def run(self, options: BaseModel, context: CompositionContext) -> None:
        context.archive_sink.put(options.path, options.text.encode("utf-8"))  # type: ignore[attr-defined]


class SquashMinifier:
    """Stub minifier removing all whitespace."""

    def minify(self, text: str) -> str:
        return "".join(text.split())


def make_transport(routes: Dict[str, httpx.Response]) -> httpx.MockTransport:
    """Mock transport answering from a URL -> response table (404 otherwise)."""

    def handler(request: httpx.Request) -> httpx.Response:
        response = routes.get(str(request.url))
        if response is None:
            return httpx.Response(404, content=b"not found")
        return response

    return httpx.MockTransport(handler)


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch, tmp_path_factory: pytest.TempPathFactory) -> None:
    """Keep the user's settings file and environment out of tests."""
    monkeypatch.setenv("HOME", str(tmp_path_factory.mktemp("home")))
    for var_name in (
        "PIENKUU_SETTINGS_PATH",
        "PIENKUU_LOG_LEVEL",
        "PIENKUU_MAX_REDIRECTS",
        "PIENKUU_DOWNLOAD_TIMEOUT",
    ):
        monkeypatch.delenv(var_name, raising=False)


@pytest.fixture
def workspace(tmp_path: Path) -> Workspace:
    return Workspace(tmp_path)


@pytest.fixture
def events() -> List[Tuple[str, str]]:
    return []


@pytest.fixture
def console_buffer() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def action_runner(events: List[Tuple[str, str]], console_buffer: io.StringIO) -> ActionRunner:
    """Runner with print, download (mocked network), record and put actions."""
    transport = make_transport(
        {
            "http://x/y/file.bin": httpx.Response(200, content=b"\x00binary\xff"),
            "http://x/y/a": httpx.Response(200, content=b"payload-a"),
        }
    )
    runner = ActionRunner()
    runner.register(PrintAction(Console(file=console_buffer, width=200)))
    runner.register(DownloadAction(HttpFetcher(transport=transport)))
    runner.register(RecordAction(events))
    runner.register(PutAction())
    return runner


@pytest.fixture
def composer(workspace: Workspace, action_runner: ActionRunner) -> FolderComposer:
    return FolderComposer(
        action_runner=action_runner,
        minifier=SquashMinifier(),
        base_dir=workspace.root,
    )
