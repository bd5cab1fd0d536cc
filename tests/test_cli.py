"""Tests for the command line interface."""

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from click.testing import CliRunner

from dropbox_bridge.cli import cli
from dropbox_bridge.storage.base import Diagnostic, Severity, StorageException


@pytest.fixture
def storage() -> MagicMock:
    storage = MagicMock()
    storage.ensure = AsyncMock(return_value=[])
    storage.get_external_url = AsyncMock(return_value="https://www.dropbox.com/s/abc/a.jpg?dl=1")
    storage.upload = AsyncMock(return_value="/docs/a.txt")
    storage.list_contents = AsyncMock(return_value=[])
    storage.__aenter__.return_value = storage
    return storage


@pytest.fixture
def runner(storage: MagicMock):
    with patch("dropbox_bridge.cli.create_storage", return_value=storage):
        yield CliRunner()


def test_ensure_healthy(runner: CliRunner):
    result = runner.invoke(cli, ["ensure"])

    assert result.exit_code == 0
    assert "healthy" in result.output


def test_ensure_reports_diagnostics(runner: CliRunner, storage: MagicMock):
    storage.ensure.return_value = [
        Diagnostic(
            severity=Severity.ERROR,
            message="The Dropbox client failed with: %error.",
            context={"%error": "invalid_access_token"},
        )
    ]

    result = runner.invoke(cli, ["ensure"])

    assert result.exit_code == 1
    assert "[ERROR] The Dropbox client failed with: invalid_access_token." in result.output


def test_url(runner: CliRunner, storage: MagicMock):
    result = runner.invoke(cli, ["url", "dropbox://styles/thumbnail/public/a.jpg"])

    assert result.exit_code == 0
    assert result.output.strip() == "https://www.dropbox.com/s/abc/a.jpg?dl=1"
    storage.get_external_url.assert_awaited_once_with("dropbox://styles/thumbnail/public/a.jpg")
    storage.__aexit__.assert_awaited_once()


def test_url_invalid_path(runner: CliRunner, storage: MagicMock):
    storage.get_external_url.side_effect = StorageException("Cannot build a URL for dropbox://")

    result = runner.invoke(cli, ["url", "dropbox://"])

    assert result.exit_code == 1
    assert "Cannot build a URL" in result.output
    storage.__aexit__.assert_awaited_once()


def test_upload(runner: CliRunner, storage: MagicMock, tmp_path: Path):
    local_file = tmp_path / "a.txt"
    local_file.write_bytes(b"hello")

    result = runner.invoke(cli, ["upload", str(local_file), "docs/a.txt"])

    assert result.exit_code == 0
    assert "/docs/a.txt" in result.output
    storage.upload.assert_awaited_once_with("docs/a.txt", b"hello", None)


def test_upload_failure(runner: CliRunner, storage: MagicMock, tmp_path: Path):
    local_file = tmp_path / "a.txt"
    local_file.write_bytes(b"hello")
    storage.upload.side_effect = StorageException("Dropbox upload failed: insufficient_space")

    result = runner.invoke(cli, ["upload", str(local_file), "docs/a.txt"])

    assert result.exit_code == 1
    assert "insufficient_space" in result.output
    storage.__aexit__.assert_awaited_once()


def test_ls(runner: CliRunner, storage: MagicMock):
    storage.list_contents.return_value = [
        {"type": "dir", "path": "/photos", "name": "photos"},
        {"type": "file", "path": "/a.txt", "name": "a.txt", "size": 5},
    ]

    result = runner.invoke(cli, ["ls", "--recursive"])

    assert result.exit_code == 0
    assert result.output.splitlines() == ["/photos/", "/a.txt\t5"]
    storage.list_contents.assert_awaited_once_with("", recursive=True)


def test_example_config(runner: CliRunner):
    result = runner.invoke(cli, ["example-config"])

    assert result.exit_code == 0
    assert "storage:" in result.output
    assert "image_styles:" in result.output
