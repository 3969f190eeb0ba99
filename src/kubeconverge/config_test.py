from pathlib import Path

import pytest

from kubeconverge.config import ClientConfig


def test__ClientConfig__load__defaults_without_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    assert ClientConfig.load() == ClientConfig()


def test__ClientConfig__load__finds_file_in_parent_directory(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    (tmp_path / ClientConfig.FILENAME).write_text("field_manager: reconciler\nlist_chunk_size: 100\n")
    (tmp_path / "sub").mkdir()
    monkeypatch.chdir(tmp_path / "sub")

    config = ClientConfig.load()

    assert config.field_manager == "reconciler"
    assert config.list_chunk_size == 100
    assert config.delete_propagation_policy is None


def test__ClientConfig__load__rejects_invalid_chunk_size(tmp_path: Path) -> None:
    file = tmp_path / ClientConfig.FILENAME
    file.write_text("list_chunk_size: 0\n")
    with pytest.raises(ValueError):
        ClientConfig.load(file)
