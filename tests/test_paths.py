from colorbook.paths import ensure_directories, get_data_root


def test_ensure_directories(tmp_path):
    dirs = ensure_directories(tmp_path)
    assert (tmp_path / "pictures").is_dir()
    assert (tmp_path / "snapshots").is_dir()
    assert dirs["pictures"] == tmp_path / "pictures"


def test_get_data_root_expands_user(tmp_path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path))
    assert get_data_root({"data_root": "~/colorbook"}) == (tmp_path / "colorbook").resolve()
