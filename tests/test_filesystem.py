from __future__ import annotations

import inspect
from pathlib import Path

from cmsite.util import safe_unlink, write_text_file


def test_write_text_file_always_locks_and_cleans_up(tmp_path: Path) -> None:
    target = write_text_file(tmp_path / "pages" / "about" / "index.html", "<p>About</p>")

    assert target.read_text(encoding="utf-8") == "<p>About</p>"
    assert sorted(path.name for path in target.parent.iterdir()) == ["index.html"]
    assert "lock" not in inspect.signature(write_text_file).parameters


def test_safe_unlink_only_deletes_inside_base(tmp_path: Path) -> None:
    base = tmp_path / "build"
    base.mkdir()
    inside = base / "old.html"
    inside.write_text("old", encoding="utf-8")
    outside = tmp_path / "cmsite.toml"
    outside.write_text("keep", encoding="utf-8")

    assert safe_unlink(inside, base_dir=base) is True
    assert safe_unlink(outside, base_dir=base) is False
    assert safe_unlink(base / "missing.html", base_dir=base) is False

    assert not inside.exists()
    assert outside.read_text(encoding="utf-8") == "keep"
    assert "dry_run" not in inspect.signature(safe_unlink).parameters
