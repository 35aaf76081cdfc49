"""Tests for workspace identity derivation."""
import hashlib
from pathlib import Path

import pytest

from aipod.sandbox.identity import derive_identity, resolve_workspace


class TestDeriveIdentity:
    """derive_identity() maps canonical paths to stable names."""

    def test_same_path_same_identity(self) -> None:
        path = Path("/home/user/src/project")
        assert derive_identity(path) == derive_identity(Path("/home/user/src/project"))

    def test_name_is_prefix_plus_twelve_hex_chars(self) -> None:
        identity = derive_identity(Path("/home/user/src/project"))
        expected = hashlib.sha256(b"/home/user/src/project").hexdigest()[:12]
        assert identity.container_name == f"claude-{expected}"

    def test_distinct_paths_distinct_names(self) -> None:
        names = {
            derive_identity(Path(f"/home/user/src/project-{i}")).container_name
            for i in range(500)
        }
        assert len(names) == 500

    def test_volume_name_derived_from_container(self) -> None:
        identity = derive_identity(Path("/work"))
        assert identity.volume_name == f"{identity.container_name}-data"

    def test_custom_prefix(self) -> None:
        identity = derive_identity(Path("/work"), prefix="sbx-")
        assert identity.container_name.startswith("sbx-")
        assert len(identity.container_name) == len("sbx-") + 12

    def test_keeps_workspace(self) -> None:
        assert derive_identity(Path("/work")).workspace == Path("/work")


class TestResolveWorkspace:
    """resolve_workspace() canonicalizes user input."""

    def test_defaults_to_cwd(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        assert resolve_workspace() == tmp_path.resolve()

    def test_resolves_symlinks(self, tmp_path: Path) -> None:
        real = tmp_path / "real"
        real.mkdir()
        link = tmp_path / "link"
        link.symlink_to(real)

        assert resolve_workspace(link) == real.resolve()
        assert derive_identity(resolve_workspace(link)) == derive_identity(
            resolve_workspace(real)
        )

    def test_missing_path_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            resolve_workspace(tmp_path / "nope")
