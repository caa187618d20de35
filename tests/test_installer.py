"""Tests for commitpost.installer module."""

import os

import pytest

from commitpost.installer import (
    ENV_TEMPLATE,
    HOOK_SCRIPT,
    HookExistsError,
    install,
    install_env_template,
    install_hook,
    resolve_hook_dir,
)


@pytest.fixture(autouse=True)
def no_hooks_path(mocker):
    """Pretend core.hooksPath is unset unless a test says otherwise."""
    return mocker.patch("commitpost.installer.get_config_value", return_value=None)


class TestResolveHookDir:
    """Tests for resolve_hook_dir function."""

    def test_defaults_to_git_hooks(self, mock_repo_root):
        """Test .git/hooks is the fallback."""
        assert resolve_hook_dir(mock_repo_root, env={}) == mock_repo_root / ".git" / "hooks"

    def test_core_hooks_path(self, mock_repo_root, no_hooks_path):
        """Test core.hooksPath is resolved against the repo root."""
        no_hooks_path.return_value = ".githooks"

        assert resolve_hook_dir(mock_repo_root, env={}) == mock_repo_root / ".githooks"

    def test_env_override_wins(self, mock_repo_root, no_hooks_path, temp_dir):
        """Test GIT_HOOK_DIR beats core.hooksPath."""
        no_hooks_path.return_value = ".githooks"
        absolute = temp_dir / "elsewhere"

        assert resolve_hook_dir(mock_repo_root, env={"GIT_HOOK_DIR": str(absolute)}) == absolute


class TestInstallHook:
    """Tests for install_hook function."""

    def test_writes_executable_hook(self, mock_repo_root):
        """Test the script is written and executable."""
        hook_dir = mock_repo_root / ".git" / "hooks"

        hook_path = install_hook(hook_dir)

        assert hook_path == hook_dir / "pre-push"
        assert hook_path.read_text() == HOOK_SCRIPT
        assert os.access(hook_path, os.X_OK)

    def test_refuses_to_overwrite(self, mock_repo_root):
        """Test an existing hook is kept without --force."""
        hook_dir = mock_repo_root / ".git" / "hooks"
        hook_dir.mkdir()
        (hook_dir / "pre-push").write_text("#!/bin/sh\necho mine\n")

        with pytest.raises(HookExistsError):
            install_hook(hook_dir)

        assert "echo mine" in (hook_dir / "pre-push").read_text()

    def test_force_overwrites(self, mock_repo_root):
        """Test --force replaces an existing hook."""
        hook_dir = mock_repo_root / ".git" / "hooks"
        hook_dir.mkdir()
        (hook_dir / "post-commit").write_text("old")

        install_hook(hook_dir, "post-commit", force=True)

        assert (hook_dir / "post-commit").read_text() == HOOK_SCRIPT


class TestInstallEnvTemplate:
    """Tests for install_env_template function."""

    def test_creates_template(self, mock_repo_root):
        """Test a missing .env gets the template."""
        path, created = install_env_template(mock_repo_root)

        assert created
        assert path.read_text() == ENV_TEMPLATE

    def test_keeps_existing(self, mock_repo_root):
        """Test an existing .env is never overwritten."""
        (mock_repo_root / ".env").write_text("BSKY_HANDLE=me\n")

        _, created = install_env_template(mock_repo_root)

        assert not created
        assert (mock_repo_root / ".env").read_text() == "BSKY_HANDLE=me\n"


class TestInstall:
    """Tests for install function."""

    def test_full_install(self, mock_repo_root):
        """Test hook and .env are both installed."""
        result = install(mock_repo_root, env={})

        assert result.env_created
        assert result.hook_path.exists()
