"""Configuration and identity, read from git config."""

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from git import InvalidGitRepositoryError, NoSuchPathError, Repo

from optiban.constants import BRANCH_NAME

OPTIBAN_DEFAULTS = {
    "branch": BRANCH_NAME,
    "board": "",
    "user": "",
}


@dataclass
class Identity:
    """The user a session acts for."""

    id: str
    name: str = ""
    email: str = ""

    def to_profile(self) -> dict:
        return {"id": self.id, "display_name": self.name, "email": self.email, "photo_url": None}


def _python_key(git_key: str) -> str:
    """Convert git-style key (hyphenated) to Python-style (underscored)."""
    return git_key.replace("-", "_")


def _git_key(python_key: str) -> str:
    """Convert Python-style key (underscored) to git-style (hyphenated)."""
    return python_key.replace("_", "-")


def _get_repo(repo_path: str | Path) -> Repo:
    return Repo(repo_path)


def is_git_repo(path: str | Path) -> bool:
    """Check if path is inside a git repository."""
    try:
        Repo(path)
        return True
    except (InvalidGitRepositoryError, NoSuchPathError):
        return False


def read_git_config(repo_path: str | Path) -> dict[str, dict[str, Any]]:
    """Read git config into {section: {key: value}} dict.

    Skips subsectioned entries (e.g. remote "origin"). Converts key
    hyphens to underscores and merges optiban defaults for missing keys.
    """
    repo = _get_repo(repo_path)
    reader = repo.config_reader()
    result: dict[str, dict[str, Any]] = {}
    for section in reader.sections():
        if '"' in section:
            continue
        result[section] = {_python_key(k): v for k, v in reader.items(section)}
    optiban = result.setdefault("optiban", {})
    for key, default in OPTIBAN_DEFAULTS.items():
        optiban.setdefault(key, default)
    return result


def write_git_config_key(repo_path: str | Path, section: str, key: str, value) -> None:
    """Write one key to the repository's git config. key is python-style."""
    repo = _get_repo(repo_path)
    writer = repo.config_writer("repository")
    writer.set_value(section, _git_key(key), str(value))
    writer.release()


def read_identity(config: dict[str, dict[str, Any]]) -> Identity | None:
    """Resolve the current user: optiban.user, else user.email.

    Returns None when neither is configured.
    """
    user = config.get("user", {})
    email = user.get("email", "")
    user_id = config.get("optiban", {}).get("user") or email
    if not user_id:
        return None
    return Identity(id=user_id, name=user.get("name", ""), email=email)
