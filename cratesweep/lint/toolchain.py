# pyright: reportUnknownMemberType=false, reportUnknownVariableType=false
"""Building and invoking a local clippy checkout."""

import logging
import subprocess  # noqa: S404
from pathlib import Path

from pydantic import BaseModel, ConfigDict

from cratesweep._utils.toml_utils import TomlError, load_toml_from_path
from cratesweep.exceptions import ToolchainError

logger = logging.getLogger(__name__)

TOOLCHAIN_FILENAMES = ("rust-toolchain", "rust-toolchain.toml")
CLIPPY_LINT_PREFIX = "clippy::"


class ClippyInvocation(BaseModel):
    """How to run the clippy built from a checkout."""

    model_config = ConfigDict(frozen=True)

    clippy_dir: Path
    channel: str

    @property
    def channel_arg(self) -> str:
        return f"+{self.channel}"

    @property
    def manifest_arg(self) -> str:
        return f"--manifest-path={self.clippy_dir / 'Cargo.toml'}"

    def run_command(self) -> list[str]:
        """Base command running ``cargo-clippy``; crate arguments follow the trailing ``--``."""
        return [
            "cargo",
            self.channel_arg,
            "--quiet",
            "run",
            self.manifest_arg,
            "--release",
            "--bin",
            "cargo-clippy",
            "--",
        ]


def normalize_lint_name(name: str) -> str:
    """Normalize a lint name to clippy's diagnostic code form.

    ``needless-return`` and ``needless_return`` both become
    ``clippy::needless_return``.
    """
    normalized = name.replace("-", "_")
    if not normalized.startswith(CLIPPY_LINT_PREFIX):
        normalized = f"{CLIPPY_LINT_PREFIX}{normalized}"
    return normalized


def read_toolchain_channel(clippy_dir: Path) -> str:
    """Read the pinned toolchain channel of a clippy checkout.

    Args:
        clippy_dir: The clippy checkout.

    Returns:
        The channel, e.g. ``nightly-2021-10-21``.

    Raises:
        ToolchainError: If the toolchain file is missing, invalid, or lacks
            ``[toolchain] channel``.
    """
    toolchain_path = next(
        (clippy_dir / filename for filename in TOOLCHAIN_FILENAMES if (clippy_dir / filename).is_file()),
        None,
    )
    if toolchain_path is None:
        msg = f"No rust-toolchain file found in '{clippy_dir}'"
        raise ToolchainError(msg)

    try:
        contents = load_toml_from_path(toolchain_path)
    except TomlError as exc:
        raise ToolchainError(exc.message) from exc
    except OSError as exc:
        msg = f"Error reading '{toolchain_path}': {exc}"
        raise ToolchainError(msg) from exc

    toolchain = contents.get("toolchain")
    if not isinstance(toolchain, dict):
        msg = f"Error parsing '{toolchain_path}': missing table `toolchain`"
        raise ToolchainError(msg)
    channel = toolchain.get("channel")
    if not isinstance(channel, str):
        msg = f"Error parsing '{toolchain_path}': missing field `channel`"
        raise ToolchainError(msg)
    return channel


def build_clippy(clippy_dir: Path, *, timeout: int | None = None) -> ClippyInvocation:
    """Build clippy in release mode with its pinned toolchain.

    Args:
        clippy_dir: The clippy checkout.
        timeout: Optional timeout in seconds for the build.

    Returns:
        The invocation used to run the built clippy.

    Raises:
        ToolchainError: If the toolchain cannot be determined or the build fails.
    """
    invocation = ClippyInvocation(clippy_dir=clippy_dir, channel=read_toolchain_channel(clippy_dir))
    logger.info("Building clippy with toolchain %s", invocation.channel)
    try:
        result = subprocess.run(  # noqa: S603
            ["cargo", invocation.channel_arg, "build", invocation.manifest_arg, "--release"],  # noqa: S607
            capture_output=True,
            text=True,
            check=False,
            timeout=timeout,
        )
    except FileNotFoundError as exc:
        msg = "cargo is not installed or not found on PATH"
        raise ToolchainError(msg) from exc
    except subprocess.TimeoutExpired as exc:
        msg = f"Timed out building clippy in '{clippy_dir}'"
        raise ToolchainError(msg) from exc

    if result.returncode != 0:
        msg = f"Failed to build clippy (exit code {result.returncode}):\n{result.stderr}"
        raise ToolchainError(msg)
    return invocation


def current_git_branch(directory: Path) -> str | None:
    """Return the checked-out branch of a git repository, or None if unknown."""
    try:
        result = subprocess.run(  # noqa: S603
            ["git", "branch", "--show-current"],  # noqa: S607
            cwd=directory,
            capture_output=True,
            text=True,
            check=False,
            timeout=60,
        )
    except (FileNotFoundError, subprocess.TimeoutExpired):
        return None
    branch = result.stdout.strip()
    if result.returncode != 0 or not branch:
        return None
    return branch
