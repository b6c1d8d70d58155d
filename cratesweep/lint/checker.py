"""Run clippy over a single cached crate and collect the tracked lint hits."""

import json
import logging
import shutil
import subprocess  # noqa: S404
import tarfile
from collections.abc import Iterator
from pathlib import Path

from pydantic import BaseModel, ConfigDict

from cratesweep._compat import StrEnum
from cratesweep.exceptions import LintRunError, ManifestPrepareError
from cratesweep.lint.manifest import prepare_manifest
from cratesweep.lint.toolchain import ClippyInvocation
from cratesweep.registry.cache import CachedCrate

logger = logging.getLogger(__name__)

COMPILER_MESSAGE_REASON = "compiler-message"


class DiagnosticLevel(StrEnum):
    ERROR = "error"
    ICE = "error: internal compiler error"
    WARNING = "warning"
    NOTE = "note"
    HELP = "help"
    FAILURE_NOTE = "failure-note"


class CompilerDiagnostic(BaseModel):
    """The parts of a cargo ``compiler-message`` we act on."""

    model_config = ConfigDict(frozen=True)

    level: str
    code: str | None = None
    rendered: str | None = None

    @property
    def is_error(self) -> bool:
        return self.level in (DiagnosticLevel.ERROR, DiagnosticLevel.ICE)


def iter_compiler_diagnostics(output: str) -> Iterator[CompilerDiagnostic]:
    """Parse cargo's ``--message-format=json`` output.

    Lines that are not JSON objects are ignored; messages other than
    compiler messages are skipped.

    Raises:
        LintRunError: If a JSON line cannot be decoded.
    """
    for line in output.splitlines():
        stripped = line.strip()
        if not stripped.startswith("{"):
            continue
        try:
            payload = json.loads(stripped)
        except json.JSONDecodeError as exc:
            msg = f"Error parsing cargo output: {exc}"
            raise LintRunError(msg) from exc
        if payload.get("reason") != COMPILER_MESSAGE_REASON:
            continue
        message = payload.get("message") or {}
        code = message.get("code") or {}
        yield CompilerDiagnostic(
            level=str(message.get("level", "")),
            code=code.get("code"),
            rendered=message.get("rendered"),
        )


def extract_crate(archive: Path, target: Path) -> None:
    """Unpack a ``.crate`` archive (gzipped tar) into a directory.

    Raises:
        LintRunError: If the archive cannot be opened or unpacked.
    """
    try:
        with tarfile.open(archive, "r:gz") as tar:
            if hasattr(tarfile, "data_filter"):
                tar.extractall(target, filter="data")
            else:
                tar.extractall(target)  # noqa: S202
    except (OSError, tarfile.TarError) as exc:
        msg = f"Error unpacking '{archive}': {exc}"
        raise LintRunError(msg) from exc


def _clippy_arguments(manifest_path: Path, target_dir: Path, lints: list[str]) -> list[str]:
    arguments = [
        "--manifest-path",
        str(manifest_path),
        "--quiet",
        "--message-format=json",
        "--target-dir",
        str(target_dir),
        "--",
        "--cap-lints",
        "warn",
        "--allow",
        "clippy::all",
        "-C",
        "incremental=false",
    ]
    for lint in lints:
        arguments.extend(["--warn", lint])
    return arguments


def check_crate(
    invocation: ClippyInvocation,
    crate: CachedCrate,
    lint_counts: dict[str, int],
    target_dir: Path,
    temp_dir: Path,
    *,
    timeout: int | None = None,
) -> list[str]:
    """Run clippy on one crate with the tracked lints enabled.

    The crate is unpacked into ``temp_dir``, its lock file and local cargo
    config are dropped, and its manifest made standalone. The unpacked
    directory is removed afterwards.

    Args:
        invocation: How to run the built clippy.
        crate: The cached crate to check.
        lint_counts: Tracked lint codes mapped to their running totals;
            updated in place.
        target_dir: Shared cargo target directory.
        temp_dir: Scratch directory to unpack into.
        timeout: Optional timeout in seconds for the clippy run.

    Returns:
        The rendered diagnostics of tracked lints, in output order.

    Raises:
        LintRunError: If the crate cannot be prepared or clippy fails.
    """
    extract_crate(crate.path, temp_dir)
    crate_dir = temp_dir / crate.archive_stem
    try:
        for stale in (crate_dir / ".cargo" / "config", crate_dir / ".cargo" / "config.toml", crate_dir / "Cargo.lock"):
            stale.unlink(missing_ok=True)
        manifest_path = crate_dir / "Cargo.toml"
        try:
            prepare_manifest(manifest_path)
        except ManifestPrepareError as exc:
            raise LintRunError(exc.message) from exc

        command = invocation.run_command() + _clippy_arguments(manifest_path, target_dir, list(lint_counts))
        try:
            result = subprocess.run(  # noqa: S603
                command,
                capture_output=True,
                text=True,
                check=False,
                timeout=timeout,
            )
        except FileNotFoundError as exc:
            msg = "cargo is not installed or not found on PATH"
            raise LintRunError(msg) from exc
        except subprocess.TimeoutExpired as exc:
            msg = f"Timed out running clippy on '{crate.identifier}'"
            raise LintRunError(msg) from exc

        if result.returncode != 0:
            errors = [
                diagnostic.rendered
                for diagnostic in iter_compiler_diagnostics(result.stdout)
                if diagnostic.is_error and diagnostic.rendered
            ]
            msg = f"error running clippy (exit code {result.returncode})\n" + "".join(errors) + result.stderr
            raise LintRunError(msg)

        messages: list[str] = []
        for diagnostic in iter_compiler_diagnostics(result.stdout):
            if diagnostic.code is not None and diagnostic.code in lint_counts and diagnostic.rendered:
                lint_counts[diagnostic.code] += 1
                messages.append(diagnostic.rendered)
        return messages
    finally:
        shutil.rmtree(crate_dir, ignore_errors=True)
