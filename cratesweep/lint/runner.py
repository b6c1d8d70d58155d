import logging
import shutil
import tempfile
from collections.abc import Callable, Sequence
from pathlib import Path

from pydantic import BaseModel, Field

from cratesweep.exceptions import LintRunError
from cratesweep.lint.checker import check_crate
from cratesweep.lint.report import LintReport
from cratesweep.lint.toolchain import build_clippy, normalize_lint_name
from cratesweep.registry.cache import CachedCrate, find_cached_crates

logger = logging.getLogger(__name__)

# Clear the shared target directory this often to bound its size.
TARGET_DIR_RESET_INTERVAL = 256

CrateCallback = Callable[[int, int, CachedCrate], None]


class LintRunSummary(BaseModel):
    """Outcome of a lint run over the crate cache."""

    report_path: Path
    crates_checked: int = 0
    crate_counts: dict[str, int] = Field(default_factory=dict)
    lint_counts: dict[str, int] = Field(default_factory=dict)
    failures: dict[str, str] = Field(default_factory=dict)


def run_lints(
    clippy_dir: Path,
    lints: Sequence[str],
    report_path: Path,
    cache_dir: Path,
    *,
    on_crate: CrateCallback | None = None,
) -> LintRunSummary:
    """Build clippy and check every relevant cached crate with the given lints.

    Crates that fail to build or check are logged and recorded in the
    summary; the run continues with the next crate.

    Args:
        clippy_dir: The clippy checkout to build.
        lints: Lint names, with or without the ``clippy::`` prefix.
        report_path: Where to write the report.
        cache_dir: The crate archive cache.
        on_crate: Called with ``(position, total, crate)`` before each crate.

    Returns:
        Counts per crate and per lint, and the crates that failed.

    Raises:
        RegistryCacheError: If the cache cannot be scanned.
        ToolchainError: If clippy cannot be built.
        ReportError: If the report cannot be written.
    """
    crates = find_cached_crates(cache_dir)
    invocation = build_clippy(clippy_dir)
    lint_counts = {normalize_lint_name(lint): 0 for lint in lints}
    summary = LintRunSummary(report_path=report_path)

    with tempfile.TemporaryDirectory(prefix="cratesweep-lint-") as tmp_dir:
        temp_dir = Path(tmp_dir)
        target_dir = temp_dir / "target"
        with LintReport(report_path) as report:
            for position, crate in enumerate(crates):
                if position > 0 and position % TARGET_DIR_RESET_INTERVAL == 0:
                    shutil.rmtree(target_dir, ignore_errors=True)
                if on_crate is not None:
                    on_crate(position + 1, len(crates), crate)

                crate_name = str(crate.identifier)
                logger.info("Checking crate %s", crate_name)
                try:
                    messages = check_crate(invocation, crate, lint_counts, target_dir, temp_dir)
                except LintRunError as exc:
                    logger.error("Error checking crate %s: %s", crate_name, exc.message)
                    summary.failures[crate_name] = exc.message
                    continue
                finally:
                    summary.crates_checked += 1

                if messages:
                    logger.info("Found %d warnings in %s", len(messages), crate_name)
                    report.add_crate(crate_name, messages)

            report.write_summary(lint_counts)
            summary.crate_counts = dict(report.crate_counts)

    summary.lint_counts = lint_counts
    return summary
