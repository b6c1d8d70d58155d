"""Plain-text lint report.

Layout::

    serde-1.0.130: 2 warnings

    <rendered diagnostic>
    <rendered diagnostic>


    Report summary:

    serde-1.0.130: 2 warnings

    clippy::needless_return: 2 occurrences
"""

from datetime import date
from pathlib import Path
from types import TracebackType
from typing import TextIO

from cratesweep.exceptions import ReportError
from cratesweep.lint.toolchain import current_git_branch


def default_report_name(clippy_dir: Path, today: date | None = None) -> Path:
    """Name the report after the clippy checkout's branch and the date.

    Returns:
        ``{branch}-{YYYY-MM-DD}.txt``, or ``{YYYY-MM-DD}.txt`` when the branch
        cannot be determined.
    """
    stamp = (today or date.today()).isoformat()
    branch = current_git_branch(clippy_dir)
    if branch:
        # Branch names may contain slashes
        return Path(f"{branch.replace('/', '-')}-{stamp}.txt")
    return Path(f"{stamp}.txt")


class LintReport:
    """Writes per-crate sections as crates are checked, then a summary."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self.crate_counts: dict[str, int] = {}
        self._file: TextIO | None = None

    def __enter__(self) -> "LintReport":
        try:
            self._file = self.path.open("w", encoding="utf-8")
        except OSError as exc:
            msg = f"Error creating report file '{self.path}': {exc}"
            raise ReportError(msg) from exc
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None

    def _write(self, text: str) -> None:
        if self._file is None:
            msg = "Report is not open"
            raise ReportError(msg)
        try:
            self._file.write(text)
            self._file.flush()
        except OSError as exc:
            msg = f"Error writing report '{self.path}': {exc}"
            raise ReportError(msg) from exc

    def add_crate(self, crate_name: str, messages: list[str]) -> None:
        """Write the section for a crate with tracked lint hits."""
        self.crate_counts[crate_name] = len(messages)
        self._write(f"{crate_name}: {len(messages)} warnings\n\n" + "".join(messages) + "\n")

    def write_summary(self, lint_counts: dict[str, int]) -> None:
        """Write per-crate warning counts and per-lint occurrence counts."""
        lines = ["\nReport summary:\n\n"]
        lines.extend(f"{crate_name}: {count} warnings\n" for crate_name, count in self.crate_counts.items())
        lines.append("\n")
        lines.extend(f"{lint}: {count} occurrences\n" for lint, count in lint_counts.items())
        self._write("".join(lines))
