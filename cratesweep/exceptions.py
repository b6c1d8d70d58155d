class CratesweepError(Exception):
    """Base exception for all cratesweep errors."""

    def __init__(self, message: str = "") -> None:
        self.message = message
        super().__init__(message)


class DumpReadError(CratesweepError):
    """Raised when a registry dump table cannot be read at all."""


class RegistryCacheError(CratesweepError):
    """Raised when the local crate archive cache cannot be scanned."""


class CrateFetchError(CratesweepError):
    """Raised when ``cargo fetch`` fails for a crate."""


class ToolchainError(CratesweepError):
    """Raised when the clippy toolchain cannot be read or built."""


class ManifestPrepareError(CratesweepError):
    """Raised when a crate's Cargo.toml cannot be read or rewritten."""


class LintRunError(CratesweepError):
    """Raised when clippy fails on a crate or its output cannot be parsed."""


class ReportError(CratesweepError):
    """Raised when the lint report file cannot be written."""
