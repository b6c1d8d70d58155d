from pydantic import BaseModel, ConfigDict, Field

from cratesweep.versions.version import Version, parse_version

CRATE_ARCHIVE_SUFFIX = ".crate"


class PackageIdentifier(BaseModel):
    """A package name paired with one of its versions.

    The string form ``{name}-{version}`` names cached archives
    (``serde-1.0.130.crate``) and addresses a specific package instance, so it
    must stay byte-stable across parse and display.

    Parsing picks the rightmost hyphen whose suffix is a valid version, since
    names may contain hyphens and the version itself uses one to introduce
    its pre-release part. A name that ends in a version-like segment
    (``codec-1.0.0`` at ``2.0.0``) is split at the rightmost parseable hyphen,
    which is the intended reading in practice but remains a heuristic.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    version: Version

    def __str__(self) -> str:
        return f"{self.name}-{self.version}"

    @property
    def archive_name(self) -> str:
        """File name of the cached archive, e.g. ``serde-1.0.130.crate``."""
        return f"{self}{CRATE_ARCHIVE_SUFFIX}"

    @property
    def requirement(self) -> str:
        """Dependency line for a Cargo manifest, e.g. ``serde = "1.0.130"``."""
        return f'{self.name} = "{self.version}"'

    @classmethod
    def parse(cls, raw: str) -> "PackageIdentifier | None":
        """Split a combined ``name-version`` string.

        Args:
            raw: The combined string, e.g. ``"tokio-util-0.7.0-alpha.1"``.

        Returns:
            The identifier, or None if no hyphen is followed by a valid version
            or the name part would be empty.
        """
        position = len(raw)
        while True:
            position = raw.rfind("-", 0, position)
            if position == -1:
                return None
            version = parse_version(raw[position + 1 :])
            if version is not None:
                break

        if position == 0:
            return None
        return cls(name=raw[:position], version=version)

    @classmethod
    def from_file_name(cls, file_name: str) -> "PackageIdentifier | None":
        """Parse the identifier out of a cached archive file name.

        Args:
            file_name: A file name such as ``"serde-1.0.130.crate"``.

        Returns:
            The identifier, or None if the name lacks the ``.crate`` suffix or
            does not contain a valid ``name-version`` stem.
        """
        if not file_name.endswith(CRATE_ARCHIVE_SUFFIX):
            return None
        return cls.parse(file_name.removesuffix(CRATE_ARCHIVE_SUFFIX))
