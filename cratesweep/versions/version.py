"""Version model and parser for crate releases.

Versions follow a restricted semver grammar::

    <major>.<minor>.<patch>[-<stream>.<number>][+<build>]

The pre-release part is a single ``stream.number`` token (e.g. ``rc.2``) and
the build metadata is an opaque string. Precedence is decided by the
``major.minor.patch`` triple alone: pre-release streams are not ordered
against each other and build metadata never takes part in comparisons.

Parsing never raises; malformed input yields ``None`` and callers decide
whether to skip, log, or abort.
"""

from pydantic import BaseModel, ConfigDict, Field

U16_MAX = 0xFFFF


class MainVersion(BaseModel):
    """The ``major.minor.patch`` triple, totally ordered."""

    model_config = ConfigDict(frozen=True)

    major: int = Field(ge=0, le=U16_MAX)
    minor: int = Field(ge=0, le=U16_MAX)
    patch: int = Field(ge=0, le=U16_MAX)

    @property
    def key(self) -> tuple[int, int, int]:
        return (self.major, self.minor, self.patch)

    def __lt__(self, other: "MainVersion") -> bool:
        return self.key < other.key

    def __le__(self, other: "MainVersion") -> bool:
        return self.key <= other.key

    def __gt__(self, other: "MainVersion") -> bool:
        return self.key > other.key

    def __ge__(self, other: "MainVersion") -> bool:
        return self.key >= other.key

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


class PreVersion(BaseModel):
    """A pre-release channel and its sequence number, e.g. ``beta.3``.

    Only equality is defined: channel names carry no inherent ordering.
    """

    model_config = ConfigDict(frozen=True)

    stream: str
    number: int = Field(ge=0, le=U16_MAX)

    def __str__(self) -> str:
        return f"{self.stream}.{self.number}"


class Version(BaseModel):
    """A crate version: main triple, optional pre-release, optional build metadata."""

    model_config = ConfigDict(frozen=True)

    main: MainVersion
    pre: PreVersion | None = None
    build: str | None = None

    @property
    def is_prerelease(self) -> bool:
        return self.pre is not None

    def __str__(self) -> str:
        return format_version(self)


def _parse_number(raw: str) -> int | None:
    # int() would also accept signs, whitespace, underscores and non-ASCII digits
    if not raw or not raw.isascii() or not raw.isdigit():
        return None
    value = int(raw)
    if value > U16_MAX:
        return None
    return value


def _split_build(raw: str) -> tuple[str, str | None]:
    head, sep, build = raw.partition("+")
    return head, (build if sep else None)


def parse_version(version_str: str) -> Version | None:
    """Parse a version string.

    The main triple is split on the first two dots. The remainder holds the
    patch number, then either ``+build`` directly or ``-stream.number``
    optionally followed by ``+build``: build metadata attaches to whichever
    of patch or pre-release number is being read when the ``+`` is found.

    Args:
        version_str: The raw version string (e.g. ``"1.2.3-rc.1+linux"``).

    Returns:
        The parsed Version, or None if the string does not match the grammar
        or a numeric component does not fit in 16 bits.
    """
    parts = version_str.split(".", maxsplit=2)
    if len(parts) < 3:
        return None

    major = _parse_number(parts[0])
    minor = _parse_number(parts[1])
    if major is None or minor is None:
        return None

    tail = parts[2]
    dash = tail.find("-")
    plus = tail.find("+")

    pre: PreVersion | None = None
    if dash == -1 or (plus != -1 and plus < dash):
        patch_str, build = _split_build(tail)
    else:
        patch_str = tail[:dash]
        stream, sep, number_part = tail[dash + 1 :].partition(".")
        if not sep:
            return None
        number_str, build = _split_build(number_part)
        number = _parse_number(number_str)
        if number is None:
            return None
        pre = PreVersion(stream=stream, number=number)

    patch = _parse_number(patch_str)
    if patch is None:
        return None

    return Version(
        main=MainVersion(major=major, minor=minor, patch=patch),
        pre=pre,
        build=build,
    )


def format_version(version: Version) -> str:
    """Render the canonical ``major.minor.patch[-stream.number][+build]`` form."""
    rendered = str(version.main)
    if version.pre is not None:
        rendered = f"{rendered}-{version.pre}"
    if version.build is not None:
        rendered = f"{rendered}+{version.build}"
    return rendered
