"""Latest-version tracking for crates.

A :class:`LatestVersionTracker` consumes the versions discovered for one
package, in the order they are observed, and keeps only what downstream
tooling should act on: the latest stable release, plus the latest
pre-release of every stream (``beta``, ``rc``, ...) belonging to the newest
pre-release group that is still ahead of that stable release.

Pre-release streams cannot be ordered against each other, so the tracker
keeps one entry per stream until a stable release, or a pre-release of a
newer ``major.minor.patch``, invalidates the whole group.

Trackers hold no shared state. :class:`VersionIndex` maps package names to
their own tracker and is owned by whichever aggregation step builds it, so
independent names can be aggregated separately. Pushes for a single name
must be applied in observation order: the algorithm is not commutative.
"""

import logging
from collections.abc import Iterator

from cratesweep.versions.identifier import PackageIdentifier
from cratesweep.versions.version import MainVersion, PreVersion, Version, parse_version

logger = logging.getLogger(__name__)


class LatestVersionTracker:
    """Latest stable version and surviving pre-release streams of one package."""

    def __init__(self) -> None:
        self._stable: tuple[MainVersion, str | None] | None = None
        self._pre_main: MainVersion | None = None
        self._pre_by_stream: list[tuple[PreVersion, str | None]] = []

    @property
    def stable(self) -> Version | None:
        if self._stable is None:
            return None
        main, build = self._stable
        return Version(main=main, build=build)

    @property
    def pre_main(self) -> MainVersion | None:
        return self._pre_main

    def push(self, version: Version) -> None:
        """Record an observed version.

        Versions older than the recorded stable release are ignored. A stable
        release equal to the recorded one replaces its build metadata (last
        write wins); an equal pre-release is ignored.

        Args:
            version: The observed version.
        """
        if self._stable is not None:
            stable_main = self._stable[0]
            if version.main < stable_main:
                return
            if version.main == stable_main:
                if version.pre is None:
                    self._stable = (stable_main, version.build)
                return

        if version.pre is not None:
            self._push_prerelease(version.main, version.pre, version.build)
            return

        self._stable = (version.main, version.build)
        if self._pre_main is not None and self._pre_main <= version.main:
            self._pre_main = None
            self._pre_by_stream.clear()

    def _push_prerelease(self, main: MainVersion, pre: PreVersion, build: str | None) -> None:
        if self._pre_main is None or main > self._pre_main:
            self._pre_main = main
            self._pre_by_stream.clear()
            self._pre_by_stream.append((pre, build))
            return

        if main < self._pre_main:
            return

        for index, (current, _current_build) in enumerate(self._pre_by_stream):
            if current.stream == pre.stream:
                if pre.number > current.number:
                    self._pre_by_stream[index] = (pre, build)
                return
        self._pre_by_stream.append((pre, build))

    def versions(self, *, sort_streams: bool = False) -> Iterator[Version]:
        """Iterate the currently relevant versions.

        Yields the stable version first (if any), then one version per
        pre-release stream in the order the streams were first established.

        Args:
            sort_streams: Order the pre-release streams by name instead.
        """
        stable = self.stable
        if stable is not None:
            yield stable

        if self._pre_main is None:
            return
        entries = list(self._pre_by_stream)
        if sort_streams:
            entries.sort(key=lambda entry: entry[0].stream)
        for pre, build in entries:
            yield Version(main=self._pre_main, pre=pre, build=build)

    def resolve(self, name: str, *, sort_streams: bool = False) -> Iterator[PackageIdentifier]:
        """Iterate the identifiers downstream tooling should act on.

        Recomputed from the current state on every call; never mutates the tracker.

        Args:
            name: The package name the tracked versions belong to.
            sort_streams: Order the pre-release streams by name instead of
                by first establishment.
        """
        for version in self.versions(sort_streams=sort_streams):
            yield PackageIdentifier(name=name, version=version)


class VersionIndex:
    """Mapping from package name to its :class:`LatestVersionTracker`."""

    def __init__(self) -> None:
        self._trackers: dict[str, LatestVersionTracker] = {}

    def __len__(self) -> int:
        return len(self._trackers)

    def __contains__(self, name: object) -> bool:
        return name in self._trackers

    def names(self) -> list[str]:
        return list(self._trackers)

    def tracker(self, name: str) -> LatestVersionTracker | None:
        return self._trackers.get(name)

    def push(self, name: str, version: Version) -> None:
        tracker = self._trackers.get(name)
        if tracker is None:
            tracker = LatestVersionTracker()
            self._trackers[name] = tracker
        tracker.push(version)

    def push_raw(self, name: str, version_str: str) -> bool:
        """Parse and record a version string.

        Returns:
            False if the string is not a valid version (nothing is recorded).
        """
        version = parse_version(version_str)
        if version is None:
            logger.debug("Skipping unparseable version %r for package %r", version_str, name)
            return False
        self.push(name, version)
        return True

    def resolve(self, *, sort_streams: bool = False) -> Iterator[PackageIdentifier]:
        """Iterate the relevant identifiers of every package, in insertion order."""
        for name, tracker in self._trackers.items():
            yield from tracker.resolve(name, sort_streams=sort_streams)
