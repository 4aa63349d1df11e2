"""Strict X.Y.Z version parsing and comparison."""

from typing import NamedTuple

from .errors import VersionParseError


class SemVer(NamedTuple):
    """Semantic version representation."""

    major: int
    minor: int
    patch: int

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


_COMPONENTS = ("major", "minor", "patch")


def parse_version(version: str) -> SemVer:
    """
    Parse a version string into its major, minor and patch values.

    Raises:
        VersionParseError: if the string does not split into exactly three
            dot-separated non-negative integers. Pre-release and build
            suffixes are rejected, not truncated.
    """
    pieces = version.split(".")
    if len(pieces) != 3:
        raise VersionParseError(
            f"failed to parse version {version!r}: not in the form X.Y.Z"
        )

    values = []
    for component, piece in zip(_COMPONENTS, pieces):
        # int() would also accept "+1", " 1" and "1_0"
        if not piece.isascii() or not piece.isdigit():
            raise VersionParseError(
                f"failed to parse version {version!r}: bad {component} version {piece!r}"
            )
        values.append(int(piece))

    return SemVer(*values)


def compare_versions(a: str, b: str) -> int:
    """Return -1 if a < b, 0 if a == b and 1 if a > b."""
    parsed_a = parse_version(a)
    parsed_b = parse_version(b)
    if parsed_a < parsed_b:
        return -1
    if parsed_a > parsed_b:
        return 1
    return 0
