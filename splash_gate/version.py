"""Local vs remote version comparison."""

from enum import Enum


class VersionMatch(str, Enum):
  EQUAL = "equal"
  DIFFERENT = "different"


def compare_versions(local: str, remote: str) -> VersionMatch:
  """Whitespace-insensitive string equality.

  There is no semantic ordering: any change of the server string, up or
  down, counts as a different version.
  """
  if (local or "").strip() == (remote or "").strip():
    return VersionMatch.EQUAL
  return VersionMatch.DIFFERENT
