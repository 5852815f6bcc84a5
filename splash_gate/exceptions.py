"""
Custom exceptions for the splash gate
"""

from typing import Literal, Optional


# All possible error sources in the splash flow
ErrorSource = Literal[
  "transport",  # Timeouts, connection errors, non-200 responses
  "parse",  # Malformed config payloads
  "decode",  # Image bytes that are not an image
  "permission",  # Collaborator-reported permission denials
  "unknown",  # Uncategorized errors
]


class GateError(Exception):
  """
  Base class for splash gate errors.
  Carries a stable identifier and the subsystem it came from so log lines
  can be grouped without parsing messages.
  """

  source: ErrorSource = "unknown"

  def __init__(
    self,
    description: str,
    name: str = "GATE_ERROR",
    source: Optional[ErrorSource] = None,
    caused_by: Optional[str] = None,
  ):
    """
    Initialize a gate error

    Args:
        description: Human-readable error message
        name: Unique error identifier (e.g., "HTTP_STATUS")
        source: Where the error originated from; defaults to the class source
        caused_by: Original error details if this wraps another error
    """
    self.description: str = description
    self.name: str = name
    if source is not None:
      self.source = source
    self.caused_by: Optional[str] = caused_by
    super().__init__(description)

  @classmethod
  def from_exception(
    cls,
    e: Exception,
    name: str,
    context: Optional[str] = None,
  ) -> "GateError":
    """
    Create an error of this class from an existing exception

    Args:
        e: The original exception
        name: Error identifier for this error
        context: Additional context to prepend to the description

    Returns:
        Error with original exception details preserved
    """
    original_msg = str(e)
    description = f"{context}: {original_msg}" if context else original_msg

    return cls(
      description=description,
      name=name,
      caused_by=f"{e.__class__.__name__}: {original_msg}",
    )


class TransportFailure(GateError):
  source: ErrorSource = "transport"


class ParseFailure(GateError):
  source: ErrorSource = "parse"


class DecodeFailure(GateError):
  source: ErrorSource = "decode"


class PermissionDenied(GateError):
  source: ErrorSource = "permission"
