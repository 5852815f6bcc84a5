"""
Config document and decision models for the splash flow
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

SENTINEL = "-99"
SENTINEL_INT = -99
LINE_BREAK_MARKER = "|@|"

DEFAULT_DELAY_MS = 3000


def is_present(value: str) -> bool:
  """True when a payload string carries real content"""
  return bool(value) and value.strip() != "" and value != SENTINEL


def expand_line_breaks(text: str) -> str:
  """Expand the server's |@| marker into newlines for display"""
  return text.replace(LINE_BREAK_MARKER, "\n")


class UpdatePolicy(str, Enum):
  NONE = "none"
  OPTIONAL = "optional"
  MANDATORY = "mandatory"

  @classmethod
  def from_raw(cls, value: int) -> "UpdatePolicy":
    if value == SENTINEL_INT:
      return cls.NONE
    if value == 1:
      return cls.MANDATORY
    return cls.OPTIONAL


class NoticeButtonMode(str, Enum):
  CONTINUE = "continue"
  CLOSE = "close"

  @classmethod
  def from_raw(cls, value: str) -> Optional["NoticeButtonMode"]:
    """None when the server sent no button (sentinel or empty)"""
    if not is_present(value):
      return None
    return cls.CONTINUE if value.strip() == "confirm" else cls.CLOSE


class ConfigDocument(BaseModel):
  """Remote splash configuration, normalized. Built once per launch."""

  model_config = ConfigDict(frozen=True)

  delay_ms: int = Field(DEFAULT_DELAY_MS, ge=0)
  background_image_path: str = SENTINEL
  background_image_name: str = SENTINEL
  app_usable: bool = True
  remote_version: str = SENTINEL
  update_required: UpdatePolicy = UpdatePolicy.NONE
  update_title: str = SENTINEL
  update_body: str = SENTINEL
  notice_enabled: bool = False
  notice_title: str = SENTINEL
  notice_body: str = SENTINEL
  notice_button_mode: Optional[NoticeButtonMode] = None
  store_app_id: str = SENTINEL

  @property
  def has_background_image(self) -> bool:
    return is_present(self.background_image_path)

  @property
  def has_version_gate(self) -> bool:
    return is_present(self.remote_version) and self.update_required is not UpdatePolicy.NONE

  @property
  def has_notice(self) -> bool:
    return (
      self.notice_enabled
      and is_present(self.notice_title)
      and is_present(self.notice_body)
      and self.notice_button_mode is not None
    )


@dataclass(frozen=True)
class LaunchContext:
  """What the host knows at launch"""

  deep_link: Optional[str] = None
  network_available: bool = True
  registration_token: Optional[str] = None

  @property
  def has_deep_link(self) -> bool:
    return bool(self.deep_link and self.deep_link.strip())


class DialogKind(str, Enum):
  UPDATE = "update"
  NOTICE = "notice"
  APP_DISABLED = "app_disabled"
  NO_CONNECTION = "no_connection"


class ButtonId(str, Enum):
  UPDATE = "update"
  KEEP_USING = "keep_using"
  CONTINUE = "continue"
  EXIT = "exit"


@dataclass(frozen=True)
class DialogButton:
  id: ButtonId
  label: str


@dataclass(frozen=True)
class DialogRequest:
  """Request for the dialog collaborator. Text is ready for display."""

  kind: DialogKind
  title: str
  body: str
  buttons: tuple[DialogButton, ...]

  @classmethod
  def build(
    cls, kind: DialogKind, title: str, body: str, buttons: tuple[DialogButton, ...]
  ) -> "DialogRequest":
    return cls(
      kind=kind,
      title=expand_line_breaks(title) if is_present(title) else "",
      body=expand_line_breaks(body) if is_present(body) else "",
      buttons=buttons,
    )

  def button_ids(self) -> tuple[ButtonId, ...]:
    return tuple(button.id for button in self.buttons)


@dataclass(frozen=True)
class DialogResult:
  """Which button was pressed; None means dismissed (outside tap, back)"""

  button_id: Optional[ButtonId] = None

  @property
  def dismissed(self) -> bool:
    return self.button_id is None
