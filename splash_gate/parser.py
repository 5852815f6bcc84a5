"""
Config payload parser
Turns the appInfo response (XML on one shell, JSON on the other) into a
ConfigDocument. The format is picked from the payload shape.
"""

import json
import logging
import xml.etree.ElementTree as ET
from typing import Any

from pydantic import BaseModel, ValidationError, field_validator

from .exceptions import ParseFailure
from .models import (
  DEFAULT_DELAY_MS,
  SENTINEL,
  SENTINEL_INT,
  ConfigDocument,
  NoticeButtonMode,
  UpdatePolicy,
)

logger = logging.getLogger(__name__)

_TEXT_FIELDS = (
  "bg_image",
  "bg_name",
  "app_version",
  "update_title",
  "update_desc",
  "noti_title",
  "noti_desc",
  "app_btn",
  "app_id",
)

_INT_DEFAULTS = {
  "delay_time": DEFAULT_DELAY_MS,
  "app_use": 1,
  "app_update": SENTINEL_INT,
  "noti_use": SENTINEL_INT,
}


def _coerce_int(value: Any, default: int) -> int:
  """Accept ints, integral floats and numeric strings; anything else is default"""
  match value:
    case bool():
      return default
    case int():
      return value
    case float() if value.is_integer():
      return int(value)
    case str():
      try:
        return int(value.strip())
      except ValueError:
        return default
    case _:
      return default


def _coerce_text(value: Any) -> str:
  match value:
    case bool() | None:
      return SENTINEL
    case int() | float():
      return str(value)
    case str():
      text = value.strip()
      return text if text else SENTINEL
    case _:
      return SENTINEL


class ConfigPayload(BaseModel):
  """Wire view of the appInfo response, with per-field defaults applied"""

  delay_time: int = DEFAULT_DELAY_MS
  bg_image: str = SENTINEL
  bg_name: str = SENTINEL
  app_use: int = 1
  app_version: str = SENTINEL
  update_title: str = SENTINEL
  update_desc: str = SENTINEL
  app_update: int = SENTINEL_INT
  noti_use: int = SENTINEL_INT
  noti_title: str = SENTINEL
  noti_desc: str = SENTINEL
  app_btn: str = SENTINEL
  app_id: str = SENTINEL

  @field_validator(*_INT_DEFAULTS.keys(), mode="before")
  @classmethod
  def parse_int(cls, v, info):
    """Numeric fields may arrive as strings ("3000")"""
    return _coerce_int(v, _INT_DEFAULTS[info.field_name])

  @field_validator("delay_time")
  @classmethod
  def clamp_delay(cls, v: int) -> int:
    return v if v >= 0 else DEFAULT_DELAY_MS

  @field_validator(*_TEXT_FIELDS, mode="before")
  @classmethod
  def parse_text(cls, v):
    """Missing or empty strings become the -99 sentinel"""
    return _coerce_text(v)

  def to_document(self) -> ConfigDocument:
    return ConfigDocument(
      delay_ms=self.delay_time,
      background_image_path=self.bg_image,
      background_image_name=self.bg_name,
      app_usable=self.app_use != -1,
      remote_version=self.app_version,
      update_required=UpdatePolicy.from_raw(self.app_update),
      update_title=self.update_title,
      update_body=self.update_desc,
      notice_enabled=self.noti_use == 1,
      notice_title=self.noti_title,
      notice_body=self.noti_desc,
      notice_button_mode=NoticeButtonMode.from_raw(self.app_btn),
      store_app_id=self.app_id,
    )


_KNOWN_KEYS = frozenset(ConfigPayload.model_fields)


def _fields_from_xml(text: str) -> dict[str, str]:
  """Collect known tags from anywhere in the tree; the last occurrence wins"""
  root = ET.fromstring(text)
  fields: dict[str, str] = {}
  for element in root.iter():
    if element.tag in _KNOWN_KEYS:
      fields[element.tag] = (element.text or "").strip()
  return fields


def _fields_from_json(text: str) -> dict[str, Any]:
  data = json.loads(text)
  if not isinstance(data, dict):
    raise ParseFailure(
      f"Expected a JSON object, got {type(data).__name__}", name="JSON_NOT_OBJECT"
    )
  return {key: value for key, value in data.items() if key in _KNOWN_KEYS}


def _decode(raw: bytes | str) -> str:
  if isinstance(raw, str):
    text = raw
  else:
    try:
      text = raw.decode("utf-8")
    except UnicodeDecodeError as e:
      raise ParseFailure.from_exception(e, "BODY_NOT_UTF8", "Config body is not UTF-8")
  return text.lstrip("\ufeff").strip()


def parse_config(raw: bytes | str) -> ConfigDocument:
  """
  Parse an appInfo payload into a ConfigDocument

  Args:
    raw: Response body, XML or JSON

  Returns:
    ConfigDocument with defaults applied to missing fields

  Raises:
    ParseFailure: On any malformed payload; nothing else escapes
  """
  try:
    text = _decode(raw)
    if text.startswith("<"):
      fields = _fields_from_xml(text)
    elif text.startswith("{"):
      fields = _fields_from_json(text)
    else:
      raise ParseFailure(
        f"Unrecognized payload shape: {text[:40]!r}", name="UNKNOWN_PAYLOAD"
      )
    document = ConfigPayload(**fields).to_document()
  except ParseFailure:
    raise
  except ET.ParseError as e:
    raise ParseFailure.from_exception(e, "XML_MALFORMED", "Invalid XML config")
  except json.JSONDecodeError as e:
    raise ParseFailure.from_exception(e, "JSON_MALFORMED", "Invalid JSON config")
  except ValidationError as e:
    raise ParseFailure.from_exception(e, "PAYLOAD_INVALID", "Config failed validation")
  except Exception as e:
    logger.exception("Unexpected error while parsing config")
    raise ParseFailure.from_exception(e, "PARSE_ERROR", "Config parsing failed")

  logger.debug(
    f"Parsed config: delay={document.delay_ms}, usable={document.app_usable}, "
    f"version={document.remote_version}, update={document.update_required.value}"
  )
  return document
