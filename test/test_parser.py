"""Tests for the appInfo payload parser"""

import pytest

from splash_gate.exceptions import ParseFailure
from splash_gate.models import (
  SENTINEL,
  ConfigDocument,
  NoticeButtonMode,
  UpdatePolicy,
)
from splash_gate.parser import parse_config

FULL_XML = """<?xml version="1.0" encoding="utf-8"?>
<appinfo>
  <delay_time>2000</delay_time>
  <bg_image>/files/splash/bg.png</bg_image>
  <bg_name>bg.png</bg_name>
  <app_use>1</app_use>
  <app_version>1.5.0</app_version>
  <update_title>New version</update_title>
  <update_desc>Please update|@|Thanks</update_desc>
  <app_update>1</app_update>
  <noti_use>1</noti_use>
  <noti_title>Maintenance</noti_title>
  <noti_desc>Back soon</noti_desc>
  <app_btn>confirm</app_btn>
</appinfo>
"""

FULL_JSON = """{
  "delay_time": "2000",
  "bg_image": "/files/splash/bg.png",
  "bg_name": "bg.png",
  "app_use": "1",
  "app_version": "1.5.0",
  "update_title": "New version",
  "update_desc": "Please update",
  "app_update": "0",
  "noti_use": "-99",
  "noti_title": "-99",
  "noti_desc": "-99",
  "app_btn": "-99",
  "app_id": "123456789"
}"""


class TestXmlPayload:
  """XML payloads (Android endpoint)"""

  def test_full_document(self):
    doc = parse_config(FULL_XML.encode("utf-8"))
    assert doc.delay_ms == 2000
    assert doc.background_image_path == "/files/splash/bg.png"
    assert doc.background_image_name == "bg.png"
    assert doc.app_usable is True
    assert doc.remote_version == "1.5.0"
    assert doc.update_required is UpdatePolicy.MANDATORY
    assert doc.update_body == "Please update|@|Thanks"
    assert doc.notice_enabled is True
    assert doc.notice_button_mode is NoticeButtonMode.CONTINUE
    assert doc.store_app_id == SENTINEL
    assert doc.has_notice
    assert doc.has_version_gate

  def test_missing_fields_take_defaults(self):
    doc = parse_config(b"<appinfo><app_use>1</app_use></appinfo>")
    assert doc == ConfigDocument()
    assert doc.delay_ms == 3000
    assert doc.update_required is UpdatePolicy.NONE
    assert not doc.has_background_image
    assert not doc.has_notice

  @pytest.mark.parametrize(
    "app_btn, mode",
    [
      ("<app_btn>confirm</app_btn>", NoticeButtonMode.CONTINUE),
      ("<app_btn>close</app_btn>", NoticeButtonMode.CLOSE),
      ("<app_btn>-99</app_btn>", None),
      ("", None),
    ],
  )
  def test_notice_button(self, app_btn, mode):
    raw = f"<r><noti_use>1</noti_use><noti_title>Hi</noti_title><noti_desc>Body</noti_desc>{app_btn}</r>"
    doc = parse_config(raw.encode("utf-8"))
    assert doc.notice_button_mode is mode
    assert doc.has_notice is (mode is not None)

  def test_nested_tags_are_found(self):
    doc = parse_config(b"<root><data><delay_time>1500</delay_time></data></root>")
    assert doc.delay_ms == 1500

  def test_empty_tag_becomes_sentinel(self):
    doc = parse_config(b"<r><app_version></app_version><bg_image>  </bg_image></r>")
    assert doc.remote_version == SENTINEL
    assert doc.background_image_path == SENTINEL

  def test_utf8_bom_is_ignored(self):
    raw = "\ufeff<r><noti_title>공지</noti_title></r>".encode("utf-8")
    assert parse_config(raw).notice_title == "공지"


class TestJsonPayload:
  """JSON payloads (iOS endpoint)"""

  def test_string_numerics(self):
    doc = parse_config(FULL_JSON)
    assert doc.delay_ms == 2000
    assert doc.update_required is UpdatePolicy.OPTIONAL
    assert doc.notice_enabled is False
    assert doc.store_app_id == "123456789"

  def test_native_numbers(self):
    doc = parse_config(b'{"delay_time": 1200, "app_use": -1, "app_update": -99}')
    assert doc.delay_ms == 1200
    assert doc.app_usable is False
    assert doc.update_required is UpdatePolicy.NONE

  def test_unknown_keys_ignored(self):
    doc = parse_config(b'{"delay_time": 100, "something_else": [1, 2]}')
    assert doc.delay_ms == 100

  def test_null_and_wrong_types_fall_back(self):
    doc = parse_config(
      b'{"delay_time": "soon", "app_use": true, "noti_title": null, "app_version": 2}'
    )
    assert doc.delay_ms == 3000
    assert doc.app_usable is True
    assert doc.notice_title == SENTINEL
    assert doc.remote_version == "2"

  def test_negative_delay_uses_default(self):
    assert parse_config(b'{"delay_time": -5}').delay_ms == 3000


class TestAppUsable:
  """app_usable is false iff app_use == -1"""

  @pytest.mark.parametrize("app_use", [-99, -2, 0, 1, 2, 7, 1000])
  def test_usable_unless_minus_one(self, app_use):
    doc = parse_config(f'{{"app_use": {app_use}}}')
    assert doc.app_usable is True

  def test_minus_one_disables(self):
    assert parse_config(b"<r><app_use>-1</app_use></r>").app_usable is False


class TestUpdatePolicy:
  @pytest.mark.parametrize(
    "raw, expected",
    [
      (-99, UpdatePolicy.NONE),
      (1, UpdatePolicy.MANDATORY),
      (0, UpdatePolicy.OPTIONAL),
      (2, UpdatePolicy.OPTIONAL),
    ],
  )
  def test_mapping(self, raw, expected):
    assert parse_config(f'{{"app_update": {raw}}}').update_required is expected

  def test_version_gate_needs_a_version(self):
    doc = parse_config(b'{"app_update": 1, "app_version": "-99"}')
    assert not doc.has_version_gate


class TestMalformedPayloads:
  """Nothing but ParseFailure escapes the parser"""

  @pytest.mark.parametrize(
    "raw",
    [
      b"",
      b"   ",
      b"<appinfo><delay_time>1</appinfo>",
      b"{not json",
      b"[1, 2, 3]",
      b"plain text",
      b"\xff\xfe\x00garbage",
    ],
  )
  def test_raises_parse_failure(self, raw):
    with pytest.raises(ParseFailure) as exc_info:
      parse_config(raw)
    assert exc_info.value.source == "parse"

  def test_error_names(self):
    with pytest.raises(ParseFailure) as exc_info:
      parse_config(b"{broken")
    assert exc_info.value.name == "JSON_MALFORMED"
    assert exc_info.value.caused_by.startswith("JSONDecodeError")

    with pytest.raises(ParseFailure) as exc_info:
      parse_config(b"[]")
    assert exc_info.value.name == "UNKNOWN_PAYLOAD"
