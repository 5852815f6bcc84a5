"""
Splash decision state machine

Given the remote ConfigDocument (or none) and the launch context, decides
whether the app proceeds, is blocked, or must first show an update or
notice dialog. Dialog outcomes are fed back through resolve().

Order of checks once a document is available:
  1. no document        -> PROCEEDING with the default delay
  2. app not usable     -> BLOCKED
  3. version differs    -> UPDATE_PROMPT (mandatory or optional)
  4. notice configured  -> NOTICE_PROMPT
  5. otherwise          -> PROCEEDING
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional

from .config import GateConfig
from .models import (
  ButtonId,
  ConfigDocument,
  DialogButton,
  DialogKind,
  DialogRequest,
  DialogResult,
  LaunchContext,
  NoticeButtonMode,
  UpdatePolicy,
)
from .version import VersionMatch, compare_versions

logger = logging.getLogger(__name__)


class SplashState(Enum):
  IDLE = auto()
  DECIDING = auto()
  UPDATE_PROMPT = auto()
  NOTICE_PROMPT = auto()
  PROCEEDING = auto()
  BLOCKED = auto()
  OFFLINE = auto()


class BlockReason(Enum):
  APP_DISABLED = auto()
  UPDATE_REQUIRED = auto()
  UPDATE_SELECTED = auto()
  NOTICE_CLOSED = auto()


_TRANSITIONS = {
  SplashState.IDLE: {SplashState.DECIDING, SplashState.OFFLINE},
  SplashState.DECIDING: {
    SplashState.BLOCKED,
    SplashState.UPDATE_PROMPT,
    SplashState.NOTICE_PROMPT,
    SplashState.PROCEEDING,
  },
  SplashState.UPDATE_PROMPT: {
    SplashState.NOTICE_PROMPT,
    SplashState.PROCEEDING,
    SplashState.BLOCKED,
  },
  SplashState.NOTICE_PROMPT: {SplashState.PROCEEDING, SplashState.BLOCKED},
  SplashState.PROCEEDING: set(),
  SplashState.BLOCKED: set(),
  SplashState.OFFLINE: set(),
}

TERMINAL_STATES = frozenset(
  state for state, targets in _TRANSITIONS.items() if not targets
)


@dataclass(frozen=True)
class Decision:
  """What the host has to do next"""

  state: SplashState
  delay_ms: Optional[int] = None
  dialog: Optional[DialogRequest] = None
  store_url: Optional[str] = None
  reason: Optional[BlockReason] = None

  @property
  def terminal(self) -> bool:
    return self.state in TERMINAL_STATES


class DecisionEngine:
  """State machine for one launch; not reusable across launches"""

  def __init__(self, config: GateConfig, local_version: Optional[str] = None):
    self._config = config
    self._local_version = config.APP_VERSION if local_version is None else local_version
    self._state = SplashState.IDLE
    self._document: Optional[ConfigDocument] = None
    self._context = LaunchContext()
    self._current: Optional[Decision] = None

  @property
  def state(self) -> SplashState:
    return self._state

  @property
  def current(self) -> Optional[Decision]:
    return self._current

  def _move(self, target: SplashState) -> bool:
    if target not in _TRANSITIONS[self._state]:
      logger.warning("Invalid state transition: %s --> %s", self._state, target)
      return False
    logger.debug("Splash state: %s --> %s", self._state, target)
    self._state = target
    return True

  def _emit(self, decision: Decision) -> Decision:
    if self._move(decision.state):
      self._current = decision
    return self._current if self._current is not None else Decision(self._state)

  # ---- entry points ----
  def begin(self) -> SplashState:
    """IDLE -> DECIDING; the config fetch is under way"""
    self._move(SplashState.DECIDING)
    return self._state

  def offline(self) -> Decision:
    """No network at launch: forced-exit notice, distinct from BLOCKED"""
    dialog = DialogRequest.build(
      DialogKind.NO_CONNECTION,
      self._config.NOTICE_TITLE,
      self._config.NO_CONNECTION_MESSAGE,
      (DialogButton(ButtonId.EXIT, self._config.LABEL_EXIT),),
    )
    return self._emit(Decision(SplashState.OFFLINE, dialog=dialog))

  def decide(
    self, document: Optional[ConfigDocument], context: LaunchContext
  ) -> Decision:
    """
    Decide the next step from one config document

    Args:
      document: Parsed config, or None when fetch or parse failed
      context: Launch context (pending deep link, network state)

    Returns:
      Decision for the host to act on
    """
    if self._state is SplashState.IDLE:
      self.begin()
    if self._state is not SplashState.DECIDING:
      logger.warning("decide() called in state %s; ignoring", self._state)
      return self._current or Decision(self._state)

    self._document = document
    self._context = context

    if document is None:
      logger.info("No config document; proceeding with default delay")
      return self._emit(self._proceeding())

    if not document.app_usable:
      logger.info("App disabled by remote config")
      return self._emit(self._app_disabled())

    if document.has_version_gate:
      match = compare_versions(self._local_version, document.remote_version)
      logger.info(
        f"Version check: local={self._local_version.strip()}, "
        f"remote={document.remote_version.strip()}, result={match.value}"
      )
      if match is VersionMatch.DIFFERENT:
        return self._emit(self._update_prompt(document))

    return self._emit(self._after_version_gate(document))

  def resolve(self, result: DialogResult) -> Decision:
    """Feed back the outcome of the dialog shown for the current decision"""
    document = self._document
    if document is None or self._state not in (
      SplashState.UPDATE_PROMPT,
      SplashState.NOTICE_PROMPT,
    ):
      logger.warning("resolve() called in state %s; ignoring", self._state)
      return self._current or Decision(self._state)

    if self._state is SplashState.UPDATE_PROMPT:
      if document.update_required is UpdatePolicy.MANDATORY:
        # Every way out of a mandatory update leads to the store
        return self._emit(self._to_store(document, BlockReason.UPDATE_REQUIRED))
      if result.button_id is ButtonId.UPDATE:
        return self._emit(self._to_store(document, BlockReason.UPDATE_SELECTED))
      return self._emit(self._after_version_gate(document))

    # NOTICE_PROMPT: a dismissal counts as pressing the only button
    if document.notice_button_mode is NoticeButtonMode.CONTINUE:
      return self._emit(self._proceeding())
    return self._emit(Decision(SplashState.BLOCKED, reason=BlockReason.NOTICE_CLOSED))

  # ---- builders ----
  def _after_version_gate(self, document: ConfigDocument) -> Decision:
    if document.has_notice:
      return self._notice_prompt(document)
    return self._proceeding()

  def proceed_delay_ms(self) -> int:
    if self._context.has_deep_link:
      return self._config.PUSH_SPLASH_DELAY_MS
    if self._document is not None:
      return self._document.delay_ms
    return self._config.DEFAULT_SPLASH_DELAY_MS

  def _proceeding(self) -> Decision:
    return Decision(SplashState.PROCEEDING, delay_ms=self.proceed_delay_ms())

  def _app_disabled(self) -> Decision:
    dialog = DialogRequest.build(
      DialogKind.APP_DISABLED,
      self._config.NOTICE_TITLE,
      self._config.APP_DISABLED_MESSAGE,
      (DialogButton(ButtonId.EXIT, self._config.LABEL_EXIT),),
    )
    return Decision(SplashState.BLOCKED, dialog=dialog, reason=BlockReason.APP_DISABLED)

  def _update_prompt(self, document: ConfigDocument) -> Decision:
    buttons = [DialogButton(ButtonId.UPDATE, self._config.LABEL_UPDATE)]
    if document.update_required is UpdatePolicy.OPTIONAL:
      buttons.append(DialogButton(ButtonId.KEEP_USING, self._config.LABEL_KEEP_USING))
    dialog = DialogRequest.build(
      DialogKind.UPDATE, document.update_title, document.update_body, tuple(buttons)
    )
    return Decision(SplashState.UPDATE_PROMPT, dialog=dialog)

  def _notice_prompt(self, document: ConfigDocument) -> Decision:
    if document.notice_button_mode is NoticeButtonMode.CONTINUE:
      button = DialogButton(ButtonId.CONTINUE, self._config.LABEL_CONTINUE)
    else:
      button = DialogButton(ButtonId.EXIT, self._config.LABEL_EXIT)
    dialog = DialogRequest.build(
      DialogKind.NOTICE, document.notice_title, document.notice_body, (button,)
    )
    return Decision(SplashState.NOTICE_PROMPT, dialog=dialog)

  def _to_store(self, document: ConfigDocument, reason: BlockReason) -> Decision:
    return Decision(
      SplashState.BLOCKED,
      store_url=self._config.store_url(document.store_app_id),
      reason=reason,
    )
