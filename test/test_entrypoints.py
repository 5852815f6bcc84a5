"""Tests for the desktop entrypoint and shared bootstrap"""

from unittest.mock import MagicMock, patch

from entrypoints import splash_app_core
from entrypoints.splash_app_linux import parse_args
from os_interfaces.base import InMemoryConfigStorage, NetworkMonitor, OSImplementations
from splash_gate.models import LaunchContext


class AlwaysOnline(NetworkMonitor):
  def is_available(self):
    return True


class TestParseArgs:
  def test_defaults(self):
    args = parse_args([])
    assert args.url is None
    assert args.offline is False

  def test_deep_link_and_offline(self):
    args = parse_args(["--url", "https://example.com/board/3", "--offline"])
    assert args.url == "https://example.com/board/3"
    assert args.offline is True


class TestRunSplashApp:
  @patch("entrypoints.splash_app_core.os._exit")
  @patch("os_interfaces.webview_host.webview")
  @patch("entrypoints.splash_app_core.webview")
  def test_starts_controller_and_exits(
    self, mock_webview, mock_host_webview, mock_exit, gate_config, tmp_path
  ):
    os_impl = OSImplementations(
      config_storage_cls=InMemoryConfigStorage,
      network_monitor_cls=AlwaysOnline,
      token_provider_factory=MagicMock(return_value=MagicMock()),
      open_external_url=MagicMock(),
      cache_dir=tmp_path,
    )
    context = LaunchContext(deep_link="https://example.com/x")

    splash_app_core.run_splash_app(os_impl=os_impl, context=context, config=gate_config)

    kwargs = mock_webview.start.call_args.kwargs
    assert kwargs["args"] == (context,)
    assert kwargs["func"].__self__.state.name == "IDLE"
    mock_host_webview.create_window.assert_called_once()
    mock_exit.assert_called_once_with(0)
