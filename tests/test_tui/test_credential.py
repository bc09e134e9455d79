# ABOUTME: Tests for the credential prompt screen
from unittest.mock import MagicMock

from mcpwire.models import EnvVar
from mcpwire.tui.credential import STATE_INPUT, STATE_SAVE, CredentialDoneMsg, CredentialScreen
from mcpwire.tui.screen import BackMsg, KeyMsg

TOKEN = EnvVar(
    name="GITHUB_TOKEN",
    description="GitHub personal access token",
    required=True,
    setup_url="https://github.com/settings/tokens",
    setup_hint="Grant repo access",
)
REGION = EnvVar(name="REGION", required=True)


def type_text(screen: CredentialScreen, text: str) -> None:
    for ch in text:
        screen.update(KeyMsg(ch))


class TestCredentialScreen:
    """Tests for CredentialScreen."""

    def test_nothing_missing_finishes_immediately(self, theme):
        """Test init emits the resolved values when no prompt is needed."""
        screen = CredentialScreen(theme, [], resolved={"A": "1"})
        assert screen.init()() == CredentialDoneMsg(resolved_env={"A": "1"})

    def test_masked_input_and_header(self, theme):
        """Test the prompt shows progress, description, URL and hint, and masks input."""
        screen = CredentialScreen(theme, [TOKEN, REGION])
        type_text(screen, "abc")

        view = screen.view()
        assert "[1/2] GITHUB_TOKEN required (GitHub personal access token)." in view
        assert "https://github.com/settings/tokens" in view
        assert "Grant repo access" in view
        assert "***" in view
        assert "abc" not in view

    def test_empty_submit_ignored(self, theme):
        screen = CredentialScreen(theme, [TOKEN])
        type_text(screen, "   ")
        assert screen.update(KeyMsg("enter")) is None
        assert screen.state == STATE_INPUT
        assert screen.index == 0

    def test_without_store_skips_save_step(self, theme):
        """Test values flow straight through when there is no credential store."""
        screen = CredentialScreen(theme, [TOKEN], resolved={"OTHER": "x"})
        type_text(screen, "tok")

        msg = screen.update(KeyMsg("enter"))()

        assert msg == CredentialDoneMsg(resolved_env={"OTHER": "x", "GITHUB_TOKEN": "tok"})

    def test_save_defaults_to_no(self, theme):
        store = MagicMock()
        screen = CredentialScreen(theme, [TOKEN], store_fn=store)
        type_text(screen, "tok")
        screen.update(KeyMsg("enter"))

        assert screen.state == STATE_SAVE
        assert "Value entered." in screen.view()
        msg = screen.update(KeyMsg("enter"))()

        store.assert_not_called()
        assert msg.resolved_env == {"GITHUB_TOKEN": "tok"}

    def test_save_yes_stores(self, theme):
        store = MagicMock()
        screen = CredentialScreen(theme, [TOKEN, REGION], store_fn=store)
        type_text(screen, "tok")
        screen.update(KeyMsg("enter"))
        screen.update(KeyMsg("right"))

        assert screen.update(KeyMsg("enter")) is None

        store.assert_called_once_with("GITHUB_TOKEN", "tok")
        assert screen.index == 1
        assert screen.state == STATE_INPUT
        assert screen.input.value == ""
        assert "[2/2] REGION required" in screen.view()

    def test_names_trimmed(self, theme):
        """Test padded variable names are stored and returned trimmed."""
        store = MagicMock()
        screen = CredentialScreen(theme, [EnvVar(name="  API_KEY ", required=True)], store_fn=store)
        type_text(screen, "k1")
        screen.update(KeyMsg("enter"))
        screen.update(KeyMsg("right"))

        msg = screen.update(KeyMsg("enter"))()

        store.assert_called_once_with("API_KEY", "k1")
        assert msg.resolved_env == {"API_KEY": "k1"}

    def test_store_failure_still_advances(self, theme):
        """Test a failing store is logged and the value is still used."""
        store = MagicMock(side_effect=OSError("disk full"))
        screen = CredentialScreen(theme, [TOKEN], store_fn=store)
        type_text(screen, "tok")
        screen.update(KeyMsg("enter"))
        screen.update(KeyMsg("l"))

        msg = screen.update(KeyMsg("enter"))()

        assert msg.resolved_env == {"GITHUB_TOKEN": "tok"}

    def test_esc_in_save_advances_without_storing(self, theme):
        store = MagicMock()
        screen = CredentialScreen(theme, [TOKEN], store_fn=store)
        type_text(screen, "tok")
        screen.update(KeyMsg("enter"))
        screen.update(KeyMsg("right"))

        msg = screen.update(KeyMsg("esc"))()

        store.assert_not_called()
        assert isinstance(msg, CredentialDoneMsg)

    def test_esc_in_input_goes_back(self, theme):
        screen = CredentialScreen(theme, [TOKEN])
        assert isinstance(screen.update(KeyMsg("esc"))(), BackMsg)

    def test_ctrl_o_opens_setup_url(self, theme):
        opener = MagicMock()
        screen = CredentialScreen(theme, [TOKEN], open_url_fn=opener)

        assert screen.update(KeyMsg("ctrl+o")) is None

        opener.assert_called_once_with("https://github.com/settings/tokens")
        assert any(h.desc == "open URL" for h in screen.status_hints())

    def test_ctrl_o_failure_is_not_fatal(self, theme):
        screen = CredentialScreen(theme, [TOKEN], open_url_fn=MagicMock(side_effect=RuntimeError("no browser")))
        assert screen.update(KeyMsg("ctrl+o")) is None

    def test_ctrl_o_without_url(self, theme):
        opener = MagicMock()
        screen = CredentialScreen(theme, [REGION], open_url_fn=opener)
        screen.update(KeyMsg("ctrl+o"))
        opener.assert_not_called()
        assert all(h.desc != "open URL" for h in screen.status_hints())

    def test_backspace_and_clear(self, theme):
        screen = CredentialScreen(theme, [TOKEN])
        type_text(screen, "abcd")
        screen.update(KeyMsg("backspace"))
        assert screen.input.value == "abc"
        screen.update(KeyMsg("ctrl+u"))
        assert screen.input.value == ""
