# Single-line text input used for search and credential entry
from mcpwire.tui.theme import Theme


class TextInput:
    """Minimal line editor fed with normalised key names.

    ABOUTME: Printable single characters are appended, backspace deletes
    ABOUTME: Masked inputs echo '*' for every character
    """

    def __init__(
        self,
        prompt: str = "",
        placeholder: str = "",
        char_limit: int = 0,
        masked: bool = False,
    ) -> None:
        self.prompt = prompt
        self.placeholder = placeholder
        self.char_limit = char_limit
        self.masked = masked
        self._value = ""

    @property
    def value(self) -> str:
        return self._value

    def set_value(self, value: str) -> None:
        self._value = value[: self.char_limit] if self.char_limit else value

    def reset(self) -> None:
        self._value = ""

    def handle_key(self, key: str) -> bool:
        """Apply a key; return True when the value changed."""
        before = self._value
        if key == "backspace":
            self._value = self._value[:-1]
        elif key == "ctrl+u":
            self._value = ""
        elif len(key) == 1 and key.isprintable():
            if not self.char_limit or len(self._value) < self.char_limit:
                self._value += key
        return self._value != before

    def view(self, theme: Theme) -> str:
        if not self._value and self.placeholder:
            return self.prompt + theme.dim.render(self.placeholder)
        shown = "*" * len(self._value) if self.masked else self._value
        return self.prompt + shown + theme.dim.render("_")
