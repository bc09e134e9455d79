# Interactive wizard package
from mcpwire.tui.app import Callbacks, WizardModel, WizardState
from mcpwire.tui.program import Program


def run_wizard(callbacks: Callbacks, version: str = "") -> None:
    """Run the wizard on the current terminal until the user quits."""
    Program(WizardModel(callbacks, version=version)).run()


__all__ = ["Callbacks", "Program", "WizardModel", "WizardState", "run_wizard"]
