class PomodoroError(Exception):
    """Base exception for the countdown and cycle engine."""


class InvalidTransitionError(PomodoroError):
    """Raised when an action is not permitted in the current timer state."""

    def __init__(self, action: str, state: str):
        super().__init__(f"Cannot {action} timer while {state}")
        self.action = action
        self.state = state


class SequencerDisposedError(PomodoroError):
    """Raised when a disposed phase sequencer is used again."""

    def __init__(self, action: str):
        super().__init__(f"Cannot {action}: phase sequencer has been disposed")
        self.action = action
