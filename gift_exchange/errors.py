"""Error codes returned to clients in action acknowledgements."""

SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
PARTICIPANT_NOT_FOUND = "PARTICIPANT_NOT_FOUND"

NOT_HOST = "NOT_HOST"
NOT_RECEIVER = "NOT_RECEIVER"

NEED_2_OR_MORE = "NEED_2_OR_MORE"
WAIT_ALL_DONE = "WAIT_ALL_DONE"
NOT_IN_WRITE = "NOT_IN_WRITE"
NOT_IN_REVEAL = "NOT_IN_REVEAL"
WAIT_OPEN = "WAIT_OPEN"
ALREADY_OPENED = "ALREADY_OPENED"
INVALID_PHASE = "INVALID_PHASE"

TITLE_REQUIRED = "TITLE_REQUIRED"
BODY_REQUIRED = "BODY_REQUIRED"

ASSIGN_FAILED = "ASSIGN_FAILED"
PAIRING_FAILED = "PAIRING_FAILED"
NO_STEP = "NO_STEP"
CODE_EXHAUSTED = "CODE_EXHAUSTED"


class ExchangeError(Exception):
    """A rejected action. ``code`` is what the client sees."""

    def __init__(self, code, message=None):
        super().__init__(message or code)
        self.code = code
        self.message = message or code


def invalid_phase(action, phase):
    return ExchangeError(
        INVALID_PHASE, f"{action} is not allowed while the session is in {phase}"
    )
