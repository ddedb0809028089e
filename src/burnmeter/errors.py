class BurnmeterError(Exception):
    """
    base class for conditions that make every aggregate meaningless
    and therefore end the run.
    """


class NoDataDirectoryError(BurnmeterError):
    def __init__(self) -> "None":
        super().__init__("No Claude data directory found")


class HookInputError(BurnmeterError):
    pass
