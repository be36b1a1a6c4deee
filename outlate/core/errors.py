class ValidationError(ValueError):
    """
    Malformed or inconsistent input. The caller fixes the input and tries again;
    nothing retries these automatically.
    """

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.message = message
        self.field = field


class InternalConsistencyError(RuntimeError):
    """An invariant failed on input that passed validation. Always a defect."""
