class AppException(Exception):
    """Base exception for all kanban errors.

    ``code`` is stable per subclass, so a caller can map errors to its own
    transport (status codes, exit codes) without matching on messages.
    """

    code: str = "app_error"

    def __init__(self, message: str = "An application error occurred"):
        self.message = message
        super().__init__(self.message)

    def to_dict(self) -> dict[str, str]:
        return {"error": self.code, "message": self.message}
