"""Errors raised by the Julius client."""


class RecordParseError(ValueError):
    """Raised when a framed record is not well-formed XML.

    Args:
        message: Parser error description.
        record: The raw record text that failed to parse.
    """

    def __init__(self, message: str, record: str) -> None:
        super().__init__(message)
        self.record = record
