"""Reassembles the module-mode line stream into complete XML records."""

RECORD_TERMINATOR = "."


class RecordFramer:
    """Accumulates lines until a terminator line and returns the joined record.

    Julius closes every message with a line holding a single ``.``.  Lines
    are joined without separators: the engine already splits its XML at
    element boundaries, so the concatenation is well-formed.

    The buffer has no size limit; a record is only complete once its
    terminator arrives.
    """

    def __init__(self) -> None:
        self._buffer = ""

    @property
    def pending(self) -> str:
        """Text accumulated since the last terminator."""
        return self._buffer

    def feed(self, line: str) -> str | None:
        """Consume one line (without its line break).

        Args:
            line: Next line received from the engine.

        Returns:
            The completed record when ``line`` is the terminator (possibly an
            empty string), otherwise None.
        """
        if line == RECORD_TERMINATOR:
            record = self._buffer
            self._buffer = ""
            return record
        self._buffer += line
        return None

    def reset(self) -> None:
        """Drop any partially accumulated record."""
        self._buffer = ""
