"""Error taxonomy for log parsing and round processing.

Unparseable lines and soft anomalies are never raised; they are logged and
processing continues. Everything defined here aborts the current round.
"""


class ParsingError(Exception):
    """Base exception for failures that abort a round."""

    def __init__(
        self,
        message: str,
        *,
        line_number: int | None = None,
        raw_line: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.line_number = line_number
        self.raw_line = raw_line

    def __str__(self) -> str:
        if self.line_number is None:
            return self.message
        return f"{self.message} (line {self.line_number}: {self.raw_line!r})"


class UnknownVocabularyError(ParsingError):
    """Raised when a team, weapon or class name has no mapping."""

    def __init__(
        self,
        vocabulary: str,
        value: str,
        *,
        line_number: int | None = None,
        raw_line: str | None = None,
    ) -> None:
        super().__init__(
            f"unknown {vocabulary}: {value!r}", line_number=line_number, raw_line=raw_line
        )
        self.vocabulary = vocabulary
        self.value = value


class UnknownTriggerError(ParsingError):
    """Raised when a two-actor line has an unrecognised verb or effect name."""

    pass


class PipelineInvariantError(ParsingError):
    """Raised when a field the pipeline guarantees is missing or a phase is unexpected."""

    pass


class SubscriberError(ParsingError):
    """Raised when a subscriber fails while the pipeline is running."""

    def __init__(
        self,
        subscriber: str,
        phase: str,
        cause: BaseException,
        *,
        line_number: int | None = None,
        raw_line: str | None = None,
    ) -> None:
        super().__init__(
            f"[subscriber={subscriber}, phase={phase}] failed (error={cause!r})",
            line_number=line_number,
            raw_line=raw_line,
        )
        self.subscriber = subscriber
        self.phase = phase


class RoundParseError(ParsingError):
    """Raised by the match service when a round cannot be processed."""

    def __init__(self, log_name: str, round_number: int, cause: BaseException) -> None:
        super().__init__(
            f"round {round_number} ({log_name}) failed: {cause}",
            line_number=getattr(cause, "line_number", None),
            raw_line=getattr(cause, "raw_line", None),
        )
        self.log_name = log_name
        self.round_number = round_number
