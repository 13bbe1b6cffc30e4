"""Julius module-mode event kinds and decoded payload types."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Literal


# ---------------------------------------------------------------------------
# Client → engine
# ---------------------------------------------------------------------------

class JuliusCommand(str, Enum):
    """Module-mode commands, written verbatim to the socket.

    VERSION is answered with ENGINEINFO, STATUS with SYSINFO; the others
    have no direct reply.
    """

    DIE = "DIE\n"
    PAUSE = "PAUSE\n"
    RESUME = "RESUME\n"
    STATUS = "STATUS\n"
    TERMINATE = "TERMINATE\n"
    VERSION = "VERSION\n"


# ---------------------------------------------------------------------------
# Engine → client
# ---------------------------------------------------------------------------

class EventKind(str, Enum):
    """Notification kinds published by the client.

    One kind per top-level tag of the module-mode vocabulary, plus:
    ``DATA`` for the whole normalized record, ``UNRECOGNIZED`` for tags outside
    the vocabulary and ``PARSE_ERROR`` for records the XML parser rejected.
    """

    STARTPROC = "STARTPROC"
    ENDPROC = "ENDPROC"
    STARTRECOG = "STARTRECOG"
    ENDRECOG = "ENDRECOG"
    RECOGFAIL = "RECOGFAIL"
    ENGINEINFO = "ENGINEINFO"
    GMM = "GMM"
    GRAMINFO = "GRAMINFO"
    GRAMMAR = "GRAMMAR"
    GRAPHOUT = "GRAPHOUT"
    INPUT = "INPUT"
    INPUTPARAM = "INPUTPARAM"
    RECOGOUT = "RECOGOUT"
    RECOGPROCESS = "RECOGPROCESS"
    REJECTED = "REJECTED"
    SYSINFO = "SYSINFO"
    DATA = "data"
    UNRECOGNIZED = "unrecognized"
    PARSE_ERROR = "parse_error"


# Kinds that carry no payload; handlers are called without arguments.
SIGNAL_KINDS = frozenset({
    EventKind.STARTPROC,
    EventKind.ENDPROC,
    EventKind.STARTRECOG,
    EventKind.ENDRECOG,
    EventKind.RECOGFAIL,
})

InputStatusValue = Literal["LISTEN", "STARTREC", "ENDREC"]
ProcessState = Literal["ACTIVE", "SLEEP"]


# ---------------------------------------------------------------------------
# Payloads
# ---------------------------------------------------------------------------

@dataclass
class EngineInfo:
    """ENGINEINFO reply to the VERSION command.

    Args:
        conf: Configuration description reported by the engine.
        type: Engine name (``"Julius"``).
        version: Engine version string.
    """

    conf: str | None
    type: str | None
    version: str | None


@dataclass
class GmmResult:
    """GMM-based input classification.

    Args:
        cm_score: Confidence score of the winning GMM.
        result: Name of the winning GMM.
    """

    cm_score: float
    result: str | None


@dataclass
class GrammarStatus:
    reason: str | None
    status: str | None


@dataclass
class InputStatus:
    """Audio input state change.

    Args:
        status: ``LISTEN``, ``STARTREC`` or ``ENDREC``.
        time: Engine wall-clock time of the change (seconds since epoch).
    """

    status: InputStatusValue | None
    time: float


@dataclass
class InputParam:
    """Length of the processed input.

    Args:
        frames: Number of feature frames.
        msec: Input duration in milliseconds.
    """

    frames: float
    msec: float


@dataclass
class WordHypothesis:
    """One recognized word of a sentence hypothesis.

    Boundary words (``<s>``/``</s>``, phones ``silB``/``silE``) are kept as
    the engine sent them.

    Args:
        word: Surface form.
        class_id: Dictionary class (output string in the grammar).
        phone: Phoneme sequence.
        cm: Word confidence measure, nominally in ``[0.0, 1.0]``.
    """

    word: str | None
    class_id: str | None
    phone: str | None
    cm: float


@dataclass
class SentenceHypothesis:
    """One ranked candidate of a RECOGOUT record.

    Args:
        gram: Grammar identifier the sentence was matched against.
        rank: 1-based rank among the candidates of the record.
        score: Log-likelihood score.
        words: Word hypotheses in utterance order.
    """

    gram: str | None
    rank: float
    score: float
    words: list[WordHypothesis] = field(default_factory=list)


@dataclass
class Rejected:
    reason: str | None


@dataclass
class SystemInfo:
    """STATUS reply: whether the engine is listening or paused."""

    process: ProcessState | None


# ---------------------------------------------------------------------------
# Tagged union
# ---------------------------------------------------------------------------

@dataclass
class JuliusEvent:
    """One dispatched notification.

    Payload type per kind:
        - signal kinds: ``None``
        - ENGINEINFO/GMM/GRAMMAR/INPUT/INPUTPARAM/REJECTED/SYSINFO: the
          matching dataclass above
        - RECOGOUT: ``list[SentenceHypothesis]``
        - GRAMINFO/GRAPHOUT/RECOGPROCESS/UNRECOGNIZED: the value as parsed
        - DATA: the whole normalized record dict
        - PARSE_ERROR: the ``RecordParseError`` raised for the record
    """

    kind: EventKind
    payload: Any = None
