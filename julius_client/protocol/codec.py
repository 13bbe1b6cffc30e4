"""Decode Julius module-mode XML records into typed events.

Record lifecycle:
  1. parse_record():   raw XML text -> generic mapping (xmltodict)
  2. normalize_tree(): repeatable elements -> lists, numeric attributes -> float
  3. decode_record():  normalized mapping -> [DATA event, one event per tag]

Attribute names are kept exactly as the engine sends them (upper case).
"""

import logging
import math
import re
from typing import Any, Callable
from xml.parsers.expat import ExpatError

import xmltodict

from julius_client.errors import RecordParseError
from julius_client.protocol.types import (
    EngineInfo,
    EventKind,
    GmmResult,
    GrammarStatus,
    InputParam,
    InputStatus,
    JuliusEvent,
    Rejected,
    SentenceHypothesis,
    SystemInfo,
    WordHypothesis,
)

logger = logging.getLogger(__name__)

_RECORD_ROOT = "JULIUS_RECORD"

# Julius writes attribute values unescaped, e.g. CLASSID="<s>" or WORD="AT&T".
_ATTRIBUTE_VALUE = re.compile(r'(=\s*")([^"]*)(")')
_BARE_AMPERSAND = re.compile(r"&(?!(?:[a-zA-Z]+|#\d+|#x[0-9a-fA-F]+);)")

_NUMERIC_ATTRIBUTES: dict[str, tuple[str, ...]] = {
    "GMM": ("CMSCORE",),
    "INPUT": ("TIME",),
    "INPUTPARAM": ("FRAMES", "MSEC"),
}
_SHYPO_NUMERIC = ("RANK", "SCORE")
_WHYPO_NUMERIC = ("CM",)

_SILENCE_PHONES = frozenset({"silB", "silE"})


# ---------------------------------------------------------------------------
# Field coercion
# ---------------------------------------------------------------------------

def to_float(text: Any) -> float:
    """Parse a numeric attribute; anything unparsable becomes NaN.

    Args:
        text: Attribute text, an already converted number, or None when the
              attribute is missing.

    Returns:
        The float value, or ``math.nan``.
    """
    try:
        return float(text)
    except (TypeError, ValueError):
        logger.debug("codec: non-numeric attribute value %r, using NaN", text)
        return math.nan


def as_list(value: Any) -> list:
    """Return a repeatable element as a list in document order.

    xmltodict yields a dict for a single occurrence and a list for several.
    """
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


def _attributes(value: Any) -> dict:
    """Attribute mapping of an element; empty for bare or text-only elements."""
    return value if isinstance(value, dict) else {}


def _coerce(value: Any, names: tuple[str, ...]) -> Any:
    if not isinstance(value, dict):
        return value
    coerced = dict(value)
    for name in names:
        if name in coerced:
            coerced[name] = to_float(coerced[name])
    return coerced


# ---------------------------------------------------------------------------
# Parse and normalize
# ---------------------------------------------------------------------------

def _escape_attribute_values(xml: str) -> str:
    def escape(match: re.Match) -> str:
        value = _BARE_AMPERSAND.sub("&amp;", match.group(2))
        value = value.replace("<", "&lt;").replace(">", "&gt;")
        return match.group(1) + value + match.group(3)

    return _ATTRIBUTE_VALUE.sub(escape, xml)


def parse_record(xml: str) -> dict[str, Any]:
    """Parse one framed record into a generic mapping.

    The record is wrapped in a synthetic root so that several top-level
    elements (or none) parse.  Attributes are plain strings, keyed without
    prefix; elements with neither attributes nor content map to None.

    Args:
        xml: Raw record text produced by RecordFramer.

    Returns:
        Mapping of top-level tag to parsed value, in document order.

    Raises:
        RecordParseError: If the record is not well-formed XML.
    """
    wrapped = f"<{_RECORD_ROOT}>{_escape_attribute_values(xml)}</{_RECORD_ROOT}>"
    try:
        parsed = xmltodict.parse(wrapped, attr_prefix="")
    except ExpatError as exc:
        raise RecordParseError(f"Invalid record XML: {exc}", xml) from exc

    root = parsed.get(_RECORD_ROOT)
    if not isinstance(root, dict):
        # Empty record, or bare text between terminators.
        return {} if root is None else {"#text": root}
    return dict(root)


def _normalize_shypo(shypo: Any) -> dict:
    normalized = _coerce(_attributes(shypo), _SHYPO_NUMERIC)
    normalized["WHYPO"] = [
        _coerce(_attributes(whypo), _WHYPO_NUMERIC)
        for whypo in as_list(normalized.get("WHYPO"))
    ]
    return normalized


def _normalize_recogout(value: Any) -> dict:
    normalized = dict(_attributes(value))
    normalized["SHYPO"] = [_normalize_shypo(s) for s in as_list(normalized.get("SHYPO"))]
    return normalized


def normalize_tree(tree: dict[str, Any]) -> dict[str, Any]:
    """Canonicalize the shapes of known tags.

    - RECOGOUT: SHYPO and every WHYPO always become lists (document order),
      RANK/SCORE/CM become floats.
    - GMM/INPUT/INPUTPARAM: numeric attributes become floats.
    - Everything else, including unknown tags, is copied unchanged.

    Args:
        tree: Output of parse_record().

    Returns:
        A new mapping with the same keys in the same order.
    """
    normalized: dict[str, Any] = {}
    for tag, value in tree.items():
        if tag == "RECOGOUT":
            normalized[tag] = _normalize_recogout(value)
        elif tag in _NUMERIC_ATTRIBUTES:
            normalized[tag] = _coerce(value, _NUMERIC_ATTRIBUTES[tag])
        else:
            normalized[tag] = value
    return normalized


# ---------------------------------------------------------------------------
# Tag dispatch
# ---------------------------------------------------------------------------

def _signal(value: Any) -> None:
    return None


def _passthrough(value: Any) -> Any:
    return value


def _decode_engine_info(value: Any) -> EngineInfo:
    attrs = _attributes(value)
    return EngineInfo(conf=attrs.get("CONF"), type=attrs.get("TYPE"), version=attrs.get("VERSION"))


def _decode_gmm(value: Any) -> GmmResult:
    attrs = _attributes(value)
    return GmmResult(cm_score=to_float(attrs.get("CMSCORE")), result=attrs.get("RESULT"))


def _decode_grammar(value: Any) -> GrammarStatus:
    attrs = _attributes(value)
    return GrammarStatus(reason=attrs.get("REASON"), status=attrs.get("STATUS"))


def _decode_input(value: Any) -> InputStatus:
    attrs = _attributes(value)
    return InputStatus(status=attrs.get("STATUS"), time=to_float(attrs.get("TIME")))


def _decode_input_param(value: Any) -> InputParam:
    attrs = _attributes(value)
    return InputParam(frames=to_float(attrs.get("FRAMES")), msec=to_float(attrs.get("MSEC")))


def _decode_word(value: Any) -> WordHypothesis:
    attrs = _attributes(value)
    return WordHypothesis(
        word=attrs.get("WORD"),
        class_id=attrs.get("CLASSID"),
        phone=attrs.get("PHONE"),
        cm=to_float(attrs.get("CM")),
    )


def _decode_recogout(value: Any) -> list[SentenceHypothesis]:
    hypotheses = []
    for shypo in as_list(_attributes(value).get("SHYPO")):
        attrs = _attributes(shypo)
        hypotheses.append(SentenceHypothesis(
            gram=attrs.get("GRAM"),
            rank=to_float(attrs.get("RANK")),
            score=to_float(attrs.get("SCORE")),
            words=[_decode_word(w) for w in as_list(attrs.get("WHYPO"))],
        ))
    return hypotheses


def _decode_rejected(value: Any) -> Rejected:
    return Rejected(reason=_attributes(value).get("REASON"))


def _decode_sysinfo(value: Any) -> SystemInfo:
    return SystemInfo(process=_attributes(value).get("PROCESS"))


_DECODERS: dict[str, Callable[[Any], Any]] = {
    "STARTPROC": _signal,
    "ENDPROC": _signal,
    "STARTRECOG": _signal,
    "ENDRECOG": _signal,
    "RECOGFAIL": _signal,
    "ENGINEINFO": _decode_engine_info,
    "GMM": _decode_gmm,
    "GRAMINFO": _passthrough,
    "GRAMMAR": _decode_grammar,
    "GRAPHOUT": _passthrough,
    "INPUT": _decode_input,
    "INPUTPARAM": _decode_input_param,
    "RECOGOUT": _decode_recogout,
    "RECOGPROCESS": _passthrough,
    "REJECTED": _decode_rejected,
    "SYSINFO": _decode_sysinfo,
}


def decode_tag(tag: str, value: Any) -> JuliusEvent:
    """Map one top-level tag to its event; unknown tags map to UNRECOGNIZED."""
    decoder = _DECODERS.get(tag)
    if decoder is None:
        logger.debug("codec: unrecognized tag %r", tag)
        return JuliusEvent(EventKind.UNRECOGNIZED, value)
    return JuliusEvent(EventKind(tag), decoder(value))


def decode_record(tree: dict[str, Any]) -> list[JuliusEvent]:
    """Turn a normalized record into the events to publish, in order.

    Algorithm:
        1. DATA event carrying the whole tree.
        2. One event per top-level key, in the tree's order.

    Args:
        tree: Output of normalize_tree().

    Returns:
        List of events; never empty.
    """
    events = [JuliusEvent(EventKind.DATA, tree)]
    for tag, value in tree.items():
        events.append(decode_tag(tag, value))
    return events


# ---------------------------------------------------------------------------
# Consumer helpers
# ---------------------------------------------------------------------------

def best_hypothesis(hypotheses: list[SentenceHypothesis]) -> SentenceHypothesis | None:
    """Lowest-ranked candidate of a RECOGOUT payload, or None when empty."""
    ranked = [h for h in hypotheses if not math.isnan(h.rank)]
    if not ranked:
        return hypotheses[0] if hypotheses else None
    return min(ranked, key=lambda h: h.rank)


def spoken_words(hypothesis: SentenceHypothesis) -> list[WordHypothesis]:
    """Words of a hypothesis without the utterance-boundary silence words."""
    return [w for w in hypothesis.words if w.phone not in _SILENCE_PHONES]
