# julius_client/__init__.py
from .ClientOptions import ClientOptions
from .errors import RecordParseError
from .EventPublisher import EventPublisher
from .JuliusClient import JuliusClient
from .protocol.types import (
    EngineInfo,
    EventKind,
    GmmResult,
    GrammarStatus,
    InputParam,
    InputStatus,
    JuliusCommand,
    JuliusEvent,
    Rejected,
    SentenceHypothesis,
    SystemInfo,
    WordHypothesis,
)

__version__ = "0.1.0"

__all__ = [
    'ClientOptions',
    'RecordParseError',
    'EventPublisher',
    'JuliusClient',
    'EngineInfo',
    'EventKind',
    'GmmResult',
    'GrammarStatus',
    'InputParam',
    'InputStatus',
    'JuliusCommand',
    'JuliusEvent',
    'Rejected',
    'SentenceHypothesis',
    'SystemInfo',
    'WordHypothesis',
]
