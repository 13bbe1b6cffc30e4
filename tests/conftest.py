# tests/conftest.py
import pytest

from tests.julius_fixture import RECOGOUT_SINGLE_WORD, RECOGOUT_TWO_HYPOTHESES, UTTERANCE_LINES


@pytest.fixture
def recogout_xml() -> str:
    """Two-hypothesis RECOGOUT record as the framer joins it."""
    return "".join(RECOGOUT_TWO_HYPOTHESES)


@pytest.fixture
def single_word_xml() -> str:
    return "".join(RECOGOUT_SINGLE_WORD)


@pytest.fixture
def utterance_lines() -> list[str]:
    """Lines of one complete utterance, listen to result."""
    return list(UTTERANCE_LINES)
