"""
Test doubles shared across the portfolio chat tests.
"""

from tests.fixtures.fakes import FailingLLM, FakeClock, RecordingLLM, StatusError, keyword_embed

__all__ = ['FailingLLM', 'FakeClock', 'RecordingLLM', 'StatusError', 'keyword_embed']
