"""Failure kinds surfaced by the store and the test session controller."""
from __future__ import annotations
from typing import Optional


class LinguaError(Exception):
    """Base class; ``str(err)`` is the message shown to the learner."""


class StoreError(LinguaError):
    """A data table could not be read or written."""


class NotFoundError(LinguaError):
    """The requested test (or its question set), course or lesson does not exist."""


class TransientLoadError(LinguaError):
    """The store failed while a session was loading."""


class SubmissionError(LinguaError):
    def __init__(self, message: str, redirect: Optional[str] = None):
        super().__init__(message)
        self.redirect = redirect
