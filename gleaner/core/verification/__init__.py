"""Selector verification."""

from gleaner.core.verification.verifier import SelectorVerifier

__all__ = ['SelectorVerifier']
