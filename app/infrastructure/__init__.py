"""Infrastructure layer for SkillSwap.

This package contains implementations of external dependencies:
the Firestore document store and the repositories built on it.
"""
