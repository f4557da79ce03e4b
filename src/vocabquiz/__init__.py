"""Spaced-repetition scheduling and quiz engine for vocabulary learning."""

__version__ = "0.1.0"
