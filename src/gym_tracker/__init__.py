"""gym-tracker: strength-training session tracking."""

__version__ = "0.1.0"
