"""Who Am I? - LLM-mediated guessing game engine."""

__version__ = "0.1.0"
