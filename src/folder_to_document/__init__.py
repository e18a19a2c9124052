"""Export a source folder as one line-numbered markdown document for LLM review."""

__version__ = "0.1.0"
