"""steward - policy search, sprint scope isolation, and regression gating for AI coding assistants."""

__version__ = "0.1.0"
