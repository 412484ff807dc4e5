"""Core resolution engine and its collaborators."""
