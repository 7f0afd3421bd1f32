from __future__ import annotations


class ConversionError(RuntimeError):
    """Base class for conversion failures."""


class EmptyResultError(ConversionError):
    """No cards left after filtering; nothing is written."""


class MalformedTokenError(ConversionError):
    """A token lacks an attribute the converter relies on."""

    def __init__(self, token_type: str, attr: str):
        super().__init__(f"malformed_token: {token_type} has no {attr}")
        self.token_type = token_type
        self.attr = attr
