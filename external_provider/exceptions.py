"""Exceptions raised by the provider outside the exchange pipeline."""


class ProviderError(RuntimeError):
    """Base exception for provider-level failures."""


class ExchangeNotFoundError(ProviderError, LookupError):
    """Raised when no persisted exchange exists for an identity."""

    def __init__(self, identity: str) -> None:
        super().__init__(f"No persisted exchange with id '{identity}'")
        self.identity = identity


__all__ = ["ExchangeNotFoundError", "ProviderError"]
