"""Promoter error types."""


class PromoterError(Exception):
    """Base class for promoter errors."""


class MetaDeclarationError(PromoterError):
    """Meta declaration has no recognized category."""

    def __init__(self, declaration: str):
        super().__init__(f"Invalid meta declaration: {declaration!r}")
        self.declaration = declaration


class PromotionError(PromoterError):
    """Promoting a temp reference to its permanent key failed.

    Fatal for the reconciliation call: remaining fields are not processed
    and earlier promotions in the same call are not rolled back.
    """

    def __init__(self, key: str, field: str, reason: str):
        super().__init__(f"Failed to promote {key!r} in field {field!r}: {reason}")
        self.key = key
        self.field = field
        self.reason = reason
