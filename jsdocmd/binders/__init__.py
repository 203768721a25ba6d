"""Declaration binder implementations."""

from .base import Binder, BindResult
from .declarations import (
    AstDeclarationBinder,
    SignatureOutcome,
    UnsupportedDeclarationShape,
    extract_signature,
)

__all__ = [
    "AstDeclarationBinder",
    "Binder",
    "BindResult",
    "SignatureOutcome",
    "UnsupportedDeclarationShape",
    "extract_signature",
]
