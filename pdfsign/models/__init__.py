from .signature import SignatureRequest, SignatureType

__all__ = [
    "SignatureRequest",
    "SignatureType",
]
