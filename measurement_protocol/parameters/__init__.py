from .fields import FIELDS, FieldKind, FieldSpec
from .hit import HitParameters

__all__ = [
    "FIELDS",
    "FieldKind",
    "FieldSpec",
    "HitParameters",
]
