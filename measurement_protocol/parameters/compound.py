"""
Enhanced e-commerce collections: products, impressions and promotions.

Each collection entry expands to several indexed wire keys, e.g. the second
product becomes ``pr2id``, ``pr2nm``, ``pr2pr`` and so on.
"""
import re
from typing import Any, Dict, Iterable, Mapping, Tuple

from measurement_protocol.errors import ValidationError
from .fields import FieldKind, FieldSpec, coerce

PRODUCT_FIELDS: Dict[str, Tuple[str, FieldKind]] = {
    "sku": ("id", FieldKind.TEXT),
    "name": ("nm", FieldKind.TEXT),
    "brand": ("br", FieldKind.TEXT),
    "category": ("ca", FieldKind.TEXT),
    "variant": ("va", FieldKind.TEXT),
    "price": ("pr", FieldKind.NUMBER),
    "quantity": ("qt", FieldKind.INTEGER),
    "coupon_code": ("cc", FieldKind.TEXT),
    "position": ("ps", FieldKind.INTEGER),
}

IMPRESSION_FIELDS: Dict[str, Tuple[str, FieldKind]] = {
    name: PRODUCT_FIELDS[name]
    for name in ("sku", "name", "brand", "category", "variant", "price", "position")
}

PROMOTION_FIELDS: Dict[str, Tuple[str, FieldKind]] = {
    "id": ("id", FieldKind.TEXT),
    "name": ("nm", FieldKind.TEXT),
    "creative": ("cr", FieldKind.TEXT),
    "position": ("ps", FieldKind.TEXT),
}

_CUSTOM_FIELD = re.compile(r"custom_(dimension|metric)_([1-9]\d*)")

PRODUCT_KEY = re.compile(r"pr([1-9]\d*)[a-z]")
PROMOTION_KEY = re.compile(r"promo([1-9]\d*)[a-z]")
IMPRESSION_LIST_KEY = re.compile(r"il([1-9]\d*)nm")


def next_index(keys: Iterable[str], pattern: "re.Pattern[str]") -> int:
    """
    Return the first free 1-based slot after the highest one used in ``keys``.
    """
    used = [int(match.group(1)) for match in map(pattern.match, keys) if match]
    return max(used, default=0) + 1


def expand(
    prefix: str,
    fields: Mapping[str, Any],
    allowed: Mapping[str, Tuple[str, FieldKind]],
    collection: str,
    custom: bool = True,
) -> Dict[str, str]:
    """
    Expand one collection entry into wire keys under ``prefix``.

    Args:
        prefix: Key prefix of the entry, e.g. ``pr2`` or ``il1pi3``.
        fields: Entry fields by name. None values are skipped.
        allowed: Field name to (key suffix, kind) for this collection.
        collection: Collection name used in error messages.
        custom: Whether ``custom_dimension_<n>`` / ``custom_metric_<n>`` apply.

    Returns:
        Dict[str, str]: Wire keys to serialized values.

    Raises:
        ValidationError: On an unknown field name or invalid value.
    """
    expanded = {}

    for name, value in fields.items():
        if value is None:
            continue

        if name in allowed:
            suffix, kind = allowed[name]
        else:
            match = _CUSTOM_FIELD.fullmatch(name) if custom else None
            if not match:
                raise ValidationError(
                    f"{collection}.{name}", f"unknown {collection} field"
                )
            kind = FieldKind.TEXT if match.group(1) == "dimension" else FieldKind.NUMBER
            suffix = f"{'cd' if match.group(1) == 'dimension' else 'cm'}{match.group(2)}"

        key = f"{prefix}{suffix}"
        expanded[key] = coerce(FieldSpec(f"{collection}.{name}", key, kind), value)

    if not expanded:
        raise ValidationError(collection, "at least one field is required")

    return expanded
