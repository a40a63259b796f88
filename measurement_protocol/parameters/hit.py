import re
from typing import Any, Dict, Iterator, List, Optional, Tuple
from urllib.parse import urlencode

from measurement_protocol.errors import ValidationError
from . import compound
from .fields import FIELDS_BY_NAME, FieldSpec, coerce, resolve

# Wire keys serialized ahead of everything else, when present
LEADING_KEYS = ("t", "v", "tid", "cid", "uid")


class HitParameters:
    """
    Ordered collection of Measurement Protocol parameters for one hit.

    Values are validated against the field table when set and stored in their
    wire form. Fluent setters are derived from the table, so
    ``set_tracking_id("UA-1")`` is ``set("tracking_id", "UA-1")`` and
    ``set_custom_dimension("x", 3)`` sets ``cd3``.
    """

    def __init__(self, values: Optional[Dict[str, Any]] = None):
        self._values: Dict[str, str] = {}
        if values:
            for name, value in values.items():
                self.set(name, value)

    def set(self, name: str, value: Any, index: Optional[int] = None) -> "HitParameters":
        """
        Set a field by name or wire key. A None value removes the field.

        Args:
            name: Field name (``document_path``) or wire key (``dp``, ``cd2``).
            value: The field value.
            index: Slot for indexed fields addressed by name.

        Returns:
            HitParameters: self, for chaining.

        Raises:
            ValidationError: If the field is unknown or the value invalid.
        """
        key, spec = resolve(name, index)

        if value is None:
            self._values.pop(key, None)
            return self

        self._values[key] = coerce(spec, value)
        return self

    def get(self, name: str, index: Optional[int] = None) -> Optional[str]:
        key, _ = resolve(name, index)
        return self._values.get(key)

    def unset(self, name: str, index: Optional[int] = None) -> "HitParameters":
        key, _ = resolve(name, index)
        self._values.pop(key, None)
        return self

    def clear(self) -> "HitParameters":
        self._values.clear()
        return self

    def copy(self) -> "HitParameters":
        clone = HitParameters()
        clone._values = dict(self._values)
        return clone

    def _update(self, values: Dict[str, str]) -> "HitParameters":
        """
        Merge already validated wire values, keeping insertion order.
        """
        self._values.update(values)
        return self

    def add_product(self, **fields: Any) -> "HitParameters":
        """
        Append a product to the enhanced e-commerce product collection.

        Accepts ``sku``, ``name``, ``brand``, ``category``, ``variant``,
        ``price``, ``quantity``, ``coupon_code``, ``position`` and
        ``custom_dimension_<n>`` / ``custom_metric_<n>``.
        """
        index = compound.next_index(self._values, compound.PRODUCT_KEY)
        return self._update(
            compound.expand(f"pr{index}", fields, compound.PRODUCT_FIELDS, "product")
        )

    def add_impression(self, list_name: str, **fields: Any) -> "HitParameters":
        """
        Append a product impression to the list called ``list_name``.

        Impressions sharing a list name share the list slot (``il<n>nm``).
        """
        list_index = None
        for key, value in self._values.items():
            match = compound.IMPRESSION_LIST_KEY.fullmatch(key)
            if match and value == list_name:
                list_index = int(match.group(1))
                break

        entries = {}
        if list_index is None:
            list_index = compound.next_index(self._values, compound.IMPRESSION_LIST_KEY)
            list_key = f"il{list_index}nm"
            entries[list_key] = coerce(FieldSpec("impression.list_name", list_key), list_name)

        pattern = re.compile(rf"il{list_index}pi([1-9]\d*)[a-z]")
        index = compound.next_index(self._values, pattern)
        entries.update(
            compound.expand(
                f"il{list_index}pi{index}", fields, compound.IMPRESSION_FIELDS, "impression"
            )
        )
        return self._update(entries)

    def add_promotion(self, **fields: Any) -> "HitParameters":
        """
        Append a promotion (``id``, ``name``, ``creative``, ``position``).
        """
        index = compound.next_index(self._values, compound.PROMOTION_KEY)
        return self._update(
            compound.expand(
                f"promo{index}", fields, compound.PROMOTION_FIELDS, "promotion", custom=False
            )
        )

    def require(self, *names: str) -> None:
        """
        Check that every named field is set to a non-empty value.

        Raises:
            ValidationError: Naming the first missing or empty field.
        """
        for name in names:
            value = self.get(name)
            if value:
                continue

            key, _ = resolve(name)
            constraint = "required field is missing" if value is None else "required field is empty"
            raise ValidationError(f"{name} ({key})", constraint)

    def items(self) -> List[Tuple[str, str]]:
        """
        Return the (wire key, value) pairs in serialization order.
        """
        leading = [(key, self._values[key]) for key in LEADING_KEYS if key in self._values]
        rest = [
            (key, value) for key, value in self._values.items() if key not in LEADING_KEYS
        ]
        return leading + rest

    def to_query_string(self) -> str:
        return urlencode(self.items())

    def to_batch_line(self) -> str:
        # Same encoding as single hits, one hit per batch line
        return self.to_query_string()

    def as_dict(self) -> Dict[str, str]:
        return dict(self.items())

    def __getattr__(self, attr: str):
        prefix, _, name = attr.partition("_")
        if name in FIELDS_BY_NAME:
            if prefix == "set":
                def setter(value: Any, index: Optional[int] = None) -> "HitParameters":
                    return self.set(name, value, index)

                setter.__name__ = attr
                return setter

            if prefix == "get":
                def getter(index: Optional[int] = None) -> Optional[str]:
                    return self.get(name, index)

                getter.__name__ = attr
                return getter

        raise AttributeError(
            f"'{type(self).__name__}' object has no attribute '{attr}'"
        )

    def __contains__(self, name: object) -> bool:
        if not isinstance(name, str):
            return False
        try:
            return self.get(name) is not None
        except ValidationError:
            return False

    def __iter__(self) -> Iterator[Tuple[str, str]]:
        return iter(self.items())

    def __len__(self) -> int:
        return len(self._values)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, HitParameters):
            return NotImplemented
        return self.items() == other.items()

    def __repr__(self) -> str:
        return f"HitParameters({self.as_dict()!r})"
