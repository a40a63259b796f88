"""
Declarative table of Measurement Protocol fields.

Each entry maps the Python-facing field name to its wire key and the
structural constraint its value must satisfy. Indexed fields carry an
``{index}`` placeholder in their key (``cd{index}`` becomes ``cd3``).
"""
import math
import re
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, NamedTuple, Optional, Tuple

from measurement_protocol.constants import HIT_TYPES, PRODUCT_ACTIONS, PROMOTION_ACTIONS
from measurement_protocol.errors import ValidationError


class FieldKind(Enum):
    TEXT = "text"
    INTEGER = "integer"
    NUMBER = "number"
    BOOLEAN = "boolean"
    CHOICE = "choice"


class FieldSpec(NamedTuple):
    name: str
    key: str
    kind: FieldKind = FieldKind.TEXT
    choices: Tuple[str, ...] = ()

    @property
    def indexed(self) -> bool:
        return "{index}" in self.key

    @property
    def key_pattern(self) -> Optional["re.Pattern[str]"]:
        """
        Regex matching concrete wire keys of an indexed field, e.g. ``cd12``.
        """
        if not self.indexed:
            return None
        prefix, _, suffix = self.key.partition("{index}")
        return re.compile(rf"{re.escape(prefix)}[1-9]\d*{re.escape(suffix)}")

    def wire_key(self, index: Optional[int] = None) -> str:
        if not self.indexed:
            if index is not None:
                raise ValidationError(self.name, "field does not take an index")
            return self.key

        if isinstance(index, bool) or not isinstance(index, int) or index < 1:
            raise ValidationError(
                self.name, f"index must be a positive integer, got {index!r}"
            )
        return self.key.format(index=index)


TEXT = FieldKind.TEXT
INTEGER = FieldKind.INTEGER
NUMBER = FieldKind.NUMBER
BOOLEAN = FieldKind.BOOLEAN
CHOICE = FieldKind.CHOICE


FIELDS: Tuple[FieldSpec, ...] = (
    # General
    FieldSpec("protocol_version", "v"),
    FieldSpec("tracking_id", "tid"),
    FieldSpec("anonymize_ip", "aip", BOOLEAN),
    FieldSpec("data_source", "ds"),
    FieldSpec("queue_time", "qt", INTEGER),
    FieldSpec("cache_buster", "z"),
    # User
    FieldSpec("client_id", "cid"),
    FieldSpec("user_id", "uid"),
    # Session
    FieldSpec("session_control", "sc", CHOICE, ("start", "end")),
    FieldSpec("ip_override", "uip"),
    FieldSpec("user_agent_override", "ua"),
    FieldSpec("geographical_override", "geoid"),
    # Traffic sources
    FieldSpec("document_referrer", "dr"),
    FieldSpec("campaign_name", "cn"),
    FieldSpec("campaign_source", "cs"),
    FieldSpec("campaign_medium", "cm"),
    FieldSpec("campaign_keyword", "ck"),
    FieldSpec("campaign_content", "cc"),
    FieldSpec("campaign_id", "ci"),
    FieldSpec("google_adwords_id", "gclid"),
    FieldSpec("google_display_ads_id", "dclid"),
    # System info
    FieldSpec("screen_resolution", "sr"),
    FieldSpec("viewport_size", "vp"),
    FieldSpec("document_encoding", "de"),
    FieldSpec("screen_colors", "sd"),
    FieldSpec("user_language", "ul"),
    FieldSpec("java_enabled", "je", BOOLEAN),
    FieldSpec("flash_version", "fl"),
    # Hit
    FieldSpec("hit_type", "t", CHOICE, HIT_TYPES),
    FieldSpec("non_interaction_hit", "ni", BOOLEAN),
    # Content information
    FieldSpec("document_location_url", "dl"),
    FieldSpec("document_host_name", "dh"),
    FieldSpec("document_path", "dp"),
    FieldSpec("document_title", "dt"),
    FieldSpec("screen_name", "cd"),
    FieldSpec("content_group", "cg{index}"),
    FieldSpec("link_id", "linkid"),
    # App tracking
    FieldSpec("application_name", "an"),
    FieldSpec("application_id", "aid"),
    FieldSpec("application_version", "av"),
    FieldSpec("application_installer_id", "aiid"),
    # Event tracking
    FieldSpec("event_category", "ec"),
    FieldSpec("event_action", "ea"),
    FieldSpec("event_label", "el"),
    FieldSpec("event_value", "ev", INTEGER),
    # E-commerce
    FieldSpec("transaction_id", "ti"),
    FieldSpec("transaction_affiliation", "ta"),
    FieldSpec("transaction_revenue", "tr", NUMBER),
    FieldSpec("transaction_shipping", "ts", NUMBER),
    FieldSpec("transaction_tax", "tt", NUMBER),
    FieldSpec("item_name", "in"),
    FieldSpec("item_price", "ip", NUMBER),
    FieldSpec("item_quantity", "iq", INTEGER),
    FieldSpec("item_code", "ic"),
    FieldSpec("item_category", "iv"),
    FieldSpec("currency_code", "cu"),
    # Enhanced e-commerce
    FieldSpec("product_action", "pa", CHOICE, PRODUCT_ACTIONS),
    FieldSpec("coupon_code", "tcc"),
    FieldSpec("product_action_list", "pal"),
    FieldSpec("checkout_step", "cos", INTEGER),
    FieldSpec("checkout_step_option", "col"),
    FieldSpec("promotion_action", "promoa", CHOICE, PROMOTION_ACTIONS),
    # Social interactions
    FieldSpec("social_network", "sn"),
    FieldSpec("social_action", "sa"),
    FieldSpec("social_action_target", "st"),
    # Timing
    FieldSpec("user_timing_category", "utc"),
    FieldSpec("user_timing_variable_name", "utv"),
    FieldSpec("user_timing_time", "utt", INTEGER),
    FieldSpec("user_timing_label", "utl"),
    FieldSpec("page_load_time", "plt", INTEGER),
    FieldSpec("dns_time", "dns", INTEGER),
    FieldSpec("page_download_time", "pdt", INTEGER),
    FieldSpec("redirect_response_time", "rrt", INTEGER),
    FieldSpec("tcp_connect_time", "tcp", INTEGER),
    FieldSpec("server_response_time", "srt", INTEGER),
    FieldSpec("dom_interactive_time", "dit", INTEGER),
    FieldSpec("content_load_time", "clt", INTEGER),
    # Exceptions
    FieldSpec("exception_description", "exd"),
    FieldSpec("is_exception_fatal", "exf", BOOLEAN),
    # Custom dimensions / metrics
    FieldSpec("custom_dimension", "cd{index}"),
    FieldSpec("custom_metric", "cm{index}", NUMBER),
    # Content experiments
    FieldSpec("experiment_id", "xid"),
    FieldSpec("experiment_variant", "xvar"),
)

FIELDS_BY_NAME: Dict[str, FieldSpec] = {spec.name: spec for spec in FIELDS}
FIELDS_BY_KEY: Dict[str, FieldSpec] = {
    spec.key: spec for spec in FIELDS if not spec.indexed
}
INDEXED_FIELDS: Tuple[FieldSpec, ...] = tuple(spec for spec in FIELDS if spec.indexed)
_INDEXED_KEY_PATTERNS = tuple((spec.key_pattern, spec) for spec in INDEXED_FIELDS)

_INDEX = r"[1-9]\d*"
_PRODUCT_SUFFIX = rf"(?:id|nm|br|ca|va|pr|qt|cc|ps|cd{_INDEX}|cm{_INDEX})"

# Wire keys accepted without a table entry: enhanced e-commerce collections
CUSTOM_KEY_PATTERNS = (
    re.compile(rf"pr{_INDEX}{_PRODUCT_SUFFIX}"),
    re.compile(rf"il{_INDEX}nm"),
    re.compile(rf"il{_INDEX}pi{_INDEX}{_PRODUCT_SUFFIX}"),
    re.compile(rf"promo{_INDEX}(?:id|nm|cr|ps)"),
)


def resolve(name: str, index: Optional[int] = None) -> Tuple[str, FieldSpec]:
    """
    Resolve a field name or wire key to its concrete wire key and spec.

    Args:
        name: A field name from the table (``custom_dimension``) or a wire key
            (``tid``, ``cd4``, ``pr1nm``).
        index: The slot for indexed fields addressed by name.

    Returns:
        Tuple[str, FieldSpec]: The wire key and the spec that validates it.

    Raises:
        ValidationError: If the name is unknown or the index is invalid.
    """
    spec = FIELDS_BY_NAME.get(name)
    if spec is not None:
        return spec.wire_key(index), spec

    spec = FIELDS_BY_KEY.get(name)
    if spec is not None:
        return spec.wire_key(index), spec

    if index is not None:
        raise ValidationError(name, "only named indexed fields take an index")

    for pattern, spec in _INDEXED_KEY_PATTERNS:
        if pattern.fullmatch(name):
            return name, spec

    if any(pattern.fullmatch(name) for pattern in CUSTOM_KEY_PATTERNS):
        return name, FieldSpec(name, name)

    raise ValidationError(name, "unknown parameter")


def coerce(spec: FieldSpec, value: Any) -> str:
    """
    Check ``value`` against the field constraint and return its wire form.

    Raises:
        ValidationError: If the value violates the field constraint.
    """
    if spec.kind is FieldKind.BOOLEAN:
        return _coerce_boolean(spec, value)

    if isinstance(value, bool):
        raise ValidationError(spec.name, f"expected {spec.kind.value}, got a boolean")

    if spec.kind is FieldKind.TEXT:
        if isinstance(value, (str, int, float, Decimal)):
            return str(value)
        raise ValidationError(spec.name, f"expected text, got {type(value).__name__}")

    if spec.kind is FieldKind.INTEGER:
        if isinstance(value, int):
            return str(value)
        if isinstance(value, str) and re.fullmatch(r"[+-]?\d+", value):
            return value
        raise ValidationError(spec.name, f"expected an integer, got {value!r}")

    if spec.kind is FieldKind.NUMBER:
        return _coerce_number(spec, value)

    if spec.kind is FieldKind.CHOICE:
        if isinstance(value, str) and value in spec.choices:
            return value
        raise ValidationError(
            spec.name,
            f"expected one of {', '.join(spec.choices)}, got {value!r}",
        )

    raise ValidationError(spec.name, f"unsupported field kind {spec.kind!r}")


def _coerce_boolean(spec: FieldSpec, value: Any) -> str:
    if isinstance(value, bool):
        return "1" if value else "0"
    if value in (0, 1, "0", "1") and not isinstance(value, float):
        return str(value)
    raise ValidationError(spec.name, f"expected a boolean or 0/1, got {value!r}")


def _coerce_number(spec: FieldSpec, value: Any) -> str:
    if isinstance(value, str):
        try:
            number = float(value)
        except ValueError:
            raise ValidationError(spec.name, f"expected a number, got {value!r}")
        if not math.isfinite(number):
            raise ValidationError(spec.name, f"expected a finite number, got {value!r}")
        return value

    if isinstance(value, (int, Decimal)):
        if isinstance(value, Decimal) and not value.is_finite():
            raise ValidationError(spec.name, f"expected a finite number, got {value!r}")
        return str(value)

    if isinstance(value, float):
        if not math.isfinite(value):
            raise ValidationError(spec.name, f"expected a finite number, got {value!r}")
        return str(value)

    raise ValidationError(spec.name, f"expected a number, got {type(value).__name__}")
