"""
Request options accepted by every send.

Only two options are recognized:

* ``timeout``: positive integer number of seconds to wait for a response
  before the send is considered failed.
* ``async``: when true the send returns immediately and the response is
  collected later, otherwise the call blocks until the response arrives.
"""
import logging
from typing import Any, Dict, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictInt
from pydantic import ValidationError as PydanticValidationError

from measurement_protocol.constants import REQUEST_TIMEOUT
from measurement_protocol.errors import InvalidOptionError

logger = logging.getLogger(__name__)

TIMEOUT_OPTION = "timeout"
ASYNC_OPTION = "async"

OPTION_REASONS = {
    TIMEOUT_OPTION: "the timeout must be an integer with a value greater than 0",
    ASYNC_OPTION: "the async option must be boolean",
}


class RequestOptions(BaseModel):
    """
    Validated, immutable request options.

    Build instances through ``RequestOptions.normalize`` so that raw mappings
    get the same validation and error reporting everywhere.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    timeout: StrictInt = Field(default=REQUEST_TIMEOUT, gt=0, validate_default=True)
    async_: StrictBool = Field(default=False, alias=ASYNC_OPTION)

    @classmethod
    def normalize(
        cls, raw: Optional[Union[Mapping[str, Any], "RequestOptions"]] = None
    ) -> "RequestOptions":
        """
        Validate raw options and fill missing ones with defaults.

        Args:
            raw: A mapping of option names to values, an already normalized
                instance, or None for all defaults. None values count as unset.

        Returns:
            RequestOptions: The normalized options.

        Raises:
            InvalidOptionError: If an option is unknown or has an invalid value.
        """
        if raw is None:
            raw = {}

        if isinstance(raw, RequestOptions):
            return raw

        if not isinstance(raw, Mapping):
            raise InvalidOptionError(
                "options", f"expected a mapping, got {type(raw).__name__}"
            )

        values = {key: value for key, value in raw.items() if value is not None}

        try:
            return cls.model_validate(values)
        except PydanticValidationError as e:
            error = e.errors()[0]
            option = str(error["loc"][0]) if error["loc"] else "options"

            if error["type"] == "extra_forbidden":
                reason = "unknown option"
            else:
                reason = OPTION_REASONS.get(option, error["msg"])

            logger.debug("Rejected request options %r: %s", values, reason)
            raise InvalidOptionError(option, reason) from e

    def merge(
        self, overrides: Optional[Union[Mapping[str, Any], "RequestOptions"]]
    ) -> "RequestOptions":
        """
        Return new options with ``overrides`` applied on top of these.
        """
        if overrides is None:
            return self

        if isinstance(overrides, RequestOptions):
            return overrides

        if not isinstance(overrides, Mapping):
            raise InvalidOptionError(
                "options", f"expected a mapping, got {type(overrides).__name__}"
            )

        merged = self.as_dict()
        merged.update(
            {key: value for key, value in overrides.items() if value is not None}
        )
        return RequestOptions.normalize(merged)

    def as_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)
