from typing import Optional


class MeasurementProtocolError(Exception):
    """
    Base error for the Measurement Protocol client.

    Args:
        message (str): The error message.
    """
    def __init__(self, message: str = "An error occurred while sending a Measurement Protocol hit."):
        self.message = message
        super().__init__(self.message)


class ValidationError(MeasurementProtocolError):
    """
    Error raised when a hit field is unknown, missing or has a value that
    violates the field's declared constraint. Raised before any network call.

    Args:
        field (str): The offending field name.
        constraint (str): Description of the violated constraint.
        message (str): The error message template.
    """
    def __init__(self, field: str, constraint: str,
                 message: str = "Invalid hit parameter '{field}': {constraint}"):
        self.field = field
        self.constraint = constraint
        self.message = message.format(field=field, constraint=constraint)
        super().__init__(self.message)


class BatchLimitError(ValidationError):
    """
    Error raised when a batch is empty or holds more hits than the protocol
    accepts in one request.

    Args:
        count (int): The number of hits in the batch.
        limit (int): The maximum number of hits per batch.
    """
    def __init__(self, count: int, limit: int):
        self.count = count
        self.limit = limit
        if count == 0:
            constraint = "a batch must contain at least one hit"
        else:
            constraint = f"a batch accepts at most {limit} hits, got {count}"
        super().__init__(field="batch", constraint=constraint)


class InvalidOptionError(MeasurementProtocolError):
    """
    Error raised when a request option is unknown or has an invalid value.

    Args:
        option (str): The offending option name.
        reason (str): Why the value was rejected.
    """
    def __init__(self, option: str, reason: str,
                 message: str = "Invalid request option '{option}': {reason}"):
        self.option = option
        self.reason = reason
        self.message = message.format(option=option, reason=reason)
        super().__init__(self.message)


class ClientUnavailableError(MeasurementProtocolError):
    """
    Error raised the first time a send is attempted without a usable HTTP client.

    Args:
        reason (Optional[str]): The reason the client could not be obtained.
    """
    def __init__(self, reason: Optional[str] = None,
                 message: str = "No HTTP client is available to send Measurement Protocol hits."):
        self.reason = reason
        self.message = message
        if reason:
            self.message += f"\nDetails: {reason}"
        super().__init__(self.message)


class TransportError(MeasurementProtocolError):
    """
    Error raised when a request fails at the network level or times out.

    Args:
        url (str): The URL of the failed request.
        cause (BaseException): The underlying exception.
    """
    def __init__(self, url: str, cause: BaseException,
                 message: str = "Request to {url} failed: {cause}"):
        self.url = url
        self.cause = cause
        self.message = message.format(url=url, cause=repr(cause))
        super().__init__(self.message)


class NotReadyError(MeasurementProtocolError):
    """
    Error raised when reading the result of an asynchronous send that has not
    been waited for yet.

    Args:
        url (str): The URL of the pending request.
    """
    def __init__(self, url: str,
                 message: str = "The response for {url} is still pending. "
                                "Call wait() on the response or drain the pending requests first."):
        self.url = url
        self.message = message.format(url=url)
        super().__init__(self.message)
