"""
Known error parsers.

A parser looks at a response the server returned and recognises
application-level errors by the shape of the payload, including errors
sent back with a 2xx status. Parsers are configured once per client and
shared by every call, so they must not keep per-call state.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional, Tuple

from .api_response import ApiResponse
from .json_value import JsonNode

logger = logging.getLogger(__name__)

ERROR_RETURNED_BY_SERVER = "ErrorReturnedByServer"


class KnownErrorParser(ABC):
    """
    Base class for known error parsers.

    Contract:
        - never raise
        - return True when a known error shape was found
        - set the error fields that could be extracted and leave the
          others untouched (never overwrite with None/"")
    """

    @abstractmethod
    def parse_known_errors(self, response: ApiResponse) -> bool:
        """Inspect response.data and populate error fields on a match."""

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


class ProblemDetailsErrorParser(KnownErrorParser):
    """
    RFC 7807 Problem Details.

    Looks for ``title``, ``type``, ``detail`` and ``instance`` at the payload
    root, falling back to the same members under an ``error`` object. Each
    non-empty member found is copied onto the response, whether or not the
    payload turns out to be an error. Only a non-empty title or detail counts
    as a match, and then ``error_type`` is overwritten with
    ERROR_RETURNED_BY_SERVER.

    Example:
        >>> response.data = JsonNode.parse('{"error": {"title": "Denied"}}')
        >>> ProblemDetailsErrorParser().parse_known_errors(response)
        True
        >>> response.error_type
        'ErrorReturnedByServer'
    """

    MEMBERS: Tuple[str, ...] = ("title", "type", "detail", "instance")
    NESTED_KEY = "error"

    def parse_known_errors(self, response: ApiResponse) -> bool:
        if response is None or response.data is None:
            return False

        logger.debug("%s: parsing response for known errors", self.__class__.__name__)

        # Copy whatever is there first, then decide on title/detail only
        found = {}
        for member in self.MEMBERS:
            value = self._lookup(response.data, member)
            if value:
                setattr(response, f"error_{member}", value)
            found[member] = value

        if not (found["title"] or found["detail"]):
            return False

        logger.debug("%s: known errors have been found", self.__class__.__name__)
        response.error_type = ERROR_RETURNED_BY_SERVER
        return True

    def _lookup(self, data: JsonNode, member: str) -> Optional[str]:
        value = data.value_str(member)
        if value is None:
            nested = data.get(self.NESTED_KEY)
            if nested is not None:
                value = nested.value_str(member)
        return value
