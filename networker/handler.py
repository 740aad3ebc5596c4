from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from networker.errors import EmptyDataError, UnknownResponseError, UnsuccessfulHTTPStatusCodeError
from networker.responses import DataResponse, HTTPResponse, ResponseMetadata
from networker.result import Failure, Result, Success

log = logging.getLogger("networker.handler")

DataCompletion = Callable[["Result[DataResponse, BaseException]"], None]


def classify(
    data: Optional[bytes],
    response: Optional[ResponseMetadata],
    error: Optional[BaseException],
) -> "Result[DataResponse, BaseException]":
    """Turn one finished transfer into a Result.

    Checks run in a fixed order and the first hit wins:
    1. a transport error is returned as-is;
    2. no body -> EmptyDataError;
    3. no metadata, or non-HTTP metadata -> UnknownResponseError;
    4. 200-299 -> Success(DataResponse), anything else ->
       UnsuccessfulHTTPStatusCodeError carrying the same DataResponse.

    Pure: no I/O, no logging, same inputs give equal outputs.
    """

    if error is not None:
        return Failure(error)

    if data is None:
        return Failure(EmptyDataError())

    if not isinstance(response, HTTPResponse):
        # None or URLResponse, the only other member of ResponseMetadata.
        return Failure(UnknownResponseError())

    data_response = DataResponse(data=data, response=response)
    if response.is_successful:
        return Success(data_response)
    return Failure(UnsuccessfulHTTPStatusCodeError(data_response))


@dataclass(frozen=True, slots=True)
class DataTaskHandler:
    """A finished transfer plus the completion that wants its outcome."""

    data: Optional[bytes]
    response: Optional[ResponseMetadata]
    error: Optional[BaseException]
    completion: DataCompletion

    def execute(self) -> None:
        """Classify the transfer and call the completion exactly once."""

        outcome = classify(self.data, self.response, self.error)
        if outcome.is_failure:
            log.debug(
                "transfer_classified_failure",
                extra={"error_type": type(outcome.error).__name__},
            )
        self.completion(outcome)
