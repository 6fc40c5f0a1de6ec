"""
Base use case class.

Each use case encapsulates a single application operation (start a
generation run, narrate a slide, export a deck) and knows nothing about HTTP.
Routes build a request object, call ``execute`` and translate domain
exceptions to HTTP responses.

Example:
    >>> class ExportUseCase(UseCase[ExportRequest, ExportArtifact]):
    ...     async def execute(self, request: ExportRequest) -> ExportArtifact:
    ...         ...
"""

from abc import ABC, abstractmethod
from typing import TypeVar, Generic

RequestT = TypeVar("RequestT")
ResponseT = TypeVar("ResponseT")


class UseCase(ABC, Generic[RequestT, ResponseT]):
    """
    Base use case abstract class.

    Type Parameters:
        RequestT: Type of the input request object
        ResponseT: Type of the output response object
    """

    @abstractmethod
    async def execute(self, request: RequestT) -> ResponseT:
        """
        Execute the use case and return a response.

        Raises:
            Domain exceptions from ``core.exceptions``. HTTP exceptions are
            never raised here; converting them is the route's responsibility.
        """
        pass
