"""
Single-Request Dispatcher

Drives decode -> build -> send -> encode for one request. Failures of any
stage arrive as HttpModuleError; the synchronous entry point turns them into
the error string handed to the host, so nothing propagates past it.
"""

import time
from typing import Any, Optional, Tuple

from ..exceptions import HttpModuleError, TransportError, UrlError
from ..logging import get_logger
from .options import decode_options
from .request_builder import build_request
from .session import Session
from .structs import RequestDirectives, Response


def operation_name(method: str) -> str:
    """Title-cased verb used to prefix transport errors: ``GET`` -> ``Get``."""
    return method[:1].upper() + method[1:].lower()


async def perform_request(
    session: Session,
    method: str,
    url: str,
    directives: RequestDirectives,
) -> Response:
    """
    Execute one request on the session loop.

    Transport errors are prefixed with the operation and URL whenever a
    method was given; an empty method leaves them bare.

    Raises:
        HttpModuleError: Any URL, transport or body read failure
    """
    logger = get_logger('hosthttp.dispatcher')
    start_time = time.perf_counter()
    success = False

    try:
        try:
            prepared = build_request(method, url, directives)
            response = await session.send(prepared)
        except TransportError as e:
            if method:
                raise UrlError(operation_name(method), url, e) from e
            raise
        success = True
        return response

    except HttpModuleError as e:
        logger.warning("Request failed", method=method.upper(), url=url, error=str(e))
        raise

    finally:
        execution_time_ms = (time.perf_counter() - start_time) * 1000
        session.record(execution_time_ms, success)
        if success:
            logger.debug("Request completed", method=method.upper(), url=url,
                         status=response.status_code)
            logger.latency("request", execution_time_ms, method=method.upper() or "GET")


class Dispatcher:
    """
    Synchronous single-request entry point bound to one session.

    Options are decoded on the calling thread so that no host value is read
    from the session loop.
    """

    def __init__(self, session: Session):
        self.session = session

    def request(self, method: str, url: str, options: Any = None) -> Tuple[Optional[Response], Optional[str]]:
        """Returns ``(response, None)`` on success, ``(None, message)`` on failure."""
        directives = decode_options(options)
        try:
            return self.session.run(perform_request(self.session, method, url, directives)), None
        except HttpModuleError as e:
            return None, str(e)
