"""
Host Binding Surface

Publishes ``get``, ``head``, ``post``, ``put``, ``patch``, ``delete``,
``request`` and ``request_batch`` into a host table. Each ``HttpModule`` owns
one Session; the loader captures it, so every host that loads the same module
instance shares its cookie jar and separate instances share nothing.

Usage:
    module = HttpModule()
    host = TableHost()
    host.preload_module("http", module.loader)

    http = host.require("http")
    response, = http.raw_get("get")("http://127.0.0.1:8080/", {"query": "page=1"})
    response.raw_get("status_code")  # 200
"""

from typing import Any, Dict, Optional, Tuple

import msgspec

from .config import HttpModuleConfig
from .host import Host, HostFunction, to_string_arg
from .logging import get_logger
from .transport import BatchExecutor, BatchOutcome, Dispatcher, HTTPMethod, Response, Session


def string_table(host: Host, values: Dict[str, str]) -> Any:
    table = host.new_table()
    for key, value in values.items():
        host.set_field(table, key, value)
    return table


def response_to_host(host: Host, response: Response, expose_headers_all: bool = False) -> Any:
    """Materialize a Response as a host table. Must run on the host's thread."""
    table = host.new_table()
    host.set_field(table, "body", response.body)
    host.set_field(table, "status_code", response.status_code)
    host.set_field(table, "headers", string_table(host, response.headers))
    host.set_field(table, "cookies", string_table(host, response.cookies))
    host.set_field(table, "url", response.url)

    if expose_headers_all:
        headers_all = host.new_table()
        for name, values in response.headers_all.items():
            entries = host.new_table()
            for index, value in enumerate(values, start=1):
                host.set_field(entries, index, value)
            host.set_field(headers_all, name, entries)
        host.set_field(table, "headers_all", headers_all)
    return table


class HttpModule:
    """
    Session-bearing HTTP module.

    Calling convention: ``(response,)`` on success, ``(None, message)`` on
    failure. ``request_batch`` returns ``(responses,)`` when every entry
    succeeded and ``(responses, errors)`` otherwise.
    """

    def __init__(self, config: Optional[HttpModuleConfig] = None, session: Optional[Session] = None):
        if config is not None and session is not None:
            raise ValueError("Pass either a config or a session, not both")
        self.session = session or Session(config)
        self.config = self.session.config
        self.dispatcher = Dispatcher(self.session)
        self.batch_executor = BatchExecutor(self.session)
        self.logger = get_logger('hosthttp.module')

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self) -> None:
        self.session.close()

    def loader(self, host: Host) -> Any:
        """Host module loader: a table of the published functions."""
        module = host.new_table()
        host.set_funcs(module, self.exports(host))
        self.logger.debug("Module loaded", host=type(host).__name__, convention=type(self).__name__)
        return module

    def exports(self, host: Host) -> Dict[str, HostFunction]:
        exports: Dict[str, HostFunction] = {
            method.value.lower(): self._shortcut(host, method) for method in HTTPMethod
        }

        def request(method=None, url=None, options=None, *_):
            return self._call(host, to_string_arg(method), to_string_arg(url), options)

        def request_batch(requests=None, *_):
            return self._batch(host, requests)

        exports["request"] = request
        exports["request_batch"] = request_batch
        return exports

    def _shortcut(self, host: Host, method: HTTPMethod) -> HostFunction:
        def call(url=None, options=None, *_):
            return self._call(host, method.value, to_string_arg(url), options)

        call.__name__ = method.value.lower()
        return call

    def _call(self, host: Host, method: str, url: str, options: Any) -> Tuple[Any, ...]:
        response, error = self.dispatcher.request(method, url, options)
        return self._result(host, response, error)

    def _result(self, host: Host, response: Optional[Response], error: Optional[str]) -> Tuple[Any, ...]:
        if error is not None:
            return None, error
        return (response_to_host(host, response, self.config.expose_headers_all),)

    def _batch(self, host: Host, requests: Any) -> Tuple[Any, ...]:
        outcome: BatchOutcome = self.batch_executor.execute(requests)

        # Host values are built only here, after every worker has finished
        responses = host.new_table()
        errors = host.new_table()
        for index, (response, error) in enumerate(zip(outcome.responses, outcome.errors), start=1):
            value = None
            if response is not None:
                value = response_to_host(host, response, self.config.expose_headers_all)
            host.set_field(responses, index, value)
            host.set_field(errors, index, error)

        if outcome.failed:
            return responses, errors
        return (responses,)


class LegacyHttpModule(HttpModule):
    """
    Stateless HTTP module with the three-value convention.

    Success returns ``(body, status_code, headers)``, failure returns
    ``(None, message, None)``. Cookies are never kept between calls and there
    is no ``request_batch``.
    """

    def __init__(self, config: Optional[HttpModuleConfig] = None, session: Optional[Session] = None):
        if session is not None and session.config.persist_cookies:
            raise ValueError("LegacyHttpModule needs a session that does not persist cookies")
        if session is None:
            config = msgspec.structs.replace(config or HttpModuleConfig(), persist_cookies=False)
        super().__init__(config=config, session=session)

    def exports(self, host: Host) -> Dict[str, HostFunction]:
        exports = super().exports(host)
        del exports["request_batch"]
        return exports

    def _result(self, host: Host, response: Optional[Response], error: Optional[str]) -> Tuple[Any, ...]:
        if error is not None:
            return None, error, None
        return response.body, response.status_code, string_table(host, response.headers)
