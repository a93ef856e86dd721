"""Standard library HTTP integration.

``http.client`` connections and ``urllib.request`` handlers whose sockets
come from a GuardedDialer. Redirects followed by an opener from
:func:`build_opener` open a new connection per hop, so every hop is
validated again.
"""

from __future__ import annotations

import functools
import http.client
import urllib.request
from typing import Any

from safedial.dialer import GuardedDialer, default_dialer


class GuardedHTTPConnection(http.client.HTTPConnection):
    """HTTPConnection that dials through a GuardedDialer."""

    def __init__(self, *args: Any, dialer: GuardedDialer | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.dialer = dialer or default_dialer()
        self._create_connection = self.dialer.create_connection


class GuardedHTTPSConnection(http.client.HTTPSConnection):
    """HTTPSConnection that dials through a GuardedDialer; TLS is unchanged."""

    def __init__(self, *args: Any, dialer: GuardedDialer | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.dialer = dialer or default_dialer()
        self._create_connection = self.dialer.create_connection


class GuardedHTTPHandler(urllib.request.HTTPHandler):
    def __init__(self, dialer: GuardedDialer | None = None) -> None:
        super().__init__()
        self.dialer = dialer or default_dialer()

    def http_open(self, req: urllib.request.Request) -> http.client.HTTPResponse:
        connection = functools.partial(GuardedHTTPConnection, dialer=self.dialer)
        return self.do_open(connection, req)


class GuardedHTTPSHandler(urllib.request.HTTPSHandler):
    def __init__(self, dialer: GuardedDialer | None = None, context: Any = None) -> None:
        super().__init__(context=context)
        self.dialer = dialer or default_dialer()

    def https_open(self, req: urllib.request.Request) -> http.client.HTTPResponse:
        connection = functools.partial(GuardedHTTPSConnection, dialer=self.dialer)
        return self.do_open(connection, req, context=self._context)


def build_opener(
    dialer: GuardedDialer | None = None, *handlers: urllib.request.BaseHandler
) -> urllib.request.OpenerDirector:
    """Return a urllib opener whose HTTP and HTTPS traffic is guarded."""
    dialer = dialer or default_dialer()
    return urllib.request.build_opener(
        GuardedHTTPHandler(dialer),
        GuardedHTTPSHandler(dialer),
        *handlers,
    )
