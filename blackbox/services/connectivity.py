from __future__ import annotations

import logging
from typing import Callable

from PyQt5 import QtCore, QtNetwork

from blackbox.domain.errors import ConnectivityError
from blackbox.domain.settings import CONNECTIVITY_TIMEOUT_MS, INTERNET_CHECK_URL

log = logging.getLogger(__name__)


class ConnectivityProber(QtCore.QObject):
    """Wait for internet access by sending HEAD requests until one succeeds.

    Every attempt races the request against a single-shot timer. The first to
    fire settles the attempt; a failed or timed out attempt immediately starts
    the next one. There is no retry limit.
    """

    def __init__(
        self,
        on_online: Callable[[], None],
        *,
        url: str = INTERNET_CHECK_URL,
        timeout_ms: int = CONNECTIVITY_TIMEOUT_MS,
        network_manager: QtNetwork.QNetworkAccessManager | None = None,
        parent: QtCore.QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._on_online = on_online
        self._url = url
        self._timeout_ms = timeout_ms
        self._manager = network_manager or QtNetwork.QNetworkAccessManager(self)
        self.attempts = 0

    def probe(self) -> None:
        self.attempts += 1
        reply = self._manager.head(QtNetwork.QNetworkRequest(QtCore.QUrl(self._url)))
        timer = QtCore.QTimer(self)
        timer.setSingleShot(True)
        settled = False

        def settle(error: ConnectivityError | None, *, abort: bool = False) -> None:
            nonlocal settled
            if settled:
                return
            settled = True
            timer.stop()
            if abort:
                reply.abort()
            timer.deleteLater()
            reply.deleteLater()

            if error is None:
                log.info("Internet reachable after %d attempt(s)", self.attempts)
                self._on_online()
                return
            log.warning("Connectivity check %d failed: %s", self.attempts, error)
            self.probe()

        def on_reply_finished() -> None:
            if reply.error() == QtNetwork.QNetworkReply.NoError:
                settle(None)
            else:
                settle(ConnectivityError(reply.errorString()))

        def on_timeout() -> None:
            settle(ConnectivityError(f"no response within {self._timeout_ms} ms"), abort=True)

        reply.finished.connect(on_reply_finished)
        timer.timeout.connect(on_timeout)
        timer.start(self._timeout_ms)
