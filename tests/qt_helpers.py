from __future__ import annotations

import os
import time
from typing import Callable

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PyQt5 import QtCore, QtTest, QtWidgets  # noqa: E402


_app: QtCore.QCoreApplication | None = None


def ensure_app() -> QtCore.QCoreApplication:
    global _app
    _app = QtWidgets.QApplication.instance() or QtWidgets.QApplication([])
    return _app


def flush_deferred_deletes() -> None:
    QtCore.QCoreApplication.sendPostedEvents(None, QtCore.QEvent.DeferredDelete)


def wait_until(predicate: Callable[[], bool], timeout_ms: int = 5000) -> bool:
    deadline = time.monotonic() + timeout_ms / 1000
    while not predicate():
        if time.monotonic() >= deadline:
            return False
        QtTest.QTest.qWait(10)
    return True
