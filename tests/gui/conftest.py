import gc

import pytest
from PyQt6 import sip
from PyQt6.QtWidgets import QApplication

from scriptrunner.core.coordinator import RunCoordinator
from scriptrunner.core.workspace import Workspace


@pytest.fixture(autouse=True)
def _enforce_widget_cleanup():
    """Error if a test leaks scriptrunner.* widgets without cleanup.

    Defined first in conftest.py so it tears down last (LIFO), after
    _flush_qt_events has already processed deferred events and GC'd.
    Only flags visible top-level widgets (parent=None) from scriptrunner.*
    modules.
    """
    app = QApplication.instance()
    if app is None:
        yield
        return

    before = set(id(w) for w in app.allWidgets())
    yield

    gc.collect()
    app.processEvents()
    app.processEvents()

    leaked = [
        w for w in app.allWidgets()
        if id(w) not in before
        and w.parent() is None
        and not sip.isdeleted(w)
        and type(w).__module__.startswith("scriptrunner.")
        and w.isVisible()
    ]
    if leaked:
        names = [type(w).__name__ for w in leaked]
        for w in leaked:
            w.close()
            w.deleteLater()
        app.processEvents()
        pytest.fail(
            f"Leaked {len(leaked)} widget(s) without cleanup: {names}. "
            "Add qtbot.addWidget(w) and close the widget in fixture teardown.",
            pytrace=False,
        )


@pytest.fixture(autouse=True)
def _flush_qt_events():
    """Flush deferred Qt events between tests.

    QTimer callbacks and deleteLater() run on the next event-loop
    iteration; firing during a later test's teardown can touch freed
    C++ objects.
    """
    yield
    app = QApplication.instance()
    if app is None:
        return
    app.processEvents()
    gc.collect()
    app.processEvents()


@pytest.fixture
def coordinator(tmp_path):
    """RunCoordinator with a per-test workspace."""
    coord = RunCoordinator(
        workspace=Workspace(base_dir=str(tmp_path)),
        extensions=["swift", "kts"],
        drain_timeout=1.0,
    )
    yield coord
    coord.shutdown()
