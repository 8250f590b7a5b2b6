from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

from PySide6.QtCore import QUrl
from PySide6.QtWidgets import QApplication, QStyle, QSystemTrayIcon
from PySide6.QtQml import QQmlApplicationEngine, QQmlEngine

from remindnotes.constants import APP_NAME
from remindnotes.controller import NotesController

logger = logging.getLogger(__name__)


def _configure_logging() -> None:
    level = os.environ.get("REMINDNOTES_LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _make_tray(app: QApplication) -> QSystemTrayIcon | None:
    if not QSystemTrayIcon.isSystemTrayAvailable():
        logger.warning("System tray not available; notifications are disabled")
        return None
    tray = QSystemTrayIcon(app.style().standardIcon(QStyle.StandardPixmap.SP_MessageBoxInformation), app)
    tray.setToolTip(APP_NAME)
    tray.show()
    return tray


def main(argv: list[str] | None = None) -> int:
    argv = list(sys.argv if argv is None else argv)
    _configure_logging()

    # Workaround: Some QtQuick.Controls styles (e.g., Fusion/Material) are broken
    # in this environment and fail to instantiate core controls like TextField/Menu.
    # Force the lightweight Basic style before the QApplication is created.
    os.environ.setdefault("QT_QUICK_CONTROLS_STYLE", "Basic")

    app = QApplication(argv)
    app.setQuitOnLastWindowClosed(True)

    engine = QQmlApplicationEngine()
    controller = NotesController(_make_tray(app))
    controller.setParent(app)
    QQmlEngine.setObjectOwnership(controller, QQmlEngine.ObjectOwnership.CppOwnership)
    engine.rootContext().setContextProperty("RN", controller)

    qml_path = Path(__file__).resolve().parent / "qml" / "Main.qml"
    engine.load(QUrl.fromLocalFile(str(qml_path)))

    if not engine.rootObjects():
        logger.error("Failed to load %s", qml_path)
        return 1

    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
