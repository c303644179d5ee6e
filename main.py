"""Application entry point for the clinic walk-in queue GUI."""

import logging
import sys

from PyQt6.QtWidgets import QApplication

from clinic_queue.config import DispatchParams
from clinic_queue.engine import DispatchEngine
from clinic_queue.registration import Registrar
from ui.main_window import MainWindow


def main():
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
    app = QApplication(sys.argv)
    engine = DispatchEngine(DispatchParams.from_env())
    window = MainWindow(engine, Registrar())
    window.show()
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
