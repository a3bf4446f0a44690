import argparse
import logging
import sys

from PySide6.QtWidgets import QApplication

from certificate.core.editor import TemplateEditor
from certificate.core.settings import EditorSettings
from ui.main_window import MainWindow

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[
        logging.StreamHandler(sys.stdout)
    ]
)

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Certificate template layout editor")
    parser.add_argument("template_id", nargs="?", help="open an existing template")
    parser.add_argument("--settings", help="JSON file overriding environment settings")
    return parser.parse_known_args(argv)[0]


def load_settings(path=None) -> EditorSettings:
    settings = EditorSettings.from_env()
    if path:
        try:
            settings = settings.overlay_file(path)
        except (OSError, ValueError) as e:
            logger.warning("Ignoring settings file %s: %s", path, e)
    return settings


def main(argv=None):
    args = parse_args(argv)
    settings = load_settings(args.settings)
    logger.info("Using API %s", settings.api_base_url)

    app = QApplication(sys.argv)
    window = MainWindow(TemplateEditor(settings))
    window.show()
    if args.template_id:
        window.open_template(args.template_id)
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
