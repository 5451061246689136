# Main.py
""""" Entry point for NovaCalc.

   Responsibilities:
   - Detect run mode (script vs PyInstaller.exe)
   - Verify required files exist in development mode
   - Configure logging, load settings and start the Qt GUI

"""""
import sys
import logging
from pathlib import Path

from novacalc import config_manager as config_manager, UI as UI


# Resolve project root depending on run mode (Script or .exe)

if getattr(sys, 'frozen', False):
    PROJECT_ROOT = Path(sys._MEIPASS)
else:
    PROJECT_ROOT = Path(__file__).resolve().parent

logger = logging.getLogger("novacalc")


def check_files_exist():

    """
      Fail fast in development if required files are missing / moved / renamed.
      In production (.exe) the files are embedded by the bundler and this check is skipped.
    """

    package_dir = PROJECT_ROOT / "novacalc"

    REQUIRED = [
        package_dir / "UI.py",
        package_dir / "MathEngine.py",
        package_dir / "ScientificEngine.py",
        package_dir / "config_manager.py",
        package_dir / "history_store.py",
        package_dir / "display.py",
        PROJECT_ROOT / "config.json",
        PROJECT_ROOT / "ui_strings.json",
    ]

    missing_files = [file_path.name for file_path in REQUIRED if not file_path.exists()]

    if missing_files:
        logger.error("The following files are missing or in the wrong location: %s", ", ".join(missing_files))
        sys.exit(1)


def main():

    """
    Load configuration and start the GUI.
    - Keep this thin: no business logic here.
    """

    settings = config_manager.load_settings()
    logger.info("Config loaded: %s", settings.to_dict())

    # Delegate control to the UI layer; the UI owns the event loop.
    app = UI.QtWidgets.QApplication(sys.argv)
    window = UI.CalculatorWindow(settings)
    window.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler()]
    )

    is_running_as_exe = getattr(sys, 'frozen', False)

    if not is_running_as_exe:
        logger.info("Developer Mode: Checking file paths...")
        check_files_exist()
    else:
        logger.info("Production mode (.exe) is starting...")
    main()
