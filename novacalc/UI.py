# UI.py
""""PySide6 user interface for NovaCalc.

Structure
---------
- Calculator window: equation line, operand display, button grid, history panel
- Settings dialog: modal dialog for user preferences

Responsibilities (Calculator)
-----------------------------
- Translate button clicks and key presses into CalculatorEngine calls
- Render the returned Snapshot through the display formatter
- Feed emitted records into the HistoryStore and the history list
- Pass precision and angle unit from the current Settings into each call
- Clipboard integration (copy result, Shift + click to paste a number)


Responsibilities (Settings)
---------------------------

- Build one widget per setting from config.json and ui_strings.json
- Validate through the Settings value object before saving
- Hand the new Settings back to the window, which applies them immediately


The engine is synchronous and cheap, so everything runs on the Qt thread.
"""

import sys
import logging
from PySide6 import QtWidgets
from PySide6.QtCore import Qt, Signal
from pynput.keyboard import Controller
import pyperclip

from . import error as E
from . import config_manager as config_manager
from . import display as display
from . import MathEngine as MathEngine
from . import ScientificEngine as ScientificEngine
from .history_store import HistoryStore

logger = logging.getLogger(__name__)

Button_Sizes = {"sm": (12, 40), "md": (16, 56), "lg": (20, 72)}

# Keyboard keys mapped to button values
Key_Map = {
    Qt.Key.Key_Return: "=",
    Qt.Key.Key_Enter: "=",
    Qt.Key.Key_Equal: "=",
    Qt.Key.Key_Backspace: "⌫",
    Qt.Key.Key_Escape: "AC",
    Qt.Key.Key_Delete: "AC",
}
Text_Map = {"+": "+", "-": "−", "*": "×", "x": "×", "/": "÷", "%": "%", "^": "^", ".": ".", ",": "."}


def is_shift_pressed():
    """""

    Small and simple check, whether shift is pressed or not.
    Used for the "shift to paste" setting, also when the window has no keyboard focus.

    """""

    keyboard_controller = Controller()
    return keyboard_controller.shift_pressed


def clipboard_number(text):
    """Return clipboard text as operand text, or raise MathError 4001."""
    cleaned = text.strip().replace(",", "")
    if not display.NUMBER_PATTERN.match(cleaned):
        raise E.MathError(f"'{text.strip()}'", code="4001")
    return cleaned


class SettingsDialog(QtWidgets.QDialog):
    """""

    Modal settings window. Every setting gets a widget matching its type:
    1. Checkboxes   (bool settings)
    2. Combo boxes  (settings with a fixed set of choices)
    3. Spin box     (precision, 0 to 8 decimal places)
    4. Input field  (theme colour)

    """""

    settings_saved = Signal(object)  # emits the new Settings

    def __init__(self, settings, parent=None):
        super().__init__(parent)
        self.settings = settings
        self.widgets = {}

        self.setWindowTitle("NovaCalc Settings")
        self.setMinimumSize(320, 280)
        main_layout = QtWidgets.QVBoxLayout(self)
        form_layout = QtWidgets.QFormLayout()
        main_layout.addLayout(form_layout)

        descriptions = config_manager.load_setting_description("all")

        for key_value, value in settings.to_dict().items():
            description = descriptions.get(key_value, key_value)

            if isinstance(value, bool):
                widget = QtWidgets.QCheckBox(description)
                widget.setChecked(value)
                form_layout.addRow(widget)

            elif key_value in config_manager.Setting_Choices:
                widget = QtWidgets.QComboBox()
                widget.addItems(list(config_manager.Setting_Choices[key_value]))
                widget.setCurrentText(value)
                form_layout.addRow(description, widget)

            elif key_value == "precision":
                widget = QtWidgets.QSpinBox()
                widget.setRange(MathEngine.MIN_PRECISION, MathEngine.MAX_PRECISION)
                widget.setValue(value)
                form_layout.addRow(description, widget)

            else:
                widget = QtWidgets.QLineEdit(str(value))
                form_layout.addRow(description, widget)

            self.widgets[key_value] = widget

        button_box = QtWidgets.QDialogButtonBox(QtWidgets.QDialogButtonBox.Ok | QtWidgets.QDialogButtonBox.Cancel)
        main_layout.addWidget(button_box)
        button_box.accepted.connect(self.save_settings)
        button_box.rejected.connect(self.reject)

        self.setStyleSheet(dialog_stylesheet(settings))

    def collect_values(self):
        values = {}
        for key_value, widget in self.widgets.items():
            if isinstance(widget, QtWidgets.QCheckBox):
                values[key_value] = widget.isChecked()
            elif isinstance(widget, QtWidgets.QComboBox):
                values[key_value] = widget.currentText()
            elif isinstance(widget, QtWidgets.QSpinBox):
                values[key_value] = widget.value()
            else:
                values[key_value] = widget.text().strip()
        return values

    def save_settings(self):
        try:
            new_settings = config_manager.Settings.from_dict(self.collect_values())
            config_manager.save_settings(new_settings)
        except E.ConfigurationError as e:
            logger.warning("Settings not saved: %s", e)
            QtWidgets.QMessageBox.critical(self, "Invalid Input", E.describe(e))
            return

        self.settings = new_settings
        self.settings_saved.emit(new_settings)
        self.accept()


def dialog_stylesheet(settings):
    if settings.darkmode:
        return """
            QDialog {background-color: #121212;}
            QLabel, QCheckBox {color: white;}
            QLineEdit, QComboBox, QSpinBox {background-color: #444444; color: white; border: 1px solid #666666;}
            QDialogButtonBox QPushButton {background-color: #666666; color: white;}"""
    return ""


class CalculatorWindow(QtWidgets.QWidget):

    def __init__(self, settings=None):
        super().__init__()

        # --- 1. Settings and collaborators ---
        self.settings = settings or config_manager.load_settings()
        self.history = HistoryStore()
        if self.settings.save_history:
            self.history.restore(config_manager.load_history())
        self.engine = MathEngine.CalculatorEngine(on_record=self.add_record)
        self.shift_is_held = False
        self.button_objects = {}

        # --- 2. Window Setup ---
        self.setWindowTitle("NovaCalc")
        self.resize(420, 620)
        main_h_layout = QtWidgets.QHBoxLayout(self)
        calculator_v_layout = QtWidgets.QVBoxLayout()
        main_h_layout.addLayout(calculator_v_layout, 3)

        # --- 3. Display Setup ---
        self.equation_label = QtWidgets.QLabel("")
        self.equation_label.setAlignment(Qt.AlignmentFlag.AlignRight)
        calculator_v_layout.addWidget(self.equation_label)

        self.display = QtWidgets.QLineEdit("0")
        self.display.setAlignment(Qt.AlignmentFlag.AlignRight)
        self.display.setReadOnly(True)
        font = self.display.font()
        font.setPointSize(36)
        self.display.setFont(font)
        calculator_v_layout.addWidget(self.display)

        self.status_label = QtWidgets.QLabel("")
        self.status_label.setAlignment(Qt.AlignmentFlag.AlignRight)
        calculator_v_layout.addWidget(self.status_label)

        # --- 4. Button Grid ---
        self.button_container = QtWidgets.QWidget()
        calculator_v_layout.addWidget(self.button_container, 1)
        self.button_grid = QtWidgets.QGridLayout(self.button_container)
        self.button_grid.setSpacing(4)

        # --- 5. History Panel ---
        history_v_layout = QtWidgets.QVBoxLayout()
        main_h_layout.addLayout(history_v_layout, 2)
        history_v_layout.addWidget(QtWidgets.QLabel("History"))
        self.history_list = QtWidgets.QListWidget()
        history_v_layout.addWidget(self.history_list, 1)
        clear_history_button = QtWidgets.QPushButton("Clear history")
        clear_history_button.clicked.connect(self.clear_history)
        history_v_layout.addWidget(clear_history_button)

        self.build_buttons()
        self.refresh_history()
        self.apply_theme()
        self.render(self.engine.snapshot())

    # --- Button Setup ---
    def button_definitions(self):
        # (text, row, column)
        buttons = [
            ('⚙️', 0, 0), ('📋', 0, 1), ('±', 0, 2), ('⌫', 0, 3),
            ('AC', 1, 0), ('%', 1, 1), ('^', 1, 2), ('÷', 1, 3),
            ('7', 2, 0), ('8', 2, 1), ('9', 2, 2), ('×', 2, 3),
            ('4', 3, 0), ('5', 3, 1), ('6', 3, 2), ('−', 3, 3),
            ('1', 4, 0), ('2', 4, 1), ('3', 4, 2), ('+', 4, 3),
            ('0', 5, 0), ('.', 5, 2), ('=', 5, 3),
        ]
        if self.settings.layout == "scientific":
            # Scientific panel sits in columns 4 and 5
            scientific = list(ScientificEngine.Science_Labels) + ["π", "e"]
            for index, value in enumerate(scientific):
                buttons.append((value, index // 2, 4 + index % 2))
        return buttons

    def build_buttons(self):
        for button in self.button_objects.values():
            self.button_grid.removeWidget(button)
            button.deleteLater()
        self.button_objects = {}

        font_size, min_height = Button_Sizes[self.settings.button_size]
        expanding_policy = QtWidgets.QSizePolicy(
            QtWidgets.QSizePolicy.Policy.Expanding,
            QtWidgets.QSizePolicy.Policy.Expanding
        )

        for value, row, col in self.button_definitions():
            label = ScientificEngine.Science_Labels.get(value, value)
            button = QtWidgets.QPushButton(label)
            button.setSizePolicy(expanding_policy)
            button.setMinimumHeight(min_height)
            font = button.font()
            font.setPointSize(font_size)
            button.setFont(font)

            if value == '⚙️':
                button.clicked.connect(self.open_settings)
            else:
                button.clicked.connect(lambda checked=False, val=value: self.handle_button_press(val))

            column_span = 2 if value == '0' else 1
            self.button_grid.addWidget(button, row, col, 1, column_span)
            self.button_objects[value] = button

    # --- Key Event Handlers ---
    def keyPressEvent(self, event):
        if event.key() == Qt.Key.Key_Shift:
            self.shift_is_held = True
        elif event.key() in Key_Map:
            self.handle_button_press(Key_Map[event.key()])
            return
        elif event.text() and (event.text().isdigit() or event.text() in Text_Map):
            text = event.text()
            self.handle_button_press(text if text.isdigit() else Text_Map[text])
            return
        super().keyPressEvent(event)

    def keyReleaseEvent(self, event):
        if event.key() == Qt.Key.Key_Shift:
            self.shift_is_held = False
        super().keyReleaseEvent(event)

    # --- Dispatch ---
    def handle_button_press(self, value):
        engine = self.engine
        precision = self.settings.precision

        if value.isdigit():
            snapshot = engine.append_digit(value)
        elif value == ".":
            snapshot = engine.append_decimal_point()
        elif value in MathEngine.Operator_Symbols:
            snapshot = engine.apply_operator(value)
        elif value == "=":
            snapshot = engine.finalize(precision)
        elif value == "AC":
            snapshot = engine.clear_all()
        elif value == "⌫":
            snapshot = engine.delete_last()
        elif value == "±":
            snapshot = engine.toggle_sign()
        elif value in ("π", "e"):
            snapshot = engine.append_constant(value)
        elif value in ScientificEngine.Science_Labels:
            snapshot = engine.apply_scientific(value, precision, degrees=self.settings.degrees)
        elif value == "📋":
            self.handle_clipboard()
            return
        else:
            logger.warning("Unhandled button value %r", value)
            return

        self.render(snapshot)

    def handle_clipboard(self):
        paste = self.settings.shift_to_copy and (self.shift_is_held or is_shift_pressed())
        try:
            if not paste:
                pyperclip.copy(self.engine.operand)
                return
            text = clipboard_number(pyperclip.paste())
        except pyperclip.PyperclipException as e:
            logger.error("Clipboard not available: %s", e)
            return
        except E.MathError as e:
            self.show_error(e)
            return

        self.engine.clear_all()
        if text.startswith("-"):
            text = text[1:]
            negative = True
        else:
            negative = False
        for character in text:
            self.engine.append_digit(character)
        if negative:
            self.engine.toggle_sign()
        self.render(self.engine.snapshot())

    # --- Rendering ---
    def render(self, snapshot):
        grouping = self.settings.digit_grouping
        self.equation_label.setText(display.format_equation(snapshot.equation_text, grouping))
        self.display.setText(display.format_operand(snapshot.operand_text, grouping))

        label = display.state_label(snapshot.display_state)
        if label and self.engine.last_error is not None:
            self.status_label.setText(E.describe(self.engine.last_error))
        else:
            self.status_label.setText(label)

    def add_record(self, expression, result):
        record = self.history.add(expression, result)
        logger.info("History: %s = %s", record.expression, record.result)
        self.refresh_history()
        if self.settings.save_history:
            config_manager.save_history(self.history.export())

    def refresh_history(self):
        self.history_list.clear()
        for record in self.history:
            self.history_list.addItem(f"{record.expression} = {record.result}")

    def clear_history(self):
        self.history.clear()
        self.refresh_history()
        if self.settings.save_history:
            config_manager.save_history([])

    def show_error(self, error):
        error_box = QtWidgets.QMessageBox(self)
        error_box.setIcon(QtWidgets.QMessageBox.Critical)
        error_box.setWindowTitle("NovaCalc")
        error_box.setText(E.describe(error))
        error_box.setStandardButtons(QtWidgets.QMessageBox.Ok)
        error_box.exec()

    # --- Settings ---
    def open_settings(self):
        settings_dialog = SettingsDialog(self.settings, self)
        settings_dialog.settings_saved.connect(self.apply_settings)
        settings_dialog.exec()  # modal

    def apply_settings(self, settings):
        layout_changed = (settings.layout, settings.button_size) != (self.settings.layout, self.settings.button_size)
        self.settings = settings
        if layout_changed:
            self.build_buttons()
        if settings.save_history:
            config_manager.save_history(self.history.export())
        self.apply_theme()
        self.render(self.engine.snapshot())

    def apply_theme(self):
        accent = self.settings.theme_color
        if self.settings.darkmode:
            self.setStyleSheet("""
                QWidget {background-color: #121212; color: white;}
                QPushButton {background-color: #1f1f1f; border: 1px solid #2e2e2e; font-weight: bold;}
                QPushButton:hover {background-color: #2e2e2e;}
                QLineEdit {border: none; font-weight: bold;}
                QListWidget {background-color: #1a1a1a; border: 1px solid #2e2e2e;}""")
        else:
            self.setStyleSheet("QLineEdit {font-weight: bold;}")

        self.equation_label.setStyleSheet("color: gray;")
        self.status_label.setStyleSheet(f"color: {accent};")
        equal_button = self.button_objects.get('=')
        if equal_button:
            equal_button.setStyleSheet(f"background-color: {accent}; color: white; font-weight: bold;")


def main():
    # --- Main Application Entry Point (console script) ---
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    app = QtWidgets.QApplication(sys.argv)
    window = CalculatorWindow()
    window.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
