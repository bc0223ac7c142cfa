# UI.py
"""""PySide6 workbench for the expression engine.

Structure
---------
- Workbench UI: expression line, variable bindings, result and renderings
- Settings UI: modal dialog for user preferences

Responsibilities (Workbench)
----------------------------
- Read the expression, the `name = value` bindings and the differentiation names
- Dispatch evaluation to MathEngine in a worker thread
- Show the result, the infix rendering and (optionally) the LaTeX rendering
- Show MathEngine errors as dialogs with their code and caret diagram
- Clipboard integration (Shift + clipboard button pastes) and dark mode

Threading Note
--------------
Evaluation is executed off the UI thread in Worker(QObject), so the UI can still handle events.
Results (or errors) are emitted via a Qt signal and handled back in the UI.
"""""

import logging
import sys
import threading

from PySide6 import QtWidgets
from PySide6.QtCore import Qt, QObject, Signal
from pynput.keyboard import Controller
import pyperclip

from . import error as E
from . import config_manager as config_manager
from . import MathEngine as MathEngine
from . import ScientificEngine as ScientificEngine
from .nodes import EvaluationContext
from .registry import get_default_registry

logger = logging.getLogger(__name__)


def is_shift_pressed():
    """""

    Small and simple check, whether shift is pressed or not.
    Used for the "shift to paste" behaviour of the clipboard button.

    """""

    keyboard_controller = Controller()
    return keyboard_controller.shift_pressed


def parse_bindings(text):
    """Turn `name = value` lines into a bindings dict.

    Values that read as numbers are bound as floats, everything else is kept
    as an expression string and substituted when the variable is used.
    """
    bindings = {}
    for line_number, line in enumerate(text.splitlines(), start=1):
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            raise E.ContextError(f"Line {line_number}: expected 'name = value', got '{line}'")
        name, value = (part.strip() for part in line.split("=", 1))
        if not name or not value:
            raise E.ContextError(f"Line {line_number}: expected 'name = value', got '{line}'")
        try:
            bindings[name] = float(value)
        except ValueError:
            bindings[name] = value
    return bindings


def parse_differentiation_names(text):
    return [name.strip() for name in text.split(",") if name.strip()]


class Worker(QObject):
    """""

    Runs on a separate thread, responsible for transmitting the problem to MathEngine.py
    and emits a Signal when the calculation is done / failed back to the workbench

    """""

    job_finished = Signal(object, str, str, str)

    def __init__(self, problem, bindings_text, diff_text):
        super().__init__()
        self.data = problem
        self.bindings_text = bindings_text
        self.diff_text = diff_text

    def run_Calc(self):
        try:
            bindings = parse_bindings(self.bindings_text)
            diff_names = parse_differentiation_names(self.diff_text)
            context = EvaluationContext(bindings, diff_names)

            result = MathEngine.calculate(self.data, bindings, differentiation_names=diff_names)
            tree = MathEngine.parse_expression(self.data)
            infix = MathEngine.render(tree, context)
            latex = MathEngine.render_latex(tree, context)
            self.job_finished.emit(result, infix, latex, self.data)

        except E.MathError as e:
            # Found a known, handled error (e.g., "Division by zero")
            if e.equation is None:
                e.equation = self.data
            self.job_finished.emit(e, "", "", self.data)

        except Exception as e:
            # Found an unexpected crash we didn't plan for
            logger.exception("Worker crashed on %r", self.data)
            critical_error = E.MathError(
                message=f"Unexpected crash: {e}",
                code="9999",
                equation=self.data
            )
            self.job_finished.emit(critical_error, "", "", self.data)


class SettingsDialog(QtWidgets.QDialog):
    """""

    Manages the settings window, saves the new settings and opens an error
    message if something went wrong.

    All of the Settings can be seperated into two categories:
    1. Checkboxes   (Managed with True or False)
    2. Input Fields (Managed as integers)

    """""

    settings_saved = Signal()

    # Smallest accepted value per integer setting
    MINIMUMS = {
        "decimal_places": 2,
        "decimal_precision": 17,
        "max_parse_depth": 1,
        "max_substitution_depth": 1,
    }

    # Largest accepted value; deeper limits run into the interpreter recursion limit
    MAXIMUMS = {
        "decimal_precision": 128,
        "max_parse_depth": 250,
        "max_substitution_depth": 100,
    }

    def __init__(self, parent=None):
        super().__init__(parent)
        self.widgets = {}

        # --- 1. Window Setup ---
        self.setWindowTitle("Workbench Settings")
        self.setMinimumSize(340, 260)

        main_layout = QtWidgets.QVBoxLayout(self)

        # --- 2. Load Settings ---
        self.setting_value_list = config_manager.load_setting_value("all")
        self.setting_description_list = config_manager.load_setting_description("all")

        # --- 3. Build Widgets ---
        for key_value, value in self.setting_value_list.items():
            description = self.setting_description_list.get(key_value, key_value)

            # --- 3a. Checkbox Builder (for Boolean settings) ---
            if isinstance(value, bool):
                checkbox = QtWidgets.QCheckBox(description)
                checkbox.setChecked(value)
                main_layout.addWidget(checkbox)
                self.widgets[key_value] = checkbox

            # --- 3b. Input Field Builder (for Integer settings) ---
            elif isinstance(value, int):
                row_h_layout = QtWidgets.QHBoxLayout()
                main_layout.addLayout(row_h_layout)
                minimum = self.MINIMUMS.get(key_value, 0)
                maximum = self.MAXIMUMS.get(key_value)
                limits = f"min. {minimum}" if maximum is None else f"{minimum}-{maximum}"
                label = QtWidgets.QLabel(f"{description} ({limits}):")
                input_field = QtWidgets.QLineEdit()
                input_field.setPlaceholderText(str(value))
                row_h_layout.addWidget(label)
                row_h_layout.addWidget(input_field)
                row_h_layout.setStretch(1, 1)
                self.widgets[key_value] = input_field

        # --- 4. OK / Cancel Buttons ---
        button_box = QtWidgets.QDialogButtonBox(QtWidgets.QDialogButtonBox.Ok | QtWidgets.QDialogButtonBox.Cancel)
        main_layout.addWidget(button_box)
        main_layout.addStretch(1)

        button_box.accepted.connect(lambda: self.save_settings(self.setting_value_list))
        button_box.rejected.connect(self.reject)

        self.update_darkmode()

    def save_settings(self, setting_value_list):
        for key_value, widget in self.widgets.items():

            # --- Handle Checkboxes ---
            if isinstance(widget, QtWidgets.QCheckBox):
                setting_value_list[key_value] = widget.isChecked()

            # --- Handle Input Fields ---
            elif isinstance(widget, QtWidgets.QLineEdit):
                new_value_str = widget.text().strip()
                if new_value_str == "":
                    continue  # Blank keeps the old value

                try:
                    new_value_int = int(new_value_str)
                    minimum = self.MINIMUMS.get(key_value, 0)
                    if new_value_int < minimum:
                        raise ValueError(f"'{new_value_int}' is too small. Minimum is {minimum}.")
                    maximum = self.MAXIMUMS.get(key_value)
                    if maximum is not None and new_value_int > maximum:
                        raise ValueError(f"'{new_value_int}' is too big. Maximum is {maximum}.")
                    setting_value_list[key_value] = new_value_int

                except ValueError as e:
                    # Show an error box and STOP the save process
                    QtWidgets.QMessageBox.critical(self, "Invalid Input:",
                                                   f"Error in input for '{key_value}':\n\n{e}\n\nPlease correct your input.")
                    return

        # --- Write to File ---
        saved_settings = config_manager.save_setting(setting_value_list)

        if saved_settings != {}:
            self.settings_saved.emit()
            self.accept()
        else:
            QtWidgets.QMessageBox.critical(self, "Error",
                                           f"Error 4501: {E.ERROR_MESSAGES['4501']}{config_manager.config_path()}")

    def update_darkmode(self):
        if self.setting_value_list["darkmode"] == True:
            self.setStyleSheet("""
                        QDialog {background-color: #121212;}
                        QLabel {color: white;}
                        QCheckBox {color: white;}
                        QLineEdit {background-color: #444444;color: white;border: 1px solid #666666;}
                        QDialogButtonBox QPushButton {background-color: #666666;color: white;}""")
        else:
            self.setStyleSheet("")


class ExpressionWorkbench(QtWidgets.QWidget):

    def __init__(self):
        super().__init__()

        # --- 1. Load Settings ---
        self.setting_value_list = config_manager.load_setting_value("all")

        # --- 2. Instance State Variables ---
        self.calculator_result = ""
        self.thread_active = False

        # --- 3. Window Setup ---
        self.setWindowTitle("Expression Workbench")
        self.resize(520, 420)
        main_v_layout = QtWidgets.QVBoxLayout(self)

        # --- 4. Inputs ---
        self.expression_input = QtWidgets.QLineEdit()
        self.expression_input.setPlaceholderText("Expression, e.g. (x + 1) * sin(pi/4)")
        self.expression_input.returnPressed.connect(self.start_calculation)
        main_v_layout.addWidget(QtWidgets.QLabel("Expression"))
        main_v_layout.addWidget(self.expression_input)

        self.bindings_input = QtWidgets.QPlainTextEdit()
        self.bindings_input.setPlaceholderText("x = 5\ny = 2*x + 1")
        main_v_layout.addWidget(QtWidgets.QLabel("Variables (one 'name = value' per line)"))
        main_v_layout.addWidget(self.bindings_input, 1)

        self.diff_input = QtWidgets.QLineEdit()
        self.diff_input.setPlaceholderText("x, y")
        main_v_layout.addWidget(QtWidgets.QLabel("Differentiation variables"))
        main_v_layout.addWidget(self.diff_input)

        # --- 5. Output ---
        self.display = QtWidgets.QLineEdit("")
        self.display.setAlignment(Qt.AlignmentFlag.AlignRight)
        self.display.setReadOnly(True)
        font = self.display.font()
        font.setPointSize(24)
        self.display.setFont(font)
        main_v_layout.addWidget(self.display)

        self.infix_label = QtWidgets.QLabel("")
        self.infix_label.setTextInteractionFlags(Qt.TextInteractionFlag.TextSelectableByMouse)
        main_v_layout.addWidget(self.infix_label)

        self.latex_label = QtWidgets.QLabel("")
        self.latex_label.setTextInteractionFlags(Qt.TextInteractionFlag.TextSelectableByMouse)
        main_v_layout.addWidget(self.latex_label)

        # --- 6. Buttons ---
        button_row = QtWidgets.QHBoxLayout()
        main_v_layout.addLayout(button_row)

        self.settings_button = QtWidgets.QPushButton("⚙️")
        self.settings_button.clicked.connect(self.open_settings)
        self.clipboard_button = QtWidgets.QPushButton("📋")
        self.clipboard_button.setToolTip("Copy result (hold Shift to paste into the expression)")
        self.clipboard_button.clicked.connect(self.handle_clipboard)
        self.clear_button = QtWidgets.QPushButton("C")
        self.clear_button.clicked.connect(self.clear)
        self.return_button = QtWidgets.QPushButton("⏎")
        self.return_button.clicked.connect(self.start_calculation)

        for button in (self.settings_button, self.clipboard_button, self.clear_button, self.return_button):
            button_row.addWidget(button)

        self.update_darkmode()

    # --- Actions ---

    def clear(self):
        self.expression_input.clear()
        self.display.clear()
        self.infix_label.clear()
        self.latex_label.clear()

    def handle_clipboard(self):
        # Shift held → paste into the expression, otherwise copy the result
        if is_shift_pressed():
            clipboard_text = QtWidgets.QApplication.clipboard().text()
            if clipboard_text:
                self.expression_input.insert(clipboard_text)
                if self.setting_value_list["after_paste_enter"] == True:
                    self.start_calculation()
        else:
            pyperclip.copy(self.display.text())

    def start_calculation(self):
        problem = self.expression_input.text()
        if self.thread_active:
            logger.warning("Error 4002: %s", E.ERROR_MESSAGES["4002"])
            return

        self.thread_active = True
        self.update_return_button()
        self.display.setText("...")
        QtWidgets.QApplication.processEvents()  # Force UI update *before* starting thread

        worker_instance = Worker(problem, self.bindings_input.toPlainText(), self.diff_input.text())
        worker_instance.job_finished.connect(self.Calc_result)
        my_thread = threading.Thread(target=worker_instance.run_Calc, daemon=True)
        my_thread.start()
        self.worker_instance = worker_instance  # Keep the QObject alive until the signal fired

    def Calc_result(self, result, infix, latex, equation):
        self.thread_active = False
        self.update_return_button()

        if isinstance(result, E.MathError):
            error_obj = result
            error_box = QtWidgets.QMessageBox(self)
            error_code = error_obj.code
            additional_info = f"Details: {error_obj.message}\nEquation: {error_obj.equation}"

            error_box.setIcon(QtWidgets.QMessageBox.Critical)
            error_box.setWindowTitle("Calculation error")
            error_box.setText(f"Error {error_code}: {E.ERROR_MESSAGES.get(error_code, 'Unknown error')}")
            error_box.setInformativeText(additional_info)
            error_box.setStandardButtons(QtWidgets.QMessageBox.Ok)
            error_box.setStyleSheet(self.get_message_box_stylesheet())
            error_box.exec()
            self.display.setText("")
            return

        self.calculator_result = result.strip()
        if self.setting_value_list["show_equation"] == True:
            self.display.setText(f"{equation} {self.calculator_result}")
        else:
            self.display.setText(self.calculator_result)

        self.infix_label.setText(infix)
        if self.setting_value_list["show_latex"] == True:
            self.latex_label.setText(latex)
        else:
            self.latex_label.clear()

    # --- Appearance ---

    def update_return_button(self):
        if self.thread_active == True:
            self.return_button.setStyleSheet("background-color: #FF0000; color: white; font-weight: bold;")
            self.return_button.setText("X")
        else:
            self.return_button.setStyleSheet("background-color: #007bff; color: white; font-weight: bold;")
            self.return_button.setText("⏎")

    def update_darkmode(self):
        if self.setting_value_list["darkmode"] == True:
            self.setStyleSheet("""
                        QWidget {background-color: #121212; color: white;}
                        QLineEdit, QPlainTextEdit {background-color: #2e2e2e; color: white; border: 1px solid #444444;}
                        QPushButton {background-color: #2e2e2e; color: white; font-weight: bold;}""")
        else:
            self.setStyleSheet("")
        self.update_return_button()

    def get_message_box_stylesheet(self):
        if self.setting_value_list["darkmode"] == True:
            return """
                QMessageBox { background-color: #121212; color: white; }
                QLabel { color: white; }
                QPushButton { background-color: #2e2e2e; color: white; border: 1px solid #444444; padding: 5px 15px; }
            """
        return ""

    def open_settings(self):
        settings_dialog = SettingsDialog(self)
        settings_dialog.exec()  # "exec" makes the dialog modal

        # Reload settings after dialog closes
        self.setting_value_list = config_manager.load_setting_value("all")
        MathEngine.configure(self.setting_value_list)
        self.update_darkmode()


def main():
    # --- Main Application Entry Point ---
    MathEngine.configure()
    ScientificEngine.install(get_default_registry())
    app = QtWidgets.QApplication(sys.argv)
    window = ExpressionWorkbench()
    window.show()
    return app.exec()
