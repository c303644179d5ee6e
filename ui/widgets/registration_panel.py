from PyQt6.QtCore import pyqtSignal, Qt
from PyQt6.QtWidgets import (
    QWidget,
    QVBoxLayout,
    QFormLayout,
    QLineEdit,
    QComboBox,
    QPushButton,
    QHBoxLayout,
    QLabel,
    QGroupBox,
    QMessageBox,
)

from clinic_queue.queue_store import DuplicateEnrollmentError
from clinic_queue.registration import (
    GENDERS,
    RegistrationError,
    classify_priority,
    format_age,
    format_name,
    specialty_for_age,
    validate,
)
from clinic_queue.tickets import PriorityClass


def _format_label(text: str) -> QLabel:
    label = QLabel(text)
    label.setStyleSheet("font-weight: bold; color: #102a43;")
    return label


class RegistrationPanel(QWidget):
    """Patient registration form plus the dispatch start/stop controls."""

    start_requested = pyqtSignal()
    stop_requested = pyqtSignal()
    ticket_enrolled = pyqtSignal(str)
    sample_requested = pyqtSignal()

    def __init__(self, engine, registrar, parent=None):
        super().__init__(parent)
        self.engine = engine
        self.registrar = registrar
        self._build_ui()
        self._update_submit_state()

    def _build_ui(self):
        layout = QVBoxLayout(self)
        layout.setContentsMargins(8, 8, 8, 8)
        layout.setSpacing(12)

        header = QLabel("Patient registration")
        header.setProperty("class", "section-title")
        helper = QLabel("Register a walk-in patient to issue a queue ticket.")
        helper.setWordWrap(True)
        helper.setProperty("class", "helper-text")
        layout.addWidget(header)
        layout.addWidget(helper)

        form_group = QGroupBox("Patient details")
        form_layout = QFormLayout()
        form_layout.setFormAlignment(form_layout.formAlignment() | Qt.AlignmentFlag.AlignLeft)
        form_layout.setHorizontalSpacing(12)
        form_layout.setVerticalSpacing(10)

        self.name_edit = QLineEdit()
        self.name_edit.setMaxLength(100)
        self.name_edit.setPlaceholderText("Full name")
        self.name_edit.textEdited.connect(self._on_name_edited)

        self.age_edit = QLineEdit()
        self.age_edit.setMaxLength(3)
        self.age_edit.setPlaceholderText("Age")
        self.age_edit.textEdited.connect(self._on_age_edited)

        self.gender_combo = QComboBox()
        self.gender_combo.addItem("", "")
        for code, label in GENDERS.items():
            self.gender_combo.addItem(f"{code} – {label}", code)
        self.gender_combo.currentIndexChanged.connect(self._update_submit_state)

        form_layout.addRow(_format_label("Name"), self.name_edit)
        form_layout.addRow(_format_label("Age"), self.age_edit)
        form_layout.addRow(_format_label("Gender"), self.gender_combo)

        self.submit_button = QPushButton("Continue")
        self.submit_button.setMinimumHeight(38)
        self.submit_button.clicked.connect(self._on_submit)
        form_layout.addRow(self.submit_button)

        form_group.setLayout(form_layout)
        layout.addWidget(form_group)

        actions_group = QGroupBox("Queue")
        button_row = QHBoxLayout()
        button_row.setSpacing(10)

        self.start_button = QPushButton("Start")
        self.start_button.clicked.connect(self.start_requested.emit)
        self.start_button.setMinimumHeight(38)
        self.stop_button = QPushButton("Stop")
        self.stop_button.clicked.connect(self.stop_requested.emit)
        self.stop_button.setMinimumHeight(38)
        self.sample_button = QPushButton("Load sample")
        self.sample_button.clicked.connect(self.sample_requested.emit)
        self.sample_button.setMinimumHeight(38)

        button_row.addWidget(self.start_button)
        button_row.addWidget(self.stop_button)
        button_row.addWidget(self.sample_button)

        actions_group.setLayout(button_row)
        layout.addWidget(actions_group)
        layout.addStretch()

    def _on_name_edited(self, text: str):
        self.name_edit.setText(format_name(text))
        self._update_submit_state()

    def _on_age_edited(self, text: str):
        self.age_edit.setText(format_age(text))
        self._update_submit_state()

    def _form_values(self):
        return self.name_edit.text(), self.age_edit.text(), self.gender_combo.currentData() or ""

    def _update_submit_state(self, *_):
        try:
            validate(*self._form_values())
        except RegistrationError:
            self.submit_button.setEnabled(False)
        else:
            self.submit_button.setEnabled(True)

    def _on_submit(self):
        try:
            name, age, gender = validate(*self._form_values())
        except RegistrationError as exc:
            QMessageBox.warning(self, "Invalid data", str(exc))
            return

        priority = classify_priority(age)
        summary = (
            f"Name: {name}\n"
            f"Age: {age}\n"
            f"Gender: {GENDERS[gender]}\n"
            f"Specialty: {specialty_for_age(age)}\n"
            f"Class: {'Priority' if priority is PriorityClass.PRIORITY else 'Normal'}"
        )
        answer = QMessageBox.question(self, "Review details", summary)
        if answer != QMessageBox.StandardButton.Yes:
            return

        try:
            ticket = self.registrar.enroll(self.engine, name, age, gender)
        except DuplicateEnrollmentError as exc:
            QMessageBox.warning(self, "Ticket not issued", str(exc))
            return

        QMessageBox.information(
            self,
            "Ticket issued",
            f"Ticket {ticket.ticket_id}\nRoom {ticket.counter_label}\nPlease wait to be called.",
        )
        self.clear_form()
        self.ticket_enrolled.emit(ticket.ticket_id)

    def clear_form(self):
        self.name_edit.clear()
        self.age_edit.clear()
        self.gender_combo.setCurrentIndex(0)
        self._update_submit_state()
