"""Patient registration: input normalisation, validation and ticket issuing."""

import logging
import re
from typing import Dict, List, Tuple

from .tickets import PriorityClass, Ticket

logger = logging.getLogger(__name__)

MIN_NAME_LENGTH = 3
MIN_AGE = 1
MAX_AGE = 120
GENDERS = {"M": "Male", "F": "Female", "O": "Other"}
DEFAULT_ROOMS = 5

_NON_NAME_CHARS = re.compile(r"[^a-zA-ZÀ-ÿ\s]")
_NON_DIGITS = re.compile(r"[^0-9]")


class RegistrationError(ValueError):
    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field


def format_name(text: str) -> str:
    """Strip anything but letters and spaces, capitalise each word."""
    cleaned = _NON_NAME_CHARS.sub("", text)
    return " ".join(word[:1].upper() + word[1:].lower() for word in cleaned.split(" "))


def format_age(text: str) -> str:
    return _NON_DIGITS.sub("", text)[:3]


def classify_priority(age: int) -> PriorityClass:
    # elderly patients and infants are served first
    if age >= 60 or age <= 2:
        return PriorityClass.PRIORITY
    return PriorityClass.NORMAL


def specialty_for_age(age: int) -> str:
    if age <= 12:
        return "Pediatrics or Pediatric Neurology"
    if age <= 18:
        return "Pediatric Endocrinology or Adolescent Psychiatry"
    if age <= 40:
        return "Dermatology or Gynecology/Urology"
    if age <= 60:
        return "Cardiology or Orthopedics"
    return "Geriatrics or Ophthalmology"


def validate(name: str, age, gender: str) -> Tuple[str, int, str]:
    """Return normalised ``(name, age, gender)`` or raise RegistrationError."""
    name = format_name(name or "").strip()
    if len(name) < MIN_NAME_LENGTH:
        raise RegistrationError(
            "name", f"Name must have at least {MIN_NAME_LENGTH} characters"
        )

    try:
        age_value = int(format_age(str(age)))
    except ValueError:
        raise RegistrationError("age", "Age must be a whole number") from None
    if not MIN_AGE <= age_value <= MAX_AGE:
        raise RegistrationError("age", f"Age must be between {MIN_AGE} and {MAX_AGE}")

    gender = (gender or "").strip().upper()
    if gender not in GENDERS:
        raise RegistrationError("gender", "Gender must be one of M, F or O")

    return name, age_value, gender


class Registrar:
    """Issues tickets with per-class sequence numbers, e.g. ``P001`` or ``C014``.

    A code and a room are only used up once the ticket is accepted, so a
    rejected enrollment leaves no gap in the sequence.
    """

    MAX_SEQUENCE = 999

    def __init__(self, rooms: int = DEFAULT_ROOMS):
        if rooms <= 0:
            raise ValueError("rooms must be positive")
        self.rooms = rooms
        self._sequences: Dict[PriorityClass, int] = {cls: 0 for cls in PriorityClass}
        self._issued = 0

    def peek_code(self, priority_class: PriorityClass) -> str:
        """Code the next ticket of ``priority_class`` will get; wraps 999 -> 001."""
        seq = self._sequences[priority_class] % self.MAX_SEQUENCE + 1
        return f"{priority_class.prefix}{seq:03d}"

    def register(self, name: str, age, gender: str) -> Ticket:
        ticket = self._build(name, age, gender)
        self._commit(ticket)
        return ticket

    def enroll(self, engine, name: str, age, gender: str) -> Ticket:
        """Register a patient straight into ``engine``.

        Raises RegistrationError or DuplicateEnrollmentError without
        consuming a code or a room.
        """
        ticket = self._build(name, age, gender)
        engine.enroll(ticket)
        self._commit(ticket)
        return ticket

    def seed(self, engine) -> List[Ticket]:
        """Enroll the demo patients from ``sample_registrations`` into ``engine``."""
        return [self.enroll(engine, *row) for row in sample_registrations()]

    def _build(self, name: str, age, gender: str) -> Ticket:
        name, age_value, gender = validate(name, age, gender)
        priority_class = classify_priority(age_value)
        return Ticket(
            ticket_id=self.peek_code(priority_class),
            subject=name,
            priority_class=priority_class,
            counter_label=str(self._issued % self.rooms + 1),
            age=age_value,
            gender=gender,
            specialty=specialty_for_age(age_value),
        )

    def _commit(self, ticket: Ticket):
        cls = ticket.priority_class
        self._sequences[cls] = self._sequences[cls] % self.MAX_SEQUENCE + 1
        self._issued += 1
        logger.info("Issued ticket %s for room %s", ticket.ticket_id, ticket.counter_label)


def sample_registrations() -> List[Tuple[str, int, str]]:
    return [
        ("Ana Souza", 34, "F"),
        ("José Pereira", 72, "M"),
        ("Lucas Almeida", 8, "M"),
        ("Maria Oliveira", 1, "F"),
        ("Carla Mendes", 45, "F"),
        ("Rui Santos", 65, "O"),
    ]
