"""TaskFlow: a personal to-do list with due-soon reminders."""

__version__ = "0.1.0"
