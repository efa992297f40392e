"""
Task subsystem.

Components:
- task_models.py: data structures (Task, Priority, DueClass, Tab, views/events)
- task_store.py: in-memory mirror of the latest backend snapshot
- views.py: classification, display order, tab filters, counters
- reminders.py: due-soon reminder detection + delivery
"""
