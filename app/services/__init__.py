# app/services/__init__.py
# Scheduling engine: time rules, availability, conflicts, lifecycle, reminders.
