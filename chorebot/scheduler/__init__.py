from .reminders import ReminderScheduler

__all__ = ["ReminderScheduler"]
