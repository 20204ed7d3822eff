from .diet_log import DietLog
