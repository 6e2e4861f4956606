"""
Custom exceptions for the StreakMate application.
Provides specific exception types for better error handling and recovery.
"""


class StreakMateException(Exception):
    """Base exception for StreakMate application"""
    pass


class HabitNotFoundException(StreakMateException):
    """Raised when a habit is not found (or not owned by the caller)"""
    def __init__(self, habit_id: int):
        self.habit_id = habit_id
        super().__init__(f"Habit with ID {habit_id} not found")


class NotificationNotFoundException(StreakMateException):
    """Raised when a notification is not found"""
    def __init__(self, notification_id: int):
        self.notification_id = notification_id
        super().__init__(f"Notification with ID {notification_id} not found")


class InvalidDateFormatException(StreakMateException):
    """Raised when a calendar date cannot be parsed"""
    def __init__(self, field: str, value):
        self.field = field
        self.value = value
        super().__init__(f"Invalid date in {field}: {value!r}. Expected YYYY-MM-DD")


class InvalidTimeFormatException(StreakMateException):
    """Raised when time format is invalid"""
    def __init__(self, field: str, time_str):
        self.field = field
        self.time_str = time_str
        super().__init__(f"Invalid time format in {field}: {time_str!r}. Expected HH:MM")


class ValidationException(StreakMateException):
    """Raised when data validation fails"""
    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(f"Validation error for {field}: {message}")


class HabitMissedException(StreakMateException):
    """Raised when completing a habit that must be restored first"""
    def __init__(self, habit_id: int):
        self.habit_id = habit_id
        super().__init__(f"Habit {habit_id} is missed. Restore it before marking it complete")


class HabitNotMissedException(StreakMateException):
    """Raised when restoring a habit that is not missed"""
    def __init__(self, habit_id: int, status: str):
        self.habit_id = habit_id
        self.status = status
        super().__init__(f"Habit {habit_id} cannot be restored: status is {status}")


class HabitAlreadyCompletedException(StreakMateException):
    """Raised when restoring a habit already completed today"""
    def __init__(self, habit_id: int):
        self.habit_id = habit_id
        super().__init__(f"Habit {habit_id} was already completed today")


class RestoreQuotaExceededException(StreakMateException):
    """Raised when the monthly restore allowance is used up"""
    def __init__(self, limit: int):
        self.limit = limit
        super().__init__(
            f"No restore chances remaining this month. You get {limit} chances per month."
        )


class MissedStreakNotAllowedException(StreakMateException):
    """Raised when explaining a miss for a habit that is too new to have one"""
    def __init__(self, habit_id: int):
        self.habit_id = habit_id
        super().__init__(
            "Cannot submit missed streak for habits created today or yesterday."
        )
