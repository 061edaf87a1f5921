# clubhouse/errors.py


class ClubhouseError(Exception):
    status_code = 400
    code = "CLUBHOUSE_ERROR"
    default_message = "Request could not be completed"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class FormatError(ClubhouseError, ValueError):
    """A time string did not match the `H:MM AM|PM` pattern."""

    status_code = 422
    code = "INVALID_TIME_FORMAT"
    default_message = "Invalid time format"


class DurationError(ClubhouseError):
    status_code = 422
    code = "INVALID_DURATION"
    default_message = "Duration is outside the allowed range"


class ScheduleError(ClubhouseError):
    """The requested start time is not a bookable slot."""

    status_code = 422
    code = "OUTSIDE_OPENING_HOURS"
    default_message = "Appointment must start on an available time slot"


class ClosedDayError(ScheduleError):
    code = "CLOSED_DAY"
    default_message = "The club is closed on that day"


class ForbiddenError(ClubhouseError):
    status_code = 403
    code = "FORBIDDEN"
    default_message = "Forbidden"


class NotFoundError(ClubhouseError):
    status_code = 404
    code = "NOT_FOUND"
    default_message = "Not found"


class NumberInUseError(ClubhouseError):
    status_code = 409
    code = "NUMBER_IN_USE"
    default_message = "Number in use"
