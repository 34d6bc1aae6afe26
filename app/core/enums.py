"""Core enums used across modules."""

from enum import StrEnum


class RoleEnum(StrEnum):
    """System roles."""

    ADMIN = "admin"
    PHOTOGRAPHER = "photographer"
    CLIENT = "client"
    BROKER = "broker"
    EDITOR = "editor"


class Capability(StrEnum):
    """Closed set of permissions checked at the service boundary."""

    MANAGE_CATALOG = "manage_catalog"
    MANAGE_PHOTOGRAPHERS = "manage_photographers"
    MANAGE_CLIENTS = "manage_clients"
    SCHEDULE_BOOKINGS = "schedule_bookings"
    SCHEDULE_ANY_CLIENT = "schedule_any_client"
    MANAGE_TIME_OFF = "manage_time_off"
    VIEW_ALL_BOOKINGS = "view_all_bookings"
    COMPLETE_BOOKINGS = "complete_bookings"
    VIEW_AUDIT = "view_audit"
    OPTIMIZE_ROUTES = "optimize_routes"


class BookingStatusEnum(StrEnum):
    """Booking lifecycle status."""

    DRAFT = "draft"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# Statuses that occupy a photographer's calendar.
BUSY_BOOKING_STATUSES = frozenset({BookingStatusEnum.CONFIRMED, BookingStatusEnum.COMPLETED})


class WeekdayEnum(StrEnum):
    """Weekday keys of the availability template, Monday first like ``date.weekday()``."""

    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"

    @classmethod
    def from_index(cls, index: int) -> "WeekdayEnum":
        return list(cls)[index]


class OutboxStatusEnum(StrEnum):
    """Outbox event status for integration publishing."""

    PENDING = "pending"
    PROCESSED = "processed"
    FAILED = "failed"
