import enum


class RoleType(str, enum.Enum):
    ADMIN = "Admin"
    LECTURER = "Lecturer"
    STUDENT = "Student"


class RoomType(str, enum.Enum):
    CLASSROOM = "Classroom"
    LAB = "Lab"
    STADIUM = "Stadium"


class RoomStatus(str, enum.Enum):
    """Operational status of a room."""

    ACTIVE = "Active"
    MAINTENANCE = "Maintenance"
    CLOSED = "Closed"


class BookingStatus(str, enum.Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


# Statuses that still hold the room
ACTIVE_BOOKING_STATUSES = (BookingStatus.PENDING, BookingStatus.APPROVED)

# Statuses a room can carry in its approval workflow
ROOM_APPROVAL_STATUSES = (BookingStatus.PENDING, BookingStatus.APPROVED, BookingStatus.REJECTED)


class ReportStatus(str, enum.Enum):
    OPEN = "Open"
    RESOLVED = "Resolved"


# Booking statuses a requester can report room issues against
REPORTABLE_BOOKING_STATUSES = (BookingStatus.APPROVED, BookingStatus.COMPLETED)


class ScheduleType(str, enum.Enum):
    ACADEMIC_COURSE = "AcademicCourse"
    RECURRING_MAINTENANCE = "RecurringMaintenance"


DAY_NAMES = (
    "Sunday",
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
)
