"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from datetime import time

EXPORT_FORMAT_VERSION = "1.0.0"

DEFAULT_MAX_STUDENTS = 35
MIN_GRADE = 1
MAX_GRADE = 12

MIN_PASSWORD_LENGTH = 6
MIN_USERNAME_LENGTH = 3
MIN_STUDENT_NAME_LENGTH = 2
MIN_STUDENT_CODE_LENGTH = 3
MIN_SEARCH_QUERY_LENGTH = 2

DEFAULT_SESSION_DAYS = 7

DEFAULT_SCHOOL_NAME = "Virtual Academy"
DEFAULT_ACADEMIC_YEAR = "2024-2025"
DEFAULT_SEMESTER = "1st Semester"
DEFAULT_ATTENDANCE_DEADLINE = time(10, 0)
DEFAULT_TIMEZONE = "UTC"
