"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

REGISTRATION_LEAD_MINUTES = 120
LATE_WINDOW_MINUTES = 15
MAX_SESSIONS_PER_DAY = 3

FACE_MATCH_THRESHOLD = 0.70
FAR_DISTANCE_METERS = 100
CHECKIN_BUFFER_MINUTES = 30

DEFAULT_HISTORY_LIMIT = 200
DEFAULT_LIST_LIMIT = 500

# Location notes written on check-in. Statistics match on these.
FAR_LOCATION_MARKER = "xa lớp học"
NOTE_FAR_FROM_CLASS = "Vị trí xa lớp học ({distance}m)"
NOTE_NO_CHECKIN_LOCATION = "Chưa có vị trí check-in"
NOTE_NO_CLASS_LOCATION = "Chưa có vị trí lớp học"

CHECKIN_IMAGE_FOLDER = "attendance_checkins"
CHECKOUT_IMAGE_FOLDER = "attendance_checkouts"
