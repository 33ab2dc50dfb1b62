"""
Field bounds shared by the SQLAlchemy models (column sizes) and the
request schemas (validation).
"""

NAME_MIN = 2
NAME_MAX = 50
EMAIL_MAX = 150
PASSWORD_MIN = 6
PASSWORD_MAX = 128
BIO_MAX = 500
LOCATION_MAX = 100
PHOTO_URL_MAX = 500
AVAILABILITY_CUSTOM_MAX = 200

SKILL_MAX = 50
SWAP_SKILL_MIN = 2
SWAP_MESSAGE_MIN = 10
SWAP_MESSAGE_MAX = 1000
CANCEL_REASON_MIN = 5
CANCEL_REASON_MAX = 500
REPORT_DETAILS_MAX = 500

RATING_MIN = 1
RATING_MAX = 5
RATING_COMMENT_MIN = 10
RATING_COMMENT_MAX = 500

ANNOUNCEMENT_TITLE_MIN = 3
ANNOUNCEMENT_TITLE_MAX = 100
ANNOUNCEMENT_MESSAGE_MIN = 10
ANNOUNCEMENT_MESSAGE_MAX = 1000

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100
