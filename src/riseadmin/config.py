"""Default configuration values for riseadmin."""

from __future__ import annotations

from typing import Final

SCHOOL_NAME: Final[str] = "Rise Learning Provision"

# ---------------------------------------------------------------------------
# Crop selector
# ---------------------------------------------------------------------------

# News and event cards are laid out at 4:3, so every uploaded image is cropped
# to that ratio before it reaches storage.
CROP_ASPECT_RATIO: Final[float] = 4.0 / 3.0
CROP_ZOOM_MIN: Final[float] = 1.0
CROP_ZOOM_MAX: Final[float] = 3.0
CROP_ZOOM_STEP: Final[float] = 0.1
CROP_WHEEL_ZOOM_STEP: Final[float] = 0.1
CROP_VIEW_MIN_HEIGHT: Final[int] = 420
CROP_MASK_OPACITY: Final[float] = 0.55

# ---------------------------------------------------------------------------
# Encoder
# ---------------------------------------------------------------------------

CROP_OUTPUT_FORMAT: Final[str] = "JPEG"
CROP_OUTPUT_MIME: Final[str] = "image/jpeg"
CROP_OUTPUT_SUFFIX: Final[str] = ".jpg"
# ``-1`` lets Qt pick its default quality; anything in [0, 100] is explicit.
CROP_JPEG_QUALITY: Final[int] = 90

REMOTE_FETCH_TIMEOUT_SEC: Final[float] = 20.0

# ---------------------------------------------------------------------------
# Content store
# ---------------------------------------------------------------------------

NEWS_EVENTS_TABLE: Final[str] = "news_events"
UPCOMING_CATEGORY: Final[str] = "upcoming"
IMAGES_BUCKET: Final[str] = "news-images"
DB_POOL_SIZE: Final[int] = 5
DB_POOL_TIMEOUT_SEC: Final[float] = 30.0

DEFAULT_EVENT_TIME: Final[str] = "12:00 PM"

# ---------------------------------------------------------------------------
# Contact notifications
# ---------------------------------------------------------------------------

EMAIL_API_BASE_URL: Final[str] = "https://api.resend.com"
EMAIL_API_KEY_ENV: Final[str] = "RESEND_API_KEY"
EMAIL_SENDER: Final[str] = f"{SCHOOL_NAME} <onboarding@resend.dev>"
EMAIL_ADMIN_RECIPIENTS: Final[list[str]] = ["riselearningprovision@gmail.com"]
EMAIL_CONTACT_PHONE: Final[str] = "+959895477771"
EMAIL_TIMEOUT_SEC: Final[float] = 15.0

CORS_HEADERS: Final[dict[str, str]] = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
}
