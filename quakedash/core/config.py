"""Configuration models - Pure data structures.

These are domain models for configuration. The actual loading
(I/O) is handled by the shell layer.
"""

from dataclasses import dataclass, field
from datetime import timezone, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from quakedash.core.feeds import USGS_FEED_BASE
from quakedash.core.filters import MAX_DEPTH_KM, MAX_MAGNITUDE, FilterConfig


# Timeline series lengths the dashboard offers
TIMELINE_LIMITS = (50, 100)

DEFAULT_ALLOWED_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:5173",
]


@dataclass
class Config:
    """Application configuration.

    This is a pure data structure - no I/O or side effects.

    Attributes:
        feed_base_url: Base URL of the USGS summary feeds
        request_timeout_seconds: HTTP timeout for feed requests
        display_timezone: IANA zone used for display times and day boundaries
        top_countries_limit: Length of the top-country ranking
        timeline_limit: Length of the timeline series
        recent_limit: Length of the recent-earthquakes list
        country_label_max_chars: Display budget for country names in the ranking
        country_overrides: Extra entries for the country override table
        default_filters: Filters used when a request does not set them
        allowed_origins: CORS origins for the HTTP API
    """
    feed_base_url: str = USGS_FEED_BASE
    request_timeout_seconds: int = 30
    display_timezone: str = "UTC"
    top_countries_limit: int = 15
    timeline_limit: int = 50
    recent_limit: int = 10
    country_label_max_chars: int = 20
    country_overrides: dict[str, str] = field(default_factory=dict)
    default_filters: FilterConfig = field(default_factory=FilterConfig)
    allowed_origins: list[str] = field(default_factory=lambda: list(DEFAULT_ALLOWED_ORIGINS))

    @property
    def tz(self) -> tzinfo:
        """Resolved display time zone."""
        return get_timezone(self.display_timezone)


def get_timezone(name: str) -> tzinfo:
    """Resolve an IANA time zone name.

    Raises:
        ValueError: If the zone is unknown
    """
    if name.upper() == "UTC":
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValueError(f"Unknown time zone: {name}") from None


@dataclass
class ValidationError:
    """A configuration validation error.

    Attributes:
        field: The field that has an error
        message: Human-readable error description
        severity: 'error' or 'warning'
    """
    field: str
    message: str
    severity: str = "error"


@dataclass
class ValidationResult:
    """Result of validating configuration.

    Attributes:
        valid: True if no errors (warnings are OK)
        errors: List of validation errors/warnings
    """
    valid: bool
    errors: list[ValidationError] = field(default_factory=list)

    @property
    def warnings(self) -> list[ValidationError]:
        """Get only warnings."""
        return [e for e in self.errors if e.severity == "warning"]

    @property
    def critical_errors(self) -> list[ValidationError]:
        """Get only critical errors."""
        return [e for e in self.errors if e.severity == "error"]


def validate_filters(filters: FilterConfig, field_name: str) -> list[ValidationError]:
    """Check a FilterConfig for values the dashboard cannot produce.

    Pure function. Everything here is a warning: the filter engine
    tolerates inverted or out-of-range values by matching nothing.

    Args:
        filters: Filters to validate
        field_name: Name of the field for error messages

    Returns:
        List of validation warnings (empty if valid)
    """
    errors = []

    if filters.min_magnitude > filters.max_magnitude:
        errors.append(ValidationError(
            field=field_name,
            message=f"min_magnitude ({filters.min_magnitude}) > max_magnitude ({filters.max_magnitude})",
            severity="warning",
        ))

    if not 0 <= filters.min_magnitude <= MAX_MAGNITUDE or not 0 <= filters.max_magnitude <= MAX_MAGNITUDE:
        errors.append(ValidationError(
            field=field_name,
            message=f"Magnitude bounds outside [0, {MAX_MAGNITUDE:g}]",
            severity="warning",
        ))

    low, high = filters.depth_range
    if low > high:
        errors.append(ValidationError(
            field=f"{field_name}.depth_range",
            message=f"Depth range is inverted ({low} > {high})",
            severity="warning",
        ))

    if not 0 <= low <= MAX_DEPTH_KM or not 0 <= high <= MAX_DEPTH_KM:
        errors.append(ValidationError(
            field=f"{field_name}.depth_range",
            message=f"Depth bounds outside [0, {MAX_DEPTH_KM:g}] km",
            severity="warning",
        ))

    if filters.use_custom_date and filters.custom_start_date and filters.custom_end_date:
        if filters.custom_start_date > filters.custom_end_date:
            errors.append(ValidationError(
                field=field_name,
                message="custom_start_date is after custom_end_date",
                severity="warning",
            ))

    return errors


def validate_config(config: Config) -> ValidationResult:
    """Validate configuration for errors and warnings.

    Pure function.

    Args:
        config: Configuration to validate

    Returns:
        ValidationResult with any errors/warnings found
    """
    errors: list[ValidationError] = []

    try:
        get_timezone(config.display_timezone)
    except ValueError as e:
        errors.append(ValidationError(field="display_timezone", message=str(e)))

    for name in ("top_countries_limit", "timeline_limit", "recent_limit", "country_label_max_chars"):
        value = getattr(config, name)
        if value <= 0:
            errors.append(ValidationError(
                field=name,
                message=f"Must be positive, got {value}",
            ))

    if config.timeline_limit > 0 and config.timeline_limit not in TIMELINE_LIMITS:
        errors.append(ValidationError(
            field="timeline_limit",
            message=f"Timeline limit {config.timeline_limit} is not one of {TIMELINE_LIMITS}",
            severity="warning",
        ))

    if config.request_timeout_seconds <= 0:
        errors.append(ValidationError(
            field="request_timeout_seconds",
            message=f"Timeout must be positive, got {config.request_timeout_seconds}",
        ))

    if not config.feed_base_url.startswith(("http://", "https://")):
        errors.append(ValidationError(
            field="feed_base_url",
            message=f"Not an HTTP URL: {config.feed_base_url}",
        ))

    errors.extend(validate_filters(config.default_filters, "default_filters"))

    has_critical = any(e.severity == "error" for e in errors)

    return ValidationResult(
        valid=not has_critical,
        errors=errors,
    )
