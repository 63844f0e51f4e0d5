"""Domain Services.

This package contains the domain services that make up the identifier
validation pipeline, without infrastructure dependencies.
"""

from pid_validation.domain.services.format_matcher import check_format, matches
from pid_validation.domain.services.location_policy import check_location, location_required
from pid_validation.domain.services.national_id import NationalIdChecksum
from pid_validation.domain.services.normalizer import normalize, normalize_series
from pid_validation.domain.services.pipeline import (
    DEFAULT_NATIONAL_ID_TYPE_NAME,
    IdentifierValidationPipeline,
    check_checksum,
)
from pid_validation.domain.services.uniqueness import UniquenessEnforcer

__all__ = [
    'DEFAULT_NATIONAL_ID_TYPE_NAME',
    'IdentifierValidationPipeline',
    'NationalIdChecksum',
    'UniquenessEnforcer',
    'check_checksum',
    'check_format',
    'check_location',
    'location_required',
    'matches',
    'normalize',
    'normalize_series',
]
