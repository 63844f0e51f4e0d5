"""Batch Identifier Validation for DataFrames.

Validates a table of identifiers (one row per identifier) and returns the
table with validation outcome columns appended. Rows are validated in order,
one pipeline call per row, so the first-failure-wins contract holds per row.

Security Impact:
    - Output frames contain identifier values (PII); callers own their storage
    - Only outcome counts are logged (as structured fields for JSON logs)

Architecture:
    - Uses pandas for tabular input/output (same as the ingestion adapters)
    - Uses Result from the pipeline so a row failing validation never aborts
      the batch; malformed input (missing columns, non-integer patient ids)
      is rejected up front instead
"""

import logging
from typing import Callable, Mapping, Optional

import pandas as pd

from pid_validation.domain.models import (
    IdentifierType,
    Location,
    PatientIdentifier,
    PatientReference,
)
from pid_validation.domain.ports import MessageRendererPort
from pid_validation.domain.services.normalizer import normalize_series
from pid_validation.domain.services.pipeline import IdentifierValidationPipeline

logger = logging.getLogger(__name__)

RESULT_COLUMNS = ['normalized_identifier', 'is_valid', 'failure_kind', 'message_key', 'message']

TRUE_STRINGS = {'true', '1', 'yes', 'y', 't'}


def _is_missing(value) -> bool:
    return value is None or (not isinstance(value, (list, tuple, dict)) and pd.isna(value))


def _as_bool(value) -> bool:
    if _is_missing(value):
        return False
    if isinstance(value, str):
        return value.strip().lower() in TRUE_STRINGS
    return bool(value)


def _as_str(value) -> Optional[str]:
    if _is_missing(value):
        return None
    return str(value)


def _as_patient_id(value) -> Optional[int]:
    """Parse a patient id cell; integral numbers written as "7" or "7.0" are accepted."""
    if _is_missing(value):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    number = pd.to_numeric(value, errors="coerce")
    if pd.isna(number) or not float(number).is_integer():
        raise ValueError(f"Invalid patient id: {value!r}")
    return int(number)


class BatchIdentifierValidator:
    """Validates DataFrames of identifiers through the pipeline.

    Expected columns (names configurable): identifier, identifier type name,
    and optionally location name, patient id and voided flag. Type names are
    looked up case-insensitively in the supplied catalog; unknown names yield
    a null type (and therefore a BlankOrNullType failure).

    Example Usage:
        ```python
        batch = BatchIdentifierValidator(pipeline, catalog, renderer=renderer)
        results = batch.validate_frame(pd.read_csv("identifiers.csv", dtype=str))
        rejected = results[~results["is_valid"]]
        ```
    """

    def __init__(
        self,
        pipeline: IdentifierValidationPipeline,
        identifier_types: Mapping[str, IdentifierType],
        renderer: Optional[MessageRendererPort] = None,
        locale: Optional[str] = None,
        on_valid: Optional[Callable[[PatientIdentifier], None]] = None
    ):
        """Initialize the batch validator.

        Parameters:
            pipeline: Identifier validation pipeline
            identifier_types: Type name -> IdentifierType catalog
            renderer: Renders the ``message`` column (keys only when None)
            locale: Locale passed to the renderer
            on_valid: Called with each identifier that passes validation
        """
        self.pipeline = pipeline
        self.identifier_types = {
            name.strip().casefold(): identifier_type
            for name, identifier_type in identifier_types.items()
        }
        self.renderer = renderer
        self.locale = locale
        self.on_valid = on_valid

    def lookup_type(self, name: Optional[str]) -> Optional[IdentifierType]:
        if name is None:
            return None
        return self.identifier_types.get(name.strip().casefold())

    def build_identifier(
        self,
        row: Mapping,
        identifier_column: str = 'identifier',
        type_column: str = 'identifier_type',
        location_column: str = 'location',
        patient_column: str = 'patient_id',
        voided_column: str = 'voided'
    ) -> PatientIdentifier:
        """Build a PatientIdentifier from one row.

        Raises:
            ValueError: If the patient id is not an integer
        """
        location_name = _as_str(row.get(location_column))

        return PatientIdentifier(
            identifier=_as_str(row.get(identifier_column)),
            identifier_type=self.lookup_type(_as_str(row.get(type_column))),
            location=Location(name=location_name) if location_name and location_name.strip() else None,
            patient=PatientReference(patient_id=_as_patient_id(row.get(patient_column))),
            voided=_as_bool(row.get(voided_column)),
        )

    def validate_frame(
        self,
        df: pd.DataFrame,
        identifier_column: str = 'identifier',
        type_column: str = 'identifier_type',
        location_column: str = 'location',
        patient_column: str = 'patient_id',
        voided_column: str = 'voided'
    ) -> pd.DataFrame:
        """Validate every row of ``df``.

        Parameters:
            df: Input frame, one identifier per row
            identifier_column: Column holding identifier values
            type_column: Column holding identifier type names
            location_column: Column holding location names (optional column)
            patient_column: Column holding patient ids (optional column)
            voided_column: Column holding voided flags (optional column)

        Returns:
            pd.DataFrame: Copy of ``df`` with ``normalized_identifier``,
                ``is_valid``, ``failure_kind``, ``message_key`` and ``message``
                columns appended

        Raises:
            KeyError: If the identifier or type column is missing
            ValueError: If a row holds a non-integer patient id; raised before
                any row is validated
        """
        for required in (identifier_column, type_column):
            if required not in df.columns:
                raise KeyError(f"Missing required column: {required}")

        out = df.copy()
        if out.empty:
            for column in RESULT_COLUMNS:
                out[column] = pd.Series(dtype='bool' if column == 'is_valid' else 'object')
            return out

        normalized = []
        is_valid = []
        failure_kinds = []
        message_keys = []
        messages = []

        patient_identifiers = []
        for position, (_, row) in enumerate(out.iterrows(), start=1):
            try:
                patient_identifiers.append(self.build_identifier(
                    row, identifier_column, type_column, location_column, patient_column, voided_column
                ))
            except ValueError as e:
                raise ValueError(f"Row {position}: {e}") from e

        for patient_identifier in patient_identifiers:
            result = self.pipeline.evaluate(patient_identifier)

            normalized.append(patient_identifier.identifier)
            is_valid.append(result.is_success())
            if result.is_success():
                failure_kinds.append(None)
                message_keys.append(None)
                messages.append(None)
                if self.on_valid is not None:
                    self.on_valid(patient_identifier)
                continue

            key = result.error_details["message_key"]
            args = result.error_details["message_args"]
            failure_kinds.append(result.error_type)
            message_keys.append(key)
            messages.append(self.renderer.render(key, args, self.locale) if self.renderer else key)

        out['normalized_identifier'] = normalized
        out['is_valid'] = is_valid
        out['failure_kind'] = failure_kinds
        out['message_key'] = message_keys
        out['message'] = messages

        valid_count = sum(is_valid)
        failures = len(out) - valid_count
        logger.info(
            f"Validated {len(out)} identifiers: {valid_count} valid, {failures} rejected",
            extra={"extra_fields": {
                "validated": len(out),
                "valid": valid_count,
                "rejected": failures,
                "failure_kinds": {
                    kind: int(count)
                    for kind, count in pd.Series(failure_kinds).dropna().value_counts().items()
                },
            }}
        )
        return out

    @staticmethod
    def digits_only(df: pd.DataFrame, identifier_column: str = 'identifier') -> pd.Series:
        """Digits-only view of an identifier column (no validation)."""
        return normalize_series(df[identifier_column])
