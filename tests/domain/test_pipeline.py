"""Unit tests for the identifier validation pipeline."""

from unittest.mock import MagicMock

import pytest

from pid_validation.domain.enums import FailureKind, LocationBehavior
from pid_validation.domain.models import IdentifierType
from pid_validation.domain.ports import (
    BlankIdentifierError,
    BlankIdentifierTypeError,
    IdentifierNotUniqueError,
    InvalidCheckDigitError,
    InvalidIdentifierFormatError,
    InvalidNationalIdError,
    LocationRequiredError,
    UnallowedCharactersError,
    ValidatorRegistryPort,
)
from pid_validation.domain.services.national_id import NationalIdChecksum
from pid_validation.domain.services.pipeline import IdentifierValidationPipeline


class TestNullAndVoided:
    """Test suite for the null check and the voided bypass."""

    def test_null_identifier_fails(self, pipeline):
        """Test that a missing identifier object fails the null check."""
        with pytest.raises(BlankIdentifierError) as exc_info:
            pipeline.validate_identifier(None)

        assert exc_info.value.message_key == "PatientIdentifier.error.null"
        assert exc_info.value.kind == FailureKind.BLANK_OR_NULL_IDENTIFIER

    @pytest.mark.parametrize("value", [None, "", "   ", "12a4"])
    def test_voided_bypasses_everything(self, pipeline, make_identifier, old_id_type, value):
        """Test that voided identifiers pass with blank values or bad formats."""
        pipeline.validate_identifier(make_identifier(value, old_id_type, voided=True))

    def test_voided_with_null_type_passes(self, pipeline, make_identifier):
        """Test that voided identifiers pass even without a type."""
        pipeline.validate_identifier(make_identifier(None, None, voided=True))

    def test_voided_never_queries_repository(self, pipeline, spy_repository, make_identifier, cpf_type):
        """Test that the voided bypass skips the uniqueness query."""
        pipeline.validate_identifier(make_identifier("not a cpf", cpf_type, voided=True))

        assert spy_repository.calls == []

    def test_voided_national_id_not_normalized(self, pipeline, make_identifier, cpf_type):
        """Test that voided national IDs keep their original value."""
        patient_identifier = make_identifier("123.456.789-09", cpf_type, voided=True)
        pipeline.validate_identifier(patient_identifier)

        assert patient_identifier.identifier == "123.456.789-09"


class TestBlankChecks:
    """Test suite for type and value presence checks."""

    @pytest.mark.parametrize("value", [None, "", "1234", "anything"])
    def test_null_type_fails_regardless_of_value(self, pipeline, make_identifier, clinic, value):
        """Test that a non-voided identifier without a type always fails on the type."""
        with pytest.raises(BlankIdentifierTypeError) as exc_info:
            pipeline.validate_identifier(make_identifier(value, None, location=clinic))

        assert exc_info.value.kind == FailureKind.BLANK_OR_NULL_TYPE
        assert exc_info.value.message_key == "PatientIdentifierType.null"

    @pytest.mark.parametrize("value", [None, "", " \t "])
    def test_blank_value_fails(self, pipeline, make_identifier, old_id_type, value):
        """Test that blank identifier values fail."""
        with pytest.raises(BlankIdentifierError) as exc_info:
            pipeline.validate_identifier(make_identifier(value, old_id_type))

        assert exc_info.value.kind == FailureKind.BLANK_OR_NULL_IDENTIFIER
        assert exc_info.value.message_key == "PatientIdentifier.error.nullOrBlank"


class TestOrdering:
    """Test suite for first-failure-wins ordering."""

    def test_format_before_location(self, pipeline, make_identifier, old_id_type):
        """Test that a bad format is reported even when the location is also missing."""
        with pytest.raises(InvalidIdentifierFormatError):
            pipeline.validate_identifier(make_identifier("12a4", old_id_type))

    def test_format_before_checksum(self, pipeline, make_identifier):
        """Test that format is checked before the checksum validator."""
        identifier_type = IdentifierType(
            name="Even ID", format="^[0-9]+$", validator="even",
            location_behavior=LocationBehavior.NOT_USED,
        )
        with pytest.raises(InvalidIdentifierFormatError):
            pipeline.validate_identifier(make_identifier("1x", identifier_type))

    def test_location_before_uniqueness(self, pipeline, spy_repository, make_identifier, old_id_type):
        """Test that a missing location stops the pipeline before the repository call."""
        spy_repository.in_use = True
        with pytest.raises(LocationRequiredError):
            pipeline.validate_identifier(make_identifier("1234", old_id_type))

        assert spy_repository.calls == []

    def test_uniqueness_last(self, pipeline, spy_repository, make_identifier, old_id_type, clinic):
        """Test that an otherwise valid identifier fails only on uniqueness."""
        spy_repository.in_use = True
        with pytest.raises(IdentifierNotUniqueError) as exc_info:
            pipeline.validate_identifier(make_identifier("1234", old_id_type, location=clinic))

        assert exc_info.value.message_args == ("1234",)
        assert spy_repository.calls == ["1234"]

    def test_valid_identifier_passes(self, pipeline, spy_repository, make_identifier, old_id_type, clinic):
        """Test that a valid identifier passes with one repository call."""
        pipeline.validate_identifier(make_identifier("1234", old_id_type, location=clinic))

        assert spy_repository.calls == ["1234"]

    def test_no_format_accepts_any_non_blank_value(self, pipeline, make_identifier):
        """Test that a type without a format accepts any non-blank value."""
        identifier_type = IdentifierType(name="Free Text", location_behavior=LocationBehavior.NOT_USED)
        pipeline.validate_identifier(make_identifier("anything #1", identifier_type))

    def test_failure_carries_patient_identifier(self, pipeline, make_identifier, old_id_type):
        """Test that failures from the string checks reference the identifier object."""
        patient_identifier = make_identifier("12a4", old_id_type)
        with pytest.raises(InvalidIdentifierFormatError) as exc_info:
            pipeline.validate_identifier(patient_identifier)

        assert exc_info.value.patient_identifier is patient_identifier


class TestChecksum:
    """Test suite for the checksum validator gate."""

    def test_valid_check_digit_passes(self, pipeline, make_identifier, even_type):
        """Test that a value accepted by the validator passes."""
        pipeline.validate_identifier(make_identifier("1102", even_type))

    def test_invalid_check_digit_fails(self, pipeline, make_identifier, even_type):
        """Test that a rejected value fails with the check-digit key."""
        with pytest.raises(InvalidCheckDigitError) as exc_info:
            pipeline.validate_identifier(make_identifier("1101", even_type))

        assert not isinstance(exc_info.value, UnallowedCharactersError)
        assert exc_info.value.kind == FailureKind.INVALID_CHECK_DIGIT
        assert exc_info.value.message_key == "PatientIdentifier.error.checkDigitWithParameter"
        assert exc_info.value.message_args == ("1101",)

    def test_unallowed_characters_name_the_validator(self, pipeline, make_identifier, even_type):
        """Test that uninterpretable input maps to the unallowed-identifier key."""
        with pytest.raises(UnallowedCharactersError) as exc_info:
            pipeline.validate_identifier(make_identifier("11-02", even_type))

        error = exc_info.value
        assert isinstance(error, InvalidCheckDigitError)
        assert error.kind == FailureKind.UNALLOWED_CHARACTERS
        assert error.message_key == "PatientIdentifier.error.unallowedIdentifier"
        assert error.message_args == ("11-02", "Even Digit Sum Validator")
        assert error.validator_name == "Even Digit Sum Validator"

    def test_validator_resolved_by_name_at_validation_time(self, spy_repository, make_identifier, even_type):
        """Test that the registry is consulted with the configured validator name."""
        registry = MagicMock(spec=ValidatorRegistryPort)
        registry.resolve.return_value = NationalIdChecksum()
        pipeline = IdentifierValidationPipeline(spy_repository, registry)

        with pytest.raises(InvalidCheckDigitError):
            pipeline.validate_identifier(make_identifier("1102", even_type))

        registry.resolve.assert_called_once_with("even")

    def test_blank_validator_name_skips_checksum(self, spy_repository, make_identifier):
        """Test that a blank validator name is treated as no validator."""
        registry = MagicMock(spec=ValidatorRegistryPort)
        pipeline = IdentifierValidationPipeline(spy_repository, registry)
        identifier_type = IdentifierType(name="X", validator="  ", location_behavior=LocationBehavior.NOT_USED)

        pipeline.validate_identifier(make_identifier("1101", identifier_type))

        registry.resolve.assert_not_called()

    def test_check_checksum_without_validator(self, pipeline):
        """Test that check_checksum is a no-op without a validator."""
        pipeline.check_checksum("anything", None)


class TestNationalIdPrePass:
    """Test suite for the national-ID pre-pass."""

    def test_masked_cpf_normalized_and_accepted(self, pipeline, spy_repository, make_identifier, cpf_type):
        """Test the end-to-end flow for a masked CPF."""
        patient_identifier = make_identifier("123.456.789-09", cpf_type)
        pipeline.validate_identifier(patient_identifier)

        assert patient_identifier.identifier == "12345678909"
        assert spy_repository.calls == ["12345678909"]

    def test_invalid_cpf_reports_original_value(self, pipeline, make_identifier, cpf_type):
        """Test that the failure carries the value as entered, not the normalized one."""
        patient_identifier = make_identifier("123.456.789-00", cpf_type)
        with pytest.raises(InvalidNationalIdError) as exc_info:
            pipeline.validate_identifier(patient_identifier)

        assert exc_info.value.kind == FailureKind.INVALID_NATIONAL_ID
        assert exc_info.value.message_key == "PatientIdentifier.error.invalidNationalId"
        assert exc_info.value.message_args == ("123.456.789-00",)
        assert patient_identifier.identifier == "123.456.789-00"

    def test_degenerate_cpf_rejected(self, pipeline, make_identifier, cpf_type):
        """Test that a repeated-digit CPF fails the pre-pass."""
        with pytest.raises(InvalidNationalIdError):
            pipeline.validate_identifier(make_identifier("111.111.111-11", cpf_type))

    def test_blank_cpf_fails_as_national_id(self, pipeline, make_identifier, cpf_type):
        """Test that the pre-pass runs before the blank check."""
        with pytest.raises(InvalidNationalIdError) as exc_info:
            pipeline.validate_identifier(make_identifier(None, cpf_type))

        assert exc_info.value.message_args == (None,)

    @pytest.mark.parametrize("name", ["cpf", " CPF ", "Cpf"])
    def test_type_name_comparison_is_case_insensitive(self, pipeline, make_identifier, name):
        """Test that the national-ID type is recognized regardless of case or padding."""
        identifier_type = IdentifierType(name=name, location_behavior=LocationBehavior.NOT_USED)
        patient_identifier = make_identifier("529.982.247-25", identifier_type)
        pipeline.validate_identifier(patient_identifier)

        assert patient_identifier.identifier == "52998224725"

    def test_other_types_are_not_normalized(self, pipeline, make_identifier):
        """Test that non-national-ID types keep masked values."""
        identifier_type = IdentifierType(name="Passport", location_behavior=LocationBehavior.NOT_USED)
        patient_identifier = make_identifier("123.456.789-09", identifier_type)
        pipeline.validate_identifier(patient_identifier)

        assert patient_identifier.identifier == "123.456.789-09"

    def test_unnamed_type_is_not_national_id(self, pipeline, make_identifier):
        """Test that a type without a name is evaluated without crashing."""
        identifier_type = IdentifierType(location_behavior=LocationBehavior.NOT_USED)
        pipeline.validate_identifier(make_identifier("abc", identifier_type))

    def test_normalized_value_checked_against_format(self, pipeline, make_identifier):
        """Test that later gates see the normalized value."""
        identifier_type = IdentifierType(
            name="CPF", format="^[0-9]{11}$", location_behavior=LocationBehavior.NOT_USED
        )
        pipeline.validate_identifier(make_identifier("123.456.789-09", identifier_type))

    def test_configurable_national_id_type_name(self, spy_repository, registry, make_identifier):
        """Test that the pre-pass follows the configured type name."""
        pipeline = IdentifierValidationPipeline(spy_repository, registry, national_id_type_name="Taxpayer ID")
        identifier_type = IdentifierType(name="taxpayer id", location_behavior=LocationBehavior.NOT_USED)

        with pytest.raises(InvalidNationalIdError):
            pipeline.validate_identifier(make_identifier("123", identifier_type))

    def test_pre_pass_can_be_disabled(self, spy_repository, registry, make_identifier, cpf_type):
        """Test that no type is treated as national ID when the name is None."""
        pipeline = IdentifierValidationPipeline(spy_repository, registry, national_id_type_name=None)
        pipeline.validate_identifier(make_identifier("123", cpf_type))


class TestValidateIdentifierString:
    """Test suite for the string-only entry point."""

    def test_null_type(self, pipeline):
        """Test that a missing type fails first."""
        with pytest.raises(BlankIdentifierTypeError):
            pipeline.validate_identifier_string("1234", None)

    def test_skips_location_and_uniqueness(self, pipeline, spy_repository, old_id_type):
        """Test that only format and checksum are checked."""
        spy_repository.in_use = True
        pipeline.validate_identifier_string("1234", old_id_type)

        assert spy_repository.calls == []

    def test_no_national_id_normalization(self, pipeline, cpf_type):
        """Test that the string entry point does not run the national-ID pre-pass."""
        pipeline.validate_identifier_string("not a cpf", cpf_type)

    def test_format_failure(self, pipeline, old_id_type):
        """Test that format failures are raised."""
        with pytest.raises(InvalidIdentifierFormatError):
            pipeline.validate_identifier_string("12345", old_id_type)


class TestEvaluate:
    """Test suite for the Result-returning wrapper."""

    def test_success_result(self, pipeline, make_identifier, cpf_type):
        """Test that success carries the normalized identifier object."""
        patient_identifier = make_identifier("123.456.789-09", cpf_type)
        result = pipeline.evaluate(patient_identifier)

        assert result.is_success()
        assert result.value is patient_identifier
        assert result.value.identifier == "12345678909"

    def test_failure_result(self, pipeline, make_identifier, old_id_type):
        """Test that failures are reported with kind, key and arguments."""
        result = pipeline.evaluate(make_identifier("12a4", old_id_type))

        assert result.is_failure()
        assert result.error_type == "InvalidFormat"
        assert result.error == "PatientIdentifier.error.invalidFormat"
        assert result.error_details["message_key"] == "PatientIdentifier.error.invalidFormat"
        assert result.error_details["message_args"] == ("12a4", "four digits")
        assert result.error_details["identifier"] == "12a4"

    def test_failure_result_keyed_by_sub_kind(self, pipeline, make_identifier, even_type):
        """Test that the unallowed-characters sub-kind is reported as its own kind."""
        result = pipeline.evaluate(make_identifier("11-02", even_type))

        assert result.value is None
        assert result.error_type == "UnallowedCharacters"
        assert result.error_details["message_args"] == ("11-02", "Even Digit Sum Validator")
