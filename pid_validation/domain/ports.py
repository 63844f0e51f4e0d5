"""Domain Ports - Abstract Contracts for Identifier Validation.

This module defines the Port interfaces (abstract contracts) that the validation
pipeline consumes, the checksum validator plugin contract, the failure
exception hierarchy and the Result type used by non-raising callers.
Following Hexagonal Architecture, the Domain Core defines what it needs, not
how it's provided.

Security Impact:
    - Failures carry message keys and positional arguments only; rendering to
      user-facing text (and deciding what to disclose) belongs to adapters
    - Repository lookups are always live; the core never caches patient state

Architecture:
    - Pure abstract interfaces with zero infrastructure dependencies
    - Adapters (in-memory repository, registries, message catalogs) implement these ports
    - Collaborators are injected into the pipeline, never looked up globally
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Generic, Optional, Sequence, TypeVar

from pid_validation.domain.enums import FailureKind

if TYPE_CHECKING:
    from pid_validation.domain.models import PatientIdentifier

# Type variable for Result generic
T = TypeVar('T')


# ============================================================================
# Result Type for Success/Failure Communication
# ============================================================================

@dataclass(frozen=True)
class Result(Generic[T]):
    """Outcome of one pipeline evaluation, for callers that must not raise.

    Batch callers use this to keep going after a failed row while still
    knowing exactly which gate rejected it.

    Attributes:
        success: True if every check passed
        value: The validated (possibly normalized) identifier on success
        error: Message key of the failure
        error_type: FailureKind value of the failure (e.g. "InvalidFormat")
        error_details: message_key, message_args and identifier of the failure

    Example:
        ```python
        result = pipeline.evaluate(patient_identifier)
        if result.is_failure():
            render(result.error_details["message_key"], result.error_details["message_args"])
        ```
    """

    success: bool
    value: Optional[T] = None
    error: Optional[str] = None
    error_type: Optional[str] = None
    error_details: Optional[dict] = None

    @classmethod
    def success_result(cls, value: T) -> 'Result[T]':
        return cls(success=True, value=value)

    @classmethod
    def failure_result(cls, failure: 'PatientIdentifierError') -> 'Result[T]':
        """Create a failure result from a raised validation failure.

        Parameters:
            failure: The first failing check of the evaluation

        Returns:
            Result: Failure result keyed by the failure's kind
        """
        return cls(
            success=False,
            error=failure.message_key,
            error_type=failure.kind.value,
            error_details={
                "message_key": failure.message_key,
                "message_args": failure.message_args,
                "identifier": failure.identifier,
            }
        )

    def is_success(self) -> bool:
        """Check if result is successful."""
        return self.success

    def is_failure(self) -> bool:
        """Check if result is a failure."""
        return not self.success


# ============================================================================
# Custom Exception Hierarchy
# ============================================================================

class PatientIdentifierError(Exception):
    """Base exception for every identifier validation failure.

    The exception message is the message key, so ``str(error)`` is stable and
    safe to log: it never contains the identifier value.

    Attributes:
        kind: FailureKind of this failure
        message_key: Localisation key describing the failure
        message_args: Positional arguments for the localised message
        identifier: The offending identifier string (PII)
        patient_identifier: The PatientIdentifier under validation, when known
    """

    kind: FailureKind = FailureKind.BLANK_OR_NULL_IDENTIFIER

    def __init__(
        self,
        message_key: str,
        message_args: Sequence[object] = (),
        identifier: Optional[str] = None,
        patient_identifier: Optional['PatientIdentifier'] = None
    ):
        super().__init__(message_key)
        self.message_key = message_key
        self.message_args = tuple(message_args)
        self.identifier = identifier
        self.patient_identifier = patient_identifier


class BlankIdentifierError(PatientIdentifierError):
    """Raised when the identifier is null or its value is blank."""
    kind = FailureKind.BLANK_OR_NULL_IDENTIFIER


class BlankIdentifierTypeError(BlankIdentifierError):
    """Raised when the identifier has no identifier type."""
    kind = FailureKind.BLANK_OR_NULL_TYPE


class InvalidIdentifierFormatError(PatientIdentifierError):
    """Raised when the identifier does not match its type's format."""
    kind = FailureKind.INVALID_FORMAT


class InvalidCheckDigitError(PatientIdentifierError):
    """Raised when the type's checksum validator rejects the identifier."""
    kind = FailureKind.INVALID_CHECK_DIGIT


class UnallowedCharactersError(InvalidCheckDigitError):
    """Raised when the checksum validator cannot interpret the identifier at all.

    Attributes:
        validator_name: Display name of the validator that refused the input
    """
    kind = FailureKind.UNALLOWED_CHARACTERS

    def __init__(
        self,
        message_key: str,
        message_args: Sequence[object] = (),
        identifier: Optional[str] = None,
        patient_identifier: Optional['PatientIdentifier'] = None,
        validator_name: Optional[str] = None
    ):
        super().__init__(message_key, message_args, identifier, patient_identifier)
        self.validator_name = validator_name


class InvalidNationalIdError(PatientIdentifierError):
    """Raised when a national taxpayer ID fails its check-digit algorithm."""
    kind = FailureKind.INVALID_NATIONAL_ID


class LocationRequiredError(PatientIdentifierError):
    """Raised when the type requires a location and none is attached."""
    kind = FailureKind.LOCATION_REQUIRED


class IdentifierNotUniqueError(PatientIdentifierError):
    """Raised when the identifier is already assigned to another patient."""
    kind = FailureKind.IDENTIFIER_NOT_UNIQUE


class UnallowedIdentifierError(Exception):
    """Raised by checksum validators for input they cannot interpret.

    This is distinct from an identifier that is interpreted and found to be
    incorrect, which validators report by returning False from ``is_valid``.
    """
    pass


class IdentifierTypeConfigurationError(ValueError):
    """Raised when an identifier type carries unusable configuration.

    Attributes:
        type_name: Name of the misconfigured identifier type (may be None)
    """

    def __init__(self, message: str, type_name: Optional[str] = None):
        super().__init__(message)
        self.type_name = type_name


class ValidatorNotFoundError(LookupError):
    """Raised when a checksum validator name cannot be resolved.

    Attributes:
        name: The validator name that failed to resolve
    """

    def __init__(self, message: str, name: Optional[str] = None):
        super().__init__(message)
        self.name = name


# ============================================================================
# Checksum Validator Plugin Contract
# ============================================================================

class ChecksumValidator(ABC):
    """Abstract contract for identifier check-digit validators.

    Validators are resolved by name at validation time through a
    ValidatorRegistryPort, so host systems can plug in their own algorithms.

    Example Usage:
        ```python
        class LuhnValidator(ChecksumValidator):
            name = "Luhn Mod-10 Check-Digit Validator"

            def is_valid(self, identifier: str) -> bool:
                ...

        registry.register(LuhnValidator())
        ```
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Display name used in error messages."""
        pass

    @abstractmethod
    def is_valid(self, identifier: str) -> bool:
        """Check the identifier's check digit(s).

        Parameters:
            identifier: Identifier value to check

        Returns:
            bool: True if the check digits are correct, False otherwise

        Raises:
            UnallowedIdentifierError: If the identifier contains characters the
                validator cannot interpret
        """
        pass

    def valid_identifier(self, undigitted: str) -> str:
        """Append check digit(s) to an identifier base.

        Parameters:
            undigitted: Identifier without its check digit(s)

        Returns:
            str: The complete, valid identifier

        Raises:
            UnallowedIdentifierError: If the base cannot be interpreted
            NotImplementedError: If the validator cannot generate identifiers
        """
        raise NotImplementedError(f"{self.name} does not generate identifiers")


# ============================================================================
# Collaborator Ports
# ============================================================================

class PatientRepositoryPort(ABC):
    """Abstract contract for querying live patient identifier state.

    Implementations must reflect committed state at call time. Any retry or
    timeout policy belongs to the implementation, not to the pipeline.
    """

    @abstractmethod
    def is_identifier_in_use_by_another_patient(self, patient_identifier: 'PatientIdentifier') -> bool:
        """Check whether the identifier is assigned to a different patient.

        Parameters:
            patient_identifier: Identifier under validation

        Returns:
            bool: True if another patient already holds the identifier
        """
        pass


class ValidatorRegistryPort(ABC):
    """Abstract contract for resolving checksum validators by name."""

    @abstractmethod
    def resolve(self, name: str) -> ChecksumValidator:
        """Resolve a validator by its configured name.

        Parameters:
            name: Validator name from the identifier type

        Returns:
            ChecksumValidator: The resolved validator

        Raises:
            ValidatorNotFoundError: If no validator matches the name
        """
        pass


class MessageRendererPort(ABC):
    """Abstract contract for turning message keys into user-facing text."""

    @abstractmethod
    def render(self, key: str, args: Sequence[object] = (), locale: Optional[str] = None) -> str:
        """Render a message key with positional arguments.

        Parameters:
            key: Message key
            args: Positional arguments substituted into the message
            locale: Locale code (e.g. "en", "pt_BR"); None for the default

        Returns:
            str: Localised message text
        """
        pass
