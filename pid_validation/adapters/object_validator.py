"""Form-Level Patient Identifier Validator.

This module adapts the validation pipeline to form/object validation: instead
of raising, failures are recorded on a ValidationErrors collector together
with a rendered default message, ready for a UI layer to display.

Security Impact:
    - Field length checks keep values within storage column sizes
    - Rendered messages may echo the identifier back to the user who entered
      it; they are never logged

Architecture:
    - Wraps IdentifierValidationPipeline (domain) and MessageRendererPort (port)
    - Errors are collected, the pipeline itself still stops at the first failure
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

from pid_validation.domain.models import PatientIdentifier
from pid_validation.domain.ports import MessageRendererPort, PatientIdentifierError
from pid_validation.domain.services.pipeline import IdentifierValidationPipeline

logger = logging.getLogger(__name__)

MAX_LENGTH_KEY = "error.exceededMaxLengthOfField"

DEFAULT_IDENTIFIER_MAX_LENGTH = 50
DEFAULT_VOID_REASON_MAX_LENGTH = 255


@dataclass(frozen=True)
class ObjectError:
    """A single rejection recorded on ValidationErrors.

    Attributes:
        code: Message key
        args: Positional message arguments
        default_message: Rendered message (None when no renderer was available)
        field: Offending field name, or None for object-level errors
    """
    code: str
    args: tuple = ()
    default_message: Optional[str] = None
    field: Optional[str] = None


@dataclass
class ValidationErrors:
    """Collector of object-level and field-level validation errors."""

    object_name: str = "patientIdentifier"
    errors: list[ObjectError] = field(default_factory=list)

    def reject(self, code: str, args: Sequence[object] = (), default_message: Optional[str] = None) -> None:
        """Record an object-level error."""
        self.errors.append(ObjectError(code, tuple(args), default_message))

    def reject_value(
        self,
        field_name: str,
        code: str,
        args: Sequence[object] = (),
        default_message: Optional[str] = None
    ) -> None:
        """Record an error on ``field_name``."""
        self.errors.append(ObjectError(code, tuple(args), default_message, field_name))

    def has_errors(self) -> bool:
        return bool(self.errors)

    @property
    def global_errors(self) -> list[ObjectError]:
        return [e for e in self.errors if e.field is None]

    @property
    def field_errors(self) -> list[ObjectError]:
        return [e for e in self.errors if e.field is not None]

    def get_field_errors(self, field_name: str) -> list[ObjectError]:
        return [e for e in self.errors if e.field == field_name]


class PatientIdentifierValidator:
    """Validates PatientIdentifier objects into a ValidationErrors collector.

    The pipeline runs first; field lengths are checked only when it passes.

    Example Usage:
        ```python
        validator = PatientIdentifierValidator(pipeline, renderer, locale="pt_BR")
        errors = ValidationErrors()
        validator.validate(patient_identifier, errors)
        if errors.has_errors():
            show(errors.global_errors[0].default_message)
        ```
    """

    def __init__(
        self,
        pipeline: IdentifierValidationPipeline,
        renderer: Optional[MessageRendererPort] = None,
        locale: Optional[str] = None,
        identifier_max_length: int = DEFAULT_IDENTIFIER_MAX_LENGTH,
        void_reason_max_length: int = DEFAULT_VOID_REASON_MAX_LENGTH
    ):
        """Initialize the validator.

        Parameters:
            pipeline: Identifier validation pipeline
            renderer: Renders default messages for rejected errors (optional)
            locale: Locale passed to the renderer
            identifier_max_length: Maximum length of ``identifier``
            void_reason_max_length: Maximum length of ``void_reason``
        """
        self.pipeline = pipeline
        self.renderer = renderer
        self.locale = locale
        self.max_lengths = {
            "identifier": identifier_max_length,
            "void_reason": void_reason_max_length,
        }

    @staticmethod
    def supports(clazz: type) -> bool:
        """Whether objects of ``clazz`` can be validated by this validator."""
        return isinstance(clazz, type) and issubclass(clazz, PatientIdentifier)

    def validate(self, obj: Any, errors: ValidationErrors) -> None:
        """Validate ``obj`` and record any failure on ``errors``.

        Parameters:
            obj: PatientIdentifier (or None) to validate
            errors: Collector receiving the rejections

        Only validation failures are recorded on ``errors``. Broken identifier
        type configuration is not a property of the submitted value and
        propagates to the caller.

        Raises:
            TypeError: If ``obj`` is neither None nor a PatientIdentifier
            IdentifierTypeConfigurationError: If the type's format is not a
                valid regular expression
            ValidatorNotFoundError: If the type names a checksum validator
                that cannot be resolved
        """
        if obj is not None and not isinstance(obj, PatientIdentifier):
            raise TypeError(f"Cannot validate objects of type {type(obj).__name__}")

        try:
            self.pipeline.validate_identifier(obj)
        except PatientIdentifierError as e:
            errors.reject(e.message_key, e.message_args, self._render(e.message_key, e.message_args))
            return

        self.validate_field_lengths(obj, errors)

    def validate_field_lengths(self, obj: PatientIdentifier, errors: ValidationErrors) -> None:
        """Reject string fields longer than their configured maximum."""
        for field_name, max_length in self.max_lengths.items():
            value = getattr(obj, field_name, None)
            if isinstance(value, str) and len(value) > max_length:
                errors.reject_value(
                    field_name,
                    MAX_LENGTH_KEY,
                    (max_length,),
                    self._render(MAX_LENGTH_KEY, (max_length,))
                )

    def _render(self, key: str, args: Sequence[object]) -> Optional[str]:
        if self.renderer is None:
            return None
        return self.renderer.render(key, args, self.locale)
