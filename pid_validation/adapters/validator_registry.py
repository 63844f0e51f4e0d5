"""Checksum Validator Registry.

Resolves checksum validators by the name configured on an identifier type.
Resolution order:
    1. validators registered on the registry (by name)
    2. a dotted import path ("package.module:ClassName" or "package.module.ClassName")
    3. the ``pid_validation.checksum_validators`` entry-point group

Security Impact:
    - Import-path resolution only instantiates ChecksumValidator subclasses;
      anything else is rejected
    - Resolved validators are cached so a name always maps to one instance

Architecture:
    - Implements ValidatorRegistryPort (Hexagonal Architecture adapter)
    - Host systems plug in their own algorithms without touching the core
"""

import importlib
import logging
from importlib.metadata import entry_points
from threading import Lock
from typing import Optional

from pid_validation.domain.ports import (
    ChecksumValidator,
    ValidatorNotFoundError,
    ValidatorRegistryPort,
)
from pid_validation.domain.services.national_id import NationalIdChecksum

logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "pid_validation.checksum_validators"

NATIONAL_ID_VALIDATOR_NAME = "national_id"


def _import_validator(path: str) -> ChecksumValidator:
    """Import and instantiate a validator class from a dotted path."""
    if ':' in path:
        module_name, _, attr = path.partition(':')
    else:
        module_name, _, attr = path.rpartition('.')
    if not module_name or not attr:
        raise ValidatorNotFoundError(f"Not a validator import path: {path}", name=path)

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ValidatorNotFoundError(f"Cannot import validator module: {module_name}", name=path) from e

    target = getattr(module, attr, None)
    if isinstance(target, type) and issubclass(target, ChecksumValidator):
        return target()
    if isinstance(target, ChecksumValidator):
        return target
    raise ValidatorNotFoundError(f"Not a ChecksumValidator: {path}", name=path)


class ValidatorRegistry(ValidatorRegistryPort):
    """Name-based registry of checksum validators.

    The national-ID validator is registered by default under both
    ``"national_id"`` and its display name.

    Example Usage:
        ```python
        registry = ValidatorRegistry()
        registry.register(LuhnValidator(), name="luhn")
        registry.register_path("verhoeff", "hospital_plugins.verhoeff:VerhoeffValidator")
        validator = registry.resolve("luhn")
        ```
    """

    def __init__(self, paths: Optional[dict[str, str]] = None, register_defaults: bool = True):
        """Initialize the registry.

        Parameters:
            paths: Validator name -> dotted import path, resolved lazily
            register_defaults: Register the national-ID validator
        """
        self._validators: dict[str, ChecksumValidator] = {}
        self._paths: dict[str, str] = dict(paths or {})
        self._lock = Lock()

        if register_defaults:
            national_id = NationalIdChecksum()
            self.register(national_id, name=NATIONAL_ID_VALIDATOR_NAME)
            self.register(national_id)

    def register(self, validator: ChecksumValidator, name: Optional[str] = None) -> None:
        """Register a validator under ``name`` (defaults to its display name)."""
        if not isinstance(validator, ChecksumValidator):
            raise TypeError(f"Expected a ChecksumValidator, got {type(validator).__name__}")
        key = name or validator.name
        with self._lock:
            self._validators[key] = validator
        logger.debug(f"Registered checksum validator: {key}")

    def register_path(self, name: str, path: str) -> None:
        """Register a dotted import path to be resolved on first use."""
        with self._lock:
            self._paths[name] = path
            self._validators.pop(name, None)

    def names(self) -> list[str]:
        """Names of registered (and path-registered) validators."""
        with self._lock:
            return sorted(set(self._validators) | set(self._paths))

    def resolve(self, name: str) -> ChecksumValidator:
        with self._lock:
            validator = self._validators.get(name)
            path = self._paths.get(name)
        if validator is not None:
            return validator

        if path is not None:
            validator = _import_validator(path)
        elif '.' in name or ':' in name:
            validator = _import_validator(name)
        else:
            validator = self._from_entry_points(name)

        with self._lock:
            self._validators[name] = validator
        logger.debug(f"Resolved checksum validator: {name}")
        return validator

    @staticmethod
    def _from_entry_points(name: str) -> ChecksumValidator:
        for entry_point in entry_points(group=ENTRY_POINT_GROUP):
            if entry_point.name == name:
                target = entry_point.load()
                if isinstance(target, type) and issubclass(target, ChecksumValidator):
                    return target()
                if isinstance(target, ChecksumValidator):
                    return target
                raise ValidatorNotFoundError(f"Entry point is not a ChecksumValidator: {name}", name=name)
        raise ValidatorNotFoundError(f"No checksum validator named: {name}", name=name)
