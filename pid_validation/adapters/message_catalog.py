"""Message Catalog Renderer.

A dictionary-backed MessageRendererPort. Messages use positional ``{0}``,
``{1}`` placeholders. Lookup falls back from the requested locale
("pt_BR") to its language ("pt"), then to the default locale, and finally
to the key itself so an unknown key is still visible to the user.
"""

import logging
import re
from typing import Optional, Sequence

from pid_validation.domain.ports import MessageRendererPort

logger = logging.getLogger(__name__)

PLACEHOLDER_PATTERN = re.compile(r'\{(\d+)\}')

DEFAULT_MESSAGES: dict[str, dict[str, str]] = {
    "en": {
        "PatientIdentifier.error.null": "Patient identifier cannot be null",
        "PatientIdentifier.error.nullOrBlank": "Identifier cannot be null or blank",
        "PatientIdentifierType.null": "Identifier type cannot be null",
        "PatientIdentifier.error.invalidFormat": "Identifier {0} does not match the required format: {1}",
        "PatientIdentifier.error.checkDigitWithParameter": "Invalid check digit for identifier: {0}",
        "PatientIdentifier.error.unallowedIdentifier": "Identifier {0} contains characters not allowed by {1}",
        "PatientIdentifier.error.invalidNationalId": "Invalid CPF: {0}",
        "PatientIdentifier.location.null": "A location is required for identifier {0}",
        "PatientIdentifier.error.notUniqueWithParameter": "Identifier {0} is already in use by another patient",
        "error.exceededMaxLengthOfField": "Value exceeds the maximum length of {0} characters",
    },
    "pt": {
        "PatientIdentifier.error.null": "O identificador do paciente não pode ser nulo",
        "PatientIdentifier.error.nullOrBlank": "O identificador não pode ser nulo ou vazio",
        "PatientIdentifierType.null": "O tipo de identificador não pode ser nulo",
        "PatientIdentifier.error.invalidFormat": "O identificador {0} não corresponde ao formato exigido: {1}",
        "PatientIdentifier.error.checkDigitWithParameter": "Dígito verificador inválido para o identificador: {0}",
        "PatientIdentifier.error.unallowedIdentifier": "O identificador {0} contém caracteres não permitidos por {1}",
        "PatientIdentifier.error.invalidNationalId": "CPF inválido: {0}",
        "PatientIdentifier.location.null": "É obrigatório informar o local para o identificador {0}",
        "PatientIdentifier.error.notUniqueWithParameter": "O identificador {0} já está em uso por outro paciente",
        "error.exceededMaxLengthOfField": "O valor excede o tamanho máximo de {0} caracteres",
    },
}


def format_message(template: str, args: Sequence[object]) -> str:
    """Substitute ``{n}`` placeholders; placeholders without an argument are kept."""
    def replace(match: re.Match) -> str:
        index = int(match.group(1))
        if index < len(args):
            return str(args[index])
        return match.group(0)

    return PLACEHOLDER_PATTERN.sub(replace, template)


class CatalogMessageRenderer(MessageRendererPort):
    """Renders message keys from in-memory, per-locale catalogs."""

    def __init__(
        self,
        messages: Optional[dict[str, dict[str, str]]] = None,
        default_locale: str = "en"
    ):
        """Initialize the renderer.

        Parameters:
            messages: Locale -> (key -> template); merged over the built-in catalogs
            default_locale: Locale used when none is requested or found
        """
        self.default_locale = default_locale
        self._messages: dict[str, dict[str, str]] = {
            locale: dict(catalog) for locale, catalog in DEFAULT_MESSAGES.items()
        }
        for locale, catalog in (messages or {}).items():
            self._messages.setdefault(locale, {}).update(catalog)

    def _candidates(self, locale: Optional[str]) -> list[str]:
        chain = []
        if locale:
            chain.append(locale)
            language = re.split(r'[_-]', locale)[0]
            if language != locale:
                chain.append(language)
        chain.append(self.default_locale)
        return chain

    def render(self, key: str, args: Sequence[object] = (), locale: Optional[str] = None) -> str:
        for candidate in self._candidates(locale):
            template = self._messages.get(candidate, {}).get(key)
            if template is not None:
                return format_message(template, args)

        logger.debug(f"No message found for key: {key}")
        return key
