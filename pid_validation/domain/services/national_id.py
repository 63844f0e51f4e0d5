"""National Taxpayer ID (CPF) Check-Digit Validator.

The CPF is an 11-digit number whose last two digits are check digits computed
from the first nine (first check digit) and first ten (second check digit)
with descending weights, modulo 11.

Security Impact:
    - CPF values are PII; this module never logs them

Architecture:
    - Implements the ChecksumValidator plugin contract
    - Stateless, safe to share across threads
"""

from typing import Sequence

from pid_validation.domain.ports import ChecksumValidator, UnallowedIdentifierError
from pid_validation.domain.services.normalizer import normalize

NATIONAL_ID_LENGTH = 11
NATIONAL_ID_BASE_LENGTH = 9


def _check_digit(digits: Sequence[int], first_weight: int) -> int:
    """Compute one check digit over ``digits`` with weights descending from ``first_weight``."""
    total = sum(d * (first_weight - i) for i, d in enumerate(digits))
    check = 11 - (total % 11)
    return 0 if check >= 10 else check


class NationalIdChecksum(ChecksumValidator):
    """Check-digit validator for the Brazilian taxpayer ID (CPF).

    Input is normalized first, so both "123.456.789-09" and "12345678909"
    are accepted.

    Rules:
        - exactly 11 digits after normalization
        - not all digits identical ("00000000000", "11111111111", ...)
        - digit 10 == check digit over digits 1-9 (weights 10..2)
        - digit 11 == check digit over digits 1-10 (weights 11..2)
    """

    name = "National Taxpayer ID (CPF) Check-Digit Validator"

    def is_valid(self, identifier: str) -> bool:
        cpf = normalize(identifier or '')

        if len(cpf) != NATIONAL_ID_LENGTH:
            return False

        # degenerate sequences pass the arithmetic but are never issued
        if len(set(cpf)) == 1:
            return False

        d = [int(c) for c in cpf]

        if _check_digit(d[:9], 10) != d[9]:
            return False

        return _check_digit(d[:10], 11) == d[10]

    def valid_identifier(self, undigitted: str) -> str:
        """Append both check digits to a 9-digit CPF base.

        Parameters:
            undigitted: The first nine digits, optionally masked

        Returns:
            str: The 11-digit CPF

        Raises:
            UnallowedIdentifierError: If the base does not hold exactly nine
                digits, or repeats a single digit
        """
        base = normalize(undigitted or '')
        if len(base) != NATIONAL_ID_BASE_LENGTH:
            raise UnallowedIdentifierError(
                f"A CPF base must have exactly {NATIONAL_ID_BASE_LENGTH} digits"
            )
        if len(set(base)) == 1:
            raise UnallowedIdentifierError("A CPF base cannot repeat a single digit")

        d = [int(c) for c in base]
        d.append(_check_digit(d, 10))
        d.append(_check_digit(d, 11))
        return ''.join(str(x) for x in d)
