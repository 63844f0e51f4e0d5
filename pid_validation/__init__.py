"""Patient identifier validation.

Validates patient identifiers against their identifier type: format,
check digits, national taxpayer ID (CPF) rules, location policy and
uniqueness among active patients.
"""

__version__ = "1.0.0"
