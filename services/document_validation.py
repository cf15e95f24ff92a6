import re


def _only_digits(value: str | None) -> str:
    return re.sub(r"\D+", "", value or "")


def _check_digit(digits: str, weights: list[int]) -> str:
    total = sum(int(char) * weight for char, weight in zip(digits, weights))
    remainder = total % 11
    return "0" if remainder < 2 else str(11 - remainder)


def validate_cpf(cpf: str | None) -> bool:
    digits = _only_digits(cpf)
    if len(digits) != 11 or digits == digits[0] * 11:
        return False
    first = _check_digit(digits[:9], list(range(10, 1, -1)))
    second = _check_digit(digits[:9] + first, list(range(11, 1, -1)))
    return digits[-2:] == first + second


def validate_cnpj(cnpj: str | None) -> bool:
    digits = _only_digits(cnpj)
    if len(digits) != 14 or digits == digits[0] * 14:
        return False
    first = _check_digit(digits[:12], [5, 4, 3, 2, 9, 8, 7, 6, 5, 4, 3, 2])
    second = _check_digit(digits[:12] + first, [6, 5, 4, 3, 2, 9, 8, 7, 6, 5, 4, 3, 2])
    return digits[-2:] == first + second


def validate_cpf_cnpj(document: str | None) -> bool:
    digits = _only_digits(document)
    if len(digits) == 11:
        return validate_cpf(digits)
    if len(digits) == 14:
        return validate_cnpj(digits)
    return False


def normalize_document(document: str | None) -> str:
    return _only_digits(document)
