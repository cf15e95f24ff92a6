import re


class PasswordValidationError(ValueError):
    pass


MIN_LENGTH = 8
MAX_LENGTH = 128


def validate_password(password: str, *, email: str | None = None) -> None:
    """Política mínima para senhas de operadores do painel.

    - entre 8 e 128 caracteres
    - ao menos 1 letra e 1 número
    - não pode conter o usuário do e-mail
    """
    if not password or len(password) < MIN_LENGTH:
        raise PasswordValidationError(f"A senha deve ter ao menos {MIN_LENGTH} caracteres.")

    if len(password) > MAX_LENGTH:
        raise PasswordValidationError(f"A senha deve ter no máximo {MAX_LENGTH} caracteres.")

    if not re.search(r"[A-Za-z]", password):
        raise PasswordValidationError("A senha deve conter ao menos 1 letra.")

    if not re.search(r"\d", password):
        raise PasswordValidationError("A senha deve conter ao menos 1 número.")

    local_part = (email or "").split("@", 1)[0].strip().lower()
    if len(local_part) >= 4 and local_part in password.lower():
        raise PasswordValidationError("A senha não pode conter o seu e-mail.")
