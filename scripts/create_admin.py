"""Cria (ou atualiza a senha de) um operador admin do painel.

Uso: python scripts/create_admin.py "Nome" email@exemplo.com
A senha é lida do prompt (ou de ADMIN_PASSWORD).
"""

import getpass
import os
import sys


def _setup_path():
    root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    if root not in sys.path:
        sys.path.insert(0, root)


def main(argv=None):
    _setup_path()
    argv = list(sys.argv[1:] if argv is None else argv)
    if len(argv) != 2:
        print(__doc__.strip())
        return 2

    from app import create_app
    from models.extensions import db
    from models.user_model import User
    from services.password_policy import PasswordValidationError, validate_password

    name, email = argv[0].strip(), argv[1].strip().lower()
    password = os.getenv("ADMIN_PASSWORD") or getpass.getpass("Senha: ")
    try:
        validate_password(password, email=email)
    except PasswordValidationError as exc:
        print(f"Erro: {exc}")
        return 1

    app = create_app()
    with app.app_context():
        user = User.query.filter_by(email=email).first()
        if user is None:
            user = User(name=name, email=email, is_admin=True)
            db.session.add(user)
            action = "criado"
        else:
            user.name = name
            user.is_admin = True
            # Troca de senha invalida tokens anteriores
            user.token_version = (user.token_version or 0) + 1
            action = "atualizado"
        user.set_password(password)
        db.session.commit()
        print(f"Admin {email} {action}.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
