
from flask import current_app
from flask_login import UserMixin
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer
from werkzeug.security import check_password_hash, generate_password_hash

from models.extensions import db
from services.date_utils import utcnow


class User(UserMixin, db.Model):
    """Operador do painel administrativo."""

    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(140), nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    is_admin = db.Column(db.Boolean, default=False, nullable=False)
    is_enabled = db.Column(db.Boolean, default=True, nullable=False)

    # Incrementado no logout: invalida tokens emitidos antes
    token_version = db.Column(db.Integer, default=0, nullable=False)

    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    @property
    def is_active(self) -> bool:
        return bool(self.is_enabled)

    def set_password(self, password: str) -> None:
        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        return check_password_hash(self.password_hash, password)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "is_admin": bool(self.is_admin),
        }

    @staticmethod
    def _serializer():
        return URLSafeTimedSerializer(current_app.config["SECRET_KEY"], salt="api-token")

    def generate_api_token(self) -> str:
        s = self._serializer()
        return s.dumps({"uid": self.id, "v": self.token_version or 0})

    @staticmethod
    def from_api_token(token: str, max_age_seconds: int | None = None):
        if not token:
            return None
        if max_age_seconds is None:
            max_age_seconds = int(current_app.config.get("API_TOKEN_MAX_AGE", 60 * 60 * 24 * 7))
        s = User._serializer()
        try:
            data = s.loads(token, max_age=max_age_seconds)
        except (BadSignature, SignatureExpired):
            return None

        user_id = data.get("uid")
        if not user_id:
            return None
        user = db.session.get(User, int(user_id))
        if not user or int(data.get("v", -1)) != int(user.token_version or 0):
            return None
        return user
