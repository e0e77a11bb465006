import hashlib
import secrets
from datetime import datetime, timezone
from flask import current_app
from clinic_api.extensions import db, bcrypt

# --- Roles ---
PATIENT = 'patient'
DOCTOR = 'doctor'
RECEPTIONIST = 'receptionist'
ADMIN = 'admin'
USER_TYPES = (PATIENT, DOCTOR, RECEPTIONIST, ADMIN)

# Keyed by bcrypt cost so the dummy check costs what a real one does
_dummy_password_hashes = {}


def utcnow() -> datetime:
    """Naive UTC timestamp, matching how DateTime columns are stored."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class User(db.Model):
    """Account record used for authentication and role checks."""
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(100), unique=True, nullable=False, index=True)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password = db.Column(db.String(255), nullable=False)
    user_type = db.Column(db.String(20), nullable=False, default=PATIENT)
    password_changed_at = db.Column(db.DateTime)
    password_reset_token = db.Column(db.String(64), index=True)
    password_reset_expires = db.Column(db.DateTime)
    created_at = db.Column(db.DateTime, default=utcnow)

    @staticmethod
    def create_hash(value: str) -> str:
        """Creates a SHA-256 hash for a given string."""
        return hashlib.sha256(value.encode('utf-8')).hexdigest()

    def set_password(self, password: str) -> None:
        """Hashes and sets the user's password, stamping when it changed."""
        self.password = bcrypt.generate_password_hash(password).decode('utf-8')
        self.password_changed_at = utcnow()

    def check_password(self, password: str) -> bool:
        return bcrypt.check_password_hash(self.password, password)

    @staticmethod
    def check_dummy_password(password: str) -> bool:
        """Spends one bcrypt comparison when there is no account to check against."""
        rounds = current_app.config.get('BCRYPT_LOG_ROUNDS', 12)
        dummy_hash = _dummy_password_hashes.get(rounds)
        if dummy_hash is None:
            dummy_hash = bcrypt.generate_password_hash(secrets.token_hex(16)).decode('utf-8')
            _dummy_password_hashes[rounds] = dummy_hash
        return bcrypt.check_password_hash(dummy_hash, password)

    def changed_password_after(self, issued_at: int) -> bool:
        """True if the password was changed after a token issued at `issued_at` (epoch seconds)."""
        if self.password_changed_at is None:
            return False
        changed_at = int(self.password_changed_at.replace(tzinfo=timezone.utc).timestamp())
        return changed_at > issued_at

    def create_password_reset_token(self) -> str:
        """
        Generates a reset token, storing only its digest and expiry.

        Returns the plaintext token, which must be delivered out-of-band.
        Any earlier token for this user stops matching.
        """
        reset_token = secrets.token_hex(32)
        self.password_reset_token = self.create_hash(reset_token)
        self.password_reset_expires = utcnow() + current_app.config['PASSWORD_RESET_EXPIRES']
        return reset_token

    @classmethod
    def find_by_reset_token(cls, reset_token: str):
        """Returns the user holding an unexpired reset token, or None."""
        return cls.query.filter(
            cls.password_reset_token == cls.create_hash(reset_token),
            cls.password_reset_expires > utcnow()
        ).first()

    @classmethod
    def claim_password_reset_token(cls, user_id, reset_token: str) -> bool:
        """
        Clears a reset token only if it is still stored and unexpired.

        The check and the clear are one UPDATE, so of two requests racing
        with the same token exactly one sees a claimed row.
        """
        claimed = cls.query.filter(
            cls.id == user_id,
            cls.password_reset_token == cls.create_hash(reset_token),
            cls.password_reset_expires > utcnow()
        ).update(
            {cls.password_reset_token: None, cls.password_reset_expires: None},
            synchronize_session=False
        )
        return claimed == 1

    def to_dict(self):
        """Serializes the User object to a dictionary for API responses."""
        return {
            'id': self.id,
            'username': self.username,
            'email': self.email,
            'user_type': self.user_type,
            'password_changed_at': self.password_changed_at.isoformat() if self.password_changed_at else None,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
