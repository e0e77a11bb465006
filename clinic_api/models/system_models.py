# /clinic_api/models/system_models.py
from clinic_api.extensions import db
from clinic_api.models.user_models import utcnow

class AuditLog(db.Model):
    """Audit trail of authentication events"""
    __tablename__ = 'audit_logs'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='SET NULL'))
    timestamp = db.Column(db.DateTime, default=utcnow, nullable=False)
    action = db.Column(db.String(100), nullable=False)
    resource = db.Column(db.String(100))
    ip_address = db.Column(db.String(45))
    user_agent = db.Column(db.String(255))
    success = db.Column(db.Boolean, default=True)
    details = db.Column(db.Text)
