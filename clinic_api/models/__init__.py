from clinic_api.models.user_models import User
from clinic_api.models.system_models import AuditLog
