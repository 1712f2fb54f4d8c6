from app.models.admin import Admin, AdminSession
from app.models.member import Member
