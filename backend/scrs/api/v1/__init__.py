# API v1 routers
from scrs.api.v1 import auth, users, admin, complaints, departments

__all__ = ["auth", "users", "admin", "complaints", "departments"]
