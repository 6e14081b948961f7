# inventory_api/routers/__init__.py

from .auth.auth_router import router as auth_router
from .users.user_router import router as user_router

from .catalog.category_router import router as category_router
from .catalog.product_router import router as product_router

from .reports.report_router import router as report_router


__all__ = [
"auth_router",
"user_router",

"category_router",
"product_router",

"report_router",
]
