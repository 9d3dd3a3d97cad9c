from .doctors import router as doctors_router
from .unbilled import router as unbilled_router

__all__ = [
    "doctors_router",
    "unbilled_router",
]
