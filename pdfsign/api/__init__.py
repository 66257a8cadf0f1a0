from . import documents, sign

routers = [
    sign.router,
    documents.router,
]

__all__ = [
    "routers",
]
