"""
S3O middleware for ASGI and WSGI frameworks.

Re-exports middleware classes for convenient imports:
    from s3o_gate.middleware import S3OASGIMiddleware
    from s3o_gate.middleware import S3OWSGIMiddleware
"""

from .wsgi import S3OWSGIMiddleware

__all__: list[str] = ["S3OWSGIMiddleware"]

# ASGI middleware (FastAPI, Starlette)
try:
    from .asgi import S3OASGIMiddleware
    __all__.append("S3OASGIMiddleware")
except ImportError:
    pass
