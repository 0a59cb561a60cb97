"""
Domain layer.

Status codes, the transport-to-domain status registry, the response
envelope and framework errors. No framework imports besides pydantic.
"""
