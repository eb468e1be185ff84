__all__ = [
    "create_gateway_app",
    "create_service_app",
    "run_gateway",
    "run_service",
]


def create_gateway_app(*args, **kwargs):
    from .gateway_app import create_gateway_app as _create_gateway_app
    return _create_gateway_app(*args, **kwargs)


def create_service_app(*args, **kwargs):
    from .service_app import create_service_app as _create_service_app
    return _create_service_app(*args, **kwargs)


def run_gateway():
    from .gateway_app import run_gateway as _run_gateway
    return _run_gateway()


def run_service():
    from .service_app import run_service as _run_service
    return _run_service()
