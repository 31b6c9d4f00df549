import importlib
import inspect
import pkgutil

from fastapi import APIRouter, FastAPI
from loguru import logger


def discover_routers(package_name: str = "rollengine.api") -> list[tuple[APIRouter, str]]:
    """
    Discover all router instances in a package and its subpackages.

    Args:
        package_name: The package to scan for routers.

    Returns:
        A list of tuples containing the router instance and its subpath, e.g. ``/v2`` for
        routers found in ``rollengine.api.v2``.
    """
    routers: list[tuple[APIRouter, str]] = []

    package = importlib.import_module(package_name)
    package_path = getattr(package, "__path__", None)

    if not package_path:
        logger.warning(f"Cannot scan {package_name} for routers as it's not a package")
        return routers

    parts = package_name.split(".")
    subpath = f"/{parts[2]}" if len(parts) > 2 else ""

    for _, module_name, is_pkg in pkgutil.iter_modules(package_path):
        full_module_name = f"{package_name}.{module_name}"

        if is_pkg:
            routers.extend(discover_routers(full_module_name))
            continue

        module = importlib.import_module(full_module_name)
        for _, obj in inspect.getmembers(module):
            if isinstance(obj, APIRouter):
                routers.append((obj, subpath))
                logger.info(f"Discovered router in {full_module_name}")

    return routers


def register_routers(app: FastAPI, prefix: str = "/api") -> None:
    """
    Register all routers in the rollengine.api package with the FastAPI app.

    Args:
        app: The FastAPI app.
        prefix: The prefix to add to all routes.
    """
    for router, subpath in discover_routers():
        app.include_router(router, prefix=f"{prefix}{subpath}")
