from fastapi import FastAPI, APIRouter

import importlib
import logging
import pkgutil
from types import ModuleType

_log = logging.getLogger(__name__)


def register_routes(app: FastAPI) -> None:  # noqa: D401
    """Automatically discover and attach all route files in this package.

    Each module that exposes a top-level ``router`` variable (an instance of
    ``fastapi.APIRouter``) will be imported and registered. Modules whose name
    starts with an underscore hold shared helpers and are skipped.
    """

    package_name = __name__

    for mod_info in pkgutil.iter_modules(__path__):  # type: ignore[name-defined]
        mod_name = mod_info.name

        if mod_name.startswith("_"):
            continue

        module: ModuleType = importlib.import_module(f"{package_name}.{mod_name}")
        router = getattr(module, "router", None)

        if isinstance(router, APIRouter):
            app.include_router(router)
            _log.info("Registered router from %s", mod_name)
        else:
            _log.debug("No router found in %s", mod_name)
