# Router aggregation.
# Created: 2026-10-19
#
# mount_routers(app) registers every domain router at the site root; the
# deployed plugin expects the /auth/* paths without a version prefix.

from __future__ import annotations

import importlib
import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from fastapi import FastAPI

logger = logging.getLogger(__name__)

_ROUTERS: list[tuple[str, str, str]] = [
    # (module_path, attr_name, tag)
    ("authrelay.api.routes.relay", "router", "Relay"),
    ("authrelay.api.routes.profile", "router", "Profile"),
    ("authrelay.api.routes.site", "router", "Site"),
]


def mount_routers(app: FastAPI) -> None:
    """Mount all domain routers on *app*.

    A router that fails to import is a broken deployment, so the error
    propagates instead of leaving a half-mounted app.
    """
    for module_path, attr_name, tag in _ROUTERS:
        mod = importlib.import_module(module_path)
        app.include_router(getattr(mod, attr_name))
        logger.debug("Mounted router: %s (%s)", module_path, tag)
