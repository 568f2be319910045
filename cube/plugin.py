"""FastAPI registration for the storage facade.

``Plugin.register(app, options)`` validates the options, builds one
:class:`Cube` for the application and attaches it to ``app.state``. Request
handlers receive it through ``Depends(get_cube)``.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping

from fastapi import FastAPI, Request

from cube.common.options import CubeOptions, validate_options
from cube.infra.storage.client import StorageDriver
from cube.services.cube import Cube

logger = logging.getLogger("cube.startup")


class PluginError(RuntimeError):
    """Raised when the plugin is missing or registered twice."""


class Plugin:
    def __init__(
        self, app: FastAPI, options: CubeOptions | Mapping[str, Any] | None
    ) -> None:
        self.app = app
        self.options = validate_options(options)
        self.cube: Cube | None = None

    @classmethod
    def register(
        cls,
        app: FastAPI,
        options: CubeOptions | Mapping[str, Any] | None,
        *,
        driver: StorageDriver | None = None,
    ) -> Cube:
        return cls(app, options).attach(driver=driver)

    def accessor(self) -> Cube:
        if self.cube is None:
            raise PluginError("cube plugin has not been attached")
        return self.cube

    def attach(self, *, driver: StorageDriver | None = None) -> Cube:
        if getattr(self.app.state, "cube", None) is not None:
            raise PluginError("cube plugin is already registered on this application")
        self.cube = Cube(self.options, driver=driver)
        self.app.state.cube = self.cube
        self.app.state.cube_accessor = self.accessor
        logger.info(
            "cube registered bucket=%s region=%s path_style=%s",
            self.options.connection.bucket,
            self.options.connection.region,
            self.options.location.path,
        )
        return self.cube


def get_cube(request: Request) -> Cube:
    accessor: Callable[[], Cube] | None = getattr(
        request.app.state, "cube_accessor", None
    )
    if accessor is None:
        raise PluginError("cube plugin is not registered on this application")
    return accessor()


__all__ = ["Plugin", "PluginError", "get_cube"]
