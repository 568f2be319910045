from __future__ import annotations

import pytest
from fastapi import Depends, FastAPI, Request
from fastapi.testclient import TestClient

from cube.common.options import OptionsError
from cube.plugin import Plugin, PluginError, get_cube
from cube.services.cube import Cube

from tests.services.mock_storage import MockStorageDriver


def test_register_without_options_fails():
    app = FastAPI()

    with pytest.raises(OptionsError):
        Plugin.register(app, None, driver=MockStorageDriver())

    assert getattr(app.state, "cube", None) is None


def test_register_exposes_cube_accessor(options, driver):
    app = FastAPI()

    cube = Plugin.register(app, options, driver=driver)

    assert isinstance(cube, Cube)
    assert callable(app.state.cube_accessor)
    assert app.state.cube_accessor() is cube
    assert app.state.cube is cube


def test_request_accessor_returns_server_cube(options, driver):
    app = FastAPI()
    Plugin.register(app, options, driver=driver)

    @app.get("/plugin")
    def handler(request: Request, cube: Cube = Depends(get_cube)):
        assert cube is request.app.state.cube_accessor()
        return {"bucket": cube.bucket.name}

    res = TestClient(app).get("/plugin")

    assert res.status_code == 200
    assert res.json() == {"bucket": "bucket"}


def test_register_twice_fails(options, driver):
    app = FastAPI()
    Plugin.register(app, options, driver=driver)

    with pytest.raises(PluginError):
        Plugin.register(app, options, driver=driver)


def test_get_cube_without_registration_fails():
    app = FastAPI()

    @app.get("/plugin")
    def handler(cube: Cube = Depends(get_cube)):
        return {}

    with pytest.raises(PluginError):
        TestClient(app).get("/plugin")


def test_accessor_before_attach_fails(options):
    plugin = Plugin(FastAPI(), options)

    with pytest.raises(PluginError):
        plugin.accessor()
