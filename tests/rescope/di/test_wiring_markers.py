import logging
import sys

import pytest
from dependency_injector.wiring import Provide, inject

from rescope.config.models import RuntimeSettings
from rescope.container import Runtime
from rescope.di.providers import (
    get_component,
    get_logger,
    get_raw_container,
    get_root_scope,
    get_runtime,
    get_settings,
)
from rescope.di.wiring import unwire, wire
from rescope.scope.scope import Scope


@inject
def injected_component(greeter=get_component("greeter")):
    return greeter


@inject
def injected_root_scope(scope=get_root_scope()):
    return scope


@inject
def injected_settings(settings=get_settings()):
    return settings


@inject
def injected_runtime(runtime=get_runtime()):
    return runtime


@inject
def injected_container(container=get_raw_container()):
    return container


@inject
def injected_logger(logger=get_logger("widgets")):
    return logger


class Greeter:

    def greet(self, name):
        return f"Hello, {name}"


@pytest.fixture
def wired_runtime():
    """A bootstrapped runtime wired to this test module."""
    runtime = Runtime(RuntimeSettings(_env_file=None))
    runtime.module("app", ["rescope"]).service("greeter", Greeter)
    runtime.bootstrap("app")
    wire(runtime, modules=[sys.modules[__name__]])
    yield runtime
    unwire(runtime)


class TestMarkers:
    """Tests for the wiring marker helpers."""

    def test_markers_are_provide_instances(self):
        """Test every helper returns a Provide marker."""
        for marker in (
                get_component("x"),
                get_root_scope(),
                get_settings(),
                get_runtime(),
                get_raw_container(),
                get_logger("x"),
        ):
            assert isinstance(marker, Provide)


class TestWire:
    """Tests for wiring @inject functions to a runtime."""

    def test_component(self, wired_runtime):
        """Test components are resolved through the injector."""
        greeter = injected_component()

        assert isinstance(greeter, Greeter)
        assert greeter is wired_runtime.resolve("greeter")

    def test_root_scope(self, wired_runtime):
        """Test the root scope is the runtime's one."""
        scope = injected_root_scope()

        assert isinstance(scope, Scope)
        assert scope is wired_runtime.root_scope

    def test_settings(self, wired_runtime):
        """Test the runtime settings are injected."""
        assert injected_settings() is wired_runtime.settings

    def test_runtime(self, wired_runtime):
        """Test the runtime itself is injected."""
        assert injected_runtime() is wired_runtime

    def test_raw_container(self, wired_runtime):
        """Test the container is injected."""
        assert injected_container() is wired_runtime.raw_container()

    def test_logger(self, wired_runtime):
        """Test loggers are children of the runtime logger."""
        logger = injected_logger()

        assert isinstance(logger, logging.Logger)
        assert logger.name == "rescope.widgets"

    def test_explicit_argument_wins(self, wired_runtime):
        """Test passing an argument skips injection."""
        assert injected_component(greeter="manual") == "manual"

    def test_wire_by_module_name(self, wired_runtime):
        """Test modules may be given by dotted name."""
        wire(wired_runtime, modules=[__name__])

        assert isinstance(injected_component(), Greeter)

    def test_wire_requires_bootstrap(self, settings):
        """Test wiring a runtime that was not bootstrapped fails."""
        with pytest.raises(AssertionError):
            wire(Runtime(settings), modules=[sys.modules[__name__]])

    def test_unknown_module_name_is_skipped(self, wired_runtime):
        """Test modules that cannot be imported are skipped with a warning."""
        wire(wired_runtime, modules=["rescope_no_such_module"])

        assert isinstance(injected_component(), Greeter)
