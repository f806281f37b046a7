import pytest

from rescope.di.injector import Injector
from rescope.errors import PhaseViolationError


class Greeter:
    def __init__(self, greeting, punctuation):
        self.greeting = greeting
        self.punctuation = punctuation

    def greet(self, name):
        return f"{self.greeting}, {name}{self.punctuation}"


class GreeterProvider:
    instances = 0

    def __init__(self, default_greeting):
        GreeterProvider.instances += 1
        self.greeting = default_greeting

    def use_greeting(self, greeting):
        self.greeting = greeting

    def get(self, punctuation):
        return Greeter(self.greeting, punctuation)


@pytest.fixture(autouse=True)
def reset_instances():
    GreeterProvider.instances = 0


@pytest.fixture
def module(registry):
    return registry.get_module("app") \
        .constant("default_greeting", "Hello") \
        .value("punctuation", "!") \
        .provider("greeter", GreeterProvider)


class TestProviderRecipes:
    """Tests for provider configuration surfaces and products."""

    def test_config_phase_returns_surface(self, registry, module):
        """Test config blocks receive the provider itself."""
        seen = []
        module.config(lambda greeter: seen.append(greeter))

        Injector(registry).load("app")

        assert len(seen) == 1
        assert isinstance(seen[0], GreeterProvider)

    def test_run_phase_returns_product(self, registry, module):
        """Test run-phase resolution invokes the producer."""
        injector = Injector(registry).load("app")

        greeter = injector.resolve("greeter")

        assert isinstance(greeter, Greeter)
        assert greeter.greet("Ada") == "Hello, Ada!"

    def test_configuration_applies_to_product(self, registry, module):
        """Test changes made in config blocks shape the product."""
        module.config(lambda greeter: greeter.use_greeting("Howdy"))

        injector = Injector(registry).load("app")

        assert injector.resolve("greeter").greet("Ada") == "Howdy, Ada!"

    def test_surface_and_product_are_distinct_singletons(self, registry, module):
        """Test one surface and one product per name."""
        surfaces = []
        module.config(lambda greeter: surfaces.append(greeter))
        module.config(lambda greeter: surfaces.append(greeter))

        injector = Injector(registry).load("app")

        assert surfaces[0] is surfaces[1]
        assert injector.resolve("greeter") is injector.resolve("greeter")
        assert injector.resolve("greeter") is not surfaces[0]
        assert GreeterProvider.instances == 1

    def test_surface_built_lazily_in_run_phase(self, registry, module):
        """Test a provider never touched in config is built on first run-phase request."""
        injector = Injector(registry).load("app")

        assert GreeterProvider.instances == 0
        injector.resolve("greeter")
        assert GreeterProvider.instances == 1

    def test_provider_object_with_get(self, registry):
        """Test a ready-made object is its own surface."""
        class Surface:
            def get(self):
                return "product"

        surface = Surface()
        seen = []
        registry.get_module("app") \
            .provider("thing", surface) \
            .config(lambda thing: seen.append(thing))

        injector = Injector(registry).load("app")

        assert seen == [surface]
        assert injector.resolve("thing") == "product"

    def test_provider_function_returning_surface(self, registry):
        """Test a function may build the surface."""
        class Surface:
            def __init__(self, size):
                self.size = size

            def get(self):
                return ["x"] * self.size

        registry.get_module("app") \
            .constant("size", 2) \
            .provider("things", lambda size: Surface(size))

        assert Injector(registry).load("app").resolve("things") == ["x", "x"]

    def test_surface_without_producer_raises(self, registry):
        """Test a surface must expose get()."""
        class NoProducer:
            pass

        registry.get_module("app").provider("broken", NoProducer)
        injector = Injector(registry).load("app")

        with pytest.raises(TypeError, match="get"):
            injector.resolve("broken")

    def test_surface_dependencies_limited_in_config_phase(self, registry):
        """Test providers built in config cannot depend on services."""
        class NeedsService:
            def __init__(self, service):
                pass

            def get(self):
                return None

        registry.get_module("app") \
            .factory("service", lambda: object()) \
            .provider("needs", NeedsService) \
            .config(lambda needs: None)

        with pytest.raises(PhaseViolationError):
            Injector(registry).load("app")
