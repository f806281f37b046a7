import pytest

from rescope.errors import (
    DuplicateComponentError,
    DuplicateModuleError,
    RegistrySealedError,
    UnknownModuleError,
)
from rescope.modules.recipes import RecipeKind, RegistrationInfo
from rescope.modules.registry import DuplicatePolicy, Module, Registry


class TestDefineModule:
    """Tests for module definition and lookup."""

    def test_define_module_returns_module(self):
        """Test defining a module returns it with its requirements."""
        registry = Registry()
        module = registry.define_module("app", ["core", "http"])

        assert isinstance(module, Module)
        assert module.name == "app"
        assert module.requires == ("core", "http")

    def test_get_module(self):
        """Test getting a defined module."""
        registry = Registry()
        module = registry.define_module("app")

        assert registry.get_module("app") is module

    def test_define_duplicate_module_raises(self):
        """Test defining the same module twice fails."""
        registry = Registry()
        registry.define_module("app")

        with pytest.raises(DuplicateModuleError, match="'app'"):
            registry.define_module("app")

    def test_get_unknown_module_raises(self):
        """Test getting an undefined module fails."""
        registry = Registry()

        with pytest.raises(UnknownModuleError) as exc_info:
            registry.get_module("missing")

        assert exc_info.value.name == "missing"

    def test_modules_may_reference_undefined_modules(self):
        """Test requirements are not checked at definition time."""
        registry = Registry()
        registry.define_module("app", ["defined_later"])
        registry.define_module("defined_later")

        assert set(registry.modules) == {"app", "defined_later"}


class TestRegister:
    """Tests for recipe registration."""

    def test_register_stores_recipe_without_invoking(self, registry):
        """Test registration never calls the constructor."""
        calls = []

        def build():
            calls.append(1)
            return object()

        recipe = registry.register("app", "thing", RecipeKind.FACTORY, [], build)

        assert calls == []
        assert recipe.kind is RecipeKind.FACTORY
        assert recipe.dependencies == ()
        assert recipe.module == "app"
        assert registry.find_recipe("thing") is recipe
        assert "thing" in registry

    def test_register_accepts_kind_value(self, registry):
        """Test kinds may be given by their string value."""
        recipe = registry.register("app", "answer", "constant", value=42)

        assert recipe.kind is RecipeKind.CONSTANT
        assert recipe.value == 42

    def test_register_without_dependencies_requests_inference(self, registry):
        """Test omitted dependencies are stored as None."""
        recipe = registry.register("app", "svc", RecipeKind.SERVICE, None, object)

        assert recipe.dependencies is None

    def test_register_in_unknown_module_raises(self, registry):
        """Test registering into an undefined module fails."""
        with pytest.raises(UnknownModuleError):
            registry.register("nope", "answer", RecipeKind.CONSTANT, value=1)

    def test_register_captures_registration_info(self, registry):
        """Test the calling location is recorded."""
        recipe = registry.register("app", "answer", RecipeKind.CONSTANT, value=1)

        assert isinstance(recipe.registration, RegistrationInfo)
        assert recipe.registration.file == __file__
        assert "test_registry" in recipe.registration.registered_by

    def test_module_helpers_record_caller_not_registry(self, registry):
        """Test fluent helpers report the user's module as registrar."""
        registry.get_module("app").constant("answer", 1)

        info = registry.find_recipe("answer").registration
        assert info.file == __file__

    def test_blocks_and_decorators_are_not_named_components(self, registry):
        """Test config/run blocks and decorators stay out of the namespace."""
        def block():
            pass

        module = registry.get_module("app")
        module.config(block).run(block).decorator("thing", lambda delegate: delegate)

        assert len(module.config_blocks) == 1
        assert len(module.run_blocks) == 1
        assert len(module.decorators) == 1
        assert "thing" not in registry
        assert module.recipes == {}

    def test_fluent_helpers_chain(self, registry):
        """Test every helper returns the module."""
        module = registry.get_module("app")

        result = module.constant("a", 1) \
            .value("b", 2) \
            .service("c", object) \
            .factory("d", lambda: 4) \
            .provider("e", object)

        assert result is module
        assert [r.kind for r in module.recipes.values()] == [
            RecipeKind.CONSTANT,
            RecipeKind.VALUE,
            RecipeKind.SERVICE,
            RecipeKind.FACTORY,
            RecipeKind.PROVIDER,
        ]


class TestDuplicatePolicy:
    """Tests for duplicate component names."""

    def test_overwrite_is_default(self):
        """Test the default policy overwrites."""
        assert Registry().duplicate_policy is DuplicatePolicy.OVERWRITE

    def test_overwrite_replaces_recipe_across_modules(self):
        """Test names are unique across modules and the last one wins."""
        registry = Registry()
        registry.define_module("a").constant("name", "from a")
        registry.define_module("b").constant("name", "from b")

        assert registry.owner_of("name") == "b"
        assert registry.find_recipe("name").value == "from b"
        assert "name" not in registry.get_module("a").recipes

    def test_overwrite_logs_warning(self, caplog):
        """Test overwriting is reported."""
        registry = Registry()
        registry.define_module("a").constant("name", 1)

        with caplog.at_level("WARNING"):
            registry.get_module("a").constant("name", 2)

        assert "overwritten" in caplog.text

    def test_error_policy_raises(self):
        """Test the error policy rejects a second registration."""
        registry = Registry(duplicate_policy="error")
        registry.define_module("a").constant("name", 1)
        registry.define_module("b")

        with pytest.raises(DuplicateComponentError) as exc_info:
            registry.get_module("b").constant("name", 2)

        assert exc_info.value.existing_module == "a"
        assert registry.find_recipe("name").value == 1


class TestSeal:
    """Tests for the sealed registry."""

    def test_sealed_registry_rejects_registration(self, registry):
        """Test recipes cannot be added after sealing."""
        registry.seal()

        assert registry.sealed
        with pytest.raises(RegistrySealedError):
            registry.get_module("app").constant("late", 1)

    def test_sealed_registry_rejects_modules(self, registry):
        """Test modules cannot be defined after sealing."""
        registry.seal()

        with pytest.raises(RegistrySealedError):
            registry.define_module("late")
