"""
Tests for the Python backend.

Generated modules are written to a temporary directory, imported, and
exercised: round trips, validation errors, lazy decoding, equality.
"""

import uuid
from pathlib import Path

import pytest

from typecraft.backends import Backend, BackendRegistry, get_backend
from typecraft.backends.python import PythonBackend
from typecraft.backends.python.layout import module_path, order_declarations, package_inits
from typecraft.backends.python.renderer import identifier
from typecraft.core.errors import BackendError
from typecraft.generator.declarations import ClassDeclaration, ClassKind


@pytest.fixture
def shop(shop_dsl, render, import_generated):
    """The generated ``Shop`` module."""
    return import_generated(render(shop_dsl), "Shop")


@pytest.fixture
def product_data() -> dict:
    return {
        "id": str(uuid.uuid4()),
        "name": "Desk lamp",
        "contact": "sales@example.com",
        "stock": 3,
        "color": "Green",
        "tags": [{"label": "home"}, {"label": "light"}, {"label": "desk"}],
        "price": 24.5,
        "active": False,
    }


class TestLayout:
    def test_module_per_namespace(self):
        assert module_path("Shop", {"Shop"}) == Path("Shop.py")
        assert module_path("Shop.Orders", {"Shop.Orders"}) == Path("Shop/Orders.py")

    def test_namespace_with_children_becomes_package(self):
        namespaces = {"Shop", "Shop.Orders"}
        assert module_path("Shop", namespaces) == Path("Shop/__init__.py")
        assert module_path("Shop.Orders", namespaces) == Path("Shop/Orders.py")

    def test_package_inits(self):
        assert package_inits([Path("Shop.py")]) == []
        assert package_inits([Path("A/B/C.py"), Path("A/D.py")]) == [
            Path("A/__init__.py"),
            Path("A/B/__init__.py"),
        ]
        assert package_inits([Path("A/__init__.py"), Path("A/B.py")]) == []

    def test_bases_are_placed_first(self):
        child = ClassDeclaration(
            namespace="Shop", classname="Child", kind=ClassKind.FINAL, implements=["Shop.Base"]
        )
        base = ClassDeclaration(namespace="Shop", classname="Base", kind=ClassKind.INTERFACE)
        assert [d.classname for d in order_declarations([child, base])] == ["Base", "Child"]

    def test_identifier_escaping(self):
        assert identifier("class") == "class_"
        assert identifier("self") == "self_"
        assert identifier("cls") == "cls_"
        assert identifier("name") == "name"


class TestRender:
    def test_single_namespace(self, shop_dsl, render):
        files = render(shop_dsl)
        assert list(files) == [Path("Shop.py")]

        source = files[Path("Shop.py")]
        assert "from __future__ import annotations" in source
        assert "import uuid" in source
        assert "@typing.final\nclass Product(Auditable):" in source
        assert "class ProductCommand(abc.ABC):" in source
        assert "class Color(enum.Enum):" in source

    def test_cross_namespace_references_are_imported(self, render):
        files = render(
            "namespace Shop.Common\nstring Sku;\n",
            "namespace Shop.Orders\nuse Shop.Common.Sku\ndata Line = { Sku $sku };\n",
        )
        assert set(files) == {
            Path("Shop/Common.py"),
            Path("Shop/Orders.py"),
            Path("Shop/__init__.py"),
        }
        orders = files[Path("Shop/Orders.py")]
        assert "import Shop.Common" in orders
        assert "Shop.Common.Sku.from_value(" in orders

    def test_keywords_are_escaped(self, render, import_generated):
        files = render("namespace Kw\ndata Block = { string $class, ?string $from = null };\n")
        assert "def __init__(self, class_: str, from_: str | None = None):" in files[Path("Kw.py")]

        module = import_generated(files, "Kw")
        block = module.Block.from_dict({"class": "a", "from": None})
        assert block.to_dict() == {"class": "a", "from": None}


class TestGeneratedScalarsAndEnums:
    def test_scalar_wrapper(self, shop):
        email = shop.Email("a@example.com")
        assert email.value() == "a@example.com"
        assert shop.Email.from_value("a@example.com") == email
        assert email != shop.Email("b@example.com")
        assert isinstance(email, shop.Named)

    def test_scalar_wrapper_is_hashable(self, shop):
        assert len({shop.Email("a@x"), shop.Email("a@x"), shop.Email("b@x")}) == 2

    def test_scalar_wrapper_validates(self, shop):
        with pytest.raises(ValueError, match='Error on "Email", string expected'):
            shop.Email(3)
        with pytest.raises(ValueError, match='Error on "Quantity", int expected'):
            shop.Quantity(True)

    def test_enum(self, shop):
        assert [member.to_name() for member in shop.Color] == ["Red", "Green", "Blue"]
        assert shop.Color.from_name("Green") is shop.Color.Green
        assert shop.Color.Blue.ordinal() == 2

    def test_enum_rejects_unknown_names(self, shop):
        with pytest.raises(ValueError, match="Color name expected"):
            shop.Color.from_name("Purple")

    def test_marker_hierarchy(self, shop):
        assert issubclass(shop.Auditable, shop.Named)
        assert issubclass(shop.Product, shop.Auditable)


class TestGeneratedRecord:
    def test_round_trip(self, shop, product_data):
        assert shop.Product.from_dict(product_data).to_dict() == product_data

    def test_round_trip_with_null(self, shop, product_data):
        product_data["contact"] = None
        assert shop.Product.from_dict(product_data).to_dict() == product_data

    def test_list_order_is_preserved(self, shop, product_data):
        product = shop.Product.from_dict(product_data)
        assert [tag.label() for tag in product.tags()] == ["home", "light", "desk"]

    def test_decoded_values(self, shop, product_data):
        product = shop.Product.from_dict(product_data)
        assert product.id() == uuid.UUID(product_data["id"])
        assert product.contact() == shop.Email("sales@example.com")
        assert product.stock() == shop.Quantity(3)
        assert product.color() is shop.Color.Green

    def test_constructor_defaults(self, shop):
        product = shop.Product(
            uuid.uuid4(), "Chair", None, shop.Quantity(1), shop.Color.Red, []
        )
        assert product.price() == 9.5
        assert product.active() is True

    def test_defaulted_parameters_are_keyword_only_after_the_first(self, shop):
        with pytest.raises(TypeError):
            shop.Product(uuid.uuid4(), "Chair", None, shop.Quantity(1), shop.Color.Red, [], 1.0, False)

    def test_structural_equality(self, shop, product_data):
        assert shop.Product.from_dict(product_data) == shop.Product.from_dict(dict(product_data))
        other = dict(product_data, name="Floor lamp")
        assert shop.Product.from_dict(product_data) != shop.Product.from_dict(other)

    def test_equal_records_hash_equal(self, shop, product_data):
        first = shop.Product.from_dict(product_data)
        second = shop.Product.from_dict(dict(product_data))
        assert hash(first) == hash(second)
        assert {first: "lamp"}[second] == "lamp"

    def test_float_accepts_int(self, shop, product_data):
        product_data["price"] = 20
        assert shop.Product.from_dict(product_data).price() == 20

    @pytest.mark.parametrize(
        ("key", "value", "message"),
        [
            ("name", 5, 'Error on "name", string expected'),
            ("contact", 5, 'Error on "contact", string expected'),
            ("stock", "3", 'Error on "stock", int expected'),
            ("stock", True, 'Error on "stock", int expected'),
            ("color", "Purple", 'Error on "color", Color name expected'),
            ("tags", {"label": "x"}, 'Error on "tags", list expected'),
            ("active", 1, 'Error on "active", bool expected'),
        ],
    )
    def test_invalid_shapes(self, shop, product_data, key, value, message):
        product_data[key] = value
        with pytest.raises(ValueError) as exc_info:
            shop.Product.from_dict(product_data)
        assert str(exc_info.value) == message

    def test_missing_key_is_an_error_even_with_default(self, shop, product_data):
        del product_data["price"]
        with pytest.raises(ValueError, match='Error on "price", float expected'):
            shop.Product.from_dict(product_data)

    def test_nested_record_errors_propagate(self, shop, product_data):
        product_data["tags"] = [{"label": 1}]
        with pytest.raises(ValueError, match='Error on "label", string expected'):
            shop.Product.from_dict(product_data)


class TestGeneratedMessage:
    def test_occur_encodes_payload(self, shop):
        command_id = uuid.uuid4()
        command = shop.AddProduct.occur(command_id, "Lamp", shop.Quantity(2), [shop.Tag("new")])

        assert command.command_id() == command_id
        assert command.command_type() == "product.add"
        assert command.payload() == {"name": "Lamp", "stock": 2, "tags": [{"label": "new"}]}
        assert command.metadata() == {}

    def test_occur_list_default(self, shop):
        command = shop.AddProduct.occur(uuid.uuid4(), "Lamp", shop.Quantity(2))
        assert command.payload()["tags"] == []
        assert command.tags() == []

    def test_lazy_accessors_decode_once(self, shop):
        command = shop.AddProduct(
            uuid.uuid4(), {"name": "Lamp", "stock": 2, "tags": [{"label": "a"}]}
        )
        assert command.stock() == shop.Quantity(2)
        assert command.tags() == [shop.Tag("a")]
        assert command.tags() is command.tags()

    def test_to_dict_and_from_dict(self, shop):
        command_id = uuid.uuid4()
        command = shop.AddProduct.occur(
            command_id, "Lamp", shop.Quantity(2), metadata={"user": "alice"}
        )
        data = command.to_dict()

        assert data == {
            "command_type": "product.add",
            "command_id": str(command_id),
            "payload": {"name": "Lamp", "stock": 2, "tags": []},
            "metadata": {"user": "alice"},
        }

        restored = shop.ProductCommand.from_dict(data)
        assert isinstance(restored, shop.AddProduct)
        assert restored == command
        assert restored.to_dict() == data

    def test_from_dict_without_metadata(self, shop):
        command_id = uuid.uuid4()
        restored = shop.ProductCommand.from_dict(
            {"command_type": "product.remove", "command_id": str(command_id), "payload": {}}
        )
        assert isinstance(restored, shop.RemoveProduct)
        assert restored.metadata() == {}

    def test_unknown_discriminant(self, shop):
        data = {"command_type": "product.rename", "command_id": str(uuid.uuid4()), "payload": {}}
        with pytest.raises(ValueError, match='Unknown command type "product.rename" given'):
            shop.ProductCommand.from_dict(data)

    def test_invalid_payload(self, shop):
        with pytest.raises(ValueError, match='Error on "name", string expected'):
            shop.AddProduct(uuid.uuid4(), {"name": 1, "stock": 2, "tags": []})
        with pytest.raises(ValueError, match='Error on "payload", dict expected'):
            shop.AddProduct(uuid.uuid4(), [])

    def test_equality_is_by_subtype_and_id(self, shop):
        command_id = uuid.uuid4()
        first = shop.AddProduct.occur(command_id, "Lamp", shop.Quantity(1))
        second = shop.AddProduct.occur(command_id, "Chair", shop.Quantity(5))

        assert first == second
        assert first != shop.RemoveProduct.occur(command_id)
        assert first != shop.AddProduct.occur(uuid.uuid4(), "Lamp", shop.Quantity(1))
        assert hash(first) == hash(second)
        assert len({first, second, shop.RemoveProduct.occur(command_id)}) == 2

    def test_base_class_is_abstract(self, shop):
        with pytest.raises(TypeError):
            shop.ProductCommand(uuid.uuid4(), {})

    def test_merged_single_constructor(self, render, import_generated):
        files = render(
            "namespace Ping\nstring Id;\n"
            "event Ping (Id, Id) = Ping as 'ping' (int $count) ;\n"
        )
        module = import_generated(files, "Ping")

        ping = module.Ping.occur(module.Id("e1"), module.Id("a1"), 3)
        data = ping.to_dict()
        assert data == {
            "event_type": "ping",
            "event_id": "e1",
            "aggregate_id": "a1",
            "payload": {"count": 3},
            "metadata": {},
        }
        assert module.Ping.from_dict(data).count() == 3


class TestCrossNamespace:
    def test_records_reference_other_modules(self, render, import_generated):
        files = render(
            "namespace Shop.Common\nstring Sku;\nenum Unit = Piece | Box\n",
            """namespace Shop.Orders
use Shop.Common.Sku
use Shop.Common.Unit as Packaging
data Line = { Sku $sku, Packaging $unit, int $quantity };
data Order = { Line[] $lines, ?Line $highlight };
""",
        )
        orders = import_generated(files, "Shop.Orders")
        common = import_generated(files, "Shop.Common")

        data = {
            "lines": [
                {"sku": "A-1", "unit": "Box", "quantity": 2},
                {"sku": "B-7", "unit": "Piece", "quantity": 1},
            ],
            "highlight": None,
        }
        order = orders.Order.from_dict(data)
        assert order.to_dict() == data
        assert order.lines()[0].sku() == common.Sku("A-1")
        assert order.lines()[0].unit() is common.Unit.Box

    def test_namespaces_referencing_each_other(self, render, import_generated):
        files = render(
            "namespace Shop\nuse Shop.Orders.B\nmarker M;\ndata A = { B $b };\n",
            "namespace Shop.Orders\nuse Shop.M\ndata B : M = { int $n };\n",
        )
        assert "\nimport Shop.Orders\n" not in files[Path("Shop/__init__.py")]
        assert "\nimport Shop\n" in files[Path("Shop/Orders.py")]

        shop = import_generated(files, "Shop")
        a = shop.A.from_dict({"b": {"n": 1}})
        assert a.to_dict() == {"b": {"n": 1}}
        assert isinstance(a.b(), shop.M)


class TestBackendRegistry:
    def test_python_backend_is_registered(self):
        assert isinstance(get_backend("python"), PythonBackend)

    def test_unknown_backend(self):
        with pytest.raises(BackendError, match="Backend 'cobol' not found") as exc_info:
            get_backend("cobol")
        assert str(exc_info.value).endswith("Available backends: python")

    def test_list_backends_is_sorted(self):
        registry = BackendRegistry()
        registry.register("python", PythonBackend)
        registry.register("listing", PythonBackend)
        assert registry.list_backends() == ["listing", "python"]

    def test_duplicate_registration(self):
        registry = BackendRegistry()
        registry.register("python", PythonBackend)
        with pytest.raises(BackendError, match="already registered"):
            registry.register("python", PythonBackend)

    def test_registration_requires_backend_subclass(self):
        registry = BackendRegistry()
        with pytest.raises(BackendError, match="must extend Backend"):
            registry.register("bogus", dict)

    def test_custom_backend(self, tmp_path, shop_dsl, generate):
        class ListingBackend(Backend):
            def render(self, declarations):
                return {Path("classes.txt"): "\n".join(declarations)}

        registry = BackendRegistry()
        registry.register("listing", ListingBackend)
        result = registry.get("listing").generate(generate(shop_dsl), tmp_path)

        assert result.files_created == [tmp_path / "classes.txt"]
        assert (tmp_path / "classes.txt").read_text().splitlines()[0] == "Shop.Named"

    def test_generate_writes_files(self, tmp_path, shop_dsl, generate):
        result = PythonBackend().generate(generate(shop_dsl), tmp_path / "out")
        assert result.files_created == [tmp_path / "out" / "Shop.py"]
        assert (tmp_path / "out" / "Shop.py").read_text().startswith('"""Generated by typecraft')
