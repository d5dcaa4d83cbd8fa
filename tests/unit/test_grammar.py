"""
Unit tests for the typecraft DSL grammar.

Covers each construct parser on its own and whole files in both namespace
forms.
"""

from pathlib import Path

import pytest

from typecraft.core import ir
from typecraft.core.combinators import complete
from typecraft.core.dsl_parser_impl import (
    enum_definition,
    marker_definition,
    parse_dsl,
    record_definition,
    scalar_definition,
)
from typecraft.core.errors import ParseError


def parse_one(parser, text):
    outcome = complete(parser, text)
    assert outcome.ok, f"could not parse from: {outcome.remainder!r}"
    return outcome.value


class TestMarkerParsing:
    def test_marker_without_parents(self):
        assert parse_one(marker_definition(), "marker Foo;") == ir.Marker(
            classname="Foo", parents=[]
        )

    def test_marker_with_parents(self):
        assert parse_one(marker_definition(), "marker Foo : Bar, Baz;") == ir.Marker(
            classname="Foo", parents=["Bar", "Baz"]
        )

    def test_marker_with_qualified_parent(self):
        marker = parse_one(marker_definition(), "marker Foo : Shop.Named;")
        assert marker.parents == ["Shop.Named"]


class TestEnumParsing:
    def test_enum_ends_at_newline(self):
        assert parse_one(enum_definition(), "enum Color = Red | Green | Blue\n") == ir.EnumDef(
            classname="Color", constructors=["Red", "Green", "Blue"]
        )

    def test_enum_without_trailing_newline_fails(self):
        assert not complete(enum_definition(), "enum Color = Red | Green | Blue").ok


class TestScalarParsing:
    @pytest.mark.parametrize("kind", list(ir.ScalarKind))
    def test_each_kind_has_a_construct(self, kind):
        wrapper = parse_one(scalar_definition(), f"{kind.value} Wrapped;")
        assert wrapper == ir.ScalarWrapper(classname="Wrapped", kind=kind)

    def test_scalar_with_markers(self):
        wrapper = parse_one(scalar_definition(), "string Email : Named, Contact;")
        assert wrapper.markers == ["Named", "Contact"]


class TestRecordParsing:
    def test_record_arguments(self):
        record = parse_one(
            record_definition(),
            "data Person : Named = { string $name, ?Email $email, Tag[] $tags = [], $extra };",
        )
        assert record.classname == "Person"
        assert record.markers == ["Named"]
        assert record.arguments == [
            ir.Argument(name="name", type="string"),
            ir.Argument(name="email", type="Email", nullable=True),
            ir.Argument(name="tags", type="Tag", is_list=True, default="[]"),
            ir.Argument(name="extra"),
        ]

    def test_default_literals_are_kept_as_written(self):
        record = parse_one(
            record_definition(),
            """data Defaults = {
                int $i = -3,
                float $f = 1.5,
                bool $b = true,
                string $s = 'hello world',
                ?string $n = null
            };""",
        )
        assert [a.default for a in record.arguments] == ["-3", "1.5", "true", "'hello world'", "null"]

    def test_field_names_may_start_with_underscore(self):
        record = parse_one(record_definition(), "data R = { int $_count2 };")
        assert record.arguments[0].name == "_count2"

    def test_record_requires_dollar_sigil(self):
        assert not complete(record_definition(), "data R = { int count };").ok

    def test_type_names_must_be_capitalized(self):
        assert not complete(record_definition(), "data person = { string $name };").ok


class TestMessageParsing:
    def test_command(self):
        module = parse_dsl(
            """namespace Shop
command UserCommand : Auditable (UserId) =
    RegisterUser as 'user.register' (string $name, ?Email $email)
    | DeactivateUser ;
""",
            Path("test.tc"),
        )
        message = module.namespaces[0].definitions[0]

        assert isinstance(message, ir.Message)
        assert message.kind is ir.MessageKind.COMMAND
        assert message.markers == ["Auditable"]
        assert message.id_fields == [ir.IdField(name="command_id", type="UserId")]

        register, deactivate = message.constructors
        assert register.classname == "RegisterUser"
        assert register.discriminant == "user.register"
        assert [a.name for a in register.arguments] == ["name", "email"]
        assert deactivate.discriminant is None
        assert deactivate.arguments == []

    def test_event_has_two_ids(self):
        module = parse_dsl(
            "namespace Shop\nevent UserEvent (EventId, UserId) = UserRegistered (string $name) ;\n",
            Path("test.tc"),
        )
        message = module.namespaces[0].definitions[0]

        assert message.kind is ir.MessageKind.EVENT
        assert message.id_fields == [
            ir.IdField(name="event_id", type="EventId"),
            ir.IdField(name="aggregate_id", type="UserId"),
        ]

    def test_discriminant_forms(self):
        module = parse_dsl(
            """namespace Shop
command C (Id) = A as "a.double" | B as 'b.single' | D as d.bare-1 ;
""",
            Path("test.tc"),
        )
        constructors = module.namespaces[0].definitions[0].constructors
        assert [c.discriminant for c in constructors] == ["a.double", "b.single", "d.bare-1"]

    def test_reserved_argument_names_are_suffixed(self):
        module = parse_dsl(
            """namespace Shop
command C (Id) = Do (string $command_type, string $payload, string $payload, string $command_type2) ;
""",
            Path("test.tc"),
        )
        arguments = module.namespaces[0].definitions[0].constructors[0].arguments
        assert [a.name for a in arguments] == [
            "command_type2",
            "payload2",
            "payload3",
            "command_type22",
        ]


class TestNamespaceParsing:
    def test_implicit_namespace(self, shop_dsl):
        module = parse_dsl(shop_dsl, Path("shop.tc"))

        assert module.file == Path("shop.tc")
        (namespace,) = module.namespaces
        assert namespace.name == "Shop"
        assert namespace.imports == [ir.Import(path="uuid.UUID")]
        assert [d.classname for d in namespace.definitions] == [
            "Named",
            "Auditable",
            "Email",
            "Quantity",
            "Color",
            "Tag",
            "Product",
            "ProductCommand",
        ]

    def test_implicit_namespaces_end_at_next_namespace(self):
        module = parse_dsl(
            "namespace A\nmarker M;\nnamespace B.C\nuse A.M as Marked\nstring S : Marked;\n",
            Path("test.tc"),
        )
        a, bc = module.namespaces
        assert (a.name, [d.classname for d in a.definitions]) == ("A", ["M"])
        assert bc.name == "B.C"
        assert bc.imports == [ir.Import(path="A.M", alias="Marked")]
        assert [d.classname for d in bc.definitions] == ["S"]

    def test_brace_namespaces(self):
        module = parse_dsl(
            """
namespace A {
    marker M;
}

namespace B {
    use A.M
    data R : M = { string $x };
}
""",
            Path("test.tc"),
        )
        a, b = module.namespaces
        assert [d.classname for d in a.definitions] == ["M"]
        assert b.imports == [ir.Import(path="A.M")]
        assert isinstance(b.definitions[0], ir.Record)

    def test_mixed_forms(self):
        module = parse_dsl(
            "namespace A {\n  marker M;\n}\nnamespace B\nenum E = X | Y\n",
            Path("test.tc"),
        )
        assert [ns.name for ns in module.namespaces] == ["A", "B"]


class TestSyntaxErrors:
    def test_error_points_at_furthest_progress(self):
        text = "namespace Shop\nmarker Named;\ndata Broken = { string name };\n"

        with pytest.raises(ParseError) as exc_info:
            parse_dsl(text, Path("broken.tc"))

        context = exc_info.value.context
        assert context.file == Path("broken.tc")
        assert context.line == 3
        assert context.column == 1
        assert context.snippet.startswith("data Broken")
        assert "broken.tc:3:1" in str(exc_info.value)

    def test_unterminated_enum_at_end_of_file(self):
        with pytest.raises(ParseError):
            parse_dsl("namespace Shop\nenum Color = Red | Green", Path("test.tc"))

    def test_missing_namespace(self):
        with pytest.raises(ParseError):
            parse_dsl("marker Named;\n", Path("test.tc"))
