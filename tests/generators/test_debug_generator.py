"""Tests for derivekit.generators.debug."""

from __future__ import annotations

from pathlib import Path

from derivekit.config import DebugConfig, DeriveKitConfig
from derivekit.generators.debug import DebugGenerator
from tests._fixtures.rust_sources import descriptor_for


def _generate(source: str, generator: DebugGenerator | None = None) -> str:
    generator = generator or DebugGenerator()
    return generator.generate(descriptor_for(source, derive=generator.derive))


def test_fields_render_in_declaration_order_with_templates() -> None:
    code = _generate(
        """
        pub struct Field {
            name: &'static str,
            #[debug = "0b{:08b}"]
            bitmask: u8,
        }
        """
    )

    assert code == (
        "impl ::std::fmt::Debug for Field {\n"
        "    fn fmt(&self, fmt: &mut ::std::fmt::Formatter<'_>) -> ::std::fmt::Result {\n"
        '        fmt.debug_struct("Field")\n'
        '            .field("name", &self.name)\n'
        '            .field("bitmask", &format_args!("0b{:08b}", &self.bitmask))\n'
        "            .finish()\n"
        "    }\n"
        "}\n"
    )


def test_value_parameter_is_bounded() -> None:
    code = _generate("pub struct Field<T> { value: T }")

    assert code.startswith("impl<T: ::std::fmt::Debug> ::std::fmt::Debug for Field<T> {\n")


def test_phantom_parameter_is_not_bounded() -> None:
    code = _generate("pub struct Field<T> { marker: PhantomData<T>, string: S }")

    assert code.startswith("impl<T> ::std::fmt::Debug for Field<T> {\n")


def test_associated_type_goes_to_where_clause() -> None:
    code = _generate("pub struct Field<T: Trait> { values: Vec<T::Value> }")

    assert code.startswith(
        "impl<T: Trait> ::std::fmt::Debug for Field<T> where T::Value: ::std::fmt::Debug {\n"
    )


def test_existing_where_clause_is_extended() -> None:
    code = _generate("pub struct Field<'a, T> where T: Clone { value: &'a T }")

    assert code.startswith(
        "impl<'a, T: ::std::fmt::Debug> ::std::fmt::Debug for Field<'a, T> where T: Clone {\n"
    )


def test_bound_override_replaces_inference() -> None:
    code = _generate(
        """
        #[debug(bound = "T::Value: Debug")]
        pub struct Wrapper<T: Trait> {
            field: Field<T>,
        }
        """
    )

    assert code.startswith("impl<T: Trait> ::std::fmt::Debug for Wrapper<T> where T::Value: Debug {\n")


def test_templates_and_names_are_escaped() -> None:
    code = _generate(
        """
        struct Quote {
            #[debug = "say \\"{}\\""]
            r#type: String,
        }
        """
    )

    assert '.field("type", &format_args!("say \\"{}\\"", &self.r#type))' in code


def test_configured_trait_path(tmp_path: Path) -> None:
    config = DeriveKitConfig(root=tmp_path, debug=DebugConfig(derive="Inspect", trait_path="core::fmt::Debug"))
    generator = DebugGenerator(config)

    code = _generate("struct Field<T> { value: T }", generator)

    assert generator.derive == "Inspect"
    assert code.startswith("impl<T: core::fmt::Debug> core::fmt::Debug for Field<T> {\n")
