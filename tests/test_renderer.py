from textwrap import dedent

from gouml.model import (
    KIND_ALIAS,
    KIND_FUNCTIONS,
    KIND_INTERFACE,
    KIND_STRUCT,
    Alias,
    EntityModel,
    Field,
    Method,
    TypeParameter,
)
from gouml.renderer.plantuml import RenderingOptions, options_legend, render_plantuml


def zoo_model():
    model = EntityModel()
    dog = model.get_or_create("zoo", "Dog")
    dog.kind = KIND_STRUCT
    dog.fields = [Field("Name", "string", "string"), Field("age", "int", "int")]
    dog.methods = [
        Method("Speak", [], ["string"], ["string"], "zoo"),
        Method("chase", [Field("target", "*Cat", "*zoo.Cat"), Field("", "int")], ["bool", "error"]),
    ]
    dog.extends.add("zoo.Speaker")
    speaker = model.get_or_create("zoo", "Speaker")
    speaker.kind = KIND_INTERFACE
    speaker.methods = [Method("Speak", [], ["string"], ["string"], "zoo")]
    return model


def test_full_document():
    expected = dedent(
        """\
        @startuml
        namespace zoo {
            class Dog << (S,Aquamarine) >> {
                - age int

                + Name string

                - chase(target *Cat, int) (bool, error)

                + Speak() string

            }
            interface Speaker {
                + Speak() string

            }
        }

        "zoo.Speaker" <|-- "zoo.Dog"
        @enduml
        """
    )
    assert render_plantuml(zoo_model()) == expected


def test_title_and_notes():
    text = render_plantuml(EntityModel(), RenderingOptions(title="Zoo", notes="one\ntwo"))
    assert text == "@startuml\ntitle Zoo\nlegend\none\ntwo\nend legend\n@enduml\n"


def test_connection_labels_name_implementations():
    text = render_plantuml(zoo_model(), RenderingOptions(show_connection_labels=True))
    assert '"zoo.Speaker" <|-- "zoo.Dog" : implements' in text


def test_value_embedding_labelled_extends():
    model = EntityModel()
    car = model.get_or_create("garage", "Car")
    car.kind = KIND_STRUCT
    car.add_to_extends("garage.Engine")
    engine = model.get_or_create("garage", "Engine")
    engine.kind = KIND_STRUCT
    text = render_plantuml(model, RenderingOptions(show_connection_labels=True))
    assert '"garage.Engine" <|-- "garage.Car" : extends' in text


def test_hide_private_members():
    text = render_plantuml(zoo_model(), RenderingOptions(show_private_members=False))
    assert "age" not in text
    assert "chase" not in text
    assert "+ Name string" in text


def test_hide_fields_keeps_methods():
    text = render_plantuml(zoo_model(), RenderingOptions(show_fields=False))
    assert "+ Name string" not in text
    assert "+ Speak() string" in text
    assert text.endswith("hide fields\n@enduml\n")


def test_hide_fields_and_methods_closes_every_block():
    text = render_plantuml(zoo_model(), RenderingOptions(show_fields=False, show_methods=False))
    assert "class Dog << (S,Aquamarine) >> {\n    }\n" in text
    assert text.count("{") == text.count("}")
    assert text.endswith("hide fields\nhide methods\n@enduml\n")


def test_alias_edges_are_sorted():
    model = EntityModel()
    for package, name, of in [("q", "q.Name", "string"), ("p", "p.ID", "int")]:
        record = model.get_or_create(package, name.split(".")[1])
        record.kind = KIND_ALIAS
        model.add_alias(Alias(name, "__builtin__", of))
    text = render_plantuml(model)
    assert "class ID << (T, #FF7700) >> {" in text
    first = text.index('"p.ID" #.. "__builtin__.int"')
    second = text.index('"q.Name" #.. "__builtin__.string"')
    assert first < second


def test_aliases_can_be_disabled():
    model = EntityModel()
    model.add_alias(Alias("p.ID", "__builtin__", "int"))
    assert "#.." not in render_plantuml(model, RenderingOptions(show_aliases=False))


def test_aggregations_respect_visibility_options():
    model = EntityModel()
    car = model.get_or_create("garage", "Car")
    car.kind = KIND_STRUCT
    car.add_to_aggregations("garage.Engine")
    car.add_to_aggregations("*garage.Radio", private=True)

    assert "o--" not in render_plantuml(model)

    public_only = render_plantuml(model, RenderingOptions(show_aggregations=True))
    assert '"garage.Car" o-- "garage.Engine"' in public_only
    assert "garage.Radio" not in public_only

    both = render_plantuml(
        model,
        RenderingOptions(show_aggregations=True, aggregate_private_members=True),
    )
    assert '"garage.Car" o-- "garage.Radio"' in both


def test_composition_edge_and_unqualified_targets():
    model = EntityModel()
    car = model.get_or_create("garage", "Car")
    car.kind = KIND_STRUCT
    car.add_to_composition("*Radio")
    car.add_to_aggregations("int")
    text = render_plantuml(
        model,
        RenderingOptions(show_aggregations=True, show_connection_labels=True),
    )
    assert '"garage.Radio" *-- "garage.Car" : embeds' in text
    assert '"garage.Car" o-- "__builtin__.int" : uses' in text


def test_edges_are_emitted_once():
    model = zoo_model()
    model.get_or_create("zoo", "Dog").add_to_extends("Speaker")
    text = render_plantuml(model)
    assert text.count('"zoo.Speaker" <|-- "zoo.Dog"') == 1


def test_nested_namespaces_and_stereotypes():
    model = EntityModel()
    box = model.get_or_create("proj.util", "Box")
    box.kind = KIND_STRUCT
    box.type_parameters = [TypeParameter("T", "any")]
    funcs = model.get_or_create("proj", "GeneralFunctions")
    funcs.kind = KIND_FUNCTIONS
    funcs.methods = [Method("Run", [], ["error"], ["error"], "proj")]

    lines = render_plantuml(model).splitlines()
    assert lines[:9] == [
        "@startuml",
        "namespace proj {",
        "    class GeneralFunctions << (F,LightSkyBlue) >> {",
        "        + Run() error",
        "",
        "    }",
        "    namespace util {",
        "        class Box<T any> << (S,Aquamarine) >> {",
        "        }",
    ]


def test_placeholder_records_are_not_rendered():
    model = EntityModel()
    model.get_or_create("zoo", "Ghost")
    assert "Ghost" not in render_plantuml(model)


def test_options_legend():
    legend = options_legend(RenderingOptions(show_aggregations=True))
    lines = legend.splitlines()
    assert lines[0] == "<u><b>Legend</b></u>"
    assert "Render Aggregations: true" in lines
    assert "Render Connection Labels: false" in lines


def test_package_of_placeholders_opens_no_namespace():
    model = EntityModel()
    model.get_or_create("zoo", "Ghost")
    assert render_plantuml(model) == "@startuml\n@enduml\n"


def test_alias_of_structural_type_has_no_edge():
    model = EntityModel()
    handler = model.get_or_create("zoo", "Handler")
    handler.kind = KIND_ALIAS
    model.add_alias(Alias("zoo.Handler", "zoo", "func(fmt.Stringer) error"))
    model.add_alias(Alias("zoo.ID", "__builtin__", "int"))
    text = render_plantuml(model)
    assert "class Handler << (T, #FF7700) >> {" in text
    assert "func(fmt.Stringer)" not in text
    assert '"zoo.ID" #.. "__builtin__.int"' in text
