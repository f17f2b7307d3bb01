import pytest

from gouml.config import GoumlConfig
from gouml.errors import DirectoryNotFoundError, GoSyntaxError
from gouml.pipeline import analyze, run

ZOO = """
package zoo

type Speaker interface {
    Speak() string
}

type Dog struct {
    Name  string
    Owner *Person
}

func (d Dog) Speak() string { return "woof" }

type Cat struct{}

func (c *Cat) Speak() int { return 1 }
"""

PEOPLE = """
package people

type ID int

type Person struct {
    Engine
    *Address
    id ID
}
"""


@pytest.fixture
def project(tmp_path, write_go):
    root = tmp_path / "proj"
    write_go(root / "zoo", "zoo.go", ZOO)
    write_go(root / "people", "person.go", PEOPLE)
    write_go(root / "people", "person_test.go", "package people\n\nfunc broken( {\n")
    return root


def test_recursive_scan(project):
    model, packages = analyze(GoumlConfig(directories=[project], recursive=True))
    assert [p.full_path for p in packages] == ["proj"]
    assert model.lookup("proj.zoo.Dog").extends == {"proj.zoo.Speaker"}
    assert model.lookup("proj.zoo.Cat").extends == set()
    person = model.lookup("proj.people.Person")
    assert person.extends == {"proj.people.Engine"}
    assert person.composition == {"proj.people.Address"}
    assert person.private_aggregations == {"proj.people.ID"}


def test_rendered_relationships(project):
    config = GoumlConfig(directories=[project], recursive=True)
    config.rendering.show_aggregations = True
    text = run(config)
    assert text.startswith("@startuml\nnamespace proj {\n    namespace people {\n")
    assert '"proj.zoo.Speaker" <|-- "proj.zoo.Dog"' in text
    assert '"proj.zoo.Speaker" <|-- "proj.zoo.Cat"' not in text
    assert '"proj.people.Address" *-- "proj.people.Person"' in text
    assert '"proj.people.ID" #.. "__builtin__.int"' in text
    assert '"proj.zoo.Dog" o-- "proj.zoo.Person"' in text
    assert '"proj.people.Person" o-- "proj.people.ID"' not in text


def test_output_is_idempotent(project):
    config = GoumlConfig(directories=[project], recursive=True)
    assert run(config) == run(config)


def test_root_order_does_not_matter(project):
    zoo, people = project / "zoo", project / "people"
    first = run(GoumlConfig(directories=[zoo, people]))
    second = run(GoumlConfig(directories=[people, zoo]))
    assert first == second


def test_non_recursive_scan_only_reads_the_root(project):
    model, _ = analyze(GoumlConfig(directories=[project]))
    assert model.records() == []


def test_ignored_and_hidden_directories(project, write_go):
    write_go(project / ".cache", "x.go", "package x\n\ntype Hidden struct{}\n")
    write_go(project / "vendor" / "lib", "lib.go", "package lib\n\ntype Vendored struct{}\n")
    config = GoumlConfig(
        directories=[project],
        recursive=True,
        ignored_directories=[project / "zoo"],
    )
    model, _ = analyze(config)
    names = {r.name for r in model.records()}
    assert "Person" in names
    assert names.isdisjoint({"Dog", "Hidden", "Vendored"})


def test_max_depth_skips_deep_packages(project, write_go):
    write_go(project / "zoo" / "deep", "deep.go", "package deep\n\ntype Deep struct{}\n")
    model, _ = analyze(GoumlConfig(directories=[project], recursive=True, max_depth=2))
    assert model.lookup("proj.zoo.Dog") is not None
    assert model.lookup("proj.zoo.deep.Deep") is None


def test_output_file_is_written(project, tmp_path):
    out = tmp_path / "out" / "diagram.puml"
    text = run(GoumlConfig(directories=[project], recursive=True, output=out))
    assert out.read_text() == text


def test_missing_directory(tmp_path):
    with pytest.raises(DirectoryNotFoundError):
        analyze(GoumlConfig(directories=[tmp_path / "nope"]))


def test_file_is_not_a_directory(tmp_path):
    path = tmp_path / "file.go"
    path.write_text("package x\n")
    with pytest.raises(DirectoryNotFoundError):
        analyze(GoumlConfig(directories=[path]))


def test_syntax_error_aborts(tmp_path, write_go):
    write_go(tmp_path / "bad", "bad.go", "package bad\n\ntype Broken struct {\n")
    with pytest.raises(GoSyntaxError) as excinfo:
        analyze(GoumlConfig(directories=[tmp_path / "bad"]))
    assert excinfo.value.path.name == "bad.go"


def server_source(field_name):
    return (
        "package svc\n\n"
        f"type Server struct {{\n    {field_name} int\n}}\n\n"
        "func (s *Server) Run() error { return nil }\n"
    )


def test_roots_with_the_same_name_are_separate_packages(tmp_path, write_go):
    first = tmp_path / "a" / "svc"
    second = tmp_path / "b" / "svc"
    write_go(first, "server.go", server_source("Alpha"))
    write_go(second, "server.go", server_source("Beta"))

    model, _ = analyze(GoumlConfig(directories=[first, second]))
    summary = [
        (r.qualified_name, [f.name for f in r.fields], [m.name for m in r.methods])
        for r in model.records()
    ]
    assert summary == [
        ("a.svc.Server", ["Alpha"], ["Run"]),
        ("b.svc.Server", ["Beta"], ["Run"]),
    ]
    assert run(GoumlConfig(directories=[first, second])) == run(
        GoumlConfig(directories=[second, first])
    )
