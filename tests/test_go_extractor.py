"""Tests for the Go documentation extractor."""

import pytest

from metagodoc.extractors.directory import Directory, File
from metagodoc.extractors.go import GoDocExtractor, PackageNotFound

SHAPES = '''// Package shapes provides geometry helpers. It is small.
//
// More text.
package shapes // import "example.com/shapes"

import (
\t"fmt"
\tm "math"
)

// Pi is roughly pi.
const Pi = 3.14

const (
\t// Small is small.
\tSmall = 1
\tlarge = 2
\tBig, Huge = 3, 4
)

var ErrEmpty = fmt.Errorf("empty")

// Shape is a shape.
type Shape interface {
\tArea() float64
}

// Circle is round.
type Circle struct {
\tR float64
}

// Area returns the area.
func (c *Circle) Area() float64 {
\treturn m.Pi * c.R * c.R
}

func (c Circle) grow() {}

// New makes a circle.
func New(r float64) *Circle {
\treturn &Circle{R: r}
}

func helper() {}

// BUG(alice): Area ignores negative radii.
'''

INTERNAL_TEST = '''package shapes

import "testing"

func TestArea(t *testing.T) {}
'''

EXTERNAL_TEST = '''package shapes_test

import (
\t"fmt"

\t"example.com/shapes"
)

func ExampleNew() {
\tfmt.Println(shapes.New(1))
}
'''


def make_dir(import_path="example.com/shapes", **files):
    names = {key.replace("__", "."): data for key, data in files.items()}
    return Directory(
        path=None,
        import_path=import_path,
        files=[
            File(name=name, data=data, browse_url=f"https://host/tree/main/{name}")
            for name, data in names.items()
        ],
    )


@pytest.fixture
def shapes():
    directory = make_dir(
        shapes__go=SHAPES,
        shapes_test__go=INTERNAL_TEST,
        example_test__go=EXTERNAL_TEST,
    )
    return GoDocExtractor().extract(directory)


def test_package_identity(shapes):
    assert shapes.name == "shapes"
    assert shapes.import_path == "example.com/shapes"
    assert not shapes.is_command
    assert shapes.errors == []


def test_doc_and_synopsis(shapes):
    assert shapes.doc.startswith("Package shapes provides geometry helpers.")
    assert "More text." in shapes.doc
    assert shapes.synopsis == "Package shapes provides geometry helpers."


def test_files_are_partitioned(shapes):
    assert shapes.files == ["shapes.go"]
    assert shapes.test_files == ["shapes_test.go"]
    assert shapes.xtest_files == ["example_test.go"]


def test_imports(shapes):
    assert shapes.imports == ["fmt", "math"]
    assert shapes.test_imports == ["testing"]
    assert shapes.xtest_imports == ["example.com/shapes", "fmt"]


def test_exported_values(shapes):
    assert [c.name for c in shapes.consts] == ["Pi", "Small", "Big", "Huge"]
    assert shapes.consts[0].doc == "Pi is roughly pi."
    assert shapes.consts[1].doc == "Small is small."
    assert [v.name for v in shapes.vars] == ["ErrEmpty"]


def test_funcs_and_types(shapes):
    assert [f.name for f in shapes.funcs] == ["New"]
    new = shapes.funcs[0]
    assert new.doc == "New makes a circle."
    assert new.text == "func New(r float64) *Circle"
    assert new.url == f"https://host/tree/main/shapes.go#L{new.line}"

    types = {t.name: t for t in shapes.types}
    assert set(types) == {"Shape", "Circle"}
    assert [m.name for m in types["Circle"].methods] == ["Area"]
    assert types["Circle"].doc == "Circle is round."


def test_examples_and_notes(shapes):
    assert [e.name for e in shapes.examples] == ["ExampleNew"]
    assert len(shapes.notes) == 1
    note = shapes.notes[0]
    assert (note.kind, note.uid, note.body) == ("BUG", "alice", "Area ignores negative radii.")


def test_import_comment_for_other_path_is_not_found():
    directory = make_dir(import_path="github.com/someone/shapes", shapes__go=SHAPES)
    with pytest.raises(PackageNotFound) as exc:
        GoDocExtractor().extract(directory)
    assert "example.com/shapes" in str(exc.value)


def test_only_test_files_is_not_found():
    with pytest.raises(PackageNotFound):
        GoDocExtractor().extract(make_dir(shapes_test__go=INTERNAL_TEST))


def test_main_package_is_a_command():
    source = "// Command tool does work.\npackage main\n\nfunc main() {}\n\nfunc run() {}\n"
    pkg = GoDocExtractor().extract(make_dir(import_path="example.com/tool", main__go=source))
    assert pkg.is_command
    assert pkg.synopsis == "Command tool does work."
    assert [f.name for f in pkg.funcs] == ["run"]


def test_build_constraint_is_not_package_doc():
    source = "//go:build linux\n\npackage sys\n"
    pkg = GoDocExtractor().extract(make_dir(import_path="example.com/sys", sys__go=source))
    assert pkg.doc == ""


def test_directory_load_skips_ignored_files(tmp_path):
    (tmp_path / "a.go").write_text("package a\n")
    (tmp_path / "_b.go").write_text("package a\n")
    (tmp_path / ".c.go").write_text("package a\n")
    (tmp_path / "notes.txt").write_text("hi")

    directory = Directory.load(tmp_path, "example.com/a", "https://github.com/x/a/tree/main")
    assert [f.name for f in directory.files] == ["a.go"]
    assert directory.files[0].browse_url == "https://github.com/x/a/tree/main/a.go"


def test_directory_load_skips_symlinks(tmp_path):
    outside = tmp_path / "outside.go"
    outside.write_text("// Secret is private.\npackage a\n\nconst Secret = 1\n")
    pkg = tmp_path / "pkg"
    pkg.mkdir()
    (pkg / "a.go").write_text("package a\n")
    (pkg / "link.go").symlink_to(outside)

    directory = Directory.load(pkg, "example.com/a", "https://github.com/x/a/tree/main")
    assert [f.name for f in directory.files] == ["a.go"]
