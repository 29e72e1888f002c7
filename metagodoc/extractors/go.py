"""Go package documentation extractor."""

import re
from collections import Counter

from ..repository.snapshot import Decl, Note, Package
from .directory import Directory, File


class ExtractorError(Exception):
    """Documentation could not be extracted from a directory."""


class PackageNotFound(ExtractorError):
    """The directory holds no package that belongs at its import path.

    This happens for directories without non-test Go files and for packages
    whose import comment names a different canonical import path, for example
    packages hosted on GitHub but imported through gopkg.in.
    """

    def __init__(self, import_path: str, reason: str):
        super().__init__(f"{import_path}: {reason}")
        self.import_path = import_path
        self.reason = reason


class GoDocExtractor:
    """Scans Go source files for package-level documentation.

    This reads declarations line by line; it does not type check or resolve
    anything, so it is only as good as gofmt'ed code makes it.
    """

    PACKAGE_CLAUSE = re.compile(
        r'^package\s+(\w+)[ \t]*(?://[ \t]*import[ \t]+"([^"]+)"|/\*[ \t]*import[ \t]+"([^"]+)"[ \t]*\*/)?',
        re.MULTILINE,
    )

    IMPORT_SINGLE = re.compile(r'^import\s+(?:[\w.]+\s+)?"([^"]+)"', re.MULTILINE)
    IMPORT_BLOCK = re.compile(r'^import\s*\((.*?)^\)', re.MULTILINE | re.DOTALL)
    QUOTED = re.compile(r'"([^"]+)"')

    VALUE_SINGLE = re.compile(r'^(const|var)\s+(\w+(?:\s*,\s*\w+)*)', re.MULTILINE)
    VALUE_BLOCK = re.compile(r'^(const|var)\s*\((.*?)^\)', re.MULTILINE | re.DOTALL)

    TYPE_SINGLE = re.compile(r'^type\s+(\w+)', re.MULTILINE)
    TYPE_BLOCK = re.compile(r'^type\s*\((.*?)^\)', re.MULTILINE | re.DOTALL)

    FUNC = re.compile(r'^func\s+(\w+)\s*[\[(]', re.MULTILINE)
    METHOD = re.compile(
        r'^func\s*\(\s*(?:\w+\s+)?\*?\s*(\w+)(?:\[[^\]]*\])?\s*\)\s*(\w+)\s*[\[(]',
        re.MULTILINE,
    )
    EXAMPLE = re.compile(r'^func\s+(Example\w*)\s*\(\s*\)', re.MULTILINE)

    NOTE = re.compile(r'^\s*//\s*(BUG|TODO)\(([^)]+)\):?\s*(.*)$', re.MULTILINE)

    SENTENCE_END = re.compile(r'^(.*?[.!?])(?:\s|$)', re.DOTALL)

    def extract(self, directory: Directory) -> Package:
        """Build the package documented by ``directory``.

        Raises PackageNotFound when there is nothing to document at this
        import path.
        """
        sources: list[tuple[File, str]] = []
        tests: list[File] = []
        xtests: list[File] = []
        errors: list[str] = []

        for f in directory.files:
            clause = self.PACKAGE_CLAUSE.search(f.data)
            if clause is None:
                errors.append(f"{f.name}: missing package clause")
                continue

            name = clause.group(1)
            import_comment = clause.group(2) or clause.group(3)
            if import_comment and import_comment != directory.import_path:
                raise PackageNotFound(
                    directory.import_path,
                    f"canonical import path is {import_comment}",
                )

            if f.name.endswith("_test.go"):
                if name.endswith("_test"):
                    xtests.append(f)
                else:
                    tests.append(f)
            else:
                sources.append((f, name))

        if not sources:
            raise PackageNotFound(directory.import_path, "no buildable Go source files")

        names = Counter(name for _, name in sources if name != "documentation")
        pkg_name = names.most_common(1)[0][0] if names else sources[0][1]
        for f, name in sources:
            if name not in (pkg_name, "documentation"):
                errors.append(f"{f.name}: found package {name}, expected {pkg_name}")

        files = [f for f, _ in sources]
        doc = self._package_doc(files)
        exported = pkg_name != "main"

        types = self._types(files, exported)
        self._attach_methods(files, types)

        return Package(
            name=pkg_name,
            import_path=directory.import_path,
            doc=doc,
            synopsis=self.synopsis(doc),
            errors=errors,
            is_command=pkg_name == "main",
            files=[f.name for f in files],
            test_files=[f.name for f in tests],
            xtest_files=[f.name for f in xtests],
            imports=self._imports(files),
            test_imports=self._imports(tests),
            xtest_imports=self._imports(xtests),
            consts=self._values(files, "const", exported),
            vars=self._values(files, "var", exported),
            funcs=self._funcs(files, exported),
            types=list(types.values()),
            examples=self._examples(tests + xtests),
            notes=self._notes(files),
        )

    def synopsis(self, doc: str) -> str:
        """Return the first sentence of a package comment."""
        paragraph = doc.strip().split("\n\n", 1)[0]
        paragraph = " ".join(paragraph.split())
        match = self.SENTENCE_END.match(paragraph)
        return match.group(1) if match else paragraph

    def _package_doc(self, files: list[File]) -> str:
        # By convention only one file carries the package comment; take the
        # longest if several do.
        best = ""
        for f in files:
            clause = self.PACKAGE_CLAUSE.search(f.data)
            lines = f.data.splitlines()
            line_no = f.data.count("\n", 0, clause.start())
            doc = _comment_above(lines, line_no)
            if len(doc) > len(best):
                best = doc
        return best

    def _imports(self, files: list[File]) -> list[str]:
        paths = set()
        for f in files:
            paths.update(self.IMPORT_SINGLE.findall(f.data))
            for block in self.IMPORT_BLOCK.finditer(f.data):
                for line in block.group(1).splitlines():
                    line = line.strip()
                    if not line or line.startswith("//"):
                        continue
                    match = self.QUOTED.search(line)
                    if match:
                        paths.add(match.group(1))
        return sorted(paths)

    def _values(self, files: list[File], keyword: str, exported: bool) -> list[Decl]:
        decls = []
        for f in files:
            lines = f.data.splitlines()
            for match in self.VALUE_SINGLE.finditer(f.data):
                if match.group(1) != keyword:
                    continue
                line_no = f.data.count("\n", 0, match.start())
                for name in _split_names(match.group(2)):
                    if _wanted(name, exported):
                        decls.append(_decl(name, f, lines, line_no))

            for block in self.VALUE_BLOCK.finditer(f.data):
                if block.group(1) != keyword:
                    continue
                start = f.data.count("\n", 0, block.start(2))
                for offset, names in _block_entries(block.group(2)):
                    for name in _split_names(names):
                        if _wanted(name, exported):
                            decls.append(_decl(name, f, lines, start + offset))
        return decls

    def _types(self, files: list[File], exported: bool) -> dict[str, Decl]:
        types: dict[str, Decl] = {}
        for f in files:
            lines = f.data.splitlines()
            for match in self.TYPE_SINGLE.finditer(f.data):
                name = match.group(1)
                if _wanted(name, exported):
                    types[name] = _decl(name, f, lines, f.data.count("\n", 0, match.start()))
            for block in self.TYPE_BLOCK.finditer(f.data):
                start = f.data.count("\n", 0, block.start(2))
                for offset, names in _block_entries(block.group(2)):
                    name = names.split(",")[0].strip()
                    if _wanted(name, exported):
                        types[name] = _decl(name, f, lines, start + offset)
        return types

    def _attach_methods(self, files: list[File], types: dict[str, Decl]) -> None:
        for f in files:
            lines = f.data.splitlines()
            for match in self.METHOD.finditer(f.data):
                receiver, name = match.group(1), match.group(2)
                if receiver in types and name[0].isupper():
                    line_no = f.data.count("\n", 0, match.start())
                    types[receiver].methods.append(_decl(name, f, lines, line_no))

    def _funcs(self, files: list[File], exported: bool) -> list[Decl]:
        decls = []
        for f in files:
            lines = f.data.splitlines()
            for match in self.FUNC.finditer(f.data):
                name = match.group(1)
                if name in ("init", "main") or not _wanted(name, exported):
                    continue
                decls.append(_decl(name, f, lines, f.data.count("\n", 0, match.start())))
        return decls

    def _examples(self, files: list[File]) -> list[Decl]:
        decls = []
        for f in files:
            lines = f.data.splitlines()
            for match in self.EXAMPLE.finditer(f.data):
                line_no = f.data.count("\n", 0, match.start())
                decls.append(_decl(match.group(1), f, lines, line_no))
        return decls

    def _notes(self, files: list[File]) -> list[Note]:
        notes = []
        for f in files:
            for match in self.NOTE.finditer(f.data):
                notes.append(Note(
                    kind=match.group(1),
                    uid=match.group(2),
                    body=match.group(3).strip(),
                ))
        return notes


def _wanted(name: str, exported: bool) -> bool:
    if not name or name == "_":
        return False
    return name[0].isupper() or not exported


def _split_names(names: str) -> list[str]:
    return [n.strip() for n in names.split(",") if n.strip()]


def _block_entries(body: str) -> list[tuple[int, str]]:
    """Return (line offset, leading identifiers) for each entry of a
    parenthesized declaration block.

    Only lines at the block's shallowest indentation start an entry, which
    skips the continuation lines of multi-line values.
    """
    lines = body.split("\n")
    indents = [
        len(line) - len(line.lstrip())
        for line in lines
        if line.strip() and not line.strip().startswith("//")
    ]
    if not indents:
        return []
    base = min(indents)

    entries = []
    for offset, line in enumerate(lines):
        stripped = line.strip()
        if not stripped or stripped.startswith(("//", "/*", "*")):
            continue
        if len(line) - len(line.lstrip()) != base:
            continue
        match = re.match(r'(\w+(?:\s*,\s*\w+)*)', stripped)
        if match:
            entries.append((offset, match.group(1)))
    return entries


def _comment_above(lines: list[str], line_no: int) -> str:
    """Collect the comment block that ends on the line before ``line_no``."""
    collected: list[str] = []
    i = line_no - 1

    if i >= 0 and lines[i].strip().endswith("*/"):
        while i >= 0:
            collected.insert(0, lines[i])
            if lines[i].strip().startswith("/*"):
                break
            i -= 1
        text = "\n".join(collected).strip()
        text = text.removeprefix("/*").removesuffix("*/")
        return "\n".join(line.strip() for line in text.splitlines()).strip()

    while i >= 0 and lines[i].strip().startswith("//"):
        text = lines[i].strip()[2:]
        if text.startswith(("go:", " +build")):
            break
        collected.insert(0, text[1:] if text.startswith(" ") else text)
        i -= 1
    return "\n".join(collected).strip()


def _decl(name: str, f: File, lines: list[str], line_no: int) -> Decl:
    text = lines[line_no].rstrip() if line_no < len(lines) else ""
    return Decl(
        name=name,
        doc=_comment_above(lines, line_no),
        text=text.removesuffix("{").rstrip(),
        file=f.name,
        line=line_no + 1,
        url=f"{f.browse_url}#L{line_no + 1}",
    )
