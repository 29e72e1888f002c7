"""The repository document written to the search index."""

from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import Enum

from .status import ActivityStatus

DATETIME_FORMAT = "%Y-%m-%dT%H:%M:%S"


class RefType(str, Enum):
    BRANCH = "branch"
    TAG = "tag"


@dataclass
class Decl:
    """A top-level declaration found by the documentation extractor."""
    name: str
    doc: str = ""
    text: str = ""
    file: str = ""
    line: int = 0
    url: str = ""
    methods: list["Decl"] = field(default_factory=list)


@dataclass
class Note:
    """A marked comment such as ``// BUG(who): text``."""
    kind: str
    uid: str
    body: str


@dataclass
class Package:
    """Documentation metadata for one package directory."""
    name: str
    import_path: str
    doc: str = ""
    synopsis: str = ""
    errors: list[str] = field(default_factory=list)
    is_command: bool = False
    files: list[str] = field(default_factory=list)
    test_files: list[str] = field(default_factory=list)
    xtest_files: list[str] = field(default_factory=list)
    imports: list[str] = field(default_factory=list)
    test_imports: list[str] = field(default_factory=list)
    xtest_imports: list[str] = field(default_factory=list)
    consts: list[Decl] = field(default_factory=list)
    vars: list[Decl] = field(default_factory=list)
    funcs: list[Decl] = field(default_factory=list)
    types: list[Decl] = field(default_factory=list)
    examples: list[Decl] = field(default_factory=list)
    notes: list[Note] = field(default_factory=list)


@dataclass
class Ref:
    """A checked-out point in history: the default branch or a version tag."""
    name: str
    ref_type: RefType
    is_default_branch: bool
    last_seen_commit: str
    last_updated: datetime
    packages: list[Package] = field(default_factory=list)


@dataclass
class Tickets:
    url: str
    open: int = 0
    closed: int = 0


@dataclass
class About:
    content: str
    content_type: str


@dataclass
class RepositorySnapshot:
    """Everything the indexer knows about a repository after one crawl pass."""
    id: str
    name: str
    full_name: str
    description: str
    owner: str
    primary_url: str
    stars: int
    forks: int
    is_fork: bool
    created: datetime
    last_updated: datetime
    last_crawled: datetime
    issues: Tickets
    pull_requests: Tickets
    status: ActivityStatus
    about: About | None = None
    refs: list[Ref] = field(default_factory=list)
    vcs: str = "git"

    @property
    def default_ref(self) -> Ref | None:
        for ref in self.refs:
            if ref.is_default_branch:
                return ref
        return None

    def to_document(self) -> dict:
        """Convert the snapshot into the JSON body stored in the index."""
        return _jsonable(asdict(self))


def _jsonable(value):
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_jsonable(v) for v in value]
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.strftime(DATETIME_FORMAT)
    return value
