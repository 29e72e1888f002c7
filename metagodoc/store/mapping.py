"""Explicit Elasticsearch mapping for repository documents.

Keep this in step with ``RepositorySnapshot.to_document()``.
"""

KEYWORD = {"type": "keyword"}
TEXT = {"type": "text"}
DATE = {"type": "date", "format": "yyyy-MM-dd'T'HH:mm:ss"}
LONG = {"type": "long"}
BOOLEAN = {"type": "boolean"}

TICKETS = {
    "type": "object",
    "properties": {
        "url": KEYWORD,
        "open": LONG,
        "closed": LONG,
    },
}

DECL_PROPERTIES = {
    "name": KEYWORD,
    "doc": TEXT,
    "text": {"type": "text", "index": False},
    "file": KEYWORD,
    "line": LONG,
    "url": KEYWORD,
}

DECL = {
    "type": "nested",
    "properties": {
        **DECL_PROPERTIES,
        "methods": {"type": "nested", "properties": DECL_PROPERTIES},
    },
}

PACKAGE = {
    "type": "nested",
    "properties": {
        "name": KEYWORD,
        "import_path": KEYWORD,
        "doc": TEXT,
        "synopsis": TEXT,
        "errors": KEYWORD,
        "is_command": BOOLEAN,
        "files": KEYWORD,
        "test_files": KEYWORD,
        "xtest_files": KEYWORD,
        "imports": KEYWORD,
        "test_imports": KEYWORD,
        "xtest_imports": KEYWORD,
        "consts": DECL,
        "vars": DECL,
        "funcs": DECL,
        "types": DECL,
        "examples": DECL,
        "notes": {
            "type": "nested",
            "properties": {
                "kind": KEYWORD,
                "uid": KEYWORD,
                "body": TEXT,
            },
        },
    },
}

REF = {
    "type": "nested",
    "properties": {
        "name": KEYWORD,
        "ref_type": KEYWORD,
        "is_default_branch": BOOLEAN,
        "last_seen_commit": KEYWORD,
        "last_updated": DATE,
        "packages": PACKAGE,
    },
}

REPOSITORY_MAPPING = {
    "properties": {
        "id": KEYWORD,
        "name": KEYWORD,
        "full_name": KEYWORD,
        "vcs": KEYWORD,
        "description": TEXT,
        "owner": KEYWORD,
        "primary_url": KEYWORD,
        "stars": LONG,
        "forks": LONG,
        "is_fork": BOOLEAN,
        "created": DATE,
        "last_updated": DATE,
        "last_crawled": DATE,
        "issues": TICKETS,
        "pull_requests": TICKETS,
        "status": KEYWORD,
        "about": {
            "type": "object",
            "properties": {
                "content": TEXT,
                "content_type": KEYWORD,
            },
        },
        "refs": REF,
    },
}
