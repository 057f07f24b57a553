from __future__ import annotations

import posixpath
import re


_PARAM_COLON = re.compile(r":([A-Za-z_][A-Za-z0-9_]*)")
_PARAM_STAR = re.compile(r"\*([A-Za-z_][A-Za-z0-9_]*)$")
_LEADING_SLASHES = re.compile(r"^/{2,}")
_SAFE = re.compile(r"[^a-zA-Z0-9_]+")


def clean_path(path: str) -> str:
    if not path:
        return ""
    cleaned = posixpath.normpath(path)
    # normpath keeps a leading "//" (POSIX allows it), URLs don't
    return _LEADING_SLASHES.sub("/", cleaned)


def join_paths(absolute: str, relative: str) -> str:
    """
    Join a group base path and a route path.

    The result is cleaned like a POSIX path, except that a trailing slash on
    the relative path survives:
      join_paths("/a/b", "/c")  -> "/a/b/c"
      join_paths("/a/b", "/c/") -> "/a/b/c/"
    """
    if not relative:
        return absolute

    final = clean_path("/".join(p for p in (absolute, relative) if p))
    if relative.endswith("/") and not final.endswith("/"):
        return final + "/"
    return final


def to_starlette_path(path: str) -> str:
    # /users/:id -> /users/{id}, /static/*rest -> /static/{rest:path}
    path = _PARAM_COLON.sub(r"{\1}", path)
    return _PARAM_STAR.sub(r"{\1:path}", path)


def fallback_operation_id(method: str, path: str) -> str:
    # GET /users/:id -> get_users_by_id
    tokens = []
    for seg in path.strip("/").split("/"):
        if not seg:
            continue
        if seg.startswith("{") and seg.endswith("}"):
            tokens.append(f"by_{seg[1:-1].split(':')[0]}")
        elif seg[0] in ":*":
            tokens.append(f"by_{seg[1:]}")
        else:
            tokens.append(seg)
    base = _SAFE.sub("_", "_".join(tokens)).strip("_") if tokens else "root"
    return f"{method.lower()}_{base or 'root'}"
