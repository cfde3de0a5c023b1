"""Paths of the three smart HTTP endpoints"""
from dataclasses import dataclass
from typing import Optional

from gitsmart.core.git.git_types import Operation

INFO_REFS_SUFFIX = "/info/refs"
UPLOAD_PACK_SUFFIX = "/git-upload-pack"
RECEIVE_PACK_SUFFIX = "/git-receive-pack"


@dataclass(frozen=True)
class RouteSet:
    info_refs: str
    upload_pack: str
    receive_pack: str

    def service_route(self, operation: Operation) -> str:
        if operation is Operation.UPLOAD_PACK:
            return self.upload_pack
        return self.receive_pack


def namespace_for(prefix: Optional[str]) -> str:
    """Normalise an optional prefix into a namespace with a leading slash."""
    if not prefix:
        return ""
    if prefix.startswith("/"):
        return prefix
    return f"/{prefix}"


def build_routes(prefix: Optional[str] = None) -> RouteSet:
    """
    Compute the routes for a repository served under ``prefix``.

    ``build_routes("x")`` and ``build_routes("/x")`` are equivalent;
    without a prefix the routes are rooted at ``/``.
    """
    namespace = namespace_for(prefix)
    return RouteSet(
        info_refs=namespace + INFO_REFS_SUFFIX,
        upload_pack=namespace + UPLOAD_PACK_SUFFIX,
        receive_pack=namespace + RECEIVE_PACK_SUFFIX,
    )
