import os
import re

SCHEME_RE = re.compile(r"^[a-z][a-z0-9+.-]*:", re.IGNORECASE)
WINDOWS_PATH_RE = re.compile(r"^[a-z]:[/\\]|^\\\\", re.IGNORECASE)
TEMPLATE_RE = re.compile(r"""^[{}\[\]#*;,'§$%&(=?`´^°<>]""")
MODULE_REQUEST_RE = re.compile(r"^[^?]*~")


def is_url_request(url, root=None):
    """
    Returns True if url points at a file that should be resolved, and False for data
    URIs, absolute and protocol-relative URLs, and template placeholders. Root-relative
    URLs (/foo.png) only count as requests when a root is given.
    """
    if SCHEME_RE.match(url) and not WINDOWS_PATH_RE.match(url):
        return False
    if url.startswith("//"):
        return False
    if TEMPLATE_RE.match(url):
        return False
    if (root is None or root is False) and url.startswith("/"):
        return False
    return True


def url_to_request(url, root=None):
    """
    Converts a relative path into a module request: ./foo.png, ../foo.png, or a root
    based request for root-relative paths. Anything up to a ~ module marker is dropped.
    """
    if url == "":
        return ""
    if WINDOWS_PATH_RE.match(url):
        request = url
    elif root is not None and root is not False and url.startswith("/"):
        if isinstance(root, bool):
            request = url
        elif isinstance(root, str):
            if MODULE_REQUEST_RE.match(root):
                # ~ --> ~, ~module --> ~module/
                request = re.sub(r"([^~/])$", r"\1/", root) + url[1:]
            else:
                request = root + url
        else:
            raise ValueError(
                "Unexpected root {!r}, expected a string or a boolean".format(root)
            )
    elif re.match(r"^\.\.?/", url):
        request = url
    else:
        request = "./" + url
    if MODULE_REQUEST_RE.match(request):
        request = MODULE_REQUEST_RE.sub("", request, count=1)
    return request


def make_join(root_dir=None, root="~"):
    """
    Builds the default join(directory, uri) function. URIs starting with the root
    marker (and /root-relative URIs, when root_dir is set) resolve against root_dir,
    everything else against directory. Returns None when a marked URI has no root_dir
    to resolve against.
    """

    def join(directory, uri):
        if root and uri.startswith(root):
            if not root_dir:
                return None
            base, uri = root_dir, uri[len(root) :].lstrip("/\\")
        elif uri.startswith("/") and root_dir:
            base, uri = root_dir, uri.lstrip("/")
        elif uri.startswith("/"):
            base, uri = directory, uri.lstrip("/")
        else:
            base = directory
        return os.path.normpath(os.path.join(os.path.abspath(base), uri))

    return join


def relative_path(start, target):
    """
    Returns the path to target from start, or an empty string when they are the same
    path or no relative path exists (different Windows drives).
    """
    if os.path.normpath(start) == os.path.normpath(target):
        return ""
    try:
        return os.path.relpath(target, start)
    except ValueError:
        return ""
