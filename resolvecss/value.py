import logging
import re
from collections import namedtuple

from . import requestutil

logger = logging.getLogger("resolvecss")

LITERAL = "literal"
URL = "url"

Segment = namedtuple("Segment", "kind text")

# An unquoted argument can't contain a literal ")" -- quote it instead. Neither form
# spans lines, and quoted arguments don't support escaped quotes.
URL_STATEMENT_RE = re.compile(
    r"""
    url\s*\(\s*
    (?:
        (?P<quote>['"])(?P<quoted>(?:(?!(?P=quote)).)*)(?P=quote)
        |
        (?P<unquoted>[^'"\s)][^)\n]*?)?
    )
    \s*\)
    """,
    re.VERBOSE,
)

QUERY_RE = re.compile(r"[?#]")


def _argument_span(match):
    if match.group("quote"):
        return match.span("quoted")
    if match.group("unquoted") is not None:
        return match.span("unquoted")
    # url() -- an empty argument sitting right before the closing paren.
    return match.end() - 1, match.end() - 1


def tokenize(value):
    """
    Yields Segment(kind, text) tuples for value, where kind is LITERAL for text that
    must be kept as-is and URL for the contents of a url() statement. Joining the text
    of every segment gives back the original value.
    """
    pos = 0
    for match in URL_STATEMENT_RE.finditer(value):
        start, end = _argument_span(match)
        if start > pos:
            yield Segment(LITERAL, value[pos:start])
        yield Segment(URL, value[start:end])
        pos = end
    if pos < len(value):
        yield Segment(LITERAL, value[pos:])


def split_query(url):
    """
    Splits url at the first ? or #, returning (uri, query) where query includes the
    marker, or is empty.
    """
    match = QUERY_RE.search(url)
    if match is None:
        return url, ""
    return url[: match.start()], url[match.start() :]


def to_uri(path):
    # Backslashes are not legal in a URI.
    return path.replace("\\", "/")


class Options:
    def __init__(self, root="~", absolute=False, keep_query=False, join=None):
        self.root = root
        self.absolute = absolute
        self.keep_query = keep_query
        self.join = join

    def __repr__(self):
        return "Options(root={!r}, absolute={!r}, keep_query={!r})".format(
            self.root, self.absolute, self.keep_query
        )


class Capabilities:
    """
    The primitives a transformer needs from the outside world. Anything left out falls
    back to the implementations in resolvecss.requestutil.
    """

    def __init__(
        self, join=None, is_url_request=None, url_to_request=None, relative_path=None
    ):
        self.join = join
        self.is_url_request = is_url_request or requestutil.is_url_request
        self.url_to_request = url_to_request or requestutil.url_to_request
        self.relative_path = relative_path or requestutil.relative_path


def value_processor(file_path, options=None, capabilities=None):
    """
    Creates a transform_value(value, directory) function for the CSS file at file_path.
    Each url() in value is resolved against directory and rewritten either as an
    absolute path (options.absolute) or as a request relative to file_path. Anything
    that isn't a file request, or can't be resolved, is left untouched.
    """
    options = options or Options()
    capabilities = capabilities or Capabilities()
    root = options.root or "~"
    join = capabilities.join or options.join or requestutil.make_join(root=root)

    def resolve(candidate, directory):
        uri, query = split_query(candidate)
        if not uri or not capabilities.is_url_request(uri, root):
            return candidate

        absolute_path = join(directory, uri)
        if not absolute_path:
            logger.debug("Could not resolve {} from {}".format(uri, directory))
            return candidate

        if not options.keep_query:
            query = ""
        if options.absolute:
            return to_uri(absolute_path) + query

        # The same file gives an empty path, which is only usable with a query.
        relative = to_uri(capabilities.relative_path(file_path, absolute_path) or "")
        relative += query
        if not relative:
            return candidate
        request = capabilities.url_to_request(relative, root)
        if not request:
            logger.debug("Could not make a request for {}".format(relative))
            return candidate
        return request

    def transform_value(value, directory):
        return "".join(
            resolve(segment.text, directory) if segment.kind == URL else segment.text
            for segment in tokenize(value)
        )

    return transform_value


make_transformer = value_processor
