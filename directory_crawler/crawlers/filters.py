"""
Glob matching of crawled paths against the configured filter pattern.
"""

from wcmatch import glob


# minimatch compatible: ** spans directories, {a,b} expands, a pattern
# without a slash is matched against the base name, dotfiles stay hidden
FILTER_FLAGS = glob.GLOBSTAR | glob.BRACE | glob.MATCHBASE | glob.FORCEUNIX


def matches(path: str, pattern: str) -> bool:
    """
    Check whether ``path`` matches the glob ``pattern``.

    A pattern without a separator is tried against the base name of the path
    (so ``*.txt`` matches at any depth). A pattern containing ``/`` is matched
    against the whole path; ``*`` and ``?`` never cross a separator and
    ``**`` spans any number of directories. ``{a,b}`` alternatives are
    expanded. Matching is case sensitive on every platform.

    Args:
        path: Filesystem path or path of an entry inside an archive
        pattern: Glob pattern

    Returns:
        True if the path is selected by the pattern
    """
    if not path or not pattern:
        return False
    return glob.globmatch(path.replace("\\", "/"), pattern, flags=FILTER_FLAGS)
