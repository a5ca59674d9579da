"""Pack reference expansion for glob patterns.

``pro@rust10x/guide/**/*.md`` becomes ``<pack dir>/guide/**/*.md``. Only the
text before the first wildcard can form the reference (see
``extract_pack_reference``), so the same predicate drives both globs and
single path resolution.
"""

from __future__ import annotations

import logging

from aipack.context import PathContext
from aipack.errors import MalformedReference, ReferenceNotFound
from aipack.pack_ref import extract_pack_reference

log = logging.getLogger(__name__)


def process_pack_references(context: PathContext, globs: list[str]) -> list[str]:
    """Rewrite pack-reference globs to absolute globs.

    Globs that are not references pass through unchanged, as do globs whose
    reference prefix does not parse. Globs referencing a pack that cannot
    be found are dropped.
    """
    processed: list[str] = []
    for glob in globs:
        ref_text = extract_pack_reference(glob)
        if ref_text is None:
            processed.append(glob)
            continue
        try:
            resolved = context.resolve_pack_ref_path(ref_text, glob[len(ref_text) :])
        except MalformedReference:
            processed.append(glob)
        except ReferenceNotFound:
            log.debug("Dropping glob %r, pack not found", glob)
        else:
            processed.append(resolved.as_posix())
    return processed
