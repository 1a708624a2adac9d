from __future__ import annotations

import re

from tagrel.core.result import Err, Ok, Result
from tagrel.pipeline.errors import MalformedReference
from tagrel.pipeline.model import ReleaseTag

TAG_REF_PREFIX = "refs/tags/"


def resolve_version(
    reference: str, *, tag_pattern: str | None = None
) -> Result[ReleaseTag, MalformedReference]:
    """Strip refs/tags/ from a trigger reference and return the tag verbatim."""
    if not reference.startswith(TAG_REF_PREFIX):
        return Err(
            MalformedReference(
                reference=reference,
                message=f"not a tag reference: {reference!r}",
            )
        )

    value = reference.removeprefix(TAG_REF_PREFIX)
    if not value:
        return Err(MalformedReference(reference=reference, message="empty tag in reference"))

    if tag_pattern is not None and re.fullmatch(tag_pattern, value) is None:
        return Err(
            MalformedReference(
                reference=reference,
                message=f"tag {value!r} does not match pattern {tag_pattern!r}",
                hint="Adjust release.tag_pattern in release.toml or push a matching tag.",
            )
        )

    return Ok(ReleaseTag(value=value))
