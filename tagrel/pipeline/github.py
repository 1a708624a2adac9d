"""Hosted release API, reached through the GitHub CLI (`gh api`).

``ReleaseApi`` is the seam the publisher depends on; ``GhReleaseApi`` is the
production implementation. Tests substitute a recording fake.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from pathlib import Path
from time import sleep
from typing import Protocol
from urllib.parse import quote

from tagrel.core.result import Err, Ok, Result
from tagrel.core.structured import StrDict, as_obj_list, as_str_dict, get_str
from tagrel.pipeline.model import ReleaseAsset, ReleaseRecord
from tagrel.pipeline.timeouts import (
    GH_READ_RETRY_ATTEMPTS,
    GH_READ_RETRY_DELAY_SECONDS,
    GH_TIMEOUT_SECONDS,
    GH_UPLOAD_TIMEOUT_SECONDS,
)
from tagrel.platform.process import ProcessError
from tagrel.platform.process import run as run_process


@dataclass(frozen=True, slots=True)
class ApiError:
    message: str
    hint: str | None = None


class ReleaseApi(Protocol):
    def find_release(self, tag: str) -> Result[ReleaseRecord | None, ApiError]:
        """Return the release for ``tag``, or None if there is none."""
        ...

    def create_release(
        self, *, tag: str, name: str, draft: bool, prerelease: bool
    ) -> Result[ReleaseRecord, ApiError]: ...

    def upload_asset(
        self, *, upload_url: str, path: Path, name: str, content_type: str
    ) -> Result[ReleaseAsset, ApiError]: ...


_TRANSIENT_MARKERS = (
    "timed out",
    "timeout",
    "connection reset",
    "connection refused",
    "temporarily unavailable",
    "service unavailable",
    "bad gateway",
    "gateway timeout",
    "tls handshake timeout",
    "network is unreachable",
    "http 429",
    "http 500",
    "http 502",
    "http 503",
    "http 504",
)


def is_transient_gh_error(error: ProcessError) -> bool:
    if error.timed_out:
        return True
    text = f"{error.stderr}\n{error.stdout}".lower()
    return any(marker in text for marker in _TRANSIENT_MARKERS)


def is_not_found(error: ProcessError) -> bool:
    return "http 404" in f"{error.stderr}\n{error.stdout}".lower()


def expand_upload_url(upload_url: str, name: str) -> str:
    """Turn the hypermedia upload URL into a concrete one for ``name``.

    GitHub returns e.g. ``.../releases/1/assets{?name,label}``.
    """
    base = re.sub(r"\{[^}]*\}$", "", upload_url)
    return f"{base}?name={quote(name, safe='')}"


def parse_release(obj: object) -> ReleaseRecord | None:
    data = as_str_dict(obj)
    if data is None:
        return None

    release_id = data.get("id")
    tag = get_str(data, "tag_name")
    upload_url = get_str(data, "upload_url")
    if isinstance(release_id, bool) or not isinstance(release_id, int):
        return None
    if tag is None or upload_url is None:
        return None

    assets: list[ReleaseAsset] = []
    for item in as_obj_list(data.get("assets")) or []:
        asset = parse_asset(item)
        if asset is not None:
            assets.append(asset)

    return ReleaseRecord(
        id=release_id,
        tag=tag,
        html_url=get_str(data, "html_url") or "",
        upload_url=upload_url,
        assets=tuple(assets),
    )


def parse_asset(obj: object) -> ReleaseAsset | None:
    data = as_str_dict(obj)
    if data is None:
        return None
    name = get_str(data, "name")
    if name is None:
        return None
    return ReleaseAsset(
        name=name,
        download_url=get_str(data, "browser_download_url"),
        digest=get_str(data, "digest"),
    )

class GhReleaseApi:
    """ReleaseApi backed by `gh api`.

    The token, when given, is handed to gh as GH_TOKEN in the child
    environment only.
    """

    def __init__(
        self,
        *,
        workspace_root: Path,
        repo: str,
        token: str | None = None,
        timeout: float = GH_TIMEOUT_SECONDS,
        upload_timeout: float = GH_UPLOAD_TIMEOUT_SECONDS,
        retry_attempts: int = GH_READ_RETRY_ATTEMPTS,
    ) -> None:
        self.workspace_root = workspace_root
        self.repo = repo
        self.timeout = timeout
        self.upload_timeout = upload_timeout
        self.retry_attempts = retry_attempts
        self._env = {"GH_TOKEN": token} if token else None

    def _gh(self, cmd: list[str], *, timeout: float) -> Result[str, ProcessError]:
        return run_process(cmd, cwd=self.workspace_root, env_overrides=self._env, timeout=timeout)

    def _read(self, cmd: list[str]) -> Result[str, ProcessError]:
        attempts = max(1, self.retry_attempts)
        result = self._gh(cmd, timeout=self.timeout)
        for attempt in range(1, attempts):
            if isinstance(result, Ok) or not is_transient_gh_error(result.error):
                break
            sleep(GH_READ_RETRY_DELAY_SECONDS * attempt)
            result = self._gh(cmd, timeout=self.timeout)
        return result

    def find_release(self, tag: str) -> Result[ReleaseRecord | None, ApiError]:
        endpoint = f"repos/{self.repo}/releases/tags/{quote(tag, safe='')}"
        result = self._read(["gh", "api", endpoint])
        if isinstance(result, Err):
            if is_not_found(result.error):
                return Ok(None)
            return Err(_api_error(f"failed to look up release {tag}", result.error))

        return _release_from_payload(result.value, endpoint)

    def create_release(
        self, *, tag: str, name: str, draft: bool, prerelease: bool
    ) -> Result[ReleaseRecord, ApiError]:
        endpoint = f"repos/{self.repo}/releases"
        cmd = [
            "gh",
            "api",
            "--method",
            "POST",
            endpoint,
            "-f",
            f"tag_name={tag}",
            "-f",
            f"name={name}",
            "-F",
            f"draft={_json_bool(draft)}",
            "-F",
            f"prerelease={_json_bool(prerelease)}",
        ]
        result = self._gh(cmd, timeout=self.timeout)
        if isinstance(result, Err):
            return Err(_api_error(f"failed to create release {tag}", result.error))

        return _release_from_payload(result.value, endpoint)

    def upload_asset(
        self, *, upload_url: str, path: Path, name: str, content_type: str
    ) -> Result[ReleaseAsset, ApiError]:
        url = expand_upload_url(upload_url, name)
        cmd = [
            "gh",
            "api",
            "--method",
            "POST",
            "-H",
            f"Content-Type: {content_type}",
            "--input",
            str(path),
            url,
        ]
        result = self._gh(cmd, timeout=self.upload_timeout)
        if isinstance(result, Err):
            return Err(_api_error(f"failed to upload {name}", result.error))

        data = _decode_object(result.value, url)
        if isinstance(data, Err):
            return data
        asset = parse_asset(data.value)
        if asset is None:
            return Err(ApiError(message="unexpected asset upload payload", hint=url))
        return Ok(asset)


def _decode_object(payload: str, endpoint: str) -> Result[StrDict, ApiError]:
    try:
        obj: object = json.loads(payload)
    except json.JSONDecodeError as e:
        return Err(ApiError(message=f"gh api returned invalid JSON: {e}", hint=endpoint))
    data = as_str_dict(obj)
    if data is None:
        return Err(ApiError(message="gh api returned a non-object", hint=endpoint))
    return Ok(data)


def _release_from_payload(payload: str, endpoint: str) -> Result[ReleaseRecord, ApiError]:
    data = _decode_object(payload, endpoint)
    if isinstance(data, Err):
        return data
    record = parse_release(data.value)
    if record is None:
        return Err(ApiError(message="unexpected release payload", hint=endpoint))
    return Ok(record)


def _api_error(message: str, error: ProcessError) -> ApiError:
    return ApiError(message=message, hint=error.stderr.strip() or str(error))


def _json_bool(value: bool) -> str:
    return "true" if value else "false"
