from __future__ import annotations

import copy
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from tokenpaint.errors import SettingsWriteError
from tokenpaint.settings.document import ConfigLayer

logger = logging.getLogger("tokenpaint.settings")


class JsonFileSettings:
    """Layered settings backed by one JSON file per writable layer.

    Files are read as JSONC, the dialect editors use for settings: comments
    and trailing commas are accepted. A rewritten file is plain JSON, so
    comments in it are not preserved.
    """

    def __init__(
        self,
        user_path: str | Path,
        workspace_path: str | Path | None = None,
        defaults: dict[str, Any] | None = None,
    ) -> None:
        self._paths: dict[ConfigLayer, Path] = {ConfigLayer.USER: Path(user_path)}
        if workspace_path is not None:
            self._paths[ConfigLayer.WORKSPACE] = Path(workspace_path)
        self._defaults = copy.deepcopy(defaults or {})

    def has_layer(self, layer: ConfigLayer) -> bool:
        return layer is ConfigLayer.DEFAULT or layer in self._paths

    def read(self, layer: ConfigLayer, key: str) -> Any:
        if layer is ConfigLayer.DEFAULT:
            return copy.deepcopy(self._defaults.get(key))
        if layer not in self._paths:
            return None
        try:
            return self._load(layer).get(key)
        except ValueError as exc:
            logger.warning("Ignoring unreadable %s settings: %s", layer.value, exc)
            return None

    def write(self, layer: ConfigLayer, key: str, value: Any) -> None:
        path = self._paths.get(layer)
        if path is None:
            raise SettingsWriteError(
                f"Layer {layer.value} is not writable", key=key, layer=layer.value
            )
        try:
            document = self._load(layer)
        except ValueError as exc:
            # never overwrite a file we could not parse
            raise SettingsWriteError(
                f"Refusing to rewrite malformed settings file {path}",
                key=key, layer=layer.value, cause=exc,
            ) from exc
        if value is None:
            document.pop(key, None)
        else:
            document[key] = value
        try:
            _atomic_write_json(path, document)
        except OSError as exc:
            raise SettingsWriteError(
                f"Failed to write {path}: {exc}", key=key, layer=layer.value, cause=exc
            ) from exc
        logger.debug("Wrote %s to %s layer", key, layer.value)

    def _load(self, layer: ConfigLayer) -> dict[str, Any]:
        path = self._paths[layer]
        if not path.exists():
            return {}
        text = path.read_text(encoding="utf-8")
        if not text.strip():
            return {}
        data = json.loads(strip_jsonc(text))
        if not isinstance(data, dict):
            raise ValueError(f"{path} does not hold a JSON object")
        return data


def strip_jsonc(text: str) -> str:
    """Drop comments and trailing commas, leaving string literals untouched."""
    out: list[str] = []
    i, n = 0, len(text)
    while i < n:
        ch = text[i]
        if ch == '"':
            end = i + 1
            while end < n and text[end] != '"':
                end += 2 if text[end] == "\\" else 1
            out.append(text[i:end + 1])
            i = end + 1
        elif text.startswith("//", i):
            end = text.find("\n", i)
            i = n if end == -1 else end
        elif text.startswith("/*", i):
            end = text.find("*/", i + 2)
            i = n if end == -1 else end + 2
        elif ch == ",":
            rest = _skip_blank(text, i + 1)
            if rest < n and text[rest] in "}]":
                i += 1
                continue
            out.append(ch)
            i += 1
        else:
            out.append(ch)
            i += 1
    return "".join(out)


def _skip_blank(text: str, i: int) -> int:
    """Index of the next character that is neither whitespace nor inside a comment."""
    n = len(text)
    while i < n:
        if text[i].isspace():
            i += 1
        elif text.startswith("//", i):
            end = text.find("\n", i)
            i = n if end == -1 else end
        elif text.startswith("/*", i):
            end = text.find("*/", i + 2)
            i = n if end == -1 else end + 2
        else:
            break
    return i


def _atomic_write_json(path: Path, data: dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            json.dump(data, handle, indent=4)
            handle.write("\n")
        os.replace(tmp_name, path)
    except OSError:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise
