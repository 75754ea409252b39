"""Rewrite the ``theme`` and ``markdown_extensions`` sections of ``mkdocs.yml``.

The transform itself is a pure function over the loaded document. Persisting
it is a separate step: the original bytes are copied to a backup first, then
the new document is staged in a temporary file and renamed over the
original, so a reader never sees a half-written configuration.

MkDocs configurations routinely carry custom YAML tags (``!ENV``,
``!!python/name:...``). They are loaded as :class:`TaggedValue` and dumped
back with the same tag, so sections we do not own survive the rewrite.
"""

from __future__ import annotations

import contextlib
import copy
import logging
import os
import stat
import tempfile
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import filelock
import yaml

from docsetup.constants import ENHANCED_THEME_NAME
from docsetup.exceptions import ConfigError, ConfigNotFoundError, ConfigParseError, ConfigWriteError

logger = logging.getLogger(__name__)

THEME_KEY = "theme"
MARKDOWN_EXTENSIONS_KEY = "markdown_extensions"


@dataclass(frozen=True, slots=True)
class TaggedValue:
    """A YAML node carrying a tag the safe loader does not know about."""

    tag: str
    value: Any


class _ConfigLoader(yaml.SafeLoader):
    """YAML loader that keeps MkDocs plugin tags instead of rejecting them."""


class _ConfigDumper(yaml.SafeDumper):
    """YAML dumper that writes :class:`TaggedValue` back with its tag."""

    def ignore_aliases(self, data: Any) -> bool:
        return True


def _construct_tagged(loader: yaml.SafeLoader, _suffix: str, node: yaml.Node) -> TaggedValue:
    if isinstance(node, yaml.SequenceNode):
        return TaggedValue(node.tag, loader.construct_sequence(node, deep=True))
    if isinstance(node, yaml.MappingNode):
        return TaggedValue(node.tag, loader.construct_mapping(node, deep=True))
    return TaggedValue(node.tag, loader.construct_scalar(node))


def _represent_tagged(dumper: yaml.SafeDumper, data: TaggedValue) -> yaml.Node:
    if isinstance(data.value, list):
        return dumper.represent_sequence(data.tag, data.value)
    if isinstance(data.value, dict):
        return dumper.represent_mapping(data.tag, data.value)
    return dumper.represent_scalar(data.tag, "" if data.value is None else str(data.value))


_ConfigLoader.add_multi_constructor("!", _construct_tagged)
_ConfigLoader.add_multi_constructor("tag:yaml.org,2002:python/", _construct_tagged)
_ConfigDumper.add_representer(TaggedValue, _represent_tagged)


@dataclass(frozen=True, slots=True)
class ReplacementBlocks:
    """The two top-level sections written over an existing configuration."""

    theme: Mapping[str, Any]
    markdown_extensions: tuple[str | Mapping[str, Any], ...]

    @property
    def replaced_keys(self) -> tuple[str, str]:
        return (THEME_KEY, MARKDOWN_EXTENSIONS_KEY)

    def as_sections(self) -> dict[str, Any]:
        """Fresh, mutable copies of both sections keyed by their top-level name."""
        return {
            THEME_KEY: copy.deepcopy(dict(self.theme)),
            MARKDOWN_EXTENSIONS_KEY: [copy.deepcopy(entry) for entry in self.markdown_extensions],
        }


MATERIAL_REPLACEMENT = ReplacementBlocks(
    theme={
        "name": ENHANCED_THEME_NAME,
        "features": [
            "navigation.tabs",
            "navigation.sections",
            "navigation.expand",
            "search.highlight",
            "content.code.copy",
        ],
        "palette": {
            "scheme": "default",
            "primary": "red",
            "accent": "red",
        },
    },
    # Order matters: extensions are registered with Python-Markdown in sequence.
    markdown_extensions=(
        "admonition",
        "codehilite",
        {"toc": {"permalink": True}},
        "pymdownx.superfences",
        "pymdownx.tabbed",
        "pymdownx.details",
    ),
)


@dataclass(slots=True)
class TransformResult:
    """Outcome of :func:`apply_replacement`."""

    config_path: Path
    backup_path: Path
    changed: bool
    document: dict[str, Any] = field(repr=False)


def parse_document(text: str, path: Path) -> dict[str, Any]:
    """Parse ``text`` as a configuration mapping.

    Raises:
        ConfigParseError: the text is not YAML or its top level is not a mapping

    """
    try:
        document = yaml.load(text, Loader=_ConfigLoader)  # noqa: S506
    except yaml.YAMLError as exc:
        raise ConfigParseError(path, str(exc)) from exc
    if document is None:
        raise ConfigParseError(path, "document is empty")
    if not isinstance(document, dict):
        raise ConfigParseError(path, f"expected a mapping at the top level, got {type(document).__name__}")
    return document


def _read_bytes(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except FileNotFoundError as exc:
        raise ConfigNotFoundError(path) from exc
    except OSError as exc:
        raise ConfigParseError(path, str(exc)) from exc


def _decode(raw: bytes, path: Path) -> str:
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise ConfigParseError(path, f"not valid UTF-8: {exc}") from exc


def load_document(path: Path) -> dict[str, Any]:
    """Read and parse the configuration document at ``path``."""
    return parse_document(_decode(_read_bytes(path), path), path)


def transform_document(document: Mapping[str, Any], blocks: ReplacementBlocks) -> dict[str, Any]:
    """Return a copy of ``document`` with the theme and extension sections replaced.

    Keys keep their position; a missing section is appended at the end. The
    input is never modified.
    """
    result = copy.deepcopy(dict(document))
    result.update(blocks.as_sections())
    return result


def render_document(document: Mapping[str, Any]) -> str:
    """Serialize ``document`` to YAML, preserving key order and custom tags."""
    return yaml.dump(
        dict(document),
        Dumper=_ConfigDumper,
        default_flow_style=False,
        sort_keys=False,
        allow_unicode=True,
    )


def atomic_write_bytes(path: Path, content: bytes) -> None:
    """Write ``content`` to ``path`` atomically.

    Writes to a temporary file in the same directory, flushes it to disk, then
    renames it over ``path``. The file mode of an existing ``path`` is kept.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, temp_path = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        with contextlib.suppress(FileNotFoundError):
            os.chmod(temp_path, stat.S_IMODE(path.stat().st_mode))
        Path(temp_path).replace(path)
    except BaseException:
        try:
            Path(temp_path).unlink()
        except FileNotFoundError:
            pass
        except OSError as cleanup_error:
            logger.warning("Failed to cleanup temp file %s: %s", temp_path, cleanup_error)
        raise


def atomic_write_text(path: Path, content: str, encoding: str = "utf-8") -> None:
    atomic_write_bytes(path, content.encode(encoding))


def write_backup(original: bytes, backup_path: Path) -> Path:
    """Durably store the pre-mutation bytes at ``backup_path``."""
    try:
        atomic_write_bytes(backup_path, original)
    except OSError as exc:
        raise ConfigWriteError(backup_path, exc) from exc
    logger.info("Backup written to %s", backup_path)
    return backup_path


@contextlib.contextmanager
def config_lock(path: Path, *, timeout: float) -> Iterator[None]:
    """Hold an exclusive advisory lock on ``path`` for the duration of the block."""
    lock_path = Path(f"{path}.lock")
    lock = filelock.FileLock(str(lock_path), timeout=timeout)
    try:
        lock.acquire()
    except filelock.Timeout as exc:
        msg = f"Another process holds the lock on '{path}' (waited {timeout:g}s)"
        raise ConfigError(msg) from exc
    except OSError as exc:
        raise ConfigWriteError(lock_path, exc) from exc
    try:
        yield
    finally:
        lock.release()


def apply_replacement(
    path: Path,
    blocks: ReplacementBlocks = MATERIAL_REPLACEMENT,
    *,
    backup_path: Path | None = None,
    lock_timeout: float = 10.0,
) -> TransformResult:
    """Back up ``path`` and rewrite it with ``blocks`` in place.

    The document is parsed before anything is written: a parse failure leaves
    no backup and no partial output behind.

    Raises:
        ConfigNotFoundError: ``path`` does not exist
        ConfigParseError: ``path`` is not a YAML mapping
        ConfigWriteError: the backup or the new document cannot be written

    """
    path = Path(path)
    if backup_path is None:
        backup_path = path.with_name(path.name + ".bak")

    with config_lock(path, timeout=lock_timeout):
        original = _read_bytes(path)
        document = parse_document(_decode(original, path), path)

        write_backup(original, backup_path)

        transformed = transform_document(document, blocks)
        rendered = render_document(transformed)
        try:
            atomic_write_text(path, rendered)
        except OSError as exc:
            raise ConfigWriteError(path, exc, backup_path=backup_path) from exc

    changed = rendered.encode("utf-8") != original
    logger.info("Updated %s (%s)", path, ", ".join(blocks.replaced_keys))
    return TransformResult(config_path=path, backup_path=backup_path, changed=changed, document=transformed)


__all__ = [
    "MARKDOWN_EXTENSIONS_KEY",
    "MATERIAL_REPLACEMENT",
    "THEME_KEY",
    "ReplacementBlocks",
    "TaggedValue",
    "TransformResult",
    "apply_replacement",
    "atomic_write_text",
    "config_lock",
    "load_document",
    "parse_document",
    "render_document",
    "transform_document",
    "write_backup",
]
