"""
Configuration file parsers.

Loads a config file of any supported format into a plain document (a dict):

- ``.toml``  - wrangler TOML
- ``.json``  - plain JSON
- ``.jsonc`` - JSON with comments and trailing commas
- ``.ts`` / ``.js`` / ``.mts`` / ``.mjs`` / ``.py`` - script configs,
  evaluated and reduced to their default export

Every parser has the same contract, ``await parser.parse(path)``. Only the
script parser actually suspends; the text parsers also offer a synchronous
``parse_file``.
"""

import asyncio
import importlib.util
import json
import logging
import tomllib
import types
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from turbomigrate.domain.errors import ParseFailureError
from turbomigrate.domain.models.run_config import DEFAULT_MODULE_RUNTIME

logger = logging.getLogger(__name__)

ConfigDocument = Dict[str, Any]

# Printed by the JS loader in front of the serialized config so that any
# console output from the config module itself is ignored
_MODULE_SENTINEL = "__TURBOMIGRATE_CONFIG__"


def strip_jsonc(content: str) -> str:
    """
    Remove comments and trailing commas from JSONC content.

    String literals are copied verbatim, so ``"https://example.com"`` or a
    ``/*`` inside a string survive. Newlines inside block comments are kept
    so that JSON error positions still point at the right source line.
    """
    return _strip_trailing_commas(_strip_comments(content))


def _strip_comments(content: str) -> str:
    out: List[str] = []
    i = 0
    length = len(content)
    in_string = False

    while i < length:
        char = content[i]

        if in_string:
            out.append(char)
            if char == "\\" and i + 1 < length:
                out.append(content[i + 1])
                i += 2
                continue
            if char == '"':
                in_string = False
            i += 1
            continue

        if char == '"':
            in_string = True
            out.append(char)
            i += 1
            continue

        if content.startswith("//", i):
            end = content.find("\n", i)
            i = length if end == -1 else end
            continue

        if content.startswith("/*", i):
            end = content.find("*/", i + 2)
            if end == -1:
                raise ValueError("Unterminated block comment")
            out.append("\n" * content.count("\n", i, end))
            i = end + 2
            continue

        out.append(char)
        i += 1

    return "".join(out)


def _strip_trailing_commas(content: str) -> str:
    out: List[str] = []
    i = 0
    length = len(content)
    in_string = False

    while i < length:
        char = content[i]

        if in_string:
            out.append(char)
            if char == "\\" and i + 1 < length:
                out.append(content[i + 1])
                i += 2
                continue
            if char == '"':
                in_string = False
            i += 1
            continue

        if char == '"':
            in_string = True
        elif char == ",":
            j = i + 1
            while j < length and content[j] in " \t\r\n":
                j += 1
            if j < length and content[j] in "}]":
                i += 1
                continue

        out.append(char)
        i += 1

    return "".join(out)


def _load_json_text(content: str, path: Path, hint: str = "") -> Any:
    try:
        return json.loads(content)
    except json.JSONDecodeError as e:
        message = f"Invalid JSON at line {e.lineno}, column {e.colno}: {e.msg}"
        if hint:
            message += f"\nHint: {hint}"
        raise ParseFailureError(path, message) from e


class FormatParser(ABC):
    """A config format: a set of extensions and a way to load them."""

    extensions: tuple = ()

    @abstractmethod
    async def parse(self, path: Path) -> ConfigDocument:
        """Load ``path`` into a document."""


class TextFormatParser(FormatParser):
    """Formats that are read as UTF-8 text and parsed synchronously."""

    async def parse(self, path: Path) -> ConfigDocument:
        return self.parse_file(path)

    def parse_file(self, path: Path) -> ConfigDocument:
        try:
            content = path.read_text(encoding="utf-8")
        except OSError as e:
            raise ParseFailureError(path, f"Cannot read file: {e.strerror or e}") from e

        if not content.strip():
            raise ParseFailureError(path, "Configuration file is empty")

        return self.parse_text(content, path)

    @abstractmethod
    def parse_text(self, content: str, path: Path) -> Any:
        """Parse already-read content."""


class TomlParser(TextFormatParser):
    extensions = (".toml",)

    def parse_text(self, content: str, path: Path) -> Any:
        try:
            return tomllib.loads(content)
        except tomllib.TOMLDecodeError as e:
            raise ParseFailureError(path, f"Invalid TOML: {e}") from e


class JsonParser(TextFormatParser):
    extensions = (".json",)

    def parse_text(self, content: str, path: Path) -> Any:
        return _load_json_text(
            content, path, hint="Plain .json files cannot contain comments; use .jsonc"
        )


class JsoncParser(TextFormatParser):
    """JSON with ``//`` and ``/* */`` comments and trailing commas."""

    extensions = (".jsonc",)

    def parse_text(self, content: str, path: Path) -> Any:
        try:
            cleaned = strip_jsonc(content)
        except ValueError as e:
            raise ParseFailureError(path, str(e)) from e
        return _load_json_text(cleaned, path)


class ModuleParser(FormatParser):
    """
    Script configs (``drizzle.config.ts`` and friends).

    JavaScript and TypeScript modules are imported by a JS runtime in a
    subprocess that prints the module's default export (or the whole export
    namespace when there is no default) as JSON. Python modules are imported
    in-process.
    """

    extensions = (".ts", ".js", ".mts", ".mjs", ".py")

    def __init__(self, runtime: str = DEFAULT_MODULE_RUNTIME):
        self.runtime = runtime

    async def parse(self, path: Path) -> ConfigDocument:
        if path.suffix.lower() == ".py":
            return await asyncio.to_thread(self._import_python_module, path)
        return await self._import_js_module(path)

    def _loader_script(self, path: Path) -> str:
        url = json.dumps(path.resolve().as_uri())
        return (
            f"const mod = await import({url});\n"
            "const config = mod.default || mod;\n"
            f"console.log({json.dumps(_MODULE_SENTINEL)} + JSON.stringify(config));\n"
        )

    async def _import_js_module(self, path: Path) -> Any:
        logger.debug("Evaluating %s with %s", path, self.runtime)
        try:
            process = await asyncio.create_subprocess_exec(
                self.runtime,
                "-e",
                self._loader_script(path),
                cwd=str(path.parent),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError as e:
            raise ParseFailureError(
                path,
                f"Failed to import module: JavaScript runtime '{self.runtime}' not found",
            ) from e

        stdout, stderr = await process.communicate()
        if process.returncode != 0:
            detail = stderr.decode("utf-8", errors="replace").strip() or f"exit code {process.returncode}"
            raise ParseFailureError(path, f"Failed to import module: {detail}")

        payload = None
        for line in stdout.decode("utf-8", errors="replace").splitlines():
            if line.startswith(_MODULE_SENTINEL):
                payload = line[len(_MODULE_SENTINEL):]

        if payload is None:
            raise ParseFailureError(path, "Failed to import module: no configuration was exported")
        return _load_json_text(payload, path)

    def _import_python_module(self, path: Path) -> Any:
        module_name = f"_turbomigrate_config_{abs(hash(str(path.resolve())))}"
        spec = importlib.util.spec_from_file_location(module_name, path)
        if spec is None or spec.loader is None:
            raise ParseFailureError(path, "Failed to import module: not a loadable Python file")

        module = importlib.util.module_from_spec(spec)
        try:
            spec.loader.exec_module(module)
        except Exception as e:
            raise ParseFailureError(path, f"Failed to import module: {e}") from e

        default = getattr(module, "default", None)
        if default is not None:
            return dict(default) if isinstance(default, Mapping) else default

        return {
            name: value
            for name, value in vars(module).items()
            if not name.startswith("_")
            and not callable(value)
            and not isinstance(value, types.ModuleType)
        }


_TEXT_PARSERS: List[TextFormatParser] = [TomlParser(), JsonParser(), JsoncParser()]


def get_parser(path: Path, module_runtime: str = DEFAULT_MODULE_RUNTIME) -> FormatParser:
    """
    Pick the parser for ``path`` by its extension (case-insensitive).

    Raises:
        ParseFailureError: If the extension is not supported
    """
    suffix = path.suffix.lower()
    for parser in _TEXT_PARSERS:
        if suffix in parser.extensions:
            return parser
    if suffix in ModuleParser.extensions:
        return ModuleParser(module_runtime)
    extension = suffix.lstrip(".") or "<none>"
    raise ParseFailureError(path, f"Unsupported file extension: {extension}")


async def parse_document(
    path: Path,
    module_runtime: str = DEFAULT_MODULE_RUNTIME,
) -> ConfigDocument:
    """
    Parse any supported config file into a document.

    Args:
        path: Config file path
        module_runtime: JS runtime for script configs

    Returns:
        Parsed document (always a dict)

    Raises:
        ParseFailureError: On unsupported extension, unreadable or malformed
            content, module import errors, or a non-mapping top level
    """
    path = Path(path)
    parser = get_parser(path, module_runtime)
    logger.info("Parsing %s with %s", path, type(parser).__name__)

    try:
        document = await parser.parse(path)
    except ParseFailureError:
        raise
    except Exception as e:
        raise ParseFailureError(path, str(e) or type(e).__name__) from e

    if not isinstance(document, dict):
        raise ParseFailureError(
            path, f"Expected a top-level object, got {type(document).__name__}"
        )
    return document


def dump_document(document: Optional[Mapping[str, Any]], pretty: bool = True) -> str:
    """Render a parsed document as JSON."""
    return json.dumps(
        document or {},
        indent=2 if pretty else None,
        ensure_ascii=False,
        default=str,
    )
