"""Script patch orchestration.

Source rewriting is textual: the package declaration and class name are
located by scanning for delimiters, not by parsing the language. Compilation
is delegated to an external tool that embeds the compiled bytecode into a
copy of the current document; the first DoAbc tag of that copy is spliced
back into the document.
"""

from __future__ import annotations

import logging
import re
import subprocess
import tempfile
from pathlib import Path
from typing import Protocol

from swfpatcher.archive import SourceResolver
from swfpatcher.codec import DocumentCodec
from swfpatcher.config import get_settings
from swfpatcher.engine.symbols import merge_symbol_bindings, script_insert_index
from swfpatcher.exceptions import CompilerError
from swfpatcher.models.document import DoAbc, Document
from swfpatcher.models.patch_config import ScriptPatch

logger = logging.getLogger(__name__)

_PACKAGE_RE = re.compile(r"\bpackage\b([^{]*)\{")
_CLASS_RE = re.compile(r"\bclass\s+")
_CLASS_END_RE = re.compile(r"\bextends\b|\bimplements\b|\{")


# ---------------------------------------------------------------------------
# Source rewriting
# ---------------------------------------------------------------------------


def set_package(source: str, package: str) -> str:
    """Rename the package declaration, or wrap the source in one when absent."""
    m = _PACKAGE_RE.search(source)
    if m is None:
        return f"package {package} {{\n{source}\n}}\n"
    return f"{source[:m.start(1)]} {package} {source[m.end(1):]}"


def set_class_name(source: str, class_name: str) -> str:
    """Rename the first class declaration. The name ends at extends, implements or ``{``."""
    m = _CLASS_RE.search(source)
    if m is None:
        logger.warning("No class declaration found; class name %r not applied", class_name)
        return source
    end = _CLASS_END_RE.search(source, m.end())
    if end is None:
        logger.warning("Unterminated class declaration; class name %r not applied", class_name)
        return source
    return f"{source[:m.end()]}{class_name} {source[end.start():]}"


# ---------------------------------------------------------------------------
# Compiler
# ---------------------------------------------------------------------------


class ScriptCompiler(Protocol):
    def compile(
        self, source: Path, base: Path, output: Path, class_name: str | None, mode: str
    ) -> None: ...


class ExternalScriptCompiler:
    """Runs the configured command line. Any failure raises CompilerError with the tool's output."""

    def __init__(self, command: list[str] | None = None, timeout: float | None = None) -> None:
        settings = get_settings()
        self.command = list(command if command is not None else settings.compiler_command)
        self.timeout = timeout if timeout is not None else settings.compiler_timeout

    def build_args(
        self, source: Path, base: Path, output: Path, class_name: str | None, mode: str
    ) -> list[str]:
        values = {
            "{source}": str(source),
            "{base}": str(base),
            "{output}": str(output),
            "{class_name}": class_name or "",
            "{mode}": mode,
        }
        args = []
        for template in self.command:
            for placeholder, value in values.items():
                template = template.replace(placeholder, value)
            args.append(template)
        return args

    def compile(
        self, source: Path, base: Path, output: Path, class_name: str | None, mode: str
    ) -> None:
        args = self.build_args(source, base, output, class_name, mode)
        logger.debug("Running compiler: %s", " ".join(args))
        try:
            result = subprocess.run(args, capture_output=True, text=True, timeout=self.timeout)
        except FileNotFoundError as e:
            raise CompilerError(f"Compiler executable not found: {args[0]}") from e
        except subprocess.TimeoutExpired as e:
            raise CompilerError(f"Compiler timed out after {self.timeout:g}s") from e

        if result.returncode != 0:
            raise CompilerError(
                f"Compiler exited with status {result.returncode}:\n{result.stdout}{result.stderr}"
            )
        if not output.is_file():
            raise CompilerError(f"Compiler produced no output file: {output}\n{result.stdout}{result.stderr}")


# ---------------------------------------------------------------------------
# Splicing
# ---------------------------------------------------------------------------


def add_script(document: Document, data: bytes, name: str = "") -> DoAbc:
    tag = DoAbc(flags=1, name=name, data=data)
    document.tags.insert(script_insert_index(document.tags), tag)
    return tag


def replace_script(document: Document, data: bytes, class_name: str | None) -> DoAbc:
    """Overwrite the DoAbc whose bytes contain ``class_name``; add one when none matches.

    Without a class name the first DoAbc is overwritten. The match is a raw
    substring search over the bytecode.
    """
    scripts = [t for t in document.tags if isinstance(t, DoAbc)]
    if class_name:
        needle = class_name.encode("utf-8")
        target = next((t for t in scripts if needle in t.data), None)
    else:
        target = scripts[0] if scripts else None

    if target is None:
        logger.debug("No script matched %r; adding a new DoAbc", class_name)
        return add_script(document, data, class_name or "")
    target.data = data
    return target


def _compiled_bytecode(compiled: Document) -> DoAbc:
    for tag in compiled.tags:
        if isinstance(tag, DoAbc):
            return tag
    raise CompilerError("Compiler output contains no DoAbc tag")


def apply_script_patch(
    document: Document,
    patch: ScriptPatch,
    resolver: SourceResolver,
    codec: DocumentCodec,
    compiler: ScriptCompiler,
    workdir: Path,
) -> DoAbc:
    source = resolver.read_text(patch.source)
    if patch.package:
        source = set_package(source, patch.package)
    if patch.mode == "replace" and patch.class_name:
        source = set_class_name(source, patch.class_name)

    workdir.mkdir(parents=True, exist_ok=True)
    source_path = workdir / f"{patch.class_name or Path(patch.source).stem or 'Script'}.as"
    base_path = workdir / "base.swf"
    output_path = workdir / "output.swf"
    source_path.write_text(source, encoding="utf-8")
    base_path.write_bytes(codec.encode(document))

    compiler.compile(source_path, base_path, output_path, patch.class_name, patch.mode)
    compiled = _compiled_bytecode(codec.decode(output_path.read_bytes()))

    if patch.mode == "add":
        tag = add_script(document, compiled.data, compiled.name)
    else:
        tag = replace_script(document, compiled.data, patch.class_name)
    merge_symbol_bindings(document, patch.symbols)
    return tag


def apply_script_patches(
    document: Document,
    patches: list[ScriptPatch],
    resolver: SourceResolver,
    codec: DocumentCodec,
    compiler: ScriptCompiler | None = None,
    scratch_dir: str | None = None,
) -> int:
    """Compile and splice every patch in order. The scratch directory is removed on every exit path."""
    if not patches:
        return 0
    compiler = compiler or ExternalScriptCompiler()
    if scratch_dir is None:
        scratch_dir = get_settings().scratch_dir

    with tempfile.TemporaryDirectory(prefix="swfpatcher-", dir=scratch_dir) as tmp:
        for i, patch in enumerate(patches):
            tag = apply_script_patch(document, patch, resolver, codec, compiler, Path(tmp) / str(i))
            logger.info("Script %s (%s) -> DoAbc %r", patch.source, patch.mode, tag.name)
    return len(patches)
