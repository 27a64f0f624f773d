"""
Renders a module graph into a single CommonJS file.

Internal modules become factories in a registry; externals become top-level
`require()` calls. No interop helpers and no `__esModule` marker are emitted,
and the exports object is not frozen.
"""
import json
import os
from typing import Dict, List, Optional, Tuple

from .parser import PLACEHOLDER, ImportDecl, ReExportDecl

RUNTIME = """function __export(target, name, get) {
  Object.defineProperty(target, name, { enumerable: true, get: get });
}
"""

EXPORT_STAR_RUNTIME = """function __exportStar(target, source) {
  Object.keys(source).forEach(function (name) {
    if (name !== 'default' && !(name in target)) {
      __export(target, name, function () { return source[name]; });
    }
  });
}
"""

REGISTRY_RUNTIME = """var __cache = [];

function __require(id) {
  if (__cache[id]) {
    return __cache[id];
  }
  var exports = (__cache[id] = {});
  __modules[id](exports, __require);
  return exports;
}
"""


def quote(value: str) -> str:
    return json.dumps(value).replace('"', "'")


class ChunkRenderer:
    """Renders the records produced by the Bundler"""

    def __init__(self, modules: List['ModuleRecord'], star_exports: Dict[int, List[Tuple[str, str]]],
                 export_mode: str, base_dir: Optional[str] = None):
        self.modules = modules
        self.by_path = {str(record.path): record for record in modules}
        self.star_exports = star_exports
        self.export_mode = export_mode
        self.base_dir = base_dir
        self.externals: Dict[str, str] = {}
        self.uses_export_star = False

    def _external_ref(self, module_id: str) -> str:
        if module_id not in self.externals:
            self.externals[module_id] = f"__ext{len(self.externals)}"
        return self.externals[module_id]

    def _dependency(self, record, source: str):
        resolved = record.resolved[source]
        if resolved.external:
            return None, self._external_ref(resolved.id)
        dep = self.by_path[resolved.id]
        return dep, f"__require({dep.index})"

    def _render_import(self, record, decl: ImportDecl) -> str:
        dep, ref = self._dependency(record, decl.source)
        if decl.side_effect_only:
            return f"{ref};" if dep is not None else ""

        statements = []
        if dep is not None:
            local = f"__m{dep.index}"
            statements.append(f"var {local} = {ref};")
            base = f"{local}.default" if dep.commonjs else local
            default = f"{local}.default"
        else:
            base = default = ref

        if decl.default:
            statements.append(f"var {decl.default} = {default};")
        if decl.namespace:
            statements.append(f"var {decl.namespace} = {base};")
        for imported, local_name in decl.named:
            statements.append(f"var {local_name} = {base}.{imported};")
        return " ".join(statements)

    def _render_reexport_getters(self, record, decl: ReExportDecl) -> List[str]:
        dep, ref = self._dependency(record, decl.source)
        base = f"{ref}.default" if dep is not None and dep.commonjs else ref
        lines = []
        if decl.star_as:
            lines.append(f"__export(__exports, {quote(decl.star_as)}, function () {{ return {base}; }});")
        for imported, exported in decl.named:
            lines.append(
                f"__export(__exports, {quote(exported)}, function () {{ return {base}.{imported}; }});"
            )
        if decl.star and dep is None:
            self.uses_export_star = True
            lines.append(f"__exportStar(__exports, {ref});")
        return lines

    def _render_module(self, record) -> str:
        parsed = record.parsed
        header = []
        for exported, local in parsed.local_exports.items():
            header.append(f"__export(__exports, {quote(exported)}, function () {{ return {local}; }});")
        for decl in parsed.reexports:
            header.extend(self._render_reexport_getters(record, decl))
        for name, source in self.star_exports.get(record.index, []):
            dep, ref = self._dependency(record, source)
            header.append(f"__export(__exports, {quote(name)}, function () {{ return {ref}.{name}; }});")

        body = parsed.body
        for index, decl in enumerate(parsed.placeholders):
            if isinstance(decl, ImportDecl):
                replacement = self._render_import(record, decl)
            else:
                dep, ref = self._dependency(record, decl.source)
                replacement = f"{ref};" if dep is not None else ""
            body = body.replace(PLACEHOLDER.format(index), replacement, 1)

        label = os.path.relpath(record.path, self.base_dir) if self.base_dir else record.path.name
        return "\n".join([
            f"  // {label}",
            "  function (__exports, __require) {",
            *header,
            body.rstrip(),
            "  },",
        ])

    def _render_entry(self) -> str:
        if self.export_mode == 'default':
            return "module.exports = __require(0).default;"
        if self.export_mode == 'none':
            return "__require(0);"
        return "module.exports = __require(0);"

    def render(self) -> str:
        factories = [self._render_module(record) for record in self.modules]
        parts = ["'use strict';\n"]
        if self.externals:
            parts.append("\n".join(
                f"var {ref} = require({quote(module_id)});" for module_id, ref in self.externals.items()
            ) + "\n")
        parts.append(RUNTIME)
        if self.uses_export_star:
            parts.append(EXPORT_STAR_RUNTIME)
        parts.append("var __modules = [\n" + "\n".join(factories) + "\n];\n")
        parts.append(REGISTRY_RUNTIME)
        parts.append(self._render_entry() + "\n")
        return "\n".join(parts)
