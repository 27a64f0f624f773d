import re
from pathlib import Path
from typing import Optional

from ..base import PipelineStage, StageContext, TransformResult
from ...core.enums import StageType


ES_SYNTAX_RE = re.compile(r'^[ \t]*(?:import|export)\b', re.M)
REQUIRE_RE = re.compile(r'''\brequire\(\s*(['"])([^'"]+)\1\s*\)''')
COMMONJS_RE = re.compile(r'\b(?:module\.exports|exports\.[\w$]+\s*=)')


class InteropStage(PipelineStage):
    """Converts CommonJS modules into ES modules with a single default export"""

    @property
    def stage_type(self) -> StageType:
        return StageType.INTEROP

    def is_commonjs(self, code: str) -> bool:
        if ES_SYNTAX_RE.search(code):
            return False
        return bool(REQUIRE_RE.search(code) or COMMONJS_RE.search(code))

    async def transform(self, code: str, module_path: Path,
                        context: StageContext) -> Optional[TransformResult]:
        if not self.is_commonjs(code):
            return None

        imports = {}

        def hoist(match):
            source = match.group(2)
            if source not in imports:
                imports[source] = f"__require{len(imports)}"
            return imports[source]

        body = REQUIRE_RE.sub(hoist, code)
        lines = [f"import {local} from '{source}';" for source, local in imports.items()]
        lines.append("var module = { exports: {} }, exports = module.exports;")
        lines.append(body)
        lines.append("export default module.exports;")
        return TransformResult(code="\n".join(lines), meta={'commonjs': True})
