"""Test cases for the individual pipeline stages."""

import json
import sys
from pathlib import Path
from unittest.mock import Mock

import pytest

from monobuild.core.exceptions import BuildError
from monobuild.core.models import BuildTarget, ExternalTable, UnclassifiedWarning
from monobuild.pipeline.base import StageContext, TransformResult
from monobuild.pipeline.stages import (
    BannerStage,
    DowngradeStage,
    InteropStage,
    LICENSE_BANNER,
    OptimizeStage,
    RemapStage,
    ResolveStage,
)
from monobuild.pipeline.stages.optimize import closure_flags
from monobuild.pipeline.tools import ToolRunner
from tests.conftest import FakeToolRunner, write


@pytest.fixture
def warnings():
    return []


@pytest.fixture
def context(tmp_path, warnings):
    target = BuildTarget(name='T', input_path=tmp_path / 'in.js', output_path=tmp_path / 'out.js')
    return StageContext(target, warnings.append)


class TestResolveStage:

    @pytest.fixture
    def stage(self):
        return ResolveStage(ExternalTable.create(['react', 'outline'], {}))

    @pytest.mark.asyncio
    async def test_external_passes_through_even_if_installed(self, stage, tmp_path):
        write(tmp_path / 'node_modules' / 'react' / 'index.js', 'module.exports = {};')
        importer = write(tmp_path / 'src' / 'a.js', '')

        resolved = await stage.resolve_id('react', importer)

        assert resolved.external is True
        assert resolved.id == 'react'

    @pytest.mark.asyncio
    async def test_relative_import_with_extension_lookup(self, stage, tmp_path):
        importer = write(tmp_path / 'src' / 'a.js', '')
        target = write(tmp_path / 'src' / 'b.js', '')

        resolved = await stage.resolve_id('./b', importer)

        assert resolved.external is False
        assert resolved.id == str(target.resolve())

    @pytest.mark.asyncio
    async def test_directory_index(self, stage, tmp_path):
        importer = write(tmp_path / 'src' / 'a.js', '')
        index = write(tmp_path / 'src' / 'utils' / 'index.js', '')

        resolved = await stage.resolve_id('./utils', importer)

        assert resolved.id == str(index.resolve())

    @pytest.mark.asyncio
    async def test_node_modules_package_main(self, stage, tmp_path):
        package = tmp_path / 'node_modules' / 'lodash'
        write(package / 'package.json', json.dumps({'main': 'lib/lodash.js'}))
        main = write(package / 'lib' / 'lodash.js', '')
        importer = write(tmp_path / 'src' / 'deep' / 'a.js', '')

        resolved = await stage.resolve_id('lodash', importer)

        assert resolved.id == str(main.resolve())

    @pytest.mark.asyncio
    async def test_unknown_returns_none(self, stage, tmp_path):
        importer = write(tmp_path / 'a.js', '')

        assert await stage.resolve_id('./missing', importer) is None
        assert await stage.resolve_id('left-pad', importer) is None


class TestDowngradeStage:

    @pytest.mark.asyncio
    async def test_runs_command_with_filename(self, context, tmp_path):
        runner = FakeToolRunner()
        stage = DowngradeStage(['babel'], runner)
        path = tmp_path / 'src' / 'a.js'

        result = await stage.transform('const a = 1;', path, context)

        assert result == 'const a = 1;'
        assert runner.calls == [['babel', '--filename', str(path)]]

    @pytest.mark.asyncio
    async def test_skips_node_modules(self, context, tmp_path):
        runner = FakeToolRunner()
        stage = DowngradeStage(['babel'], runner)

        result = await stage.transform('x', tmp_path / 'node_modules' / 'react' / 'index.js', context)

        assert result is None
        assert runner.calls == []

    @pytest.mark.asyncio
    async def test_tool_stderr_is_an_unclassified_warning(self, context, warnings, tmp_path):
        stage = DowngradeStage(['babel'], FakeToolRunner(stderr='deprecated option\n'))

        await stage.transform('x', tmp_path / 'a.js', context)

        assert warnings == [UnclassifiedWarning(message='deprecated option', stage='downgrade')]


class TestInteropStage:

    @pytest.mark.asyncio
    async def test_commonjs_module_is_converted(self, context, tmp_path):
        code = "var React = require('react');\nmodule.exports = function () { return React; };\n"

        result = await InteropStage().transform(code, tmp_path / 'a.js', context)

        assert isinstance(result, TransformResult)
        assert result.meta == {'commonjs': True}
        assert result.code.startswith("import __require0 from 'react';")
        assert "var React = __require0;" in result.code
        assert result.code.endswith("export default module.exports;")

    @pytest.mark.asyncio
    async def test_repeated_require_is_hoisted_once(self, context, tmp_path):
        code = "exports.a = require('./x');\nexports.b = require('./x');\n"

        result = await InteropStage().transform(code, tmp_path / 'a.js', context)

        assert result.code.count("import __require0 from './x';") == 1
        assert '__require1' not in result.code

    @pytest.mark.asyncio
    async def test_es_module_is_left_alone(self, context, tmp_path):
        code = "import x from './x';\nexport default x;\n"

        assert await InteropStage().transform(code, tmp_path / 'a.js', context) is None


class TestRemapStage:

    @pytest.mark.asyncio
    async def test_rewrites_mapped_module_identifiers(self, context, tmp_path):
        stage = RemapStage({'outline': 'Outline', 'outline-extensions/Bold': 'OutlineBold'})
        code = "import {a} from 'outline';\nimport Bold from \"outline-extensions/Bold\";\nimport r from 'react';\n"

        result = await stage.transform(code, tmp_path / 'a.js', context)

        assert "from 'Outline'" in result
        assert 'from "OutlineBold"' in result
        assert "from 'react'" in result

    @pytest.mark.asyncio
    async def test_does_not_touch_bare_identifiers_or_prefixes(self, context):
        stage = RemapStage({'outline': 'Outline'})
        code = "var outline = require('outline-react');\nrequire('outline');"

        result = await stage.render_chunk(code, context)

        assert result == "var outline = require('outline-react');\nrequire('Outline');"

    @pytest.mark.asyncio
    async def test_empty_mapping_is_identity(self, context):
        assert await RemapStage({}).render_chunk("require('x')", context) == "require('x')"


class TestOptimizeStage:

    def test_closure_flags_are_fixed(self):
        flags = closure_flags()

        assert '--compilation_level=SIMPLE' in flags
        assert '--use_types_for_optimization=false' in flags
        assert '--rewrite_polyfills=false' in flags
        assert '--inject_libraries=false' in flags

    @pytest.mark.asyncio
    async def test_runs_on_rendered_chunk(self, context):
        runner = FakeToolRunner()
        stage = OptimizeStage(['closure'], runner)

        result = await stage.render_chunk('var a = 1;', context)

        assert result == 'var a = 1;'
        assert runner.calls == [['closure'] + closure_flags()]


class TestBannerStage:

    @pytest.mark.asyncio
    async def test_prepends_banner_verbatim(self, context):
        result = await BannerStage().render_chunk("'use strict';\n", context)

        assert result == LICENSE_BANNER + "'use strict';\n"
        assert result.startswith('/**\n * Copyright (c) Facebook, Inc. and its affiliates.')
        assert '@preventMunge' in result


class TestToolRunner:

    @pytest.mark.asyncio
    async def test_source_goes_through_stdin(self):
        command = [sys.executable, '-c', 'import sys; sys.stdout.write(sys.stdin.read().upper())']

        result = await ToolRunner().run(command, 'var a = 1;')

        assert result.stdout == 'VAR A = 1;'
        assert result.returncode == 0

    @pytest.mark.asyncio
    async def test_nonzero_exit_is_a_build_error(self):
        command = [sys.executable, '-c', 'import sys; sys.stderr.write("SyntaxError"); sys.exit(2)']

        with pytest.raises(BuildError, match='SyntaxError'):
            await ToolRunner().run(command, '')

    @pytest.mark.asyncio
    async def test_missing_binary_is_a_build_error(self):
        with pytest.raises(BuildError, match='Failed to start'):
            await ToolRunner().run(['monobuild-no-such-tool'], '')
