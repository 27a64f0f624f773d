"""Test cases for the monobuild command line."""

import sys

import pytest
import yaml
from click.testing import CliRunner

from monobuild.cli.build_cli import cli
from monobuild.pipeline.stages import LICENSE_BANNER
from tests.conftest import write


@pytest.fixture
def config_file(project_root):
    path = project_root / 'monobuild.yaml'
    path.write_text(yaml.safe_dump({'root': '.'}))
    return path


class TestCli:

    def test_targets(self, config_file):
        result = CliRunner().invoke(cli, ['--config', str(config_file), 'targets'])

        assert result.exit_code == 0
        assert 'Outline Extensions - OutlineBold' in result.output
        assert 'Outline React - useOutline' in result.output
        assert 'Total: 4 target(s)' in result.output

    def test_externals(self, config_file):
        result = CliRunner().invoke(cli, ['--config', str(config_file), 'externals'])

        assert result.exit_code == 0
        assert '  - outline-extensions/Bold' in result.output
        assert 'outline-extensions/Bold -> OutlineBold' in result.output
        assert 'outline -> Outline' in result.output

    def test_missing_source_root_exits_nonzero(self, tmp_path):
        path = tmp_path / 'monobuild.yaml'
        path.write_text(yaml.safe_dump({'root': '.'}))

        result = CliRunner().invoke(cli, ['--config', str(path), 'targets'])

        assert result.exit_code == 1
        assert 'does not exist' in result.output

    def test_invalid_config_exits_nonzero(self, tmp_path):
        path = tmp_path / 'monobuild.yaml'
        path.write_text(yaml.safe_dump({'root': '.', 'source_suffixes': []}))

        result = CliRunner().invoke(cli, ['--config', str(path), 'externals'])

        assert result.exit_code == 1
        assert 'source_suffixes must not be empty' in result.output


ECHO = [sys.executable, '-c', 'import sys; sys.stdout.write(sys.stdin.read())']
MARK_OPTIMIZED = [sys.executable, '-c', 'import sys; sys.stdout.write("/* optimized */" + sys.stdin.read())']


@pytest.fixture
def build_file(project_root):
    """Config whose babel / closure commands are stand-ins run through the interpreter"""
    path = project_root / 'monobuild.yaml'
    path.write_text(yaml.safe_dump({
        'root': '.',
        'tools': {'downgrade_command': ECHO, 'optimize_command': MARK_OPTIMIZED},
    }))
    return path


class TestBuildCommand:

    def test_single_shot_build_succeeds(self, build_file, project_root):
        result = CliRunner().invoke(cli, ['--config', str(build_file)])

        assert result.exit_code == 0, result.output
        assert (project_root / 'packages/outline/dist/Outline.js').exists()
        assert (project_root / 'packages/outline-react/dist/useOutline.js').exists()

    def test_fatal_warning_exits_nonzero(self, build_file, project_root):
        write(project_root / 'packages/outline-react/src/useOutline.js',
              "import pad from 'left-pad-not-installed';\nexport default pad;\n")

        result = CliRunner().invoke(cli, ['--config', str(build_file)])

        assert result.exit_code == 1
        assert 'left-pad-not-installed' in result.output

    def test_failed_target_exits_nonzero(self, build_file, project_root):
        write(project_root / 'packages/outline-extensions/src/OutlineItalic.js',
              "import broken from './missing';\nexport default broken;\n")

        result = CliRunner().invoke(cli, ['--config', str(build_file)])

        assert result.exit_code == 1
        assert 'Build failed for Outline Extensions - OutlineItalic' in result.output
        assert (project_root / 'packages/outline/dist/Outline.js').exists()

    def test_www_flag_remaps_and_adds_banner(self, build_file, project_root):
        result = CliRunner().invoke(cli, ['--config', str(build_file), '--www'])

        assert result.exit_code == 0, result.output
        bold = (project_root / 'packages/outline-extensions/dist/OutlineBold.js').read_text()
        assert bold.startswith(LICENSE_BANNER)
        assert "require('Outline')" in bold

    def test_prod_flag_runs_optimizer(self, build_file, project_root):
        result = CliRunner().invoke(cli, ['--config', str(build_file), '--prod'])

        assert result.exit_code == 0, result.output
        main = (project_root / 'packages/outline/dist/Outline.js').read_text()
        assert main.startswith('/* optimized */')
        assert LICENSE_BANNER not in main

    def test_clean_flag_removes_stale_output(self, build_file, project_root):
        stale = write(project_root / 'packages/outline/dist/stale.js', 'old')

        result = CliRunner().invoke(cli, ['--config', str(build_file), '--clean'])

        assert result.exit_code == 0, result.output
        assert not stale.exists()
        assert (project_root / 'packages/outline/dist/Outline.js').exists()

    def test_without_clean_flag_stale_output_stays(self, build_file, project_root):
        stale = write(project_root / 'packages/outline/dist/stale.js', 'old')

        result = CliRunner().invoke(cli, ['--config', str(build_file)])

        assert result.exit_code == 0, result.output
        assert stale.exists()
