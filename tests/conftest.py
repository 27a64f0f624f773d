"""Pytest configuration and fixtures for monobuild tests."""

import logging
import sys
from pathlib import Path
from typing import List

import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from monobuild.config.build_config import BuildConfig, PluginPackageConfig
from monobuild.pipeline.tools import ToolResult

# Configure logging
logging.basicConfig(level=logging.INFO)


class FakeToolRunner:
    """Stands in for babel / closure: echoes its input and records calls"""

    def __init__(self, stderr: str = ""):
        self.calls: List[List[str]] = []
        self.stderr = stderr

    async def run(self, command, source):
        self.calls.append(list(command))
        return ToolResult(stdout=source, stderr=self.stderr, returncode=0)


def write(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    return path


@pytest.fixture
def fake_runner() -> FakeToolRunner:
    return FakeToolRunner()


@pytest.fixture
def project_root(tmp_path) -> Path:
    """A small multi-package tree in the default layout."""
    packages = tmp_path / "packages"
    write(packages / "outline" / "src" / "index.js", (
        "import {createEditor} from './editor';\n"
        "export {createEditor};\n"
        "export const VERSION = '0.1';\n"
    ))
    write(packages / "outline" / "src" / "editor.js", (
        "export function createEditor(config) {\n"
        "  return {config: config};\n"
        "}\n"
    ))
    write(packages / "outline-extensions" / "src" / "OutlineBold.js", (
        "import {createEditor} from 'outline';\n"
        "export default function Bold() {\n"
        "  return createEditor({bold: true});\n"
        "}\n"
    ))
    write(packages / "outline-extensions" / "src" / "OutlineItalic.js", (
        "import Bold from 'outline-extensions/Bold';\n"
        "export function italic() {\n"
        "  return Bold();\n"
        "}\n"
    ))
    write(packages / "outline-extensions" / "src" / "README.md", "# not a source file\n")
    (packages / "outline-extensions" / "src" / "nested").mkdir()
    write(packages / "outline-react" / "src" / "useOutline.js", (
        "import React from 'react';\n"
        "import Bold from 'outline-extensions/Bold';\n"
        "export default function useOutline() {\n"
        "  return React.useMemo(Bold, []);\n"
        "}\n"
    ))
    return tmp_path


@pytest.fixture
def build_config(project_root) -> BuildConfig:
    return BuildConfig(root=str(project_root))


@pytest.fixture
def plugins_config(tmp_path) -> BuildConfig:
    """Layout with a single lower-cased `plugins` namespace."""
    write(tmp_path / "src" / "index.js", "export default 1;\n")
    write(tmp_path / "plugins" / "src" / "Bold.js", "export default 'b';\n")
    write(tmp_path / "plugins" / "src" / "Italic.js", "export default 'i';\n")
    return BuildConfig.from_dict({
        'root': str(tmp_path),
        'main': {
            'name': 'Core',
            'package': 'core',
            'global_name': 'Core',
            'entry': 'src/index.js',
            'output': 'dist/Core.js',
        },
        'plugins': [{
            'label': 'Plugins',
            'src_dir': 'plugins/src',
            'dist_dir': 'plugins/dist',
            'namespace': 'plugins',
            'lowercase': True,
        }],
        'clean_dir': 'dist',
    })
