"""
Filesystem helpers. Blocking calls run in the default executor so that
concurrent target builds keep making progress.
"""
import asyncio
import logging
import shutil
from pathlib import Path
from typing import Union

logger = logging.getLogger(__name__)


def _write(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding='utf-8')


async def read_text(path: Union[str, Path]) -> str:
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, Path(path).read_text, 'utf-8')


async def write_text(path: Union[str, Path], content: str) -> None:
    loop = asyncio.get_running_loop()
    await loop.run_in_executor(None, _write, Path(path), content)


def remove_tree(path: Union[str, Path]) -> bool:
    """
    Recursively delete a directory.

    Returns:
        True if something was removed, False if the path did not exist
    """
    path = Path(path)
    if not path.exists():
        logger.debug(f"Nothing to remove at {path}")
        return False
    if path.is_dir():
        shutil.rmtree(path)
    else:
        path.unlink()
    logger.info(f"Removed {path}")
    return True
