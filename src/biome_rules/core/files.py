import glob
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


def select_files(cwd: str | Path, pattern: str) -> list[Path]:
    """Expand ``pattern`` relative to ``cwd`` into sorted absolute file paths.

    ``**`` matches any number of directories, including none. Hidden
    directories are not descended into.
    """
    root = Path(cwd).resolve()
    matches = glob.glob(pattern, root_dir=root, recursive=True)
    files = sorted({(root / match).resolve() for match in matches if (root / match).is_file()})
    logger.debug("Pattern %s matched %d file(s) under %s", pattern, len(files), root)
    return files
