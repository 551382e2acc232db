"""Download and extraction of resolved package archives.

Both steps shell out: a resumable downloader (wget -c by default) writes
<staging_dir>/<name>.tar.gz, and tar unpacks it into <root>/<name>.
Commands are argv templates with {url}, {archive} and {dest} placeholders.
"""
from __future__ import annotations

import os
import re
import subprocess
from typing import Callable, List, Optional, Sequence

from .core.config import DEFAULT_DOWNLOAD_COMMAND, DEFAULT_EXTRACT_COMMAND, DEFAULT_STAGING_DIR
from .core.logs import TaggedLogger, get_tagged_logger
from .errors import ArchiveNotFoundError, FilesystemError, NotDownloadedError, SubprocessError
from .model import Package

Runner = Callable[[List[str]], int]

FETCH_TAG = "package-fetcher"
_PLACEHOLDER = re.compile(r"\{(\w+)\}")


def run_command(argv: List[str]) -> int:
    """Run argv to completion with the caller's stdin/stdout/stderr.

    Returns:
        The process exit status

    Raises:
        SubprocessError: If the program cannot be started
    """
    try:
        return subprocess.run(argv, check=False).returncode
    except OSError as e:
        raise SubprocessError(f"Could not run {argv[0]}: {e}", command=argv) from e


def render_command(template: Sequence[str], **values: str) -> List[str]:
    """Substitute {name} placeholders in each argv part.

    Only the given names are replaced; any other braces stay literal.
    """

    def substitute(match: re.Match) -> str:
        return str(values.get(match.group(1), match.group(0)))

    return [_PLACEHOLDER.sub(substitute, str(part)) for part in template]


def ensure_directory(path: str) -> None:
    """Create path (and parents) if missing.

    Raises:
        FilesystemError: If the directory cannot be created
    """
    try:
        os.makedirs(path, exist_ok=True)
    except OSError as e:
        raise FilesystemError(f"Couldn't create directory {path}: {e}") from e


class PackageFetcher:
    """Runs the external download and extract steps for a resolved package."""

    def __init__(
        self,
        staging_dir: str = DEFAULT_STAGING_DIR,
        download_command: Optional[Sequence[str]] = None,
        extract_command: Optional[Sequence[str]] = None,
        runner: Optional[Runner] = None,
        fail_on_error: bool = True,
        logger: Optional[TaggedLogger] = None,
    ):
        self.staging_dir = staging_dir
        self.download_command = list(download_command or DEFAULT_DOWNLOAD_COMMAND)
        self.extract_command = list(extract_command or DEFAULT_EXTRACT_COMMAND)
        self.runner = runner or run_command
        self.fail_on_error = fail_on_error
        self.log = logger or get_tagged_logger(__name__)

    def archive_path(self, package: Package) -> str:
        return package.archive_file(self.staging_dir)

    def _run(self, argv: List[str], step: str) -> int:
        self.log.debug(FETCH_TAG, "running " + " ".join(argv))
        status = self.runner(argv)
        if status != 0:
            self.log.error(FETCH_TAG, f"{step} exited with status {status}")
            if self.fail_on_error:
                raise SubprocessError(f"{step} failed with exit status {status}", command=argv, returncode=status)
        return status

    def download(self, package: Package) -> int:
        """Download the package archive into the staging directory.

        Raises:
            ArchiveNotFoundError: If the package has no resolved archive URL
            FilesystemError: If the staging directory cannot be created
            SubprocessError: If the downloader fails (non-zero only when fail_on_error)
        """
        url = package.resolved_archive_url
        if url is None:
            raise ArchiveNotFoundError(f"package archive (download url) not found: {package.name}")

        archive = self.archive_path(package)
        ensure_directory(os.path.dirname(archive))

        self.log.info(FETCH_TAG, f"downloading {url} -> {archive}")
        argv = render_command(self.download_command, url=url, archive=archive, dest=os.path.dirname(archive))
        return self._run(argv, "download")

    def extract(self, package: Package, destination_root: str) -> int:
        """Unpack the staged archive into {destination_root}/{package.name}.

        Raises:
            NotDownloadedError: If the staged archive does not exist
            FilesystemError: If the output directory cannot be created
            SubprocessError: If extraction fails (non-zero only when fail_on_error)
        """
        archive = self.archive_path(package)
        if not os.path.isfile(archive):
            raise NotDownloadedError(f"Package was not downloaded: {archive}")

        output_dir = os.path.join(destination_root, package.name)
        ensure_directory(output_dir)

        self.log.info(FETCH_TAG, f"extracting {archive} -> {output_dir}")
        argv = render_command(
            self.extract_command,
            url=package.resolved_archive_url or "",
            archive=archive,
            dest=output_dir,
        )
        return self._run(argv, "extract")
