"""
Read, write and inspect .agent / .agents files on disk.

These helpers are the only place praykit touches the filesystem; everything
below them works on bytes.
"""

from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple, Union

import numpy as np

from praykit.archive import Archive
from praykit.errors import PrayError
from praykit.pray import iter_block_headers
from praykit.records import FileRecord
from praykit.sprites import SPRITE_EXTENSIONS, decode_sprite


def read_agent_file(agent_path: Union[str, Path]) -> Archive:
    """
    Read and decode an agent file.

    Args:
        agent_path: Path to .agent / .agents file

    Returns:
        Archive with tags and a sorted file pool

    Raises:
        PrayError: If the file is not a valid PRAY archive
    """
    return Archive.from_bytes(Path(agent_path).read_bytes())


def write_agent_file(output_path: Union[str, Path], archive: Archive) -> Path:
    """
    Encode an archive and write it to disk.

    Args:
        output_path: Path for output agent file
        archive: Archive to write

    Returns:
        Path to created agent file
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(archive.to_bytes())
    return output_path


def get_agent_info(agent_path: Union[str, Path]) -> Dict:
    """
    Get summary information about an agent file.

    Args:
        agent_path: Path to agent file

    Returns:
        Dict with tags, file pool, raw block list and sizes
    """
    agent_path = Path(agent_path)
    data = agent_path.read_bytes()
    archive = Archive.from_bytes(data)

    blocks = []
    total_size = 0
    for header in iter_block_headers(data):
        blocks.append({
            "id": header.id,
            "name": header.name,
            "compressed": header.is_compressed,
            "compressed_size": header.size_compressed,
            "uncompressed_size": header.size_uncompressed,
        })
        total_size += header.size_uncompressed

    return {
        "tags": [tag.to_dict() for tag in archive.tags],
        "files": [record.to_dict() for record in archive.files],
        "blocks": blocks,
        "total_uncompressed_size": total_size,
        "archive_size": len(data),
    }


def extract_agent_files(
    agent_path: Union[str, Path],
    output_dir: Union[str, Path],
    filenames: Optional[Sequence[str]] = None,
    overwrite: bool = False,
) -> Tuple[List[Path], List[str]]:
    """
    Write files from an agent's pool to a directory.

    Args:
        agent_path: Path to agent file
        output_dir: Directory to extract to (created if missing)
        filenames: Files to extract (defaults to all, scripts included)
        overwrite: Replace files that already exist

    Returns:
        Tuple of (written paths, skipped filenames)
    """
    archive = read_agent_file(agent_path)
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    if filenames is None:
        records = list(archive.files)
    else:
        records = []
        for filename in filenames:
            record = archive.get_file(filename)
            if record is None:
                raise FileNotFoundError(f"{filename} is not in {agent_path}")
            records.append(record)

    output_root = output_dir.resolve()
    written = []
    skipped = []
    for record in records:
        target = output_dir / record.filename
        if output_root not in target.resolve().parents:
            raise ValueError(f"Refusing to extract \"{record.filename}\" outside {output_dir}")
        if target.exists() and not overwrite:
            skipped.append(record.filename)
            continue
        target.write_bytes(record.data)
        written.append(target)

    return written, skipped


def add_files_to_agent(
    agent_path: Union[str, Path],
    file_paths: Sequence[Union[str, Path]],
    tag_index: Optional[int] = None,
    output_path: Optional[Union[str, Path]] = None,
) -> List[str]:
    """
    Add files from disk to an agent file's pool.

    Args:
        agent_path: Agent file to modify (created if it does not exist)
        file_paths: Files to add
        tag_index: Tag whose dependency list should include the new files
        output_path: Where to write the result (defaults to agent_path)

    Returns:
        Filenames that were added (files already present are skipped)

    Raises:
        UnsupportedFileType: If any file has an unsupported extension
    """
    agent_path = Path(agent_path)
    archive = read_agent_file(agent_path) if agent_path.exists() else Archive()

    added = []
    for file_path in file_paths:
        file_path = Path(file_path)
        record = archive.add_file(file_path.name, file_path.read_bytes(), tag_index=tag_index)
        if record is not None:
            added.append(record.filename)

    write_agent_file(output_path or agent_path, archive)
    return added


def read_sprite_frames(
    source: Union[Archive, str, Path],
    filename: str,
) -> List[np.ndarray]:
    """
    Decode a sprite file stored in an agent.

    Args:
        source: Archive, or path to an agent file
        filename: Sprite filename in the pool (e.g. "ball.c16")

    Returns:
        List of RGBA frames
    """
    archive = source if isinstance(source, Archive) else read_agent_file(source)
    record = archive.get_file(filename)
    if record is None:
        raise FileNotFoundError(f"{filename} is not in the agent")
    return decode_sprite(record.filename, record.data)


def _check_sprite(record: FileRecord) -> Optional[str]:
    try:
        decode_sprite(record.filename, record.data)
    except PrayError as e:
        return f"Sprite {record.filename} does not decode: {e}"
    return None


def validate_agent_file(agent_path: Union[str, Path]) -> Tuple[bool, List[str]]:
    """
    Validate an agent file structure and contents.

    Checks:
    - File exists and decodes as a PRAY archive
    - Every tag dependency is present in the file pool
    - Every sprite in the pool decodes

    Args:
        agent_path: Path to agent file

    Returns:
        Tuple of (is_valid, list_of_errors)

    Example:
        >>> is_valid, errors = validate_agent_file("ball.agents")
        >>> if not is_valid:
        ...     print(f"Validation failed: {errors}")
    """
    agent_path = Path(agent_path)

    if not agent_path.exists():
        return False, [f"File not found: {agent_path}"]

    try:
        archive = read_agent_file(agent_path)
    except PrayError as e:
        return False, [f"Not a valid agent file: {e}"]

    errors = []
    if not archive.tags:
        errors.append("Agent file contains no tags")

    for tag_name, filename in archive.missing_dependencies():
        errors.append(f"Missing dependency for \"{tag_name}\": {filename}")

    for record in archive.files:
        if record.extension.lower() in SPRITE_EXTENSIONS:
            error = _check_sprite(record)
            if error:
                errors.append(error)

    return len(errors) == 0, errors
