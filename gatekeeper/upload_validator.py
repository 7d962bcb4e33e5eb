"""
Upload filename checking logic
"""

from dataclasses import dataclass, field
from typing import Dict, List


@dataclass
class BatchResult:
    """Accept/reject partition of one upload batch"""

    accepted_file_names: List[str] = field(default_factory=list)
    rejected_file_names: List[str] = field(default_factory=list)
    blocked_by: Dict[str, List[str]] = field(default_factory=dict)

    @property
    def accepted_files(self):
        return len(self.accepted_file_names)

    @property
    def total_files(self):
        return len(self.accepted_file_names) + len(self.rejected_file_names)

    def to_dict(self):
        return {
            'totalFiles': self.total_files,
            'acceptedFiles': self.accepted_files,
            'acceptedFileNames': list(self.accepted_file_names),
            'rejectedFileNames': list(self.rejected_file_names),
            'blockedBy': {name: list(exts) for name, exts in self.blocked_by.items()}
        }


def candidate_extensions(filename):
    """
    Extract every extension segment of a filename

    Directory components are dropped, then the base name is split on '.'
    and every segment after the first is returned trimmed and lowercased.
    "report.EXE.txt" yields ['exe', 'txt']; "archive" yields [].

    Args:
        filename: Name or path of file

    Returns:
        list: Candidate extensions, empty segments removed
    """
    if not filename:
        return []

    base_name = filename.replace('\\', '/').rsplit('/', 1)[-1]
    segments = base_name.split('.')[1:]
    candidates = (segment.strip().lower() for segment in segments)
    return [candidate for candidate in candidates if candidate]


def blocked_segments(filename, snapshot):
    """Return the extensions of filename that appear in the blocklist snapshot"""
    return [ext for ext in candidate_extensions(filename) if ext in snapshot]


def is_blocked(filename, snapshot):
    """
    Check if a single file carries a blocked extension in any segment

    Args:
        filename: Name or path of file
        snapshot: Blocked extension strings

    Returns:
        bool: True if extension is blocked
    """
    return any(ext in snapshot for ext in candidate_extensions(filename))


class UploadValidator:
    """Classify upload batches against a blocklist snapshot"""

    def __init__(self, logger):
        self.logger = logger

    def validate(self, filenames, snapshot):
        """
        Partition a batch of filenames into accepted and rejected

        The snapshot is used as given for the whole batch; callers capture
        it once before classification.

        Args:
            filenames: Candidate filenames
            snapshot: Blocked extension strings (frozenset)

        Returns:
            BatchResult: Accepted and rejected names in input order
        """
        result = BatchResult()

        for filename in filenames:
            name = filename if isinstance(filename, str) else ''
            matches = blocked_segments(name, snapshot)

            if matches:
                result.rejected_file_names.append(name)
                result.blocked_by[name] = matches
                self.logger.debug(f"Blocked file found: {name} (extensions: {', '.join(matches)})")
            else:
                result.accepted_file_names.append(name)

        if result.rejected_file_names:
            self.logger.warning(
                f"Rejected {len(result.rejected_file_names)} of {result.total_files} file(s): "
                f"{', '.join(result.rejected_file_names)}"
            )
        else:
            self.logger.info(f"Accepted all {result.total_files} file(s)")

        return result
