"""
Blocklist state: fixed system extensions and user-defined custom extensions
"""

import re
import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, NamedTuple

from gatekeeper.errors import CapacityError, IntegrityError, NotFoundError, ValidationError
from gatekeeper.utils.helpers import format_timestamp

# Canonical order, also used for display
FIXED_EXTENSIONS = ('bat', 'cmd', 'com', 'cpl', 'exe', 'scr', 'js')

EXTENSION_PATTERN = re.compile(r'[a-z0-9]+')

REASON_INVALID = 'invalid'
REASON_TOO_LONG = 'too_long'
REASON_DUPLICATE = 'duplicate'
REASON_CAPACITY = 'capacity'


@dataclass(frozen=True)
class FixedExtension:
    name: str
    blocked: bool

    def to_dict(self):
        return {'extension': self.name, 'blocked': self.blocked}


@dataclass(frozen=True)
class CustomExtension:
    id: str
    extension: str
    created_at: datetime

    def to_dict(self):
        return {
            'id': self.id,
            'extension': self.extension,
            'createdAt': format_timestamp(self.created_at)
        }


class Rejection(NamedTuple):
    extension: str
    reason: str


@dataclass
class AddResult:
    added: List[CustomExtension] = field(default_factory=list)
    rejected: List[Rejection] = field(default_factory=list)
    total_count: int = 0

    def to_dict(self):
        return {
            'added': [entry.to_dict() for entry in self.added],
            'rejected': [{'extension': r.extension, 'reason': r.reason} for r in self.rejected],
            'totalCount': self.total_count
        }


def _utcnow():
    return datetime.now(timezone.utc)


class BlocklistStore:
    """
    Owns the fixed-extension table and the custom-extension set.

    Every read and every mutation runs under a single lock. Mutations build
    the new state on copies, persist it when a state file is configured, and
    only then swap it in, so readers never observe a partially applied change.
    """

    def __init__(self, blocklist_config, logger, state_file=None, clock=None):
        self.config = blocklist_config
        self.logger = logger
        self.state_file = state_file
        self.lock = threading.Lock()
        self._clock = clock or _utcnow

        self._fixed = {name: False for name in FIXED_EXTENSIONS}
        # id -> CustomExtension, kept in insertion order
        self._custom = {}

        if self.state_file is not None:
            self._load_state()

    # ----- fixed extensions -----

    def list_fixed(self):
        """Return all fixed extensions in canonical order"""
        with self.lock:
            return [FixedExtension(name, self._fixed[name]) for name in FIXED_EXTENSIONS]

    def set_fixed_blocked(self, name, blocked):
        """
        Block or unblock one fixed extension

        Args:
            name: Fixed extension name (case-insensitive)
            blocked: New flag value

        Returns:
            FixedExtension: The updated entry

        Raises:
            NotFoundError: If name is not one of the fixed extensions
        """
        key = name.strip().lower() if isinstance(name, str) else ''
        blocked = bool(blocked)

        with self.lock:
            if key not in self._fixed:
                raise NotFoundError(f"Unknown fixed extension: {name}")

            if self._fixed[key] != blocked:
                fixed = dict(self._fixed)
                fixed[key] = blocked
                self._commit(fixed, self._custom)
                self.logger.info(f"Fixed extension '{key}' {'blocked' if blocked else 'unblocked'}")

            return FixedExtension(key, blocked)

    def bulk_set_fixed(self, blocked):
        """Set every fixed extension to the same flag, returns the count affected"""
        blocked = bool(blocked)
        with self.lock:
            fixed = {name: blocked for name in FIXED_EXTENSIONS}
            self._commit(fixed, self._custom)
            self.logger.info(f"All fixed extensions {'blocked' if blocked else 'unblocked'}")
            return len(fixed)

    # ----- custom extensions -----

    def list_custom(self):
        """Return custom extensions, oldest first"""
        with self.lock:
            return sorted(self._custom.values(), key=lambda entry: entry.created_at)

    def custom_count(self):
        with self.lock:
            return len(self._custom)

    def add_custom(self, raw_input):
        """
        Add custom extensions from a comma-delimited input

        Tokens are trimmed and lowercased. Repeats inside the batch collapse to
        their first occurrence. Malformed tokens, tokens already present and
        tokens beyond the capacity are reported in AddResult.rejected.

        Args:
            raw_input: Comma-delimited extensions, e.g. "sh, py, dll"

        Returns:
            AddResult: Entries added, tokens rejected and the new total

        Raises:
            ValidationError: If the input holds no tokens at all
            CapacityError: If the set is full and at least one valid new
                token was supplied
        """
        tokens = self._split_tokens(raw_input)
        if not tokens:
            raise ValidationError("Enter at least one extension")

        with self.lock:
            existing = {entry.extension for entry in self._custom.values()}
            room = max(self.config.custom_limit - len(self._custom), 0)

            rejected = []
            candidates = []
            seen = set()
            for token in tokens:
                if token in seen:
                    continue
                seen.add(token)

                problem = self._token_problem(token)
                if problem:
                    rejected.append(Rejection(token, problem))
                elif token in existing:
                    rejected.append(Rejection(token, REASON_DUPLICATE))
                else:
                    candidates.append(token)

            accepted = candidates[:room]
            rejected.extend(Rejection(token, REASON_CAPACITY) for token in candidates[room:])

            if candidates and not accepted:
                self.logger.warning(f"Custom extension limit reached, rejected: {', '.join(candidates)}")
                raise CapacityError(
                    f"Custom extensions are limited to {self.config.custom_limit} "
                    f"(current: {len(self._custom)})"
                )

            added = self._insert(accepted)

            if rejected:
                self.logger.debug(f"Rejected custom extensions: {rejected}")

            return AddResult(added=added, rejected=rejected, total_count=len(self._custom))

    def delete_custom(self, ext_id):
        """
        Delete one custom extension by id

        Raises:
            NotFoundError: If no entry has this id, including one already deleted
        """
        with self.lock:
            entry = self._custom.get(ext_id)
            if entry is None:
                raise NotFoundError(f"Unknown custom extension id: {ext_id}")

            custom = dict(self._custom)
            del custom[ext_id]
            self._commit(self._fixed, custom)

            self.logger.info(f"Custom extension deleted: {entry.extension}")
            return entry

    def clear_custom(self):
        """Delete every custom extension, returns the count removed"""
        with self.lock:
            removed = len(self._custom)
            self._commit(self._fixed, {})
            self.logger.info(f"Cleared {removed} custom extension(s)")
            return removed

    def reset(self):
        """Unblock all fixed extensions and clear the custom set in one step"""
        with self.lock:
            fixed = {name: False for name in FIXED_EXTENSIONS}
            self._commit(fixed, {})
            self.logger.info("Blocklist reset")

    def seed_test_data(self, prefix=None, count=None):
        """
        Generate synthetic custom extensions named <prefix>1, <prefix>2, ...

        Existing names are skipped. Generation stops at count entries or at
        the capacity, whichever comes first.

        Returns:
            int: Number of entries generated

        Raises:
            ValidationError: If the prefix or count is unusable
            CapacityError: If the set is already full
        """
        prefix = self.config.seed_prefix if prefix is None else prefix
        prefix = prefix.strip().lower() if isinstance(prefix, str) else ''
        count = self.config.custom_limit if count is None else count

        if not EXTENSION_PATTERN.fullmatch(prefix):
            raise ValidationError(f"Invalid seed prefix: {prefix!r}")
        if not isinstance(count, int) or isinstance(count, bool) or count < 1:
            raise ValidationError(f"Seed count must be a positive integer: {count!r}")

        with self.lock:
            room = self.config.custom_limit - len(self._custom)
            if room <= 0:
                raise CapacityError(f"Custom extensions already at the limit of {self.config.custom_limit}")

            target = min(count, room)
            existing = {entry.extension for entry in self._custom.values()}
            generated = []
            index = 1
            while len(generated) < target:
                candidate = f"{prefix}{index}"
                index += 1
                if len(candidate) > self.config.max_extension_length:
                    raise ValidationError(
                        f"Generated extension '{candidate}' exceeds "
                        f"{self.config.max_extension_length} characters"
                    )
                if candidate not in existing:
                    generated.append(candidate)

            added = self._insert(generated)
            return len(added)

    # ----- snapshot -----

    def snapshot(self):
        """
        Capture the effective set of blocked extension strings

        Returns:
            frozenset: Blocked fixed names plus every custom extension
        """
        with self.lock:
            blocked = {name for name, flag in self._fixed.items() if flag}
            blocked.update(entry.extension for entry in self._custom.values())
            return frozenset(blocked)

    # ----- internals (callers hold self.lock) -----

    def _insert(self, extensions):
        if not extensions:
            return []

        now = self._clock()
        custom = dict(self._custom)
        added = []
        for extension in extensions:
            entry = CustomExtension(id=uuid.uuid4().hex, extension=extension, created_at=now)
            custom[entry.id] = entry
            added.append(entry)

        self._commit(self._fixed, custom)
        self.logger.info(f"Added {len(added)} custom extension(s): {', '.join(extensions)}")
        return added

    def _commit(self, fixed, custom):
        if self.state_file is not None:
            self.state_file.save(self._serialize(fixed, custom))
        self._fixed = fixed
        self._custom = custom

    def _token_problem(self, token):
        if not EXTENSION_PATTERN.fullmatch(token):
            return REASON_INVALID
        if len(token) > self.config.max_extension_length:
            return REASON_TOO_LONG
        return None

    @staticmethod
    def _split_tokens(raw_input):
        if not isinstance(raw_input, str):
            return []
        tokens = (part.strip().lower() for part in raw_input.split(','))
        return [token for token in tokens if token]

    @staticmethod
    def _serialize(fixed, custom):
        return {
            'fixed': dict(fixed),
            'custom': [
                {
                    'id': entry.id,
                    'extension': entry.extension,
                    'created_at': entry.created_at.isoformat()
                }
                for entry in sorted(custom.values(), key=lambda e: e.created_at)
            ]
        }

    def _load_state(self):
        data = self.state_file.load()
        if data is None:
            return

        stored_fixed = data.get('fixed') or {}
        stored_custom = data.get('custom') or []
        if not isinstance(stored_fixed, dict):
            raise IntegrityError("State file 'fixed' must be an object")
        if not isinstance(stored_custom, list):
            raise IntegrityError("State file 'custom' must be a list")

        fixed = {name: False for name in FIXED_EXTENSIONS}
        for name, flag in stored_fixed.items():
            if name in fixed:
                fixed[name] = bool(flag)
            else:
                self.logger.warning(f"Ignoring unknown fixed extension in state file: {name}")

        custom = {}
        extensions = set()
        for item in stored_custom:
            try:
                entry = CustomExtension(
                    id=str(item['id']),
                    extension=str(item['extension']),
                    created_at=datetime.fromisoformat(item['created_at'])
                )
            except (KeyError, TypeError, ValueError) as e:
                raise IntegrityError(f"Malformed custom extension record: {item!r}") from e

            if entry.created_at.tzinfo is None:
                entry = CustomExtension(entry.id, entry.extension, entry.created_at.replace(tzinfo=timezone.utc))

            if entry.id in custom:
                raise IntegrityError(f"Duplicate custom extension id in state: {entry.id}")
            if entry.extension in extensions:
                raise IntegrityError(f"Duplicate custom extension in state: {entry.extension}")
            if self._token_problem(entry.extension):
                raise IntegrityError(f"Invalid custom extension in state: {entry.extension!r}")

            custom[entry.id] = entry
            extensions.add(entry.extension)

        if len(custom) > self.config.custom_limit:
            raise IntegrityError(
                f"State holds {len(custom)} custom extensions, limit is {self.config.custom_limit}"
            )

        self._fixed = fixed
        self._custom = custom
        self.logger.info(
            f"Loaded blocklist state: {sum(fixed.values())} fixed blocked, {len(custom)} custom"
        )
