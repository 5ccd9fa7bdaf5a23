"""Team and participant code generation.

A team code is ``NNN-XXXXXX``: the competition id zero-padded to three
digits, a dash, and six uppercase hex characters from ``secrets``.
Participant ids append ``-PNN`` (1-based member index) to the team code.
"""

import re
import secrets
from dataclasses import dataclass
from typing import List

from competition_manager.errors import InvalidTeamCodeFormat

COMPETITION_ID_WIDTH = 3
SUFFIX_BYTES = 3  # 3 bytes -> 6 hex characters
MAX_COMPETITION_ID = 10**COMPETITION_ID_WIDTH - 1
MEMBER_INDEX_WIDTH = 2
MAX_TEAM_MEMBERS = 10**MEMBER_INDEX_WIDTH - 1

TEAM_CODE_PATTERN = re.compile(r"^([0-9]{3})-([0-9A-F]{6})$")


@dataclass(frozen=True)
class TeamCode:
    competition_id: int
    unique_suffix: str

    def __str__(self) -> str:
        return f"{self.competition_id:0{COMPETITION_ID_WIDTH}d}-{self.unique_suffix}"


def generate_team_code(competition_id: int) -> str:
    """Generate a fresh team code for a competition.

    Raises:
        ValueError: If the id does not fit the fixed three-digit prefix
    """
    if isinstance(competition_id, bool) or not isinstance(competition_id, int):
        raise ValueError(f"Competition id must be an integer, got {competition_id!r}")
    if not 0 <= competition_id <= MAX_COMPETITION_ID:
        raise ValueError(
            f"Competition id {competition_id} does not fit a "
            f"{COMPETITION_ID_WIDTH}-digit team code"
        )

    suffix = secrets.token_hex(SUFFIX_BYTES).upper()
    return str(TeamCode(competition_id=competition_id, unique_suffix=suffix))


def is_valid_team_code(code: str) -> bool:
    """Structural check only; does not look the code up"""
    if not isinstance(code, str):
        return False
    return TEAM_CODE_PATTERN.fullmatch(code) is not None


def parse_team_code(code: str) -> TeamCode:
    """Split a team code into competition id and random suffix.

    Raises:
        InvalidTeamCodeFormat: If the code is not NNN-XXXXXX
    """
    match = TEAM_CODE_PATTERN.fullmatch(code) if isinstance(code, str) else None
    if match is None:
        raise InvalidTeamCodeFormat(f"Invalid team code format: {code!r}")

    return TeamCode(competition_id=int(match.group(1)), unique_suffix=match.group(2))


def participant_ids_for(team_code: str, member_count: int) -> List[str]:
    """One id per member: ``<team_code>-P01``, ``-P02``, ...

    Raises:
        ValueError: If the team has more members than two digits can number
    """
    if member_count > MAX_TEAM_MEMBERS:
        raise ValueError(
            f"A team can have at most {MAX_TEAM_MEMBERS} members, got {member_count}"
        )
    return [
        f"{team_code}-P{index:0{MEMBER_INDEX_WIDTH}d}"
        for index in range(1, member_count + 1)
    ]
